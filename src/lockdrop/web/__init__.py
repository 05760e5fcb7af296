"""HTTP front end of LockDrop."""
