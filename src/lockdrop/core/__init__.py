"""Core package of LockDrop: storage, errors and the share service."""
