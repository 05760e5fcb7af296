"""LockDrop: password-protected file drop."""

__version__ = "0.1.0"
