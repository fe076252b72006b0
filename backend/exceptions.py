"""
Custom exception classes for infrastructure operations (database, cache).
"""


class StorageError(Exception):
    """Raised when the order store fails (connectivity, unexpected SQL errors)."""
    pass


class ConcurrentUpdateError(StorageError):
    """Raised when a repeatable-read transaction lost a race on the same row."""
    pass


class CacheBackendError(Exception):
    """Raised when the cache backend is unreachable or returns unreadable data."""
    pass
