"""Custom exceptions for lyrics-sync-maker."""


class LyricsSyncError(Exception):
    """Base exception for lyrics-sync-maker."""
    pass


class StorageError(LyricsSyncError):
    """Error reading or writing the key-value store (quota, serialization)."""
    pass


class BundleFormatError(LyricsSyncError):
    """Bundle payload is not a mapping with a ``songs`` list."""
    pass


class LibraryNotReadyError(LyricsSyncError):
    """Library used before its built-in registry was loaded."""
    pass
