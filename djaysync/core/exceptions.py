"""
Custom exceptions for djay-sync

This module defines the exceptions raised by the reconciliation core and
its library adapters. Per-track problems are reported through outcomes,
these are only raised where a caller is expected to handle them.
"""

class DjaySyncError(Exception):
    """Base exception for all djay-sync errors"""

    def __init__(self, message: str, details: str = None, track_id: str = None):
        super().__init__(message)
        self.message = message
        self.details = details
        self.track_id = track_id

    def __str__(self):
        parts = [self.message]
        if self.track_id:
            parts.append(f"Track: {self.track_id}")
        if self.details:
            parts.append(f"Details: {self.details}")
        return " | ".join(parts)


class KeyIndexOutOfRangeError(DjaySyncError):
    """Raised when a key index has no label in the key codex"""

    def __init__(self, index, size: int, track_id: str = None):
        super().__init__(
            f"Key index {index!r} out of range",
            details=f"valid range is 0..{size - 1}",
            track_id=track_id,
        )
        self.index = index


class TableError(DjaySyncError):
    """Raised when a metadata table cannot be loaded"""

    def __init__(self, message: str, details: str = None, path: str = None):
        super().__init__(message, details)
        self.path = path

    def __str__(self):
        text = super().__str__()
        if self.path:
            text = f"{text} | Table: {self.path}"
        return text


class LibraryError(DjaySyncError):
    """Raised when a music library cannot be read or written"""

    def __init__(self, message: str, details: str = None, path: str = None):
        super().__init__(message, details)
        self.path = path

    def __str__(self):
        text = super().__str__()
        if self.path:
            text = f"{text} | Library: {self.path}"
        return text


class TagWriteError(DjaySyncError):
    """Raised when tempo or grouping cannot be written to a track"""
    pass


class ConfigurationError(DjaySyncError):
    """Raised when configuration values are invalid"""
    pass
