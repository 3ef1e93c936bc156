"""
Custom exception hierarchy for photo-sword.

Every error here is fatal to a run: nothing is retried or skipped, the CLI
reports the failure and exits.
"""


class PhotoSwordError(Exception):
    """Base exception for all photo-sword errors."""
    pass


class InvalidPathError(PhotoSwordError):
    """Raised when a path has no usable filename stem."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"Cannot extract a filename stem from '{path}'")


class UnsupportedFormatError(PhotoSwordError):
    """Raised when a path's extension is not one of the supported photo formats."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"Unsupported photo format: '{path}'")


class HashIoError(PhotoSwordError):
    """Raised when a file's bytes cannot be read for hashing."""

    def __init__(self, path, reason):
        self.path = path
        super().__init__(f"Cannot hash '{path}': {reason}")


class SerializationError(PhotoSwordError):
    """Raised when the snapshot cannot be encoded, written or decoded."""
    pass


class ScanError(PhotoSwordError):
    """Raised when the scan root cannot be walked at all."""
    pass
