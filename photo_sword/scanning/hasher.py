import hashlib
from pathlib import Path
from typing import Protocol

from ..exceptions import HashIoError

# SHA-256 output length in bytes
DIGEST_SIZE = hashlib.sha256().digest_size


class ContentHasher(Protocol):
    """Anything that maps a file path to a fixed-length digest of its contents."""

    def hash(self, path: Path) -> bytes:
        ...


class FileHasher:
    def hash(self, path: Path) -> bytes:
        """
        Reads the entire file and returns its SHA-256 digest.

        The whole content goes through the digest in one call. Read failures
        (missing file, permissions, I/O faults) raise HashIoError.
        """
        try:
            with open(path, 'rb') as f:
                contents = f.read()
        except OSError as e:
            raise HashIoError(path, e.strerror or e) from e
        return hashlib.sha256(contents).digest()
