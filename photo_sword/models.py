from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from . import config


@dataclass
class PhotoFile:
    """
    A physical file found during a scan.
    """
    path: Path
    size: int                     # bytes, from filesystem metadata
    hash: Optional[bytes] = None  # content digest, attached after the scan

    def add_hash(self, digest: bytes):
        self.hash = bytes(digest)


@dataclass
class PhotoUnit:
    """
    One logical photograph: every file sharing a stem, at most one per slot.
    """
    stem: str
    jpg: Optional[PhotoFile] = None
    raw: Optional[PhotoFile] = None

    def slot(self, name: str) -> Optional[PhotoFile]:
        if name not in config.SLOTS:
            raise KeyError(name)
        return getattr(self, name)

    def set_slot(self, name: str, photo_file: PhotoFile):
        if name not in config.SLOTS:
            raise KeyError(name)
        setattr(self, name, photo_file)

    def files(self) -> Iterator[PhotoFile]:
        """Occupied slots, jpg first."""
        for name in config.SLOTS:
            photo_file = getattr(self, name)
            if photo_file is not None:
                yield photo_file
