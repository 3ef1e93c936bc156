import fnmatch
import logging
import os
import re
from pathlib import Path
from typing import Iterable, Iterator, Tuple

from .. import config
from ..exceptions import ScanError


class PhotoFileFilter:
    """
    Case-insensitive filename filter built from glob patterns.

    Built once at startup and handed to the scanner; it can't be changed
    afterwards.
    """
    __slots__ = ('_patterns', '_regexes')

    def __init__(self, patterns: Iterable[str] = config.PHOTO_PATTERNS):
        patterns = tuple(patterns)
        if not patterns:
            raise ValueError("PhotoFileFilter needs at least one pattern")
        object.__setattr__(self, '_patterns', patterns)
        object.__setattr__(self, '_regexes', tuple(
            re.compile(fnmatch.translate(p), re.IGNORECASE) for p in patterns
        ))

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __eq__(self, other):
        if not isinstance(other, PhotoFileFilter):
            return NotImplemented
        return self._patterns == other._patterns

    def __hash__(self):
        return hash(self._patterns)

    def __repr__(self):
        return f"PhotoFileFilter({list(self._patterns)!r})"

    @property
    def patterns(self) -> Tuple[str, ...]:
        return self._patterns

    def matches(self, name: str) -> bool:
        return any(rx.match(name) for rx in self._regexes)


class DiskScanner:
    def __init__(self, file_filter: PhotoFileFilter):
        self.file_filter = file_filter

    def scan(self, root: Path) -> Iterator[Tuple[Path, int]]:
        """
        Generator that yields (path, size) for every photo file under root.

        Directories and files the filter rejects are never yielded. Symlinks
        to files are yielded under the link's path with the target's size.
        A photo that vanishes before its size is read raises ScanError.
        """
        root = Path(root)
        if not root.is_dir():
            raise ScanError(f"Not a directory: {root}")

        for entry in self._iter_files(root):
            if not self.file_filter.matches(entry.name):
                continue
            try:
                size = entry.stat().st_size
            except OSError as e:
                raise ScanError(f"Cannot read size of {entry.path}: {e}") from e
            yield Path(entry.path), size

    def _iter_files(self, root: Path) -> Iterator[os.DirEntry]:
        """Depth-first walker using os.scandir for speed."""
        stack = [root]
        while stack:
            current = stack.pop()

            try:
                with os.scandir(current) as it:
                    entries = list(it)
            except (OSError, PermissionError):
                logging.warning(f"Permission denied: {current}")
                continue

            # Sort for stable traversal order
            entries.sort(key=lambda e: e.name.lower())

            dirs = []
            for e in entries:
                # Symlinked directories are not followed
                if e.is_dir(follow_symlinks=False):
                    dirs.append(Path(e.path))
                elif e.is_file():
                    yield e
                elif e.is_symlink():
                    logging.warning(f"Skipping dangling or non-file link: {e.path}")

            # Push dirs to stack (reversed so we process A before Z)
            for d in reversed(dirs):
                stack.append(d)
