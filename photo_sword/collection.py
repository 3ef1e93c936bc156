import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from . import config
from .exceptions import InvalidPathError, UnsupportedFormatError
from .models import PhotoFile, PhotoUnit
from .scanning.hasher import ContentHasher


class PhotoCollection:
    """
    Groups scanned files into photo units keyed by filename stem.

    The primary mapping holds one unit per stem. A file whose slot is already
    taken on the primary unit is a naming collision: it gets a fresh unit of its
    own, appended to the stem's duplicate list. Primary files are never
    overwritten.
    """

    def __init__(self):
        self.file_map: Dict[str, PhotoUnit] = {}
        self.duplicates: Dict[str, List[PhotoUnit]] = {}

    # --- Registration ---

    def register(self, path, size: int) -> PhotoUnit:
        """
        Adds a file to the collection and returns the unit that now holds it.

        Raises InvalidPathError / UnsupportedFormatError before touching any
        state, so a rejected path leaves the collection as it was.
        """
        file_path = Path(os.fsdecode(path))
        stem, slot = self._classify(file_path)
        if size < 0:
            raise ValueError(f"Negative size {size} for '{file_path}'")

        photo_file = PhotoFile(path=file_path, size=size)

        unit = self.file_map.get(stem)
        if unit is None:
            unit = PhotoUnit(stem)
            self.file_map[stem] = unit
        elif unit.slot(slot) is not None:
            # Slot taken: park the file in its own unit instead of overwriting
            unit = PhotoUnit(stem)
            self.duplicates.setdefault(stem, []).append(unit)
            logging.debug(f"Stem collision for '{stem}': {file_path}")

        unit.set_slot(slot, photo_file)
        return unit

    def _classify(self, path: Path) -> Tuple[str, str]:
        # Path('.jpg') has stem '.jpg' and no suffix, so it falls through to
        # the format check below
        if not path.name or not path.stem:
            raise InvalidPathError(path)
        slot = config.EXT_TO_SLOT.get(path.suffix.lower())
        if slot is None:
            raise UnsupportedFormatError(path)
        return path.stem, slot

    # --- Hashing ---

    def attach_hashes(self,
                      hasher: ContentHasher,
                      max_workers: int = 1,
                      progress: Optional[Callable[[PhotoFile], None]] = None) -> int:
        """
        Computes digests for every file that doesn't carry one yet.

        Files that already have a digest are skipped, so calling this twice
        never re-reads a file. Hasher errors propagate and abort the sweep.

        Args:
            max_workers: Number of threads hashing in parallel (1 = sequential)
            progress: Called once per newly hashed file

        Returns:
            Number of files hashed by this call.
        """
        pending = [f for f in self.iter_files() if f.hash is None]
        if not pending:
            return 0

        logging.debug(f"Hashing {len(pending)} files with {max_workers} worker(s)")

        if max_workers <= 1:
            for photo_file in pending:
                photo_file.add_hash(hasher.hash(photo_file.path))
                if progress:
                    progress(photo_file)
            return len(pending)

        # Each pending file is submitted exactly once; results are stored on
        # this thread
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            future_to_file = {
                executor.submit(hasher.hash, photo_file.path): photo_file
                for photo_file in pending
            }
            try:
                for future in as_completed(future_to_file):
                    photo_file = future_to_file[future]
                    photo_file.add_hash(future.result())
                    if progress:
                        progress(photo_file)
            except BaseException:
                for future in future_to_file:
                    future.cancel()
                raise

        return len(pending)

    # --- Queries ---

    def entry_count(self) -> int:
        """Number of distinct stems."""
        return len(self.file_map)

    def duplicate_count(self) -> int:
        """Number of stems with at least one collision (not the number of files)."""
        return len(self.duplicates)

    def file_count(self) -> int:
        return sum(1 for _ in self.iter_files())

    def unhashed_count(self) -> int:
        return sum(1 for f in self.iter_files() if f.hash is None)

    def get(self, stem: str) -> Optional[PhotoUnit]:
        return self.file_map.get(stem)

    def duplicates_of(self, stem: str) -> List[PhotoUnit]:
        return list(self.duplicates.get(stem, []))

    def units(self) -> Iterator[PhotoUnit]:
        """Primary units ordered by stem."""
        for stem in sorted(self.file_map):
            yield self.file_map[stem]

    def duplicate_units(self) -> Iterator[Tuple[str, List[PhotoUnit]]]:
        """(stem, duplicate units) pairs ordered by stem."""
        for stem in sorted(self.duplicates):
            yield stem, self.duplicates[stem]

    def iter_files(self) -> Iterator[PhotoFile]:
        """Every file: primary units first, then duplicate units."""
        for unit in self.units():
            yield from unit.files()
        for _, units in self.duplicate_units():
            for unit in units:
                yield from unit.files()
