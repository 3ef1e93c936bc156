import logging
import os
import time
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Optional

from tqdm import tqdm

from . import config
from .collection import PhotoCollection
from .scanning.filesystem import DiskScanner, PhotoFileFilter
from .scanning.hasher import ContentHasher, FileHasher
from .snapshot import write_snapshot


@dataclass
class ScanSummary:
    entries: int
    duplicates: int
    files: int
    elapsed_sec: float


class PhotoSwordApp:
    def __init__(self,
                 file_filter: Optional[PhotoFileFilter] = None,
                 hasher: Optional[ContentHasher] = None,
                 max_workers: int = config.DEFAULT_WORKERS,
                 show_progress: bool = True):
        """
        file_filter may narrow the default patterns, but every pattern must end
        in an extension the collection has a slot for (.jpg / .nef). Anything
        else would abort the run on the first matching file, so it is refused
        here with ValueError.
        """
        self.file_filter = file_filter or PhotoFileFilter()
        self._check_filter(self.file_filter)
        self.hasher = hasher or FileHasher()
        self.max_workers = max_workers
        self.show_progress = show_progress
        self.collection = PhotoCollection()

    @staticmethod
    def _check_filter(file_filter: PhotoFileFilter):
        for pattern in file_filter.patterns:
            ext = os.path.splitext(pattern)[1].lower()
            if ext not in config.EXT_TO_SLOT:
                raise ValueError(
                    f"Pattern '{pattern}' matches no supported format "
                    f"({', '.join(sorted(config.EXT_TO_SLOT))})"
                )

    def run(self, directory: Path, output: Path) -> ScanSummary:
        """
        Executes the pipeline.
        1. Scan & Register (group by stem)
        2. Hash every registered file
        3. Write the snapshot

        Any error aborts the run before the snapshot is written.
        """
        started = time.perf_counter()
        # A collection is consumed once: every run starts from an empty one
        self.collection = PhotoCollection()

        # --- Step 1: Scanning ---
        logging.info(f"[1/2] Processing files in directory '{directory}'...")
        scanner = DiskScanner(self.file_filter)
        with tqdm(desc="Scanning", unit="file", disable=not self.show_progress) as bar:
            for path, size in scanner.scan(directory):
                self.collection.register(path, size)
                bar.update(1)

        logging.info(
            f"Scan complete. {self.collection.file_count()} files, "
            f"{self.collection.entry_count()} photos."
        )

        # --- Step 2: Hashing ---
        logging.info("[2/2] Hashing files...")
        with tqdm(total=self.collection.unhashed_count(), desc="Hashing", unit="file",
                  disable=not self.show_progress) as bar:
            self.collection.attach_hashes(
                self.hasher,
                max_workers=self.max_workers,
                progress=lambda photo_file: bar.update(1),
            )

        # --- Step 3: Snapshot ---
        logging.info("Dumping serialization of data...")
        write_snapshot(self.collection, output)

        elapsed = time.perf_counter() - started
        summary = ScanSummary(
            entries=self.collection.entry_count(),
            duplicates=self.collection.duplicate_count(),
            files=self.collection.file_count(),
            elapsed_sec=elapsed,
        )
        logging.info(
            f"Done. {summary.entries} files found, {summary.duplicates} potential "
            f"duplicates identified in {timedelta(seconds=round(elapsed))}"
        )
        return summary
