"""
JSON snapshot of a PhotoCollection.

Layout:
    {
      "file_map":   {stem: unit, ...},
      "duplicates": {stem: [unit, ...], ...}
    }
    unit = {"stem": str, "jpg": file | null, "raw": file | null}
    file = {"path": str, "size": int, "hash": [int, ...] | null}

Digests are written as raw byte sequences (arrays of 0-255 values), not as hex.
"""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from . import config
from .collection import PhotoCollection
from .exceptions import SerializationError
from .models import PhotoFile, PhotoUnit
from .scanning.hasher import DIGEST_SIZE


def _file_to_dict(photo_file: Optional[PhotoFile]) -> Optional[Dict[str, Any]]:
    if photo_file is None:
        return None
    return {
        "path": os.fspath(photo_file.path),
        "size": photo_file.size,
        "hash": list(photo_file.hash) if photo_file.hash is not None else None,
    }


def _unit_to_dict(unit: PhotoUnit) -> Dict[str, Any]:
    data: Dict[str, Any] = {"stem": unit.stem}
    for slot in config.SLOTS:
        data[slot] = _file_to_dict(unit.slot(slot))
    return data


def collection_to_dict(collection: PhotoCollection) -> Dict[str, Any]:
    return {
        "file_map": {unit.stem: _unit_to_dict(unit) for unit in collection.units()},
        "duplicates": {
            stem: [_unit_to_dict(u) for u in units]
            for stem, units in collection.duplicate_units()
        },
    }


def _file_from_dict(data) -> Optional[PhotoFile]:
    if data is None:
        return None
    size = int(data["size"])
    if size < 0:
        raise SerializationError(f"Negative size {size} for '{data['path']}'")
    digest = data.get("hash")
    if digest is not None:
        digest = bytes(digest)
        if len(digest) != DIGEST_SIZE:
            raise SerializationError(
                f"Digest for '{data['path']}' is {len(digest)} bytes, expected {DIGEST_SIZE}"
            )
    return PhotoFile(path=Path(data["path"]), size=size, hash=digest)


def _unit_from_dict(data) -> PhotoUnit:
    unit = PhotoUnit(data["stem"])
    for slot in config.SLOTS:
        photo_file = _file_from_dict(data.get(slot))
        if photo_file is not None:
            unit.set_slot(slot, photo_file)
    return unit


def collection_from_dict(data: Dict[str, Any]) -> PhotoCollection:
    """Rebuilds a collection from a decoded snapshot document."""
    collection = PhotoCollection()
    try:
        for stem, unit_data in data["file_map"].items():
            collection.file_map[stem] = _unit_from_dict(unit_data)
        for stem, units in data["duplicates"].items():
            if stem not in collection.file_map:
                raise SerializationError(f"Duplicate entry '{stem}' has no primary unit")
            collection.duplicates[stem] = [_unit_from_dict(u) for u in units]
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise SerializationError(f"Malformed snapshot: {e!r}") from e
    return collection


def dumps(collection: PhotoCollection) -> str:
    try:
        return json.dumps(collection_to_dict(collection))
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Cannot encode snapshot: {e}") from e


def write_snapshot(collection: PhotoCollection, output: Path) -> Path:
    """
    Writes the snapshot to output.

    The document goes to a temporary file next to the target first and is
    renamed into place, so a failed run never leaves a partial snapshot.
    """
    output = Path(output)
    serialized = dumps(collection)

    tmp_name = None
    try:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{output.name}.", suffix=".tmp", dir=output.parent
        )
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(serialized)
        os.replace(tmp_name, output)
    except OSError as e:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise SerializationError(f"Couldn't write to {output}: {e}") from e

    logging.info(f"Successfully wrote to {output}")
    return output


def load_snapshot(path: Path) -> PhotoCollection:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise SerializationError(f"Couldn't read snapshot {path}: {e}") from e
    return collection_from_dict(data)
