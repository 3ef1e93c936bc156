import json
from pathlib import Path

import pytest

from photo_sword.exceptions import SerializationError
from photo_sword.snapshot import (
    collection_from_dict,
    collection_to_dict,
    load_snapshot,
    write_snapshot,
)


@pytest.fixture
def populated(collection, path_hasher):
    collection.register("/a/IMG_0001.jpg", 4096)
    collection.register("/a/IMG_0001.nef", 8192)
    collection.register("/b/IMG_0001.jpg", 4000)
    collection.register("/a/IMG_0002.nef", 10)
    collection.attach_hashes(path_hasher)
    return collection


def test_layout_and_raw_byte_digest(collection, counting_hasher):
    collection.register("/a/IMG_0001.jpg", 4096)
    collection.attach_hashes(counting_hasher)

    data = collection_to_dict(collection)

    assert data == {
        "file_map": {
            "IMG_0001": {
                "stem": "IMG_0001",
                "jpg": {"path": "/a/IMG_0001.jpg", "size": 4096, "hash": list(counting_hasher.digest)},
                "raw": None,
            }
        },
        "duplicates": {},
    }


def test_unhashed_file_serializes_null(collection):
    collection.register("/a/IMG_0001.nef", 1)
    unit = collection_to_dict(collection)["file_map"]["IMG_0001"]
    assert unit["raw"]["hash"] is None


def test_round_trip_preserves_files(populated, tmp_path):
    out = write_snapshot(populated, tmp_path / "photo-sword.json")
    restored = load_snapshot(out)

    assert restored.entry_count() == populated.entry_count()
    assert restored.duplicate_count() == populated.duplicate_count()
    assert list(restored.iter_files()) == list(populated.iter_files())

    dupe = restored.duplicates_of("IMG_0001")[0]
    assert dupe.jpg.path == Path("/b/IMG_0001.jpg")
    assert dupe.jpg.size == 4000
    assert dupe.jpg.hash == populated.duplicates_of("IMG_0001")[0].jpg.hash


def test_written_document_is_json_ordered_by_stem(populated, tmp_path):
    out = write_snapshot(populated, tmp_path / "snap.json")
    data = json.loads(out.read_text(encoding="utf-8"))

    assert list(data["file_map"]) == ["IMG_0001", "IMG_0002"]
    assert list(data["duplicates"]) == ["IMG_0001"]
    assert all(0 <= b <= 255 for b in data["file_map"]["IMG_0002"]["raw"]["hash"])


def test_write_leaves_no_temp_files(populated, tmp_path):
    write_snapshot(populated, tmp_path / "snap.json")
    assert [p.name for p in tmp_path.iterdir()] == ["snap.json"]


def test_write_to_missing_directory_fails(populated, tmp_path):
    target = tmp_path / "missing" / "snap.json"
    with pytest.raises(SerializationError):
        write_snapshot(populated, target)
    assert not target.exists()


def test_failed_write_keeps_previous_snapshot(populated, tmp_path, monkeypatch):
    target = tmp_path / "snap.json"
    target.write_text("previous", encoding="utf-8")

    def broken_replace(src, dst):
        raise OSError("no space left on device")

    monkeypatch.setattr("photo_sword.snapshot.os.replace", broken_replace)
    with pytest.raises(SerializationError):
        write_snapshot(populated, target)

    assert target.read_text(encoding="utf-8") == "previous"
    assert [p.name for p in tmp_path.iterdir()] == ["snap.json"]


@pytest.mark.parametrize(
    "data",
    [
        {},
        {"file_map": {}},
        {"file_map": {"A": {"jpg": None}}, "duplicates": {}},
        {"file_map": {}, "duplicates": {"A": []}},
        {"file_map": {"A": {"stem": "A", "jpg": {"path": "/A.jpg", "size": 1, "hash": [999]}}},
         "duplicates": {}},
        {"file_map": {"A": {"stem": "A", "jpg": {"path": "/A.jpg", "size": 1, "hash": [1, 2, 3]}}},
         "duplicates": {}},
        {"file_map": {"A": {"stem": "A", "raw": {"path": "/A.nef", "size": -5, "hash": None}}},
         "duplicates": {}},
        [],
    ],
)
def test_malformed_snapshot_rejected(data):
    with pytest.raises(SerializationError):
        collection_from_dict(data)


def test_load_invalid_json(tmp_path):
    p = tmp_path / "broken.json"
    p.write_text("{not json", encoding="utf-8")
    with pytest.raises(SerializationError):
        load_snapshot(p)


def test_load_accepts_full_length_digest(tmp_path):
    p = tmp_path / "snap.json"
    p.write_text(json.dumps({
        "file_map": {"A": {"stem": "A", "jpg": {"path": "/A.jpg", "size": 0, "hash": [7] * 32}, "raw": None}},
        "duplicates": {},
    }), encoding="utf-8")

    restored = load_snapshot(p)
    assert restored.get("A").jpg.hash == bytes([7] * 32)
    assert restored.get("A").jpg.size == 0
