import hashlib

import pytest

from photo_sword.collection import PhotoCollection

FIXED_DIGEST = hashlib.sha256(b"foobarindeadbeef").digest()


class CountingHasher:
    """Deterministic stand-in for FileHasher that records every call."""

    def __init__(self, digest=FIXED_DIGEST):
        self.digest = digest
        self.calls = []

    def hash(self, path):
        self.calls.append(path)
        return self.digest


class PathHasher(CountingHasher):
    """Returns a digest derived from the path itself, so every file differs."""

    def hash(self, path):
        self.calls.append(path)
        return hashlib.sha256(str(path).encode("utf-8")).digest()


@pytest.fixture
def collection():
    """Returns an empty PhotoCollection."""
    return PhotoCollection()


@pytest.fixture
def counting_hasher():
    return CountingHasher()


@pytest.fixture
def path_hasher():
    return PathHasher()


@pytest.fixture
def photo_tree(tmp_path):
    """
    A small photo library:
        a/IMG_0001.jpg, a/IMG_0001.NEF, a/notes.txt
        b/IMG_0001.jpg, b/IMG_0002.JPG
    """
    a = tmp_path / "a"
    b = tmp_path / "b"
    a.mkdir()
    b.mkdir()
    (a / "IMG_0001.jpg").write_bytes(b"jpeg one")
    (a / "IMG_0001.NEF").write_bytes(b"raw one")
    (a / "notes.txt").write_text("not a photo")
    (b / "IMG_0001.jpg").write_bytes(b"jpeg one copy")
    (b / "IMG_0002.JPG").write_bytes(b"jpeg two")
    return tmp_path
