import pytest
from pathlib import Path

from license_tagger.exceptions import TagReadError, TagWriteError
from license_tagger.metadata.engine import MetadataEngine


class FakeEngine(MetadataEngine):
    """In-memory stand-in for exiftool. Writes are visible to later reads."""

    def __init__(self, tags=None):
        # str(path) -> {tag: value}
        self.store = {str(k): dict(v) for k, v in (tags or {}).items()}
        self.reads = []
        self.writes = []
        self.unreadable = set()
        self.unwritable = set()
        self.started = 0
        self.closed = 0

    def start(self):
        self.started += 1

    def close(self):
        self.closed += 1

    def version(self):
        return "12.76"

    def read_all(self, path, filter_spec):
        key = str(path)
        self.reads.append(key)
        if key in self.unreadable:
            raise TagReadError(path, "File format error")
        return {"SourceFile": key, **self.store.get(key, {})}

    def write(self, path, fields, overwrite_original=True):
        key = str(path)
        self.writes.append((key, dict(fields), overwrite_original))
        if key in self.unwritable:
            raise TagWriteError(path, "Error opening file")
        self.store.setdefault(key, {}).update(fields)


@pytest.fixture
def images(tmp_path):
    """Three empty image paths inside a temp project."""
    paths = []
    for name in ("a.jpg", "b.jpg", "c.png"):
        p = tmp_path / name
        p.write_bytes(b"")
        paths.append(p)
    return paths


@pytest.fixture
def engine():
    return FakeEngine()
