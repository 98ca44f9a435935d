import asyncio
import pytest
from datetime import datetime, date
from pathlib import Path

from exiftool.exceptions import ExifToolException, ExifToolExecuteError

import license_tagger.metadata.engine as engine_module
from license_tagger.exceptions import EngineError, TagReadError, TagWriteError
from license_tagger.metadata.engine import ExifToolEngine, normalize_raw_tags, tag_text
from license_tagger.metadata.reader import TagReader


class StubHelper:
    """Mimics the parts of exiftool.ExifToolHelper the engine uses."""
    instances = []

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.running = False
        self.version = "12.76"
        self.calls = []
        self.fail_with = None
        StubHelper.instances.append(self)

    def run(self):
        self.running = True

    def terminate(self):
        self.running = False

    def get_tags(self, files, tags, params=None):
        self.calls.append(("get_tags", files, tags, params))
        if self.fail_with:
            raise self.fail_with
        return [{"SourceFile": files, "Creator": "Jane"}]

    def set_tags(self, files, tags, params=None):
        self.calls.append(("set_tags", files, tags, params))
        if self.fail_with:
            raise self.fail_with
        return "1 image files updated"


@pytest.fixture
def stub_helper(monkeypatch):
    StubHelper.instances.clear()
    monkeypatch.setattr(engine_module.exiftool, "ExifToolHelper", StubHelper)
    return StubHelper


def test_normalize_flattens_engine_values():
    raw = {
        "SourceFile": "a.jpg",
        "DateTimeOriginal": datetime(2023, 5, 1, 10, 30),
        "DateCreated": date(2023, 5, 1),
        "Comment": b"caf\xc3\xa9",
        "Warning": ValueError("Bad IFD"),
        "Creator": ("Jane", "John"),
        "Region": {"Name": "x", "Count": 2},
        "ImageWidth": 640,
    }
    tags = normalize_raw_tags(raw)

    assert tags["DateTimeOriginal"] == "2023-05-01T10:30:00"
    assert tags["DateCreated"] == "2023-05-01"
    assert tags["Comment"] == "café"
    assert tags["Warning"] == "Bad IFD"
    assert tags["Creator"] == ["Jane", "John"]
    assert tags["Region"] == {"Name": "x", "Count": 2}
    assert tags["ImageWidth"] == 640


@pytest.mark.parametrize(
    "value,expected",
    [
        (None, None),
        ("CC-BY", "CC-BY"),
        ("", ""),
        (2023, "2023"),
        (["Jane", "John"], "Jane, John"),
    ],
)
def test_tag_text(value, expected):
    assert tag_text(value) == expected


def test_engine_lifecycle(stub_helper):
    engine = ExifToolEngine()
    with engine:
        helper = stub_helper.instances[0]
        assert helper.running
        assert helper.kwargs["common_args"] == []
        assert engine.version() == "12.76"
    assert not helper.running

    with pytest.raises(EngineError):
        engine.read_all(Path("a.jpg"), ["all"])


def test_engine_passes_executable(stub_helper):
    with ExifToolEngine(executable="/opt/exiftool/exiftool"):
        assert stub_helper.instances[0].kwargs["executable"] == "/opt/exiftool/exiftool"


def test_engine_read_and_write(stub_helper):
    with ExifToolEngine() as engine:
        tags = engine.read_all(Path("a.jpg"), ("all", "xmp:all"))
        engine.write(Path("a.jpg"), {"Creator": "B"})
        engine.write(Path("a.jpg"), {"Rights": "CC"}, overwrite_original=False)

        calls = stub_helper.instances[0].calls

    assert tags["Creator"] == "Jane"
    assert calls[0] == ("get_tags", "a.jpg", ["all", "xmp:all"], None)
    assert calls[1] == ("set_tags", "a.jpg", {"Creator": "B"}, ["-overwrite_original"])
    assert calls[2] == ("set_tags", "a.jpg", {"Rights": "CC"}, [])


def test_engine_maps_execute_errors(stub_helper):
    with ExifToolEngine() as engine:
        helper = stub_helper.instances[0]
        helper.fail_with = ExifToolExecuteError(1, "", "Error: File not found - a.jpg", ["-all"])

        with pytest.raises(TagReadError) as read_err:
            engine.read_all(Path("a.jpg"), ["all"])
        with pytest.raises(TagWriteError) as write_err:
            engine.write(Path("a.jpg"), {"Creator": "B"})

    assert read_err.value.message == "Error: File not found - a.jpg"
    assert "File not found" in str(write_err.value)


def test_engine_maps_other_exiftool_errors(stub_helper):
    with ExifToolEngine() as engine:
        stub_helper.instances[0].fail_with = ExifToolException("exiftool returned invalid JSON")

        with pytest.raises(TagReadError) as read_err:
            engine.read_all(Path("a.jpg"), ["all"])
        with pytest.raises(TagWriteError):
            engine.write(Path("a.jpg"), {"Creator": "B"})

    assert read_err.value.message == "exiftool returned invalid JSON"


def test_reader_isolates_exiftool_errors(stub_helper, images):
    with ExifToolEngine() as engine:
        stub_helper.instances[0].fail_with = ExifToolException("exiftool returned invalid JSON")
        records = asyncio.run(TagReader(engine).read_tags(images))

    assert [r.error for r in records] == ["exiftool returned invalid JSON"] * 3


def test_engine_start_failure(monkeypatch):
    def missing(**kwargs):
        raise FileNotFoundError("exiftool not found")

    monkeypatch.setattr(engine_module.exiftool, "ExifToolHelper", missing)
    with pytest.raises(EngineError):
        ExifToolEngine().start()
