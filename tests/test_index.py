import json
import os

import pytest

from pinshare.services.index import MetadataIndex
from pinshare.services.records import FileRecord


@pytest.fixture
def index(tmp_path):
    return MetadataIndex(str(tmp_path / "filedata.json"), str(tmp_path / "uploads"))


def test_missing_index_loads_empty(index):
    assert index.load() == []


def test_persist_writes_ordered_snapshot(index):
    records = [
        FileRecord("b.txt", 2, "uploads/b.txt"),
        FileRecord("a.txt", 1, "uploads/a.txt"),
    ]
    index.persist(records)

    text = index.path.read_text(encoding="utf-8")
    assert text.startswith('{\n  "files": [')
    doc = json.loads(text)
    assert doc == {"files": [
        {"filename": "b.txt", "size": 2, "path": "uploads/b.txt"},
        {"filename": "a.txt", "size": 1, "path": "uploads/a.txt"},
    ]}
    assert list(doc["files"][0]) == ["filename", "size", "path"]
    assert not os.path.exists(str(index.path) + ".tmp")
    assert index.load() == records


def test_persist_failure_raises_and_keeps_previous_snapshot(index, monkeypatch):
    index.persist([FileRecord("a.txt", 1, "uploads/a.txt")])

    def fail_replace(src, dst):
        raise OSError("read-only filesystem")

    monkeypatch.setattr("pinshare.services.index.os.replace", fail_replace)
    with pytest.raises(OSError):
        index.persist([])

    monkeypatch.undo()
    assert [r.filename for r in index.load()] == ["a.txt"]
    assert not os.path.exists(str(index.path) + ".tmp")


def test_invalid_json_loads_empty(index):
    index.path.write_text("{not json", encoding="utf-8")
    assert index.load() == []


@pytest.mark.parametrize("doc", [[], {"files": "nope"}, {"other": []}, "just a string"])
def test_wrong_shape_loads_empty(index, doc):
    index.path.write_text(json.dumps(doc), encoding="utf-8")
    assert index.load() == []


def test_malformed_entries_are_skipped(index):
    index.path.write_text(json.dumps({"files": [
        {"filename": "ok.txt", "size": 3, "path": "uploads/ok.txt"},
        {"filename": "../evil", "size": 1},
        {"filename": "nosize.txt"},
        {"filename": "neg.txt", "size": -1},
        {"filename": "flag.txt", "size": True},
        "garbage",
        {"filename": "ok.txt", "size": 9, "path": "uploads/dupe"},
        {"filename": "also-ok.bin", "size": 0, "path": "uploads/also-ok.bin"},
    ]}), encoding="utf-8")

    loaded = index.load()
    assert [(r.filename, r.size) for r in loaded] == [("ok.txt", 3), ("also-ok.bin", 0)]


def test_legacy_entries_without_path_resolve_to_upload_dir(index, tmp_path):
    index.path.write_text(json.dumps({"files": [{"filename": "old.txt", "size": 4}]}), encoding="utf-8")
    (record,) = index.load()
    assert record.storage_path == str(tmp_path / "uploads" / "old.txt")
