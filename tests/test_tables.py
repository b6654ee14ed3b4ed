import json

import pytest

from djaysync.core.exceptions import TableError
from djaysync.tables import load_table, load_tables


def write_json(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_load_tables_with_djay_field_names(tmp_path):
    auto_path = write_json(tmp_path / "auto.json", {"X1": {"bpm": 120.2, "key": 4}})
    manual_path = write_json(tmp_path / "manual.json", {
        "Song Entries": {"song\tartist\t180": {"song.manualBpm": 124.0, "song.manualKey": 1}}
    })

    auto, manual = load_tables(auto_path, manual_path)

    assert auto.tempo("X1") == 120.2
    assert auto.key_index("X1") == 4
    assert manual.tempo("song\tartist\t180") == 124.0
    assert manual.key_index("song\tartist\t180") == 1
    assert manual.name == "manual"


def test_manual_entries_without_wrapper(tmp_path):
    path = write_json(tmp_path / "manual.json", {"X1": {"song.manualBpm": 99}})
    table = load_table(path, "song.manualBpm", "song.manualKey", entries_key="Song Entries")
    assert table.tempo("X1") == 99


def test_missing_manual_table_is_empty(tmp_path):
    auto_path = write_json(tmp_path / "auto.json", {})
    auto, manual = load_tables(auto_path, str(tmp_path / "missing.json"))
    assert len(manual) == 0
    assert manual.tempo_field == "song.manualBpm"


def test_missing_auto_table_raises(tmp_path):
    with pytest.raises(TableError):
        load_tables(str(tmp_path / "missing.json"))


def test_invalid_json_raises(tmp_path):
    path = tmp_path / "auto.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(TableError) as excinfo:
        load_table(str(path))
    assert str(path) in str(excinfo.value)


def test_non_object_raises(tmp_path):
    path = write_json(tmp_path / "auto.json", [1, 2, 3])
    with pytest.raises(TableError):
        load_table(path)
