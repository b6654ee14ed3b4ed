import json

import pytest

from djaysync.cli.config import SyncConfig
from djaysync.cli.main import apply_cli_overrides, create_parser, main
from djaysync.core.models import FieldSelection
from djaysync.library.rekordbox import RekordboxLibrary


COLLECTION = '''<?xml version="1.0" encoding="UTF-8"?>
<DJ_PLAYLISTS Version="1.0.0">
  <PRODUCT Name="rekordbox" Version="6.6.2" Company="AlphaTheta"/>
  <COLLECTION Entries="2">
    <TRACK TrackID="1" Name="Song" Artist="Artist" TotalTime="180"
           AverageBpm="120.00" Grouping="8A-Am Chill" Location="file://localhost/music/song.mp3"/>
    <TRACK TrackID="2" Name="Unknown" Artist="Nobody" TotalTime="200"
           Location="file://localhost/music/unknown.mp3"/>
  </COLLECTION>
  <PLAYLISTS/>
</DJ_PLAYLISTS>'''


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    for name in ("DJAYSYNC_FIELDS", "DJAYSYNC_OVERWRITE", "DJAYSYNC_DRY_RUN",
                 "DJAYSYNC_AUTO_TABLE", "DJAYSYNC_MANUAL_TABLE"):
        monkeypatch.delenv(name, raising=False)

    (tmp_path / "rekordbox.xml").write_text(COLLECTION, encoding="utf-8")
    (tmp_path / "auto.json").write_text(json.dumps({"1": {"bpm": 123.7, "key": 4}}), encoding="utf-8")
    (tmp_path / "manual.json").write_text(json.dumps({
        "Song Entries": {"song\tartist\t180": {"song.manualBpm": 125.0}}
    }), encoding="utf-8")
    return tmp_path


def run(workspace, *extra):
    return main([
        str(workspace / "rekordbox.xml"),
        "--auto", str(workspace / "auto.json"),
        "--manual", str(workspace / "manual.json"),
        "--log-dir", str(workspace / "logs"),
        "--no-console-log", "--no-progress",
        *extra,
    ])


def test_keep_existing_by_default(workspace, capsys):
    run(workspace)
    track = RekordboxLibrary.load(str(workspace / "rekordbox.xml")).tracks["1"]
    assert track.tempo == pytest.approx(120.0)
    assert track.grouping == "8A-Am Chill"
    assert "Processed 0 of 2 tracks" in capsys.readouterr().out


def test_overwrite_writes_manual_tempo_and_auto_key(workspace, capsys):
    run(workspace, "--overwrite")
    track = RekordboxLibrary.load(str(workspace / "rekordbox.xml")).tracks["1"]
    assert track.tempo == pytest.approx(125.0)
    assert track.grouping == "10B-D Chill"
    out = capsys.readouterr().out
    assert "Processed 1 of 2 tracks" in out
    assert "Not found in djay: 1" in out


def test_output_and_report(workspace):
    run(workspace, "--overwrite", "--fields", "key",
        "--output", str(workspace / "out.xml"), "--report", str(workspace / "report.json"))

    original = RekordboxLibrary.load(str(workspace / "rekordbox.xml")).tracks["1"]
    assert original.grouping == "8A-Am Chill"

    updated = RekordboxLibrary.load(str(workspace / "out.xml")).tracks["1"]
    assert updated.grouping == "10B-D Chill"
    assert updated.tempo == pytest.approx(120.0)

    report = json.loads((workspace / "report.json").read_text(encoding="utf-8"))
    assert report["options"]["fields"] == "key"
    assert report["result"]["updated"] == 1
    assert report["result"]["outcomes"][1]["status"] == "unmatched"


def test_dry_run_changes_nothing(workspace, capsys):
    before = (workspace / "rekordbox.xml").read_text(encoding="utf-8")
    run(workspace, "--overwrite", "--dry-run")
    assert (workspace / "rekordbox.xml").read_text(encoding="utf-8") == before
    assert "Would update 1 of 2 tracks" in capsys.readouterr().out


def test_missing_auto_table_exits(workspace):
    with pytest.raises(SystemExit) as excinfo:
        main([str(workspace / "rekordbox.xml"), "--log-dir", str(workspace / "logs"),
              "--no-console-log", "--no-progress"])
    assert excinfo.value.code == 1


def test_missing_library_exits(workspace):
    with pytest.raises(SystemExit) as excinfo:
        main([str(workspace / "missing.xml"), "--auto", str(workspace / "auto.json"),
              "--log-dir", str(workspace / "logs"), "--no-console-log", "--no-progress"])
    assert excinfo.value.code == 1


def test_cli_overrides_reach_config_manager(workspace):
    args = create_parser().parse_args([
        "rekordbox.xml", "--auto", "auto.json", "--fields", "key", "--dry-run", "--no-progress",
    ])
    config_manager = SyncConfig(load_env_file=False)
    apply_cli_overrides(args, config_manager.load_config())

    options = config_manager.sync_options()
    assert options.fields == FieldSelection.KEY
    assert options.dry_run is True
    assert options.overwrite_existing is False
    assert config_manager.get_option("tables.auto_path") == "auto.json"
    assert config_manager.get_option("ui.progress_bars") is False
