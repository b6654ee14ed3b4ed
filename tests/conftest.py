from dataclasses import dataclass

import pytest

from djaysync.core.resolver import MetadataTable


@dataclass
class FakeTrack:
    name: str = "Song"
    artist: str = "Artist"
    duration_seconds: float = 180.4
    stable_id: str = "X1"
    tempo: float = 0
    grouping: str = ""


@pytest.fixture
def make_track():
    return FakeTrack


@pytest.fixture
def track():
    return FakeTrack()


@pytest.fixture
def example_tables():
    manual = MetadataTable.manual({"song\tartist\t180": {"song.manualBpm": 124.0}})
    auto = MetadataTable.auto({"X1": {"key": 4}})
    return auto, manual
