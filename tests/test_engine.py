import pytest

from djaysync.core.engine import SyncEngine
from djaysync.core.models import FieldSelection, OutcomeStatus, SyncOptions
from djaysync.core.resolver import MetadataTable


@pytest.fixture
def engine(example_tables):
    auto, manual = example_tables
    return SyncEngine(auto, manual)


def test_example_track_updated(engine, track):
    outcome = engine.process_track(track, SyncOptions())
    assert outcome.status == OutcomeStatus.UPDATED
    assert outcome.resolved.tempo == 124
    assert outcome.resolved.key_label == "10B-D"
    assert track.tempo == 124
    assert track.grouping == "10B-D"
    assert outcome.tempo_written and outcome.grouping_written


@pytest.mark.parametrize(
    "fields,tempo_written,grouping_written",
    [
        (FieldSelection.TEMPO, True, False),
        (FieldSelection.KEY, False, True),
        (FieldSelection.BOTH, True, True),
    ],
)
def test_field_selection(engine, track, fields, tempo_written, grouping_written):
    outcome = engine.process_track(track, SyncOptions(fields=fields))
    assert outcome.tempo_written is tempo_written
    assert outcome.grouping_written is grouping_written
    assert (track.tempo == 124) is tempo_written
    assert (track.grouping == "10B-D") is grouping_written


def test_existing_values_kept_without_overwrite(engine, make_track):
    track = make_track(tempo=120, grouping="8A-Am Chill")
    outcome = engine.process_track(track, SyncOptions(overwrite_existing=False))
    assert outcome.status == OutcomeStatus.UNCHANGED
    assert track.tempo == 120
    assert track.grouping == "8A-Am Chill"


def test_existing_values_replaced_with_overwrite(engine, make_track):
    track = make_track(tempo=120, grouping="8A-Am Chill")
    outcome = engine.process_track(track, SyncOptions(overwrite_existing=True))
    assert outcome.status == OutcomeStatus.UPDATED
    assert track.tempo == 124
    assert track.grouping == "10B-D Chill"
    assert outcome.previous_tempo == 120
    assert outcome.previous_grouping == "8A-Am Chill"


def test_dry_run_leaves_track_untouched(engine, track):
    outcome = engine.process_track(track, SyncOptions(dry_run=True))
    assert outcome.updated
    assert track.tempo == 0
    assert track.grouping == ""


def test_unmatched_track(engine, make_track):
    outcome = engine.process_track(make_track(name="Other", stable_id="Z9"), SyncOptions())
    assert outcome.status == OutcomeStatus.UNMATCHED
    assert not outcome.updated


def test_out_of_range_key_is_absent(make_track):
    engine = SyncEngine(MetadataTable.auto({"X1": {"bpm": 128, "key": 24}}))
    track = make_track(grouping="8A-Am")
    outcome = engine.process_track(track, SyncOptions(overwrite_existing=True))
    assert outcome.resolved.key_index is None
    assert outcome.resolved.key_label == ""
    assert outcome.warnings
    assert track.grouping == "8A-Am"
    assert track.tempo == 128


def test_negative_key_index_is_absent(make_track):
    engine = SyncEngine(MetadataTable.auto({"X1": {"key": -1}}))
    outcome = engine.process_track(make_track(), SyncOptions())
    assert outcome.resolved.key_label == ""
    assert outcome.status == OutcomeStatus.UNMATCHED


class ExplodingTrack:
    name = "Broken"
    artist = "Artist"
    duration_seconds = 10.0
    stable_id = "X1"
    tempo = 0
    grouping = ""

    def __setattr__(self, key, value):
        raise OSError("read-only library")


def test_track_failure_does_not_abort_batch(engine, track):
    batch = engine.process_tracks([ExplodingTrack(), track], SyncOptions())
    assert batch.total == 2
    assert batch.outcomes[0].status == OutcomeStatus.ERROR
    assert batch.outcomes[0].errors
    assert batch.outcomes[1].status == OutcomeStatus.UPDATED
    assert batch.failed == 1
    assert batch.updated == 1


class GroupingLockedTrack:
    name = "Song"
    artist = "Artist"
    duration_seconds = 180.4
    stable_id = "X1"
    tempo = 0

    @property
    def grouping(self):
        return ""

    @grouping.setter
    def grouping(self, value):
        raise OSError("grouping is read-only")


def test_partial_write_still_counts_as_updated(engine):
    track = GroupingLockedTrack()
    batch = engine.process_tracks([track], SyncOptions())

    outcome = batch.outcomes[0]
    assert outcome.status == OutcomeStatus.ERROR
    assert outcome.tempo_written and not outcome.grouping_written
    assert track.tempo == 124
    assert batch.updated == 1
    assert batch.failed == 1
    assert batch.summary() == "Processed 1 of 1 tracks"


def test_batch_counts_and_progress(engine, make_track):
    tracks = [make_track(), make_track(name="Nope", stable_id="N"), make_track(tempo=90, grouping="1B-B")]
    seen = []
    batch = engine.process_tracks(iter(tracks), SyncOptions(),
                                  progress_callback=lambda i, total, o: seen.append((i, total, o.status)))
    assert [s[:2] for s in seen] == [(1, 3), (2, 3), (3, 3)]
    assert batch.total == 3
    assert batch.updated == 1
    assert batch.unmatched == 1
    assert batch.summary() == "Processed 1 of 3 tracks"
    assert batch.to_dict()["outcomes"][0]["key"] == "10B-D"


def test_missing_manual_table_defaults_to_empty(make_track):
    engine = SyncEngine(MetadataTable.auto({"X1": {"bpm": 100}}))
    assert engine.process_track(make_track(), SyncOptions()).resolved.tempo == 100
