"""
djay-sync - Core Sync Engine

Runs each track through the reconciliation pipeline:
slug -> resolve -> merge tempo / merge key. Tracks are independent; a
failure on one track is recorded in its outcome and never stops the batch.
"""

import time
import logging
from typing import Callable, Iterable, Optional, Sequence

from .codex import KEY_CODEX, KeyCodex
from .exceptions import KeyIndexOutOfRangeError
from .mergers import GroupingTagMerger, TempoFieldMerger
from .models import (
    BatchResult, OutcomeStatus, ResolvedMetadata, SyncOptions, Track, TrackOutcome,
)
from .resolver import MetadataResolver, MetadataTable


ProgressCallback = Callable[[int, int, TrackOutcome], None]


class SyncEngine:
    """
    Core reconciliation engine for djay-sync

    The two metadata tables are loaded once by the caller and only read
    here. Options are passed per call so the same engine can serve several
    runs.
    """

    def __init__(self, auto_table: MetadataTable, manual_table: Optional[MetadataTable] = None,
                 codex: KeyCodex = KEY_CODEX, resolver: Optional[MetadataResolver] = None):
        """
        Initialize the sync engine

        Args:
            auto_table: Values computed by djay's analysis
            manual_table: Values corrected by the user in djay
            codex: Key label catalog
            resolver: Metadata resolver (default: MetadataResolver())
        """
        self.auto_table = auto_table
        self.manual_table = manual_table if manual_table is not None else MetadataTable.manual()
        self.codex = codex
        self.resolver = resolver or MetadataResolver()
        self.tempo_merger = TempoFieldMerger()
        self.grouping_merger = GroupingTagMerger(codex)
        self.logger = logging.getLogger(__name__)

        self.logger.debug(f"Sync engine initialized: auto={auto_table!r}, manual={self.manual_table!r}")

    def resolve(self, track: Track, outcome: Optional[TrackOutcome] = None) -> ResolvedMetadata:
        """Resolve tempo and key, translating the key index into its label"""
        resolved = self.resolver.resolve(track, self.auto_table, self.manual_table)

        if resolved.key_index is not None:
            try:
                resolved.key_label = self.codex.label_of(resolved.key_index)
            except KeyIndexOutOfRangeError as e:
                e.track_id = str(track.stable_id)
                self.logger.warning(str(e))
                if outcome is not None:
                    outcome.add_warning(e.message)
                resolved.key_index = None
                resolved.key_label = ''

        return resolved

    def process_track(self, track: Track, options: SyncOptions) -> TrackOutcome:
        """
        Process a single track through the complete pipeline

        Args:
            track: Library track to update
            options: Field selection, overwrite policy and dry-run flag

        Returns:
            TrackOutcome describing what was (or would be) written
        """
        outcome = TrackOutcome()

        try:
            outcome.track_id = str(track.stable_id)
            outcome.display_name = f"{track.artist} - {track.name}"

            resolved = self.resolve(track, outcome)
            outcome.resolved = resolved

            if not resolved.matched:
                outcome.status = OutcomeStatus.UNMATCHED
                self.logger.debug(f"No djay data for {outcome.display_name}")
                return outcome

            if options.fields.writes_tempo:
                self._apply_tempo(track, resolved, options, outcome)

            if options.fields.writes_key:
                self._apply_key(track, resolved, options, outcome)

            outcome.status = OutcomeStatus.UPDATED if outcome.updated else OutcomeStatus.UNCHANGED

        except Exception as e:
            outcome.status = OutcomeStatus.ERROR
            outcome.add_error(f"{type(e).__name__}: {e}")
            self.logger.error(f"Failed to update {outcome.display_name or outcome.track_id}: {e}")
            self.logger.debug("Stack trace:", exc_info=True)

        return outcome

    def _apply_tempo(self, track: Track, resolved: ResolvedMetadata,
                     options: SyncOptions, outcome: TrackOutcome):
        current = track.tempo or 0
        new_tempo = self.tempo_merger.merge(current, resolved.tempo, options.overwrite_existing)
        if new_tempo is None:
            return

        outcome.previous_tempo = current
        if not options.dry_run:
            track.tempo = new_tempo
        outcome.tempo_written = True
        self.logger.debug(f"Tempo {current} -> {new_tempo}: {outcome.display_name}")

    def _apply_key(self, track: Track, resolved: ResolvedMetadata,
                   options: SyncOptions, outcome: TrackOutcome):
        current = track.grouping or ''
        new_tag = self.grouping_merger.merge(current, resolved.key_label, options.overwrite_existing)
        if new_tag is None:
            return

        outcome.previous_grouping = current
        if not options.dry_run:
            track.grouping = new_tag
        outcome.grouping_written = True
        self.logger.debug(f"Grouping {current!r} -> {new_tag!r}: {outcome.display_name}")

    def process_tracks(self, tracks: Iterable[Track], options: SyncOptions,
                       progress_callback: Optional[ProgressCallback] = None) -> BatchResult:
        """
        Process tracks one at a time, in the order given

        Args:
            tracks: Library tracks (already filtered to file-based tracks)
            options: Sync options applied to every track
            progress_callback: Called as (position, total, outcome) after each track

        Returns:
            BatchResult with exactly one outcome per input track
        """
        start_time = time.time()
        track_list: Sequence[Track] = tracks if isinstance(tracks, Sequence) else list(tracks)
        total = len(track_list)
        batch = BatchResult(dry_run=options.dry_run)

        self.logger.info(f"Starting sync: {total} tracks, options: {options.to_dict()}")

        for position, track in enumerate(track_list, 1):
            outcome = self.process_track(track, options)
            batch.add_outcome(outcome)
            if progress_callback:
                progress_callback(position, total, outcome)

        elapsed = time.time() - start_time
        self.logger.info(f"{batch.summary()} in {elapsed:.2f}s "
                         f"({batch.unmatched} unmatched, {batch.failed} failed)")
        return batch
