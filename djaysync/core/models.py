"""
Data models for djay-sync

This module defines the data structures passed between the reconciliation
core and its callers: the track protocol, sync options, resolved values and
per-track / batch outcomes.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Any, NamedTuple, Protocol


class Track(Protocol):
    """A library item whose tempo and grouping can be updated

    Library adapters provide their own implementation. Only identity and
    duration are read; only ``tempo`` and ``grouping`` are written.
    """

    name: str
    artist: str
    duration_seconds: float
    stable_id: str
    tempo: float
    grouping: str


class FieldSelection(str, Enum):
    """Which library fields a sync run writes"""

    TEMPO = "tempo"
    KEY = "key"
    BOTH = "both"

    @property
    def writes_tempo(self) -> bool:
        return self in (FieldSelection.TEMPO, FieldSelection.BOTH)

    @property
    def writes_key(self) -> bool:
        return self in (FieldSelection.KEY, FieldSelection.BOTH)

    @classmethod
    def parse(cls, value) -> 'FieldSelection':
        """Accept enum members, names and the tool's 'BPM' spelling"""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        if text == "bpm":
            return cls.TEMPO
        return cls(text)


class CandidateKeys(NamedTuple):
    """Every key a track may be recorded under in a metadata table"""

    stable_id: str
    slug_floor: str
    slug_ceil: str


@dataclass
class SyncOptions:
    """User selections for a sync run"""

    fields: FieldSelection = FieldSelection.BOTH
    overwrite_existing: bool = False
    dry_run: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            'fields': self.fields.value,
            'overwrite_existing': self.overwrite_existing,
            'dry_run': self.dry_run,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SyncOptions':
        """Create from dictionary"""
        return cls(
            fields=FieldSelection.parse(data.get('fields', FieldSelection.BOTH)),
            overwrite_existing=bool(data.get('overwrite_existing', False)),
            dry_run=bool(data.get('dry_run', False)),
        )


@dataclass
class ResolvedMetadata:
    """Best tempo and key found for a single track"""

    tempo: Optional[int] = None
    key_index: Optional[int] = None
    key_label: str = ""

    @property
    def matched(self) -> bool:
        """True if any table supplied a value"""
        return self.tempo is not None or self.key_index is not None


class OutcomeStatus(str, Enum):
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    UNMATCHED = "unmatched"
    ERROR = "error"


@dataclass
class TrackOutcome:
    """Result of processing a single track"""

    track_id: str = ""
    display_name: str = ""
    status: OutcomeStatus = OutcomeStatus.UNCHANGED
    resolved: Optional[ResolvedMetadata] = None

    tempo_written: bool = False
    grouping_written: bool = False
    previous_tempo: Optional[float] = None
    previous_grouping: Optional[str] = None

    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def updated(self) -> bool:
        return self.tempo_written or self.grouping_written

    def add_warning(self, warning: str):
        """Add a warning message"""
        if warning not in self.warnings:
            self.warnings.append(warning)

    def add_error(self, error: str):
        """Add an error message"""
        if error not in self.errors:
            self.errors.append(error)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            'track_id': self.track_id,
            'display_name': self.display_name,
            'status': self.status.value,
            'tempo': self.resolved.tempo if self.resolved else None,
            'key': self.resolved.key_label if self.resolved else "",
            'tempo_written': self.tempo_written,
            'grouping_written': self.grouping_written,
            'warnings': list(self.warnings),
            'errors': list(self.errors),
        }


@dataclass
class BatchResult:
    """Result of a sync run over many tracks"""

    outcomes: List[TrackOutcome] = field(default_factory=list)
    updated: int = 0
    unmatched: int = 0
    failed: int = 0
    dry_run: bool = False

    @property
    def total(self) -> int:
        return len(self.outcomes)

    def add_outcome(self, outcome: TrackOutcome):
        """Add a track outcome to the batch"""
        self.outcomes.append(outcome)

        # A track that failed after one field was written still counts as updated
        if outcome.updated:
            self.updated += 1

        if outcome.status == OutcomeStatus.UNMATCHED:
            self.unmatched += 1
        elif outcome.status == OutcomeStatus.ERROR:
            self.failed += 1

    def summary(self) -> str:
        verb = "Would update" if self.dry_run else "Processed"
        return f"{verb} {self.updated} of {self.total} tracks"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            'total': self.total,
            'updated': self.updated,
            'unmatched': self.unmatched,
            'failed': self.failed,
            'dry_run': self.dry_run,
            'outcomes': [o.to_dict() for o in self.outcomes],
        }
