"""
djay-sync Core Package

This package contains the reconciliation core: key codex, track slugs,
metadata resolution, field mergers and the sync engine.
"""

from .models import (
    Track, FieldSelection, CandidateKeys, SyncOptions, ResolvedMetadata,
    OutcomeStatus, TrackOutcome, BatchResult,
)
from .exceptions import (
    DjaySyncError, KeyIndexOutOfRangeError, TableError, LibraryError,
    TagWriteError, ConfigurationError,
)
from .codex import KeyCodex, KEY_CODEX
from .slugger import TrackSlugger, candidate_keys
from .resolver import MetadataTable, MetadataResolver
from .mergers import GroupingTagMerger, TempoFieldMerger
from .engine import SyncEngine

__all__ = [
    'Track',
    'FieldSelection',
    'CandidateKeys',
    'SyncOptions',
    'ResolvedMetadata',
    'OutcomeStatus',
    'TrackOutcome',
    'BatchResult',
    'DjaySyncError',
    'KeyIndexOutOfRangeError',
    'TableError',
    'LibraryError',
    'TagWriteError',
    'ConfigurationError',
    'KeyCodex',
    'KEY_CODEX',
    'TrackSlugger',
    'candidate_keys',
    'MetadataTable',
    'MetadataResolver',
    'GroupingTagMerger',
    'TempoFieldMerger',
    'SyncEngine',
]
