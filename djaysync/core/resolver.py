"""
Metadata resolution

Looks a track up in djay's two databases and picks the best tempo and key.
Manual (user-corrected) values always win over automatic ones. Within a
table the floor slug is tried first, then the ceiling slug, then the
persistent id, which djay does not always record.
"""

import math
import logging
from typing import Any, Callable, List, Mapping, Optional, Tuple

from .models import CandidateKeys, ResolvedMetadata, Track
from .slugger import TrackSlugger


AUTO_TEMPO_FIELD = 'bpm'
AUTO_KEY_FIELD = 'key'
MANUAL_TEMPO_FIELD = 'song.manualBpm'
MANUAL_KEY_FIELD = 'song.manualKey'


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives"""
    return int(math.floor(value + 0.5))


def as_number(value: Any) -> Optional[float]:
    """Return value if it is a finite real number, else None"""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return value


class MetadataTable:
    """
    Read-only mapping from lookup key to an analysis record

    Each record is a mapping; the table knows which record fields hold the
    tempo and the key index, since the automatic and manual databases use
    different names.
    """

    def __init__(self, entries: Optional[Mapping[str, Any]] = None,
                 tempo_field: str = AUTO_TEMPO_FIELD, key_field: str = AUTO_KEY_FIELD,
                 name: str = 'table'):
        self._entries = entries if entries is not None else {}
        self.tempo_field = tempo_field
        self.key_field = key_field
        self.name = name

    @classmethod
    def auto(cls, entries: Optional[Mapping[str, Any]] = None) -> 'MetadataTable':
        return cls(entries, AUTO_TEMPO_FIELD, AUTO_KEY_FIELD, name='auto')

    @classmethod
    def manual(cls, entries: Optional[Mapping[str, Any]] = None) -> 'MetadataTable':
        return cls(entries, MANUAL_TEMPO_FIELD, MANUAL_KEY_FIELD, name='manual')

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key) -> bool:
        return key in self._entries

    def lookup(self, key: str) -> Optional[Mapping[str, Any]]:
        """Return the record stored under key, or None on a miss"""
        if not key:
            return None
        record = self._entries.get(key)
        if not isinstance(record, Mapping):
            return None
        return record

    def tempo(self, key: str) -> Optional[float]:
        record = self.lookup(key)
        return None if record is None else as_number(record.get(self.tempo_field))

    def key_index(self, key: str) -> Optional[float]:
        record = self.lookup(key)
        return None if record is None else as_number(record.get(self.key_field))

    def __repr__(self):
        return f"MetadataTable(name={self.name!r}, entries={len(self._entries)})"


class MetadataResolver:
    """Resolves a single tempo and key index per track"""

    def __init__(self, slugger: Optional[TrackSlugger] = None):
        self.slugger = slugger or TrackSlugger()
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def probe_order(keys: CandidateKeys, auto_table: MetadataTable,
                    manual_table: MetadataTable) -> List[Tuple[MetadataTable, str]]:
        """(table, key) pairs in the order they are consulted"""
        order = []
        for table in (manual_table, auto_table):
            for key in (keys.slug_floor, keys.slug_ceil, keys.stable_id):
                order.append((table, key))
        return order

    def _first(self, probes: List[Tuple[MetadataTable, str]],
               getter: Callable[[MetadataTable, str], Optional[float]]) -> Tuple[Optional[int], Optional[str]]:
        for table, key in probes:
            value = getter(table, key)
            if value is not None:
                return round_half_up(value), table.name
        return None, None

    def resolve(self, track: Track, auto_table: MetadataTable,
                manual_table: MetadataTable) -> ResolvedMetadata:
        """
        Find the best tempo and key index for a track

        Tempo and key are resolved independently, so they may come from
        different tables or keys. Values are rounded to whole numbers.
        """
        keys = self.slugger.candidate_keys(track)
        probes = self.probe_order(keys, auto_table, manual_table)

        tempo, tempo_source = self._first(probes, MetadataTable.tempo)
        key_index, key_source = self._first(probes, MetadataTable.key_index)

        self.logger.debug(
            f"Resolved {keys.slug_floor!r}: tempo={tempo} ({tempo_source}), "
            f"key={key_index} ({key_source})"
        )
        return ResolvedMetadata(tempo=tempo, key_index=key_index)
