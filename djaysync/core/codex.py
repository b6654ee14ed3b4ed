"""
Harmonic key codex

djay stores a track's key as an index into a fixed table of 24 keys. The
labels below combine the Camelot wheel position with the key name, which is
also the form written at the start of a track's grouping tag.
"""

from typing import Optional, Tuple

from .exceptions import KeyIndexOutOfRangeError


CAMELOT_LABELS = (
    '8B-C', '8A-Am', '3B-Db', '3A-Bbm', '10B-D', '10A-Bm',
    '5B-Eb', '5A-Cm', '12B-E', '12A-C#m', '7B-F', '7A-Dm',
    '2B-Gb', '2A-Ebm', '9B-G', '9A-Em', '4B-Ab', '4A-Fm',
    '11B-A', '11A-F#m', '6B-Bb', '6A-Gm', '1B-B', '1A-G#m',
)


class KeyCodex:
    """Ordered, immutable catalog of key labels"""

    def __init__(self, labels: Tuple[str, ...] = CAMELOT_LABELS):
        self._labels = tuple(labels)
        if len(set(self._labels)) != len(self._labels):
            raise ValueError("Key codex labels must be unique")
        self._index = {label: i for i, label in enumerate(self._labels)}

    def __len__(self) -> int:
        return len(self._labels)

    def __contains__(self, label) -> bool:
        return label in self._index

    def label_of(self, index: int) -> str:
        """
        Translate a key index into its label

        Raises:
            KeyIndexOutOfRangeError: If index is not in 0..len-1. Negative
                indexes are rejected rather than counted from the end.
        """
        if isinstance(index, bool) or not isinstance(index, int):
            raise KeyIndexOutOfRangeError(index, len(self._labels))
        if not 0 <= index < len(self._labels):
            raise KeyIndexOutOfRangeError(index, len(self._labels))
        return self._labels[index]

    def index_of(self, label: str) -> Optional[int]:
        return self._index.get(label)

    def all_labels(self) -> Tuple[str, ...]:
        return self._labels

    def find_in(self, text: str) -> Optional[str]:
        """Return the first label, in codex order, that occurs in text"""
        if not text:
            return None
        for label in self._labels:
            if label in text:
                return label
        return None


KEY_CODEX = KeyCodex()
