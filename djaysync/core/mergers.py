"""
Field mergers

Pure functions deciding what a track's tempo and grouping fields should
become. Both return None when the field must be left alone, so callers only
write (and only count a track as updated) when a new value comes back.
"""

from typing import Optional

from .codex import KEY_CODEX, KeyCodex


def strip_key_label(tag: str, codex: KeyCodex = KEY_CODEX):
    """
    Remove the first codex label found in a grouping tag

    Labels are scanned in codex order and only one is removed; a tag
    carrying several labels keeps the rest.

    Returns:
        (tag without the label, label removed or None)
    """
    tag = tag or ''
    label = codex.find_in(tag)
    if label is None:
        return tag, None

    before, _, after = tag.partition(label)
    return (before.strip() + ' ' + after.strip()).strip(), label


class GroupingTagMerger:
    """Writes the key label at the start of the grouping tag"""

    def __init__(self, codex: KeyCodex = KEY_CODEX):
        self.codex = codex

    def merge(self, current_tag: str, new_label: str, overwrite: bool) -> Optional[str]:
        """
        Merge a key label into the grouping tag

        Args:
            current_tag: Existing grouping text (may be empty)
            new_label: Resolved key label; empty means no key was found
            overwrite: Replace a key label that is already present

        Returns:
            The new tag, or None if the tag must stay unchanged
        """
        if not new_label:
            return None

        stripped, existing = strip_key_label(current_tag, self.codex)
        if existing is not None and not overwrite:
            return None

        return (new_label + ' ' + stripped.strip()).strip()


class TempoFieldMerger:
    """Writes a resolved tempo under the overwrite policy"""

    def merge(self, current_tempo: float, new_tempo: Optional[float],
              overwrite: bool) -> Optional[float]:
        """
        Decide the new tempo value

        A zero tempo means "no value" on both sides: zero never gets
        written, and a current tempo of zero is always replaced.
        """
        if new_tempo is None or new_tempo <= 0:
            return None
        if not current_tempo or overwrite:
            return new_tempo
        return None
