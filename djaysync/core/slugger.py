"""
Track slugs

djay records some songs under the library's persistent id and others under
a "slug": lowercased name and artist plus the duration in whole seconds,
separated by tabs. djay and the library decode durations slightly
differently, so the whole-second value can be off by one in either
direction. Both the floor and the ceiling of the duration are tried.
"""

import math

from .models import CandidateKeys, Track


SLUG_SEPARATOR = '\t'


def make_slug(name: str, artist: str, seconds: int) -> str:
    """Build one slug from its parts"""
    return SLUG_SEPARATOR.join([
        (name or '').lower(),
        (artist or '').lower(),
        str(seconds),
    ])


class TrackSlugger:
    """Derives candidate table keys for a track"""

    def candidate_keys(self, track: Track) -> CandidateKeys:
        """
        Return the three keys a track may be stored under

        Args:
            track: Any object following the Track protocol

        Returns:
            CandidateKeys(stable_id, slug_floor, slug_ceil). The two slugs
            are equal when the duration is a whole number of seconds.
        """
        duration = float(track.duration_seconds or 0.0)
        stable_id = '' if track.stable_id is None else str(track.stable_id)

        return CandidateKeys(
            stable_id=stable_id,
            slug_floor=make_slug(track.name, track.artist, math.floor(duration)),
            slug_ceil=make_slug(track.name, track.artist, math.ceil(duration)),
        )


def candidate_keys(track: Track) -> CandidateKeys:
    return TrackSlugger().candidate_keys(track)
