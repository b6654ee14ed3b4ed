"""
Audio files as a sync library

Reads identity and duration from audio files with mutagen and writes the
tempo and grouping tags back. Supported tag schemes:

- ID3 (MP3, AIFF, WAV): TIT2 / TPE1 / TBPM / TIT1
- MP4 (M4A, MP4): \xa9nam / \xa9ART / tmpo / \xa9grp
- Vorbis comments (FLAC, Ogg): TITLE / ARTIST / BPM / GROUPING
"""

import os
import logging
from typing import Iterator, List, Optional, Sequence

from mutagen import File as MutagenFile
from mutagen import MutagenError
from mutagen.flac import FLAC
from mutagen.aiff import AIFF
from mutagen.id3 import TBPM, TIT1
from mutagen.mp3 import MP3
from mutagen.mp4 import MP4
from mutagen.oggvorbis import OggVorbis
from mutagen.oggopus import OggOpus
from mutagen.wave import WAVE

from ..core.exceptions import LibraryError, TagWriteError


SUPPORTED_EXTENSIONS = ('.mp3', '.m4a', '.mp4', '.flac', '.ogg', '.opus', '.aiff', '.aif', '.wav')

SCHEME_ID3 = 'id3'
SCHEME_MP4 = 'mp4'
SCHEME_VORBIS = 'vorbis'

# (title, artist, tempo, grouping) per scheme
TAG_NAMES = {
    SCHEME_ID3: ('TIT2', 'TPE1', 'TBPM', 'TIT1'),
    SCHEME_MP4: ('\xa9nam', '\xa9ART', 'tmpo', '\xa9grp'),
    SCHEME_VORBIS: ('TITLE', 'ARTIST', 'BPM', 'GROUPING'),
}

logger = logging.getLogger(__name__)


def _tag_scheme(audio) -> Optional[str]:
    if isinstance(audio, MP4):
        return SCHEME_MP4
    if isinstance(audio, (FLAC, OggVorbis, OggOpus)):
        return SCHEME_VORBIS
    if isinstance(audio, (MP3, AIFF, WAVE)):
        return SCHEME_ID3
    return None


def _first_text(tags, name: str) -> str:
    """Get the first text value of a tag in any scheme"""
    if tags is None or name not in tags:
        return ''
    value = tags[name]
    if hasattr(value, 'text'):
        return str(value.text[0]) if value.text else ''
    if isinstance(value, list):
        return str(value[0]) if value else ''
    return str(value)


def _parse_tempo(text: str) -> float:
    try:
        tempo = float(text)
    except (TypeError, ValueError):
        return 0.0
    return tempo if tempo > 0 else 0.0


class AudioFileTrack:
    """
    Audio file exposing the Track protocol

    Setting ``tempo`` or ``grouping`` only stages the change; ``save()``
    writes staged changes to disk.
    """

    def __init__(self, filepath: str, audio):
        self.filepath = os.path.abspath(filepath)
        self._audio = audio
        self.scheme = _tag_scheme(audio)
        if self.scheme is None:
            raise LibraryError("Unsupported tag format",
                               details=type(audio).__name__, path=filepath)

        title_tag, artist_tag, tempo_tag, grouping_tag = TAG_NAMES[self.scheme]
        tags = audio.tags

        self.name = _first_text(tags, title_tag) or os.path.splitext(os.path.basename(filepath))[0]
        self.artist = _first_text(tags, artist_tag)
        self.duration_seconds = float(getattr(audio.info, 'length', 0.0) or 0.0)
        self._tempo = _parse_tempo(_first_text(tags, tempo_tag))
        self._grouping = _first_text(tags, grouping_tag)
        self._dirty = set()

    @classmethod
    def open(cls, filepath: str) -> 'AudioFileTrack':
        """
        Read an audio file

        Raises:
            LibraryError: If mutagen cannot read the file
        """
        try:
            audio = MutagenFile(filepath)
        except (MutagenError, OSError) as e:
            raise LibraryError("Could not read audio file", details=str(e), path=filepath)
        if audio is None:
            raise LibraryError("Unsupported audio format", path=filepath)
        return cls(filepath, audio)

    @property
    def stable_id(self) -> str:
        return self.filepath

    @property
    def tempo(self) -> float:
        return self._tempo

    @tempo.setter
    def tempo(self, value: float):
        self._tempo = float(value)
        self._dirty.add('tempo')

    @property
    def grouping(self) -> str:
        return self._grouping

    @grouping.setter
    def grouping(self, value: str):
        self._grouping = value or ''
        self._dirty.add('grouping')

    @property
    def has_changes(self) -> bool:
        return bool(self._dirty)

    def save(self) -> bool:
        """
        Write staged tempo and grouping changes

        Returns:
            True if anything was written

        Raises:
            TagWriteError: If the tags cannot be saved
        """
        if not self._dirty:
            return False

        if self._audio.tags is None:
            self._audio.add_tags()
        tags = self._audio.tags
        _, _, tempo_tag, grouping_tag = TAG_NAMES[self.scheme]
        bpm = int(round(self._tempo))

        if self.scheme == SCHEME_ID3:
            if 'tempo' in self._dirty:
                tags.setall(tempo_tag, [TBPM(encoding=3, text=[str(bpm)])])
            if 'grouping' in self._dirty:
                tags.setall(grouping_tag, [TIT1(encoding=3, text=[self._grouping])])
        elif self.scheme == SCHEME_MP4:
            if 'tempo' in self._dirty:
                tags[tempo_tag] = [bpm]
            if 'grouping' in self._dirty:
                tags[grouping_tag] = [self._grouping]
        else:
            if 'tempo' in self._dirty:
                tags[tempo_tag] = [str(bpm)]
            if 'grouping' in self._dirty:
                tags[grouping_tag] = [self._grouping]

        try:
            self._audio.save()
        except (MutagenError, OSError) as e:
            raise TagWriteError("Failed to save tags", details=str(e), track_id=self.filepath)

        logger.debug(f"Saved {sorted(self._dirty)}: {os.path.basename(self.filepath)}")
        self._dirty.clear()
        return True

    def __repr__(self):
        return f"AudioFileTrack({os.path.basename(self.filepath)!r})"


def find_audio_files(folder: str, extensions: Sequence[str] = SUPPORTED_EXTENSIONS) -> List[str]:
    """Find supported audio files below folder, sorted by path"""
    extensions = tuple(e.lower() for e in extensions)
    found = []
    for dirpath, dirnames, filenames in os.walk(folder):
        dirnames.sort()
        for filename in sorted(filenames):
            if filename.startswith('.'):
                continue
            if filename.lower().endswith(extensions):
                found.append(os.path.join(dirpath, filename))
    return found


def scan_folder(folder: str, extensions: Sequence[str] = SUPPORTED_EXTENSIONS) -> Iterator[AudioFileTrack]:
    """Yield a track per readable audio file; unreadable files are logged and skipped"""
    if not os.path.isdir(folder):
        raise LibraryError("Music folder not found", path=folder)

    for filepath in find_audio_files(folder, extensions):
        try:
            yield AudioFileTrack.open(filepath)
        except LibraryError as e:
            logger.warning(str(e))
