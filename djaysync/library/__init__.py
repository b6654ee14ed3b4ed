"""
Library adapters for djay-sync.

Each adapter supplies Track objects (name, artist, duration, stable id,
writable tempo and grouping) and knows how to persist the changes.
"""

from .rekordbox import RekordboxTrack, RekordboxLibrary
from .file_tags import AudioFileTrack, scan_folder, find_audio_files, SUPPORTED_EXTENSIONS

__all__ = [
    'RekordboxTrack',
    'RekordboxLibrary',
    'AudioFileTrack',
    'scan_folder',
    'find_audio_files',
    'SUPPORTED_EXTENSIONS',
]
