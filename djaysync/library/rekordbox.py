"""
Rekordbox XML collection as a sync library.

Tracks are read from the COLLECTION node of a Rekordbox XML export. Tempo
and grouping changes are written straight into the parsed tree, so saving
preserves every attribute, child node and playlist that was not touched.
"""

import os
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional
from urllib.parse import unquote, urlparse

from ..core.exceptions import LibraryError


@dataclass
class RekordboxTrack:
    """Single TRACK entry of a Rekordbox collection"""
    # Core identifiers
    track_id: str = ""
    location: str = ""   # file:// URL
    kind: str = ""

    # Identity used for matching
    title: str = ""
    artist: str = ""
    total_time: float = 0.0  # seconds

    # Fields written by the sync
    average_bpm: float = 0.0
    grouping_text: str = ""

    _node: Optional[ET.Element] = field(default=None, repr=False, compare=False)

    def from_xml_node(self, node: ET.Element) -> 'RekordboxTrack':
        """Read the fields used by the sync from a TRACK node"""
        self._node = node

        self.track_id = node.attrib.get('TrackID', '')
        self.location = node.attrib.get('Location', '')
        self.kind = node.attrib.get('Kind', '')
        self.title = node.attrib.get('Name', '')
        self.artist = node.attrib.get('Artist', '')
        self.grouping_text = node.attrib.get('Grouping', '')

        try:
            self.total_time = float(node.attrib.get('TotalTime', '0') or 0)
        except ValueError:
            self.total_time = 0.0

        try:
            self.average_bpm = float(node.attrib.get('AverageBpm', '0') or 0)
        except ValueError:
            self.average_bpm = 0.0

        return self

    # Track protocol

    @property
    def name(self) -> str:
        return self.title

    @property
    def duration_seconds(self) -> float:
        return self.total_time

    @property
    def stable_id(self) -> str:
        return self.track_id

    @property
    def tempo(self) -> float:
        return self.average_bpm

    @tempo.setter
    def tempo(self, value: float):
        self.average_bpm = float(value)
        if self._node is not None:
            self._node.attrib['AverageBpm'] = f"{self.average_bpm:.2f}"

    @property
    def grouping(self) -> str:
        return self.grouping_text

    @grouping.setter
    def grouping(self, value: str):
        self.grouping_text = value or ''
        if self._node is not None:
            self._node.attrib['Grouping'] = self.grouping_text

    # Location helpers

    @property
    def is_file_track(self) -> bool:
        """True for tracks backed by a local file"""
        return self.location.startswith('file://')

    @property
    def file_path(self) -> str:
        """Local path decoded from the file:// location"""
        if not self.is_file_track:
            return ''
        path = unquote(urlparse(self.location).path)
        # file://localhost/C:/... on Windows
        if len(path) > 2 and path[0] == '/' and path[2] == ':':
            path = path[1:]
        return os.path.normpath(path)


class RekordboxLibrary:
    """Reads and writes a Rekordbox XML collection"""

    def __init__(self):
        self.tracks: Dict[str, RekordboxTrack] = {}
        self.collection: List[RekordboxTrack] = []
        self.tree: Optional[ET.ElementTree] = None
        self.path: Optional[str] = None
        self.logger = logging.getLogger(__name__)

    @classmethod
    def load(cls, xml_path: str) -> 'RekordboxLibrary':
        return cls().parse(xml_path)

    def parse(self, xml_path: str) -> 'RekordboxLibrary':
        """
        Parse Rekordbox XML file and build track collection

        Raises:
            LibraryError: If the file is missing or is not a Rekordbox export
        """
        if not os.path.exists(xml_path):
            raise LibraryError("XML file not found", path=xml_path)

        try:
            self.tree = ET.parse(xml_path)
        except ET.ParseError as e:
            raise LibraryError("Error parsing XML", details=str(e), path=xml_path)

        root = self.tree.getroot()
        if root.tag != 'DJ_PLAYLISTS':
            raise LibraryError("Not a Rekordbox collection",
                               details=f"root element is <{root.tag}>", path=xml_path)

        self.path = xml_path
        self._parse_tracks(root)
        self.logger.info(f"Parsed {len(self.collection)} tracks from {xml_path}")
        return self

    def _parse_tracks(self, root: ET.Element):
        """Extract all track data from COLLECTION node"""
        self.tracks = {}
        self.collection = []
        collection = root.find('./COLLECTION')
        if collection is None:
            self.logger.warning("No COLLECTION node found in XML")
            return

        for track_node in collection.findall('./TRACK'):
            track = RekordboxTrack().from_xml_node(track_node)
            if not track.track_id:
                self.logger.warning(f"Skipping track without TrackID: {track.title!r}")
                continue
            if track.track_id in self.tracks:
                self.logger.warning(f"Duplicate TrackID {track.track_id}: {track.title!r} "
                                    f"shadows {self.tracks[track.track_id].title!r} in lookups")
            self.tracks[track.track_id] = track
            self.collection.append(track)

    def file_tracks(self) -> List[RekordboxTrack]:
        """Tracks backed by local files, in collection order"""
        return [t for t in self.collection if t.is_file_track]

    def __iter__(self) -> Iterator[RekordboxTrack]:
        return iter(self.file_tracks())

    def __len__(self) -> int:
        return len(self.collection)

    def save(self, output_path: Optional[str] = None) -> str:
        """
        Write the collection back to XML

        Args:
            output_path: Destination (default: the file that was parsed)
        """
        if self.tree is None:
            raise LibraryError("No collection loaded")

        output_path = output_path or self.path
        try:
            self.tree.write(output_path, encoding='UTF-8', xml_declaration=True)
        except OSError as e:
            raise LibraryError("Could not write XML", details=str(e), path=output_path)

        self.logger.info(f"Exported {len(self.collection)} tracks to {output_path}")
        return output_path
