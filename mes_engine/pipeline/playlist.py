"""
HLS playlist generation.

Per-quality playlists list every chunk with the configured chunk length;
the master playlist references each per-quality playlist with its
bandwidth and resolution.
"""

import re
from typing import List

from ..models import QualityLevel, VideoManifest
from .util import chunk_filename, PLAYLIST_NAME, MASTER_PLAYLIST_NAME

# Width is not computed; only the height of a rendition is meaningful.
RESOLUTION_WIDTH_SENTINEL = -1

_BITRATE_RE = re.compile(r'^\s*(\d+(?:\.\d+)?)\s*([kKmMgG]?)\s*$')
_BITRATE_MULTIPLIERS = {'': 1, 'k': 1_000, 'm': 1_000_000, 'g': 1_000_000_000}


def parse_bitrate(bitrate: str) -> int:
    """Convert a bitrate token ("2500k", "5M", "800000") to bits per second"""
    match = _BITRATE_RE.match(str(bitrate))
    if not match:
        raise ValueError(f"Invalid bitrate token: {bitrate!r}")
    value, unit = match.groups()
    return int(round(float(value) * _BITRATE_MULTIPLIERS[unit.lower()]))


def _format_duration(seconds: float) -> str:
    return f"{float(seconds):.1f}"


def _format_target_duration(seconds: float) -> str:
    seconds = float(seconds)
    return str(int(seconds)) if seconds.is_integer() else str(seconds)


class MediaPlaylistBuilder:
    """Accumulates segment entries for one quality, in index order"""

    def __init__(self, chunk_size: float):
        self.chunk_size = chunk_size
        self.lines: List[str] = [
            "#EXTM3U",
            "#EXT-X-VERSION:3",
            f"#EXT-X-TARGETDURATION:{_format_target_duration(chunk_size)}",
            "#EXT-X-MEDIA-SEQUENCE:0",
            "#EXT-X-PLAYLIST-TYPE:VOD",
        ]
        self.segment_count = 0
        self.finalized = False

    def add_segment(self, index: int) -> None:
        if self.finalized:
            raise RuntimeError("Playlist already finalized")
        self.lines.append(f"#EXTINF:{_format_duration(self.chunk_size)},")
        self.lines.append(chunk_filename(index))
        self.segment_count += 1

    def finalize(self) -> str:
        if not self.finalized:
            self.lines.append("#EXT-X-ENDLIST")
            self.finalized = True
        return "\n".join(self.lines) + "\n"


def build_media_playlist(chunk_size: float, chunk_count: int) -> str:
    """Build a complete per-quality playlist for chunks [0, chunk_count)"""
    builder = MediaPlaylistBuilder(chunk_size)
    for index in range(chunk_count):
        builder.add_segment(index)
    return builder.finalize()


def build_master_playlist(qualities: List[QualityLevel]) -> str:
    """Build the master playlist, listing qualities in the given order"""
    lines = ["#EXTM3U", "#EXT-X-VERSION:3"]
    for quality in qualities:
        lines.append(
            f"#EXT-X-STREAM-INF:BANDWIDTH={parse_bitrate(quality.bitrate)},"
            f"RESOLUTION={RESOLUTION_WIDTH_SENTINEL}x{quality.height}"
        )
        lines.append(f"{quality.label}/{PLAYLIST_NAME}")
    return "\n".join(lines) + "\n"


def playlists_from_manifest(manifest: VideoManifest, chunk_size: float) -> dict:
    """Regenerate every playlist of a manifest, keyed by relative path"""
    playlists = {}
    for quality in manifest.qualities:
        count = len(manifest.chunks_for_quality(quality.height))
        playlists[f"{quality.label}/{PLAYLIST_NAME}"] = build_media_playlist(chunk_size, count)
    if len(manifest.qualities) > 1:
        playlists[MASTER_PLAYLIST_NAME] = build_master_playlist(manifest.qualities)
    return playlists
