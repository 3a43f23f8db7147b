import pytest

from mes_engine.models import QualityLevel, VideoChunk, VideoManifest
from mes_engine.pipeline.playlist import (
    MediaPlaylistBuilder,
    build_master_playlist,
    build_media_playlist,
    parse_bitrate,
    playlists_from_manifest,
)


@pytest.mark.parametrize("token,expected", [
    ("2500k", 2_500_000),
    ("2500K", 2_500_000),
    ("5M", 5_000_000),
    ("1.5M", 1_500_000),
    ("800000", 800_000),
])
def test_parse_bitrate(token, expected):
    assert parse_bitrate(token) == expected


@pytest.mark.parametrize("token", ["", "fast", "10kbps", "-5k"])
def test_parse_bitrate_rejects_garbage(token):
    with pytest.raises(ValueError):
        parse_bitrate(token)


def test_media_playlist_layout():
    text = build_media_playlist(10, 3)
    assert text.splitlines() == [
        "#EXTM3U",
        "#EXT-X-VERSION:3",
        "#EXT-X-TARGETDURATION:10",
        "#EXT-X-MEDIA-SEQUENCE:0",
        "#EXT-X-PLAYLIST-TYPE:VOD",
        "#EXTINF:10.0,",
        "chunk_0.mp4",
        "#EXTINF:10.0,",
        "chunk_1.mp4",
        "#EXTINF:10.0,",
        "chunk_2.mp4",
        "#EXT-X-ENDLIST",
    ]


def test_builder_finalize_is_idempotent():
    builder = MediaPlaylistBuilder(6)
    builder.add_segment(0)
    first = builder.finalize()
    assert builder.finalize() == first
    assert first.count("#EXT-X-ENDLIST") == 1
    with pytest.raises(RuntimeError):
        builder.add_segment(1)


def test_master_playlist():
    text = build_master_playlist([QualityLevel(720, "2500k"), QualityLevel(480, "1000k")])
    assert text.splitlines() == [
        "#EXTM3U",
        "#EXT-X-VERSION:3",
        "#EXT-X-STREAM-INF:BANDWIDTH=2500000,RESOLUTION=-1x720",
        "720p/playlist.m3u8",
        "#EXT-X-STREAM-INF:BANDWIDTH=1000000,RESOLUTION=-1x480",
        "480p/playlist.m3u8",
    ]


def test_playlists_regenerated_from_manifest():
    qualities = [QualityLevel(720, "2500k"), QualityLevel(480, "1000k")]
    manifest = VideoManifest(
        video_id="v_1",
        qualities=qualities,
        chunks=[VideoChunk(q.height, i, f"{q.label}/chunk_{i}.mp4") for q in qualities for i in range(2)]
    )

    playlists = playlists_from_manifest(manifest, 10)

    assert set(playlists) == {"720p/playlist.m3u8", "480p/playlist.m3u8", "master.m3u8"}
    assert playlists["720p/playlist.m3u8"] == build_media_playlist(10, 2)
