import json

from mes_engine.models import ManifestMetadata, QualityLevel, VideoChunk, VideoManifest


def make_manifest():
    qualities = [QualityLevel(720, "2500k"), QualityLevel(480, "1000k")]
    chunks = [
        VideoChunk(720, 0, "/o/v/720p/chunk_0.mp4", "/o/v/screenshots/chunk_0.jpg", "intro"),
        VideoChunk(720, 1, "/o/v/720p/chunk_1.mp4", "/o/v/screenshots/chunk_1.jpg"),
        VideoChunk(480, 0, "/o/v/480p/chunk_0.mp4", "/o/v/screenshots/chunk_0.jpg", "intro"),
        VideoChunk(480, 1, "/o/v/480p/chunk_1.mp4", "/o/v/screenshots/chunk_1.jpg"),
    ]
    return VideoManifest(
        video_id="v_1",
        qualities=qualities,
        chunks=chunks,
        metadata=ManifestMetadata(title="Trip", duration_sec=15.5, chunk_size=10)
    )


def test_quality_level_parse():
    assert QualityLevel.parse(" 1080:5000k ") == QualityLevel(1080, "5000k")
    assert QualityLevel(720, "1M").label == "720p"


def test_manifest_helpers():
    manifest = make_manifest()
    assert manifest.chunk_count == 2
    assert [c.index for c in manifest.chunks_for_quality(480)] == [0, 1]


def test_manifest_json_shape():
    data = json.loads(make_manifest().to_json())

    assert data["video_id"] == "v_1"
    assert data["qualities"][0] == {"height": 720, "bitrate": "2500k"}
    assert data["chunks"][0]["description"] == "intro"
    assert "description" not in data["chunks"][1]
    assert data["metadata"]["title"] == "Trip"
    assert "description" not in data["metadata"]


def test_manifest_from_dict_restores_everything():
    original = make_manifest()
    restored = VideoManifest.from_dict(json.loads(original.to_json()))

    assert restored.qualities == original.qualities
    assert restored.chunks == original.chunks
    assert restored.metadata == original.metadata
