"""
Unit tests for service wiring and the command line entry point.
"""

import json
from unittest.mock import Mock, patch

import pytest

from mes_engine.adapters.filesystem_adapter import FileSystemStorage
from mes_engine.adapters.s3_adapter import S3StorageAdapter
from mes_engine.cache import ExternalCache, InternalCache
from mes_engine.engines.ffmpeg_engine import FFmpegEngine
from mes_engine.exceptions import ConfigurationError
from mes_engine.models import ProcessingResult, VideoManifest
from mes_engine.service import MediaService, build_parser, main

from tests.conftest import FakeEngine


@pytest.fixture
def service_config(config, tmp_path):
    config.LOG_DIR = str(tmp_path / "logs")
    return config


class TestFactories:
    """Test adapter construction from configuration."""

    def test_defaults(self, service_config):
        service = MediaService(service_config)
        service.initialize(start_http=False)

        assert isinstance(service.engine, FFmpegEngine)
        assert isinstance(service.storage, FileSystemStorage)
        assert isinstance(service.cache, InternalCache)
        assert service.processor.cache is service.cache
        assert service.health_server is None

    def test_engine_options(self, service_config):
        service_config.ENGINE_CONFIG = {"preset": "slow", "audio_bitrate": "192k"}
        engine = MediaService(service_config)._create_engine()
        assert (engine.preset, engine.audio_bitrate) == ("slow", "192k")

    def test_s3_storage(self, service_config):
        service_config.STORAGE_TYPE = "s3"
        service_config.STORAGE_CONFIG = {"bucket": "media", "region": "eu-west-1", "prefix": "hls/"}

        storage = MediaService(service_config)._create_storage_adapter()

        assert isinstance(storage, S3StorageAdapter)
        assert storage.bucket == "media"
        assert storage.base_dir == service_config.OUTPUT_DIR

    def test_external_cache(self, service_config):
        service_config.CACHE_TYPE = "external"
        service_config.CACHE_CONFIG = {"external_cache_url": "http://cache:9000"}

        assert isinstance(MediaService(service_config)._create_cache(), ExternalCache)

    def test_no_cache(self, service_config):
        service_config.CACHE_TYPE = "none"
        assert MediaService(service_config)._create_cache() is None

    def test_relative_output_dir_is_anchored_at_storage_root(self, service_config, input_video, tmp_path, monkeypatch):
        root = tmp_path / "store"
        workdir = tmp_path / "work"
        workdir.mkdir()
        monkeypatch.chdir(workdir)
        service_config.OUTPUT_DIR = "processed"
        service_config.STORAGE_CONFIG = {"root": str(root)}
        service_config.QUALITIES = service_config.QUALITIES[:1]

        service = MediaService(service_config)
        service.initialize(start_http=False)
        service.processor.engine = FakeEngine(duration=5)
        manifest = service.processor.process_video(input_video)

        assert service_config.OUTPUT_DIR == str(root / "processed")
        assert manifest.chunks[0].path.startswith(str(root / "processed"))
        assert (root / "processed" / manifest.video_id / "manifest.json").is_file()
        assert list(workdir.iterdir()) == []

    def test_invalid_config_fails_initialize(self, service_config):
        service_config.CHUNK_SIZE = 0
        with pytest.raises(ConfigurationError):
            MediaService(service_config).initialize(start_http=False)


class TestCommandLine:
    """Test argument parsing and the main entry point."""

    def test_parser(self):
        args = build_parser().parse_args(["process", "in.mp4", "--title", "Trip"])
        assert (args.command, args.input, args.title) == ("process", "in.mp4", "Trip")

    def test_parser_requires_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    @patch("mes_engine.service.signal")
    @patch("mes_engine.service.MediaService")
    def test_process_prints_manifest(self, mock_service_cls, mock_signal, capsys):
        manifest = VideoManifest(video_id="v_1", qualities=[], chunks=[])
        service = Mock()
        service.process.return_value = ProcessingResult(success=True, video_id="v_1", manifest=manifest)
        mock_service_cls.return_value = service

        code = main(["process", "in.mp4", "--title", "Trip"])

        assert code == 0
        assert json.loads(capsys.readouterr().out)["video_id"] == "v_1"
        options = service.process.call_args[0][1]
        assert options.title == "Trip"
        service.stop.assert_called_once()

    @patch("mes_engine.service.signal")
    @patch("mes_engine.service.MediaService")
    def test_process_failure_exit_code(self, mock_service_cls, mock_signal, capsys):
        service = Mock()
        service.process.return_value = ProcessingResult(success=False, error="boom")
        mock_service_cls.return_value = service

        assert main(["process", "in.mp4"]) == 1
        assert "boom" in capsys.readouterr().err
