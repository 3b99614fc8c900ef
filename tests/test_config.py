"""Tests for Config loading, saving, validation and environment overrides."""

import logging
from pathlib import Path

import pytest

from static_maps.config import CACHE_DISABLED_ENV, CACHE_TTL_ENV, Config, get_default_config
from static_maps.logging_config import LOG_LEVEL_ENV, get_logger, setup_logging


class TestConfig:

    def test_defaults(self):
        config = get_default_config()
        assert config.tile_size == 256
        assert config.max_zoom == 18
        assert config.single_point_zoom == 15
        assert 1 <= config.tile_request_limit <= 8
        assert config.output_dir == Path("./output")
        assert config.validate()

    @pytest.mark.parametrize("suffix", [".yaml", ".yml", ".json"])
    def test_round_trip(self, temp_dir, suffix):
        path = temp_dir / f"config{suffix}"
        original = Config(tile_request_timeout=3.5, default_basemap="carto-light", output_dir="maps")
        original.save_to_file(path)

        loaded = Config.load_from_file(path)
        assert loaded.tile_request_timeout == 3.5
        assert loaded.default_basemap == "carto-light"
        assert loaded.output_dir == Path("maps")

    def test_unsupported_suffix(self, temp_dir):
        path = temp_dir / "config.toml"
        path.write_text("tile_size = 256")
        with pytest.raises(ValueError):
            Config.load_from_file(path)

    def test_unknown_keys(self, temp_dir):
        path = temp_dir / "config.yaml"
        path.write_text("tile_size: 512\ndefault_dpi: 300\n")
        with pytest.raises(ValueError, match="default_dpi"):
            Config.load_from_file(path)

    def test_empty_file_gives_defaults(self, temp_dir):
        path = temp_dir / "config.yml"
        path.write_text("")
        assert Config.load_from_file(path).tile_size == 256

    def test_missing_file(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            Config.load_from_file(temp_dir / "nope.yaml")

    @pytest.mark.parametrize(
        "field, value",
        [
            ("tile_size", 0),
            ("tile_request_timeout", 0),
            ("tile_request_retries", -1),
            ("tile_request_limit", 0),
            ("default_quality", 101),
            ("cache_ttl", -1),
            ("single_point_zoom", 25),
        ],
    )
    def test_validate_rejects(self, field, value):
        config = Config()
        setattr(config, field, value)
        with pytest.raises(ValueError):
            config.validate()

    def test_cache_env_vars(self, monkeypatch):
        monkeypatch.setenv(CACHE_TTL_ENV, "120")
        monkeypatch.setenv(CACHE_DISABLED_ENV, "true")
        config = Config()
        assert config.cache_ttl == 120.0
        assert config.cache_disabled is True

    def test_bad_ttl_env_falls_back(self, monkeypatch):
        monkeypatch.setenv(CACHE_TTL_ENV, "soon")
        monkeypatch.delenv(CACHE_DISABLED_ENV, raising=False)
        config = Config()
        assert config.cache_ttl == 3600.0
        assert config.cache_disabled is False


class TestLogging:

    def test_verbosity_levels(self, monkeypatch):
        monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
        logger = logging.getLogger("static_maps")
        setup_logging(verbosity=1)
        assert logger.level == logging.DEBUG
        setup_logging(verbosity=-1)
        assert logger.level == logging.WARNING
        setup_logging()
        assert logger.level == logging.INFO
        assert len(logger.handlers) == 1

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv(LOG_LEVEL_ENV, "error")
        setup_logging(verbosity=1)
        assert logging.getLogger("static_maps").level == logging.ERROR
        monkeypatch.delenv(LOG_LEVEL_ENV)
        setup_logging()

    def test_get_logger_nests_under_package(self):
        assert get_logger("cli").name == "static_maps.cli"
        assert get_logger("static_maps.tiles").name == "static_maps.tiles"

    def test_log_file(self, temp_dir, monkeypatch):
        monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
        log_file = temp_dir / "render.log"
        setup_logging(log_file=str(log_file))
        logging.getLogger("static_maps.tests").info("hello from tests")
        for handler in logging.getLogger("static_maps").handlers:
            handler.flush()
        assert "hello from tests" in log_file.read_text()
        setup_logging()
