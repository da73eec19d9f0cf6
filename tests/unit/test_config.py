"""
Unit tests for configuration and the command line.
"""

import pytest

from assetserver.config import AppConfig, ConfigError
from assetserver.__main__ import build_parser, config_from_args, main

from conftest import MTIME_MS


class TestAppConfig:
    """Tests for AppConfig."""

    def test_defaults_are_valid(self):
        """Test the default configuration validates."""
        config = AppConfig()
        config.validate()

        assert config.port == 8080
        assert config.production is True

    @pytest.mark.parametrize("kwargs", [
        {"port": 70000},
        {"port": -1},
        {"cache_max_age": -5},
        {"log_level": "LOUD"},
        {"log_format": "xml"},
        {"public_url_path": "public"},
        {"webjars_url_path": "webjars"},
    ])
    def test_invalid_values(self, kwargs):
        """Test each invalid value is rejected."""
        with pytest.raises(ConfigError):
            AppConfig(**kwargs).validate()

    def test_missing_public_dir(self, tmp_path):
        """Test a missing public directory is caught at startup."""
        with pytest.raises(ConfigError, match="does not exist"):
            AppConfig(public_dir=str(tmp_path / "nope")).validate()

    def test_log_level_number(self):
        """Test level names map to logging constants."""
        assert AppConfig(log_level="debug").log_level_number == 10


class TestFromEnv:
    """Tests for AppConfig.from_env."""

    def test_reads_environment(self, monkeypatch):
        """Test ASSETS_* variables are read."""
        monkeypatch.setenv("ASSETS_PORT", "9000")
        monkeypatch.setenv("ASSETS_PUBLIC_DIR", "/srv/public")
        monkeypatch.setenv("ASSETS_PRODUCTION", "no")
        monkeypatch.setenv("ASSETS_LOG_LEVEL", "debug")
        monkeypatch.setenv("ASSETS_LOG_FORMAT", "JSON")

        config = AppConfig.from_env()

        assert config.port == 9000
        assert config.public_dir == "/srv/public"
        assert config.production is False
        assert config.log_level == "DEBUG"
        assert config.log_format == "json"

    def test_bad_number(self, monkeypatch):
        """Test non-numeric values become ConfigError."""
        monkeypatch.setenv("ASSETS_CACHE_MAX_AGE", "forever")

        with pytest.raises(ConfigError):
            AppConfig.from_env()


class TestCommandLine:
    """Tests for python -m assetserver."""

    def test_arguments_override_environment(self, monkeypatch):
        """Test command line values win over the environment."""
        monkeypatch.setenv("ASSETS_PORT", "9000")
        monkeypatch.setenv("ASSETS_HOST", "0.0.0.0")
        args = build_parser().parse_args(["--dev", "serve", "--port", "3000"])

        config = config_from_args(args)

        assert config.port == 3000
        assert config.host == "0.0.0.0"
        assert config.production is False

    def test_version_command(self, public_dir, capsys):
        """Test the version command prints the versioned URL."""
        exit_code = main(["--public", str(public_dir), "version", "css/site.css"])

        assert exit_code == 0
        assert capsys.readouterr().out.strip() == f"/public/css/site-ver-{MTIME_MS}.css"

    def test_version_command_missing(self, public_dir, capsys):
        """Test a missing resource is reported with exit code 1."""
        exit_code = main(["--public", str(public_dir), "version", "missing.js"])

        assert exit_code == 1
        assert "Error:" in capsys.readouterr().err

    def test_bad_config_exit_code(self, tmp_path, capsys):
        """Test configuration errors exit with 2."""
        exit_code = main(["--public", str(tmp_path / "nope"), "version", "a.js"])

        assert exit_code == 2
        assert "does not exist" in capsys.readouterr().err
