"""Tests for configuration management"""

import tempfile
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from ytaudio.core.config import ConfigService, ExtractorConfig, LoggingConfig


class TestConfigService:
    """Test ConfigService functionality"""

    def test_load_from_yaml(self, tmp_path: Path) -> None:
        """Test loading configuration from YAML file"""
        config_file = tmp_path / "config.yaml"
        config_data = {
            "server": {"host": "127.0.0.1", "port": 9000},
            "extractor": {"binary": "/opt/yt-dlp", "kill_on_cancel": True},
            "logging": {"level": "debug", "format": "console"},
        }
        config_file.write_text(yaml.dump(config_data))

        config = ConfigService(str(config_file)).load()

        assert config.server.host == "127.0.0.1"
        assert config.server.port == 9000
        assert config.extractor.binary == "/opt/yt-dlp"
        assert config.extractor.kill_on_cancel is True
        assert config.logging.level == "DEBUG"
        assert config.logging.format == "console"

    def test_load_with_defaults(self, tmp_path: Path) -> None:
        """Test loading configuration with default values"""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")

        config = ConfigService(str(config_file)).load()

        assert config.server.host == "0.0.0.0"
        assert config.server.port == 8000
        assert config.extractor.binary == "yt-dlp"
        assert config.extractor.scratch_root == tempfile.gettempdir()
        assert config.extractor.scratch_namespace == "yt-audio-downloads"
        assert config.extractor.kill_on_cancel is False
        assert config.security.cors_origins == ["*"]
        assert config.monitoring.metrics_enabled is True

    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        config = ConfigService(str(tmp_path / "absent.yaml")).load()
        assert config.logging.level == "INFO"

    def test_environment_variable_override(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test environment variable overrides YAML configuration"""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.dump({"server": {"port": 8000}, "extractor": {"binary": "a"}}))

        monkeypatch.setenv("APP_SERVER_PORT", "9999")
        monkeypatch.setenv("APP_EXTRACTOR_BINARY", "/usr/local/bin/yt-dlp")

        config = ConfigService(str(config_file)).load()

        assert config.server.port == 9999
        assert config.extractor.binary == "/usr/local/bin/yt-dlp"

    def test_config_path_from_environment(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        config_file = tmp_path / "custom.yaml"
        config_file.write_text(yaml.dump({"server": {"port": 7000}}))
        monkeypatch.setenv("APP_CONFIG_PATH", str(config_file))

        service = ConfigService()

        assert service.config_path == str(config_file)
        assert service.load().server.port == 7000

    def test_config_before_load_raises(self) -> None:
        with pytest.raises(ValueError, match="not loaded"):
            _ = ConfigService("unused.yaml").config


class TestSectionValidation:
    """Field validators"""

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValidationError):
            LoggingConfig(level="LOUD")

    def test_invalid_log_format(self) -> None:
        with pytest.raises(ValidationError):
            LoggingConfig(format="xml")

    @pytest.mark.parametrize("namespace", ["", "a/b", "..", "."])
    def test_invalid_namespace(self, namespace: str) -> None:
        with pytest.raises(ValidationError):
            ExtractorConfig(scratch_namespace=namespace)
