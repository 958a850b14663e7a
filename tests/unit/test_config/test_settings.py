"""Tests for configuration loading and validation."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from termengine.config.settings import (
    EndpointConfig,
    EngineConfig,
    LoggingConfig,
    Settings,
    load_settings,
)
from termengine.utils.logging import setup_logging


class TestSettings:
    """Test configuration models and loading."""

    def test_default_settings(self) -> None:
        """Default Settings should be valid."""
        settings = Settings()
        assert settings.engine.core_version == "1.0.0"
        assert settings.engine.history_limit == 500
        assert settings.storage.backend == "memory"
        assert settings.endpoint.port == 8080

    def test_invalid_values_rejected(self) -> None:
        with pytest.raises(ValidationError):
            EngineConfig(history_limit=0)
        with pytest.raises(ValidationError):
            EndpointConfig(port=70000)

    def test_load_settings_missing_file(self, tmp_path: Path) -> None:
        """load_settings with missing file should return defaults."""
        settings = load_settings(tmp_path / "nonexistent.yaml")
        assert settings.engine.prompt == "$ "

    def test_load_settings_from_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "termengine.yaml"
        path.write_text(
            "engine:\n"
            "  core_version: 2.1.0\n"
            "  history_limit: 50\n"
            "storage:\n"
            "  backend: file\n"
            f"  path: {tmp_path / 'storage.json'}\n"
        )
        settings = load_settings(path)
        assert settings.engine.core_version == "2.1.0"
        assert settings.engine.history_limit == 50
        assert settings.storage.backend == "file"

    def test_env_overrides_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "termengine.yaml"
        path.write_text("engine:\n  prompt: '% '\n")
        monkeypatch.setenv("TERMENGINE_ENGINE__PROMPT", "> ")
        monkeypatch.setenv("TERMENGINE_ENDPOINT__PORT", "9090")
        settings = load_settings(path)
        assert settings.engine.prompt == "> "
        assert settings.endpoint.port == 9090


class TestSetupLogging:
    """Test logging configuration."""

    def test_handlers_replaced(self, tmp_path: Path) -> None:
        log_file = tmp_path / "termengine.log"
        setup_logging(LoggingConfig(level="DEBUG", file=str(log_file)))
        setup_logging(LoggingConfig(level="WARNING"))
        logger = logging.getLogger("termengine")
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1
        assert log_file.exists()
