"""Unit tests for EngineConfig."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from personaflow.core.config import EngineConfig
from personaflow.errors.exceptions import ConfigurationError, InvalidConfigError


class TestEngineConfig:
    """Tests for EngineConfig."""

    def test_defaults(self) -> None:
        config = EngineConfig()

        assert config.max_steps == 50
        assert config.step_timeout == 60.0
        assert config.default_model == "gemini-2.0-flash"
        assert config.stream_tokens is False
        assert config.fallback_system_instruction == "You are a helpful assistant."

    @pytest.mark.parametrize(
        "field,value",
        [("max_steps", 0), ("step_timeout", -1.0), ("default_temperature", 2.5), ("log_preview_chars", 0)],
    )
    def test_rejects_out_of_range(self, field: str, value: object) -> None:
        with pytest.raises(ValidationError):
            EngineConfig(**{field: value})

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PERSONAFLOW_MAX_STEPS", "20")
        monkeypatch.setenv("PERSONAFLOW_STREAM_TOKENS", "true")
        monkeypatch.setenv("PERSONAFLOW_DEFAULT_MODEL", "gemini-2.5-pro")

        config = EngineConfig.from_env()

        assert config.max_steps == 20
        assert config.stream_tokens is True
        assert config.default_model == "gemini-2.5-pro"
        assert config.step_timeout == 60.0

    def test_from_env_custom_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PF_STEP_TIMEOUT", "5")

        assert EngineConfig.from_env(prefix="PF_").step_timeout == 5.0

    def test_from_env_invalid_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PERSONAFLOW_MAX_STEPS", "many")

        with pytest.raises(InvalidConfigError) as exc_info:
            EngineConfig.from_env()

        assert exc_info.value.field == "PERSONAFLOW_MAX_STEPS"
        assert exc_info.value.value == "many"
        assert isinstance(exc_info.value, ConfigurationError)
