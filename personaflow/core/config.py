"""Configuration for the PersonaFlow workflow engine."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field, ValidationError

from personaflow.errors.exceptions import InvalidConfigError


class EngineConfig(BaseModel):
    """Runtime bounds and defaults for the workflow interpreter.

    Example:
        >>> config = EngineConfig(
        ...     max_steps=20,
        ...     step_timeout=30.0,
        ...     default_model="gemini-2.0-flash",
        ... )
    """

    max_steps: int = Field(
        default=50,
        gt=0,
        description="Maximum node executions per run before halting (cycle guard)",
    )
    step_timeout: float = Field(
        default=60.0,
        gt=0,
        description="Timeout in seconds for each external generation call",
    )
    default_model: str = Field(
        default="gemini-2.0-flash",
        description="Model used by llm/agent/classifier nodes that name none",
    )
    default_temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for nodes that name none",
    )
    default_max_tokens: int = Field(
        default=1024,
        gt=0,
        description="Maximum tokens to generate for nodes that name none",
    )
    fallback_system_instruction: str = Field(
        default="You are a helpful assistant.",
        description="Instruction used when an llm/agent node resolves none",
    )
    stream_tokens: bool = Field(
        default=False,
        description="Use the streaming generation variant and emit token events",
    )
    log_preview_chars: int = Field(
        default=100,
        gt=0,
        description="Maximum characters of node output copied into log entries",
    )

    @classmethod
    def from_env(cls, prefix: str = "PERSONAFLOW_") -> EngineConfig:
        """Build a config from environment variables.

        Every field can be overridden by ``{prefix}{FIELD_NAME}``, e.g.
        ``PERSONAFLOW_MAX_STEPS=20``. Unset variables keep their defaults.

        Raises:
            InvalidConfigError: If a variable cannot be coerced to its field type.
        """
        overrides: dict[str, str] = {}
        for name in cls.model_fields:
            value = os.environ.get(f"{prefix}{name.upper()}")
            if value is not None:
                overrides[name] = value

        try:
            return cls.model_validate(overrides)
        except ValidationError as e:
            first = e.errors()[0]
            field = str(first["loc"][0]) if first["loc"] else "config"
            raise InvalidConfigError(
                f"{prefix}{field.upper()}",
                overrides.get(field),
                first["msg"],
            ) from e
