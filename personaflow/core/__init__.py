"""PersonaFlow core components."""

from personaflow.core.types import (
    LLMResponse,
    Message,
    MessageRole,
    StreamChunk,
    Usage,
)
from personaflow.core.config import EngineConfig

__all__ = [
    "Message",
    "MessageRole",
    "Usage",
    "LLMResponse",
    "StreamChunk",
    "EngineConfig",
]
