"""Core type definitions for PersonaFlow.

Message and response types exchanged with LLM providers. All types use
Pydantic for validation and serialization.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class MessageRole(str, Enum):
    """Role of a message in a conversation."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """A single message in a conversation."""

    role: MessageRole = Field(..., description="Role of the message sender")
    content: str = Field(..., description="Content of the message")

    @classmethod
    def system(cls, content: str) -> Message:
        """Create a system message."""
        return cls(role=MessageRole.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> Message:
        """Create a user message."""
        return cls(role=MessageRole.USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> Message:
        """Create an assistant message."""
        return cls(role=MessageRole.ASSISTANT, content=content)


class Usage(BaseModel):
    """Token usage statistics."""

    prompt_tokens: int = Field(..., ge=0, description="Number of prompt tokens used")
    completion_tokens: int = Field(
        ..., ge=0, description="Number of completion tokens used"
    )

    @property
    def total_tokens(self) -> int:
        """Total tokens used."""
        return self.prompt_tokens + self.completion_tokens


class LLMResponse(BaseModel):
    """Response from an LLM provider."""

    content: str = Field(..., description="Generated content")
    model: str = Field(..., description="Model used for generation")
    usage: Usage = Field(..., description="Token usage statistics")
    finish_reason: str = Field(..., description="Reason for completion")
    raw_response: dict[str, Any] | None = Field(
        None, description="Raw response from the provider"
    )


class StreamChunk(BaseModel):
    """A chunk of streamed LLM response."""

    content: str = Field(..., description="Accumulated content so far")
    delta: str = Field(..., description="New content in this chunk")
    finish_reason: str | None = Field(
        None, description="Reason for completion (last chunk only)"
    )
    usage: Usage | None = Field(None, description="Token usage (last chunk only)")
