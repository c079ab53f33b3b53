"""Base LLM provider interface.

All LLM providers must implement this abstract base class.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, AsyncIterator

from personaflow.core.types import LLMResponse, Message, StreamChunk


class BaseLLMProvider(ABC):
    """Abstract base class for LLM providers.

    Providers are the transport behind the workflow generation call; node
    handlers never talk to them directly but through a ``TextGenerator``.

    Example:
        >>> class MyProvider(BaseLLMProvider):
        ...     async def complete(self, messages, **kwargs):
        ...         ...
    """

    @property
    @abstractmethod
    def model(self) -> str:
        """Return the model identifier."""
        ...

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name (e.g., 'gemini')."""
        ...

    @abstractmethod
    async def complete(
        self,
        messages: list[Message],
        *,
        temperature: float = 0.7,
        max_tokens: int = 1024,
        **kwargs: Any,
    ) -> LLMResponse:
        """Generate a completion for the given messages.

        Args:
            messages: List of conversation messages.
            temperature: Sampling temperature (0.0-2.0).
            max_tokens: Maximum tokens to generate.
            **kwargs: Additional provider-specific parameters.

        Returns:
            LLMResponse containing the generated content and usage stats.

        Raises:
            RateLimitError: If rate limit is exceeded.
            AuthenticationError: If authentication fails.
            APIError: If the API returns an error.
            TimeoutError: If the request times out.
        """
        ...

    @abstractmethod
    def stream(
        self,
        messages: list[Message],
        *,
        temperature: float = 0.7,
        max_tokens: int = 1024,
        **kwargs: Any,
    ) -> AsyncIterator[StreamChunk]:
        """Stream a completion for the given messages.

        Yields:
            StreamChunk containing incremental content.
        """
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(model={self.model!r})"
