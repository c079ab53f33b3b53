"""The generation call consumed by llm, agent and classifier nodes.

Handlers depend only on the ``TextGenerator`` protocol: prompt and system
instruction in, text out (or a stream of text deltas). ``ProviderGenerator``
implements it on top of a ``BaseLLMProvider``.
"""

from __future__ import annotations

from typing import AsyncIterator, Protocol, runtime_checkable

from personaflow.core.types import Message
from personaflow.llm.base import BaseLLMProvider
from personaflow.llm.registry import ProviderRegistry, get_registry


@runtime_checkable
class TextGenerator(Protocol):
    """Opaque text generation used by workflow node handlers."""

    async def generate(
        self,
        prompt: str,
        system_instruction: str,
        model_id: str | None = None,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Return the full generated text."""
        ...

    def stream(
        self,
        prompt: str,
        system_instruction: str,
        model_id: str | None = None,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> AsyncIterator[str]:
        """Yield incremental text deltas."""
        ...


def build_messages(prompt: str, system_instruction: str) -> list[Message]:
    """Build the provider message list for a single generation call."""
    messages: list[Message] = []
    if system_instruction:
        messages.append(Message.system(system_instruction))
    messages.append(Message.user(prompt))
    return messages


class ProviderGenerator:
    """TextGenerator backed by an LLM provider.

    Calls that name a different model than the default provider's are routed
    through the provider registry; the resulting providers are cached.

    Example:
        >>> generator = ProviderGenerator(GeminiProvider())
        >>> text = await generator.generate("Hi", "You are terse.")
    """

    def __init__(
        self,
        provider: BaseLLMProvider,
        registry: ProviderRegistry | None = None,
        default_temperature: float = 0.7,
        default_max_tokens: int = 1024,
    ) -> None:
        self._provider = provider
        self._registry = registry
        self._default_temperature = default_temperature
        self._default_max_tokens = default_max_tokens
        self._providers: dict[str, BaseLLMProvider] = {provider.model: provider}

    @property
    def provider(self) -> BaseLLMProvider:
        """The default provider."""
        return self._provider

    def _resolve_provider(self, model_id: str | None) -> BaseLLMProvider:
        if not model_id:
            return self._provider
        if model_id not in self._providers:
            registry = self._registry or get_registry()
            self._providers[model_id] = registry.create_provider(model_id)
        return self._providers[model_id]

    async def generate(
        self,
        prompt: str,
        system_instruction: str,
        model_id: str | None = None,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        provider = self._resolve_provider(model_id)
        response = await provider.complete(
            build_messages(prompt, system_instruction),
            temperature=self._default_temperature if temperature is None else temperature,
            max_tokens=max_tokens or self._default_max_tokens,
        )
        return response.content

    async def stream(
        self,
        prompt: str,
        system_instruction: str,
        model_id: str | None = None,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> AsyncIterator[str]:
        provider = self._resolve_provider(model_id)
        async for chunk in provider.stream(
            build_messages(prompt, system_instruction),
            temperature=self._default_temperature if temperature is None else temperature,
            max_tokens=max_tokens or self._default_max_tokens,
        ):
            if chunk.delta:
                yield chunk.delta
