"""LLM Provider Registry.

Maps model identifiers named by workflow nodes to provider factories.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from personaflow.errors.exceptions import ModelNotFoundError
from personaflow.llm.base import BaseLLMProvider


@dataclass
class ProviderInfo:
    """Information about a registered LLM provider."""

    name: str
    factory: Callable[..., BaseLLMProvider]
    prefixes: list[str]


class ProviderRegistry:
    """Registry for provider registration and model-prefix routing.

    Example:
        >>> registry = ProviderRegistry()
        >>> registry.register("gemini", GeminiProvider, ["gemini-"])
        >>> provider = registry.create_provider("gemini-1.5-pro")
    """

    def __init__(self) -> None:
        self._providers: dict[str, ProviderInfo] = {}
        self._prefix_map: list[tuple[str, str]] = []  # (prefix, provider_name), longest first

    def register(
        self,
        name: str,
        factory: Callable[..., BaseLLMProvider],
        prefixes: list[str],
    ) -> None:
        """Register a provider with its factory and model prefixes."""
        self._providers[name] = ProviderInfo(name=name, factory=factory, prefixes=prefixes)
        self._rebuild_prefix_map()

    def unregister(self, name: str) -> bool:
        """Remove a provider. Returns True if found."""
        if name not in self._providers:
            return False
        del self._providers[name]
        self._rebuild_prefix_map()
        return True

    def _rebuild_prefix_map(self) -> None:
        pairs: list[tuple[str, str]] = []
        for info in self._providers.values():
            for prefix in info.prefixes:
                pairs.append((prefix, info.name))
        self._prefix_map = sorted(pairs, key=lambda p: len(p[0]), reverse=True)

    def detect_provider(self, model: str) -> str:
        """Detect provider name from model string using prefix matching.

        Raises:
            ModelNotFoundError: If no registered prefix matches.
        """
        for prefix, provider_name in self._prefix_map:
            if model.startswith(prefix):
                return provider_name
        raise ModelNotFoundError(model)

    def create_provider(self, model: str, **kwargs: Any) -> BaseLLMProvider:
        """Create a provider instance for the given model."""
        info = self._providers[self.detect_provider(model)]
        return info.factory(model=model, **kwargs)

    def list_providers(self) -> list[str]:
        """List all registered provider names."""
        return list(self._providers.keys())


_default_registry: ProviderRegistry | None = None


def get_registry() -> ProviderRegistry:
    """Get the default provider registry, creating it lazily with built-in providers."""
    global _default_registry
    if _default_registry is None:
        _default_registry = ProviderRegistry()
        _register_defaults(_default_registry)
    return _default_registry


def _register_defaults(registry: ProviderRegistry) -> None:
    def _create_gemini(**kwargs: Any) -> BaseLLMProvider:
        from personaflow.llm.gemini import GeminiProvider
        return GeminiProvider(**kwargs)

    registry.register(name="gemini", factory=_create_gemini, prefixes=["gemini-"])
