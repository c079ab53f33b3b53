"""LLM providers and the generation call used by workflow nodes."""

from personaflow.llm.base import BaseLLMProvider
from personaflow.llm.generation import ProviderGenerator, TextGenerator
from personaflow.llm.registry import ProviderRegistry, get_registry

__all__ = [
    "BaseLLMProvider",
    "TextGenerator",
    "ProviderGenerator",
    "ProviderRegistry",
    "get_registry",
]
