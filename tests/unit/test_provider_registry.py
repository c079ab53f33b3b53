"""Unit tests for the provider registry and the provider-backed generator."""

from unittest.mock import MagicMock

import pytest

import personaflow.llm.registry as registry_module
from personaflow.core.types import MessageRole
from personaflow.errors.exceptions import ModelNotFoundError
from personaflow.llm.generation import ProviderGenerator, TextGenerator, build_messages
from personaflow.llm.registry import ProviderRegistry, get_registry


class TestProviderRegistry:
    """Test provider registration and detection."""

    def test_register_and_unregister(self):
        registry = ProviderRegistry()
        registry.register("test_provider", MagicMock(), ["test-"])

        assert "test_provider" in registry.list_providers()
        assert registry.unregister("test_provider") is True
        assert registry.unregister("test_provider") is False

    def test_longest_prefix_wins(self):
        registry = ProviderRegistry()
        registry.register("generic", MagicMock(), ["gemini-"])
        registry.register("pro", MagicMock(), ["gemini-1.5-pro"])

        assert registry.detect_provider("gemini-1.5-pro-latest") == "pro"
        assert registry.detect_provider("gemini-2.0-flash") == "generic"

    def test_unknown_model(self):
        with pytest.raises(ModelNotFoundError):
            ProviderRegistry().detect_provider("gpt-4o")

    def test_create_provider_passes_model(self):
        registry = ProviderRegistry()
        factory = MagicMock()
        registry.register("test_provider", factory, ["test-"])

        registry.create_provider("test-large", api_key="k")

        factory.assert_called_once_with(model="test-large", api_key="k")

    def test_default_registry_has_gemini(self):
        registry_module._default_registry = None
        try:
            registry = get_registry()
            assert registry.detect_provider("gemini-2.0-flash") == "gemini"
            assert get_registry() is registry
        finally:
            registry_module._default_registry = None


class TestProviderGenerator:
    """Tests for ProviderGenerator."""

    def test_satisfies_protocol(self, mock_provider, generator_factory):
        assert isinstance(ProviderGenerator(mock_provider), TextGenerator)
        assert isinstance(generator_factory(), TextGenerator)

    def test_build_messages(self):
        messages = build_messages("Hi", "Be brief.")

        assert [m.role for m in messages] == [MessageRole.SYSTEM, MessageRole.USER]
        assert len(build_messages("Hi", "")) == 1

    @pytest.mark.asyncio
    async def test_generate(self, mock_provider):
        generator = ProviderGenerator(mock_provider, default_max_tokens=256)

        text = await generator.generate("Hi", "Be brief.", temperature=0.3)

        assert text == "Mock response"
        assert mock_provider.received_messages[0][0].content == "Be brief."
        assert mock_provider.received_options[0] == {"temperature": 0.3, "max_tokens": 256}

    @pytest.mark.asyncio
    async def test_stream(self, mock_provider_factory):
        provider = mock_provider_factory(response_content="one two three")
        generator = ProviderGenerator(provider)

        deltas = [d async for d in generator.stream("Hi", "")]

        assert "".join(deltas) == "one two three"

    @pytest.mark.asyncio
    async def test_other_model_routed_through_registry(self, mock_provider, mock_provider_factory):
        other = mock_provider_factory(model="other-1", response_content="From other")
        registry = ProviderRegistry()
        factory = MagicMock(return_value=other)
        registry.register("other", factory, ["other-"])
        generator = ProviderGenerator(mock_provider, registry=registry)

        first = await generator.generate("Hi", "", "other-1")
        await generator.generate("Hi", "", "other-1")
        default = await generator.generate("Hi", "", "mock-model")

        assert first == "From other"
        assert default == "Mock response"
        factory.assert_called_once()
        assert other.call_count == 2
