"""Unit tests for the agent registry."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from personaflow.agents import AgentLookup, AgentProfile, AgentRegistry


@pytest.fixture
def copywriter() -> AgentProfile:
    return AgentProfile(
        id="a2",
        display_name="Copywriter",
        system_instruction="You write marketing copy.",
    )


class TestAgentRegistry:
    """Tests for AgentRegistry."""

    def test_lookup(self, copywriter: AgentProfile) -> None:
        registry = AgentRegistry([copywriter])

        assert registry.lookup("a2") is copywriter
        assert registry.lookup("missing") is None
        assert "a2" in registry
        assert len(registry) == 1

    def test_register_replaces(self, copywriter: AgentProfile) -> None:
        registry = AgentRegistry([copywriter])
        updated = copywriter.model_copy(update={"system_instruction": "Be punchy."})

        registry.register(updated)

        assert registry.lookup("a2").system_instruction == "Be punchy."
        assert len(registry) == 1

    def test_unregister(self, copywriter: AgentProfile) -> None:
        registry = AgentRegistry([copywriter])

        assert registry.unregister("a2") is True
        assert registry.unregister("a2") is False
        assert registry.list_profiles() == []

    def test_list_profiles_keeps_order(self, copywriter: AgentProfile) -> None:
        analyst = AgentProfile(id="a1", display_name="Analyst", system_instruction="You analyze.")
        registry = AgentRegistry([copywriter, analyst])

        assert [p.id for p in registry.list_profiles()] == ["a2", "a1"]

    def test_satisfies_lookup_protocol(self) -> None:
        assert isinstance(AgentRegistry(), AgentLookup)

    def test_profile_requires_id(self) -> None:
        with pytest.raises(ValidationError):
            AgentProfile(id="", display_name="x", system_instruction="y")
