"""Agent persona registry consumed by agent nodes."""

from __future__ import annotations

from typing import Iterable, Protocol, runtime_checkable

from pydantic import BaseModel, Field


class AgentProfile(BaseModel):
    """A specialized agent persona referenced by ``agent`` nodes."""

    id: str = Field(..., min_length=1, description="Stable agent identifier")
    display_name: str = Field(..., description="Human-readable agent name")
    system_instruction: str = Field(..., description="Persona system instruction")
    description: str = Field(default="", description="Short description")


@runtime_checkable
class AgentLookup(Protocol):
    """Anything that resolves an agent id to a persona."""

    def lookup(self, agent_id: str) -> AgentProfile | None:
        ...


class AgentRegistry:
    """In-memory agent registry.

    Example:
        >>> registry = AgentRegistry([
        ...     AgentProfile(id="a2", display_name="Copywriter",
        ...                  system_instruction="You write marketing copy."),
        ... ])
        >>> registry.lookup("a2").display_name
        'Copywriter'
    """

    def __init__(self, profiles: Iterable[AgentProfile] | None = None) -> None:
        self._profiles: dict[str, AgentProfile] = {}
        for profile in profiles or ():
            self.register(profile)

    def register(self, profile: AgentProfile) -> None:
        """Register or replace a profile."""
        self._profiles[profile.id] = profile

    def unregister(self, agent_id: str) -> bool:
        """Remove a profile. Returns True if found."""
        return self._profiles.pop(agent_id, None) is not None

    def lookup(self, agent_id: str) -> AgentProfile | None:
        """Return the profile for ``agent_id`` or None."""
        return self._profiles.get(agent_id)

    def list_profiles(self) -> list[AgentProfile]:
        """All registered profiles in registration order."""
        return list(self._profiles.values())

    def __len__(self) -> int:
        return len(self._profiles)

    def __contains__(self, agent_id: object) -> bool:
        return agent_id in self._profiles
