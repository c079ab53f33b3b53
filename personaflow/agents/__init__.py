"""Agent personas referenced by workflow agent nodes."""

from personaflow.agents.registry import AgentLookup, AgentProfile, AgentRegistry

__all__ = ["AgentProfile", "AgentLookup", "AgentRegistry"]
