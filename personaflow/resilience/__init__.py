"""Resilience module for PersonaFlow.

Bounds the external generation calls made while a workflow runs.
"""

from personaflow.resilience.timeout import TimeoutManager

__all__ = ["TimeoutManager"]
