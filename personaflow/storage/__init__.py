"""Workflow persistence: save, publish and load workflow graphs."""

from personaflow.storage.base import WorkflowRecord, WorkflowStatus, WorkflowStore
from personaflow.storage.json_file import JSONFileWorkflowStore
from personaflow.storage.memory import InMemoryWorkflowStore

__all__ = [
    "WorkflowRecord",
    "WorkflowStatus",
    "WorkflowStore",
    "InMemoryWorkflowStore",
    "JSONFileWorkflowStore",
]
