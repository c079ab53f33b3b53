"""Workflow records and the abstract store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field

from personaflow.graph.model import WorkflowGraph


class WorkflowStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class WorkflowRecord(BaseModel):
    """A saved workflow graph plus its catalog metadata."""

    id: str = Field(..., min_length=1)
    name: str
    description: str = ""
    status: WorkflowStatus = WorkflowStatus.DRAFT
    graph: WorkflowGraph
    updated_at: datetime = Field(default_factory=datetime.now)


class WorkflowStore(ABC):
    """Abstract interface for workflow persistence backends.

    ``save`` always stores a draft; a saved graph becomes runnable by others
    only after ``publish`` has validated it.
    """

    @staticmethod
    def _build_record(
        graph: WorkflowGraph,
        *,
        name: str,
        description: str,
        workflow_id: str | None,
    ) -> WorkflowRecord:
        return WorkflowRecord(
            id=workflow_id or f"wf-{uuid4().hex[:12]}",
            name=name,
            description=description,
            status=WorkflowStatus.DRAFT,
            graph=graph.snapshot(),
        )

    @abstractmethod
    async def save(
        self,
        graph: WorkflowGraph,
        *,
        name: str,
        description: str = "",
        workflow_id: str | None = None,
    ) -> str:
        """Save a graph as a draft.

        Args:
            graph: Graph to store. A copy is kept.
            name: Display name.
            description: Free-text description.
            workflow_id: Existing id to overwrite; a new id is generated if None.

        Returns:
            The workflow id.
        """
        ...

    @abstractmethod
    async def load(self, workflow_id: str) -> WorkflowRecord:
        """Load a record.

        Raises:
            WorkflowNotFoundError: If the id is unknown.
        """
        ...

    @abstractmethod
    async def list_workflows(self) -> list[WorkflowRecord]:
        """All records, most recently updated first."""
        ...

    @abstractmethod
    async def delete(self, workflow_id: str) -> bool:
        """Delete a record. Returns False if it did not exist."""
        ...

    @abstractmethod
    async def put(self, record: WorkflowRecord) -> None:
        """Store a complete record, replacing any with the same id."""
        ...

    async def publish(self, workflow_id: str) -> WorkflowRecord:
        """Validate a stored graph and mark it published.

        Raises:
            WorkflowNotFoundError: If the id is unknown.
            InvalidGraphError: If the graph fails validation.
        """
        record = await self.load(workflow_id)
        record.graph.validate_graph().raise_for_errors()

        published = record.model_copy(
            update={"status": WorkflowStatus.PUBLISHED, "updated_at": datetime.now()}
        )
        await self.put(published)
        return published
