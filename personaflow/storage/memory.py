"""In-memory workflow store."""

from __future__ import annotations

from personaflow.errors.exceptions import WorkflowNotFoundError
from personaflow.graph.model import WorkflowGraph
from personaflow.storage.base import WorkflowRecord, WorkflowStore


class InMemoryWorkflowStore(WorkflowStore):
    """Process-local store, for tests and single-process use.

    Example:
        >>> store = InMemoryWorkflowStore()
        >>> workflow_id = await store.save(editor.snapshot(), name="Triage")
        >>> await store.publish(workflow_id)
    """

    def __init__(self) -> None:
        self._records: dict[str, WorkflowRecord] = {}

    async def save(
        self,
        graph: WorkflowGraph,
        *,
        name: str,
        description: str = "",
        workflow_id: str | None = None,
    ) -> str:
        record = self._build_record(
            graph, name=name, description=description, workflow_id=workflow_id
        )
        await self.put(record)
        return record.id

    async def put(self, record: WorkflowRecord) -> None:
        self._records[record.id] = record.model_copy(deep=True)

    async def load(self, workflow_id: str) -> WorkflowRecord:
        record = self._records.get(workflow_id)
        if record is None:
            raise WorkflowNotFoundError(workflow_id)
        return record.model_copy(deep=True)

    async def list_workflows(self) -> list[WorkflowRecord]:
        records = sorted(self._records.values(), key=lambda r: r.updated_at, reverse=True)
        return [r.model_copy(deep=True) for r in records]

    async def delete(self, workflow_id: str) -> bool:
        return self._records.pop(workflow_id, None) is not None

    def __len__(self) -> int:
        return len(self._records)
