"""JSON file-based workflow storage."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

from personaflow.errors.exceptions import WorkflowNotFoundError
from personaflow.graph.model import WorkflowGraph
from personaflow.storage.base import WorkflowRecord, WorkflowStore


class JSONFileWorkflowStore(WorkflowStore):
    """File-based workflow storage using JSON.

    Stores one file per workflow:
        base_dir/
            wf-1a2b3c.json
            wf-4d5e6f.json

    The graph is written in the editor wire format (camelCase ``data`` keys),
    so files can be loaded directly by the front end.

    Example:
        >>> store = JSONFileWorkflowStore("./workflows")
        >>> workflow_id = await store.save(graph, name="Refund triage")
        >>> record = await store.load(workflow_id)
    """

    def __init__(self, base_dir: str | Path) -> None:
        """Initialize JSON file store.

        Args:
            base_dir: Directory holding the workflow files.
        """
        self._base_dir = Path(base_dir)
        self._locks: dict[str, asyncio.Lock] = {}

    def _get_lock(self, workflow_id: str) -> asyncio.Lock:
        if workflow_id not in self._locks:
            self._locks[workflow_id] = asyncio.Lock()
        return self._locks[workflow_id]

    @staticmethod
    def _validate_id(workflow_id: str) -> None:
        """Reject ids that could escape the base directory."""
        if not workflow_id or ".." in workflow_id or "/" in workflow_id or "\\" in workflow_id:
            raise ValueError(f"Invalid workflow id: {workflow_id!r}")

    def _get_path(self, workflow_id: str) -> Path:
        self._validate_id(workflow_id)
        path = self._base_dir / f"{workflow_id}.json"
        if not str(path.resolve()).startswith(str(self._base_dir.resolve())):
            raise ValueError(f"Invalid workflow id: {workflow_id!r}")
        return path

    @staticmethod
    def _serialize(record: WorkflowRecord) -> dict[str, Any]:
        data = record.model_dump(mode="json", exclude={"graph"})
        data["graph"] = record.graph.to_dict()
        return data

    async def _read(self, path: Path) -> WorkflowRecord | None:
        def _read_file() -> WorkflowRecord | None:
            if not path.exists():
                return None
            with path.open("r", encoding="utf-8") as f:
                return WorkflowRecord.model_validate(json.load(f))

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, _read_file)

    async def _write(self, path: Path, record: WorkflowRecord) -> None:
        data = self._serialize(record)

        def _write_file() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)

        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, _write_file)

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
        path = self._get_path(record.id)
        async with self._get_lock(record.id):
            await self._write(path, record)

    async def load(self, workflow_id: str) -> WorkflowRecord:
        path = self._get_path(workflow_id)
        async with self._get_lock(workflow_id):
            record = await self._read(path)
        if record is None:
            raise WorkflowNotFoundError(workflow_id)
        return record

    async def list_workflows(self) -> list[WorkflowRecord]:
        if not self._base_dir.exists():
            return []

        records: list[WorkflowRecord] = []
        for path in sorted(self._base_dir.glob("*.json")):
            async with self._get_lock(path.stem):
                record = await self._read(path)
            if record is not None:
                records.append(record)
        return sorted(records, key=lambda r: r.updated_at, reverse=True)

    async def delete(self, workflow_id: str) -> bool:
        path = self._get_path(workflow_id)
        async with self._get_lock(workflow_id):
            if not path.exists():
                return False

            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, path.unlink)
            return True
