"""Per-run execution context and execution log."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator, Mapping


@dataclass
class ContextPatch:
    """Changes a handler asks the interpreter to merge into the context.

    ``last_output`` of None leaves the current value in place.
    """

    last_output: str | None = None
    variables: dict[str, Any] = field(default_factory=dict)


@dataclass
class ExecutionContext:
    """State threaded between the steps of one run.

    Created by the interpreter at run start and owned by that run. The user
    profile is a read-only view over a copy of the caller's mapping.
    """

    input: str
    last_output: str | None = None
    variables: dict[str, Any] = field(default_factory=dict)
    user_profile: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def create(cls, input: str, user_profile: Mapping[str, Any] | None = None) -> ExecutionContext:
        return cls(
            input=input,
            last_output=None,
            variables={"input": input},
            user_profile=MappingProxyType(dict(user_profile or {})),
        )

    def apply(self, patch: ContextPatch) -> None:
        if patch.last_output is not None:
            self.last_output = patch.last_output
        self.variables.update(patch.variables)

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict view used for the ``{{context}}`` placeholder."""
        return {
            "input": self.input,
            "last_output": self.last_output,
            "variables": dict(self.variables),
        }


class LogKind(str, Enum):
    INFO = "info"
    OUTPUT = "output"
    ERROR = "error"
    USER = "user"


@dataclass(frozen=True)
class LogEntry:
    kind: LogKind
    message: str
    node_id: str | None = None
    timestamp: datetime = field(default_factory=datetime.now)


class ExecutionLog:
    """Append-only, ordered record of a run. Never read by control flow."""

    def __init__(self) -> None:
        self._entries: list[LogEntry] = []

    def append(self, kind: LogKind, message: str, node_id: str | None = None) -> LogEntry:
        entry = LogEntry(kind=kind, message=message, node_id=node_id)
        self._entries.append(entry)
        return entry

    @property
    def entries(self) -> tuple[LogEntry, ...]:
        return tuple(self._entries)

    def errors(self) -> list[LogEntry]:
        return [e for e in self._entries if e.kind == LogKind.ERROR]

    def for_node(self, node_id: str) -> list[LogEntry]:
        return [e for e in self._entries if e.node_id == node_id]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(self._entries)
