"""Events emitted by the interpreter while a run is in progress."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Union


class ExecutionEventType(str, Enum):
    RUN_STARTED = "run_started"
    NODE_STARTED = "node_started"
    NODE_COMPLETED = "node_completed"
    NODE_FAILED = "node_failed"
    EDGE_TRAVERSED = "edge_traversed"
    LOG = "log"
    TOKEN = "token"
    RUN_FINISHED = "run_finished"


@dataclass(frozen=True)
class ExecutionEvent:
    """A single observable step of a run.

    ``data`` carries type-specific details, e.g. ``output`` for
    ``node_completed`` or ``delta`` for ``token``.
    """

    type: ExecutionEventType
    run_id: str
    node_id: str | None = None
    edge_id: str | None = None
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)


ExecutionObserver = Callable[[ExecutionEvent], Union[None, Awaitable[None]]]
