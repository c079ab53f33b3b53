"""Workflow interpreter: walks a graph from start, one node at a time."""

from __future__ import annotations

import asyncio
import inspect
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, AsyncIterator, Mapping
from uuid import uuid4

from personaflow.agents.registry import AgentLookup
from personaflow.core.config import EngineConfig
from personaflow.errors.exceptions import HandlerFailureError, InterpreterBusyError
from personaflow.graph.model import BaseNode, Edge, NodeKind, WorkflowGraph
from personaflow.llm.generation import TextGenerator
from personaflow.logging import get_logger
from personaflow.logging.logger import PersonaFlowLogger
from personaflow.resilience.timeout import TimeoutManager
from personaflow.runtime.context import ExecutionContext, ExecutionLog, LogKind
from personaflow.runtime.events import ExecutionEvent, ExecutionEventType, ExecutionObserver
from personaflow.runtime.handlers import HandlerEnvironment, NodeOutcome, execute_node


class InterpreterState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    HALTED = "halted"


class RunStatus(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class HaltReason(str, Enum):
    END_REACHED = "end_reached"
    DEAD_END = "dead_end"
    HANDLER_FAILURE = "handler_failure"
    STEP_LIMIT = "step_limit"
    ABORTED = "aborted"


@dataclass
class NodeExecution:
    """Record of a single node execution."""

    node_id: str
    kind: NodeKind
    output: Any = None
    branch_label: str | None = None
    error: str | None = None
    started_at: datetime = field(default_factory=datetime.now)
    duration_ms: int = 0


@dataclass
class RunResult:
    """Outcome of one run.

    ``output`` is the end node's output, or the last produced output when the
    run stopped at a dead end.
    """

    run_id: str
    status: RunStatus
    halt_reason: HaltReason
    output: Any
    log: ExecutionLog
    steps: list[NodeExecution] = field(default_factory=list)
    error: str | None = None
    failed_node_id: str | None = None
    started_at: datetime = field(default_factory=datetime.now)
    completed_at: datetime = field(default_factory=datetime.now)

    @property
    def is_success(self) -> bool:
        return self.status == RunStatus.COMPLETED

    @property
    def visited_node_ids(self) -> list[str]:
        return [step.node_id for step in self.steps]

    @property
    def duration_ms(self) -> int:
        return int((self.completed_at - self.started_at).total_seconds() * 1000)


class _Run:
    """Mutable bookkeeping for the run in flight."""

    def __init__(self, run_id: str, context: ExecutionContext) -> None:
        self.run_id = run_id
        self.context = context
        self.log = ExecutionLog()
        self.steps: list[NodeExecution] = []
        self.output: Any = None
        self.started_at = datetime.now()
        self.clock = time.perf_counter()


class WorkflowInterpreter:
    """Executes a workflow graph against one input at a time.

    The graph is snapshotted and validated at the start of every run, so the
    caller may keep editing its own copy. Nodes run strictly sequentially.

    Example:
        >>> interpreter = WorkflowInterpreter(graph, generator)
        >>> result = await interpreter.run("I want a refund")
        >>> result.status, result.output
        (<RunStatus.COMPLETED: 'completed'>, '...')
    """

    def __init__(
        self,
        graph: WorkflowGraph,
        generator: TextGenerator,
        *,
        agents: AgentLookup | None = None,
        config: EngineConfig | None = None,
        timeouts: TimeoutManager | None = None,
        observers: list[ExecutionObserver] | None = None,
        logger: PersonaFlowLogger | None = None,
    ) -> None:
        self._graph = graph
        self._generator = generator
        self._agents = agents
        self._config = config or EngineConfig()
        self._timeouts = timeouts or TimeoutManager(default_timeout=self._config.step_timeout)
        self._observers: list[ExecutionObserver] = list(observers or [])
        self._logger = logger or get_logger()

        self._state = InterpreterState.IDLE
        self._active_node_id: str | None = None
        self._active_edge_id: str | None = None

    @property
    def state(self) -> InterpreterState:
        return self._state

    @property
    def active_node_id(self) -> str | None:
        """Node currently executing, or None."""
        return self._active_node_id

    @property
    def active_edge_id(self) -> str | None:
        """Edge currently being traversed, or None."""
        return self._active_edge_id

    @property
    def config(self) -> EngineConfig:
        return self._config

    def add_observer(self, observer: ExecutionObserver) -> None:
        self._observers.append(observer)

    def remove_observer(self, observer: ExecutionObserver) -> bool:
        try:
            self._observers.remove(observer)
            return True
        except ValueError:
            return False

    async def _emit(self, event: ExecutionEvent) -> None:
        for observer in list(self._observers):
            try:
                result = observer(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                self._logger.warning(
                    "Observer raised, continuing run",
                    event=event.type.value,
                    error=str(e),
                )

    async def _log(
        self,
        run: _Run,
        kind: LogKind,
        message: str,
        node_id: str | None = None,
    ) -> None:
        entry = run.log.append(kind, message, node_id)
        await self._emit(
            ExecutionEvent(
                type=ExecutionEventType.LOG,
                run_id=run.run_id,
                node_id=node_id,
                data={"kind": entry.kind.value, "message": entry.message},
            )
        )

    def _preview(self, output: Any) -> str:
        text = output if isinstance(output, str) else str(output)
        limit = self._config.log_preview_chars
        return text if len(text) <= limit else text[:limit] + "..."

    def _describe_output(self, node: BaseNode, outcome: NodeOutcome) -> str:
        if node.kind == NodeKind.CONDITION:
            return f"Condition evaluated to {outcome.branch_label}"
        if node.kind == NodeKind.CLASSIFIER:
            return f"Classified as: {outcome.branch_label}"
        return self._preview(outcome.output)

    @staticmethod
    def _next_edge(graph: WorkflowGraph, node_id: str, branch_label: str | None) -> Edge | None:
        edges = graph.outgoing_edges(node_id)
        if branch_label is None:
            return edges[0] if edges else None
        for edge in edges:
            if edge.label == branch_label:
                return edge
        return None

    async def _finish(
        self,
        run: _Run,
        status: RunStatus,
        reason: HaltReason,
        *,
        error: str | None = None,
        failed_node_id: str | None = None,
    ) -> RunResult:
        result = RunResult(
            run_id=run.run_id,
            status=status,
            halt_reason=reason,
            output=run.output,
            log=run.log,
            steps=run.steps,
            error=error,
            failed_node_id=failed_node_id,
            started_at=run.started_at,
            completed_at=datetime.now(),
        )
        await self._emit(
            ExecutionEvent(
                type=ExecutionEventType.RUN_FINISHED,
                run_id=run.run_id,
                data={
                    "status": status.value,
                    "halt_reason": reason.value,
                    "output": run.output,
                    "error": error,
                },
            )
        )
        self._logger.run_end(run.run_id, status.value, len(run.steps), result.duration_ms)
        return result

    async def run(
        self,
        input: str,
        user_profile: Mapping[str, Any] | None = None,
        abort: asyncio.Event | None = None,
    ) -> RunResult:
        """Execute the graph from its start node.

        Args:
            input: The triggering text.
            user_profile: Read-only user data exposed to nodes.
            abort: Set by the caller to cancel between steps.

        Returns:
            RunResult. Handler failures, dead ends, the step limit and aborts
            are reported here rather than raised.

        Raises:
            InvalidGraphError: If the graph fails validation. Nothing is
                executed or logged in that case.
            InterpreterBusyError: If a run is already in flight.
        """
        if self._state == InterpreterState.RUNNING:
            raise InterpreterBusyError()

        graph = self._graph.snapshot()
        validation = graph.validate_graph()
        validation.raise_for_errors()

        self._state = InterpreterState.RUNNING
        try:
            for warning in validation.warnings:
                self._logger.warning(warning)
            return await self._execute(graph, input, user_profile, abort)
        finally:
            self._active_node_id = None
            self._active_edge_id = None
            self._state = InterpreterState.HALTED

    async def _execute(
        self,
        graph: WorkflowGraph,
        input: str,
        user_profile: Mapping[str, Any] | None,
        abort: asyncio.Event | None,
    ) -> RunResult:
        run = _Run(uuid4().hex[:12], ExecutionContext.create(input, user_profile))

        async def on_token(node_id: str, delta: str) -> None:
            await self._emit(
                ExecutionEvent(
                    type=ExecutionEventType.TOKEN,
                    run_id=run.run_id,
                    node_id=node_id,
                    data={"delta": delta},
                )
            )

        env = HandlerEnvironment(
            generator=self._generator,
            agents=self._agents,
            config=self._config,
            timeouts=self._timeouts,
            on_token=on_token,
        )

        def aborted() -> bool:
            return abort is not None and abort.is_set()

        self._logger.run_start(run.run_id, len(graph.nodes), input)
        await self._emit(
            ExecutionEvent(
                type=ExecutionEventType.RUN_STARTED,
                run_id=run.run_id,
                data={"input": input},
            )
        )
        await self._log(run, LogKind.USER, input)
        await self._log(run, LogKind.INFO, "Starting workflow execution")

        current: BaseNode | None = graph.nodes_of_kind(NodeKind.START)[0]

        while current is not None:
            if aborted():
                await self._log(run, LogKind.INFO, "Execution aborted")
                return await self._finish(run, RunStatus.CANCELLED, HaltReason.ABORTED)

            if len(run.steps) >= self._config.max_steps:
                message = f"Step limit of {self._config.max_steps} exceeded"
                await self._log(run, LogKind.ERROR, message, current.id)
                return await self._finish(
                    run, RunStatus.FAILED, HaltReason.STEP_LIMIT, error=message
                )

            node = current
            self._active_node_id = node.id
            await self._log(run, LogKind.INFO, f"Executing: {node.label} ({node.kind.value})", node.id)
            self._logger.node_start(node.id, node.kind.value, node.data.label or None)
            await self._emit(
                ExecutionEvent(
                    type=ExecutionEventType.NODE_STARTED,
                    run_id=run.run_id,
                    node_id=node.id,
                    data={"kind": node.kind.value, "label": node.label},
                )
            )

            started_at = datetime.now()
            clock = time.perf_counter()
            try:
                outcome = await execute_node(node, run.context, env)
            except HandlerFailureError as e:
                duration_ms = int((time.perf_counter() - clock) * 1000)
                run.steps.append(
                    NodeExecution(
                        node_id=node.id,
                        kind=node.kind,
                        error=str(e),
                        started_at=started_at,
                        duration_ms=duration_ms,
                    )
                )
                await self._log(run, LogKind.ERROR, f"Error in {node.label}: {e}", node.id)
                self._logger.node_error(node.id, str(e))
                await self._emit(
                    ExecutionEvent(
                        type=ExecutionEventType.NODE_FAILED,
                        run_id=run.run_id,
                        node_id=node.id,
                        data={"error": str(e)},
                    )
                )
                return await self._finish(
                    run,
                    RunStatus.FAILED,
                    HaltReason.HANDLER_FAILURE,
                    error=str(e),
                    failed_node_id=node.id,
                )
            duration_ms = int((time.perf_counter() - clock) * 1000)

            if aborted():
                await self._log(run, LogKind.INFO, "Execution aborted", node.id)
                return await self._finish(run, RunStatus.CANCELLED, HaltReason.ABORTED)

            run.context.variables[node.id] = outcome.output
            run.context.apply(outcome.patch)
            run.output = outcome.output
            run.steps.append(
                NodeExecution(
                    node_id=node.id,
                    kind=node.kind,
                    output=outcome.output,
                    branch_label=outcome.branch_label,
                    started_at=started_at,
                    duration_ms=duration_ms,
                )
            )
            await self._log(run, LogKind.OUTPUT, self._describe_output(node, outcome), node.id)
            self._logger.node_output(node.id, self._preview(outcome.output), duration_ms)
            await self._emit(
                ExecutionEvent(
                    type=ExecutionEventType.NODE_COMPLETED,
                    run_id=run.run_id,
                    node_id=node.id,
                    data={
                        "output": outcome.output,
                        "branch_label": outcome.branch_label,
                        "duration_ms": duration_ms,
                    },
                )
            )

            if node.kind == NodeKind.END:
                await self._log(run, LogKind.INFO, "Workflow finished", node.id)
                return await self._finish(run, RunStatus.COMPLETED, HaltReason.END_REACHED)

            edge = self._next_edge(graph, node.id, outcome.branch_label)
            if edge is None:
                await self._log(run, LogKind.INFO, "End of path reached (no connecting edge)", node.id)
                return await self._finish(run, RunStatus.COMPLETED, HaltReason.DEAD_END)

            self._active_edge_id = edge.id
            self._logger.edge_traversed(edge.id, edge.source, edge.target, edge.label)
            await self._emit(
                ExecutionEvent(
                    type=ExecutionEventType.EDGE_TRAVERSED,
                    run_id=run.run_id,
                    node_id=node.id,
                    edge_id=edge.id,
                    data={"source": edge.source, "target": edge.target, "label": edge.label},
                )
            )
            self._active_edge_id = None
            current = graph.get_node(edge.target)

        # Validation guarantees edge targets exist.
        raise RuntimeError("Edge target vanished during run")

    async def stream(
        self,
        input: str,
        user_profile: Mapping[str, Any] | None = None,
        abort: asyncio.Event | None = None,
    ) -> AsyncIterator[ExecutionEvent]:
        """Run the graph and yield its events as they happen.

        Errors raised by ``run`` (invalid graph, busy interpreter) propagate
        after any events already yielded.
        """
        queue: asyncio.Queue[ExecutionEvent | None] = asyncio.Queue()

        def enqueue(event: ExecutionEvent) -> None:
            queue.put_nowait(event)

        self.add_observer(enqueue)
        task = asyncio.create_task(self.run(input, user_profile, abort))
        task.add_done_callback(lambda _: queue.put_nowait(None))
        try:
            while True:
                event = await queue.get()
                if event is None:
                    break
                yield event
            await task
        finally:
            self.remove_observer(enqueue)
            if not task.done():
                task.cancel()

    def run_sync(
        self,
        input: str,
        user_profile: Mapping[str, Any] | None = None,
    ) -> RunResult:
        """Blocking wrapper around ``run``. Not usable inside a running event loop."""
        return asyncio.run(self.run(input, user_profile))
