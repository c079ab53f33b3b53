"""Workflow runtime: context, templating, node handlers and the interpreter."""

from personaflow.runtime.context import (
    ContextPatch,
    ExecutionContext,
    ExecutionLog,
    LogEntry,
    LogKind,
)
from personaflow.runtime.events import ExecutionEvent, ExecutionEventType, ExecutionObserver
from personaflow.runtime.handlers import (
    NODE_HANDLERS,
    Handler,
    HandlerEnvironment,
    NodeOutcome,
    evaluate_condition,
    execute_node,
    get_handler,
    match_intent,
    resolve_variable,
)
from personaflow.runtime.interpreter import (
    HaltReason,
    InterpreterState,
    NodeExecution,
    RunResult,
    RunStatus,
    WorkflowInterpreter,
)
from personaflow.runtime.templating import PLACEHOLDERS, render_instruction

__all__ = [
    # Context
    "ExecutionContext",
    "ContextPatch",
    "ExecutionLog",
    "LogEntry",
    "LogKind",
    # Templating
    "PLACEHOLDERS",
    "render_instruction",
    # Handlers
    "NodeOutcome",
    "HandlerEnvironment",
    "Handler",
    "NODE_HANDLERS",
    "get_handler",
    "execute_node",
    "resolve_variable",
    "evaluate_condition",
    "match_intent",
    # Events
    "ExecutionEvent",
    "ExecutionEventType",
    "ExecutionObserver",
    # Interpreter
    "WorkflowInterpreter",
    "InterpreterState",
    "RunStatus",
    "HaltReason",
    "RunResult",
    "NodeExecution",
]
