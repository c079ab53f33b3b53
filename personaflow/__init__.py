"""PersonaFlow - visual workflow orchestration for agent personas.

Users compose agent personas into directed graphs in a visual editor;
PersonaFlow validates those graphs and interprets them at runtime, one node
at a time, threading an execution context between steps.

Example:
    >>> from personaflow import GraphEditor, NodeKind, WorkflowInterpreter
    >>> editor = GraphEditor()
    >>> start = editor.add_node(NodeKind.START)
    >>> editor.add_node(NodeKind.END, source_id=start.id)
    >>> interpreter = WorkflowInterpreter(editor.snapshot(), generator)
    >>> result = interpreter.run_sync("hello")
    >>> print(result.output)
    hello
"""

__version__ = "0.1.0"

# Core exports
from personaflow.core.config import EngineConfig
from personaflow.core.types import LLMResponse, Message, MessageRole, StreamChunk, Usage

# Graph exports
from personaflow.graph.authoring import GraphEditor
from personaflow.graph.model import (
    ConditionOperator,
    Edge,
    NodeKind,
    Position,
    WorkflowGraph,
)
from personaflow.graph.synthesis import WorkflowSynthesizer, parse_graph_payload
from personaflow.graph.validation import ValidationResult, validate_graph

# Runtime exports
from personaflow.runtime.context import ExecutionContext, ExecutionLog, LogEntry, LogKind
from personaflow.runtime.events import ExecutionEvent, ExecutionEventType
from personaflow.runtime.interpreter import (
    HaltReason,
    InterpreterState,
    NodeExecution,
    RunResult,
    RunStatus,
    WorkflowInterpreter,
)

# Agent exports
from personaflow.agents.registry import AgentProfile, AgentRegistry

# LLM exports
from personaflow.llm.base import BaseLLMProvider
from personaflow.llm.generation import ProviderGenerator, TextGenerator

# Error exports
from personaflow.errors.exceptions import (
    APIError,
    AuthenticationError,
    ConfigurationError,
    DanglingEdgeError,
    DuplicateEdgeIdError,
    DuplicateNodeIdError,
    GraphSynthesisError,
    HandlerFailureError,
    InterpreterBusyError,
    InvalidConfigError,
    InvalidGraphError,
    LLMError,
    MissingAPIKeyError,
    MissingStartNodeError,
    ModelNotFoundError,
    PersonaFlowError,
    RateLimitError,
    TimeoutError,
    UnsupportedNodeKindError,
    WorkflowError,
    WorkflowNotFoundError,
)

__all__ = [
    # Version
    "__version__",
    # Core
    "EngineConfig",
    "LLMResponse",
    "Message",
    "MessageRole",
    "StreamChunk",
    "Usage",
    # Graph
    "NodeKind",
    "ConditionOperator",
    "Position",
    "Edge",
    "WorkflowGraph",
    "ValidationResult",
    "validate_graph",
    "GraphEditor",
    "WorkflowSynthesizer",
    "parse_graph_payload",
    # Runtime
    "ExecutionContext",
    "ExecutionLog",
    "LogEntry",
    "LogKind",
    "ExecutionEvent",
    "ExecutionEventType",
    "WorkflowInterpreter",
    "InterpreterState",
    "RunStatus",
    "HaltReason",
    "RunResult",
    "NodeExecution",
    # Agents
    "AgentProfile",
    "AgentRegistry",
    # LLM
    "BaseLLMProvider",
    "TextGenerator",
    "ProviderGenerator",
    # Errors
    "PersonaFlowError",
    "ConfigurationError",
    "MissingAPIKeyError",
    "InvalidConfigError",
    "LLMError",
    "RateLimitError",
    "AuthenticationError",
    "APIError",
    "TimeoutError",
    "ModelNotFoundError",
    "WorkflowError",
    "InvalidGraphError",
    "MissingStartNodeError",
    "DanglingEdgeError",
    "DuplicateNodeIdError",
    "DuplicateEdgeIdError",
    "HandlerFailureError",
    "UnsupportedNodeKindError",
    "InterpreterBusyError",
    "GraphSynthesisError",
    "WorkflowNotFoundError",
]


def __getattr__(name: str):
    """Lazy import for optional components."""
    # LLM Providers
    if name == "GeminiProvider":
        from personaflow.llm.gemini import GeminiProvider
        return GeminiProvider
    elif name == "ProviderRegistry":
        from personaflow.llm.registry import ProviderRegistry
        return ProviderRegistry
    elif name == "get_registry":
        from personaflow.llm.registry import get_registry
        return get_registry

    # Storage
    elif name == "InMemoryWorkflowStore":
        from personaflow.storage import InMemoryWorkflowStore
        return InMemoryWorkflowStore
    elif name == "JSONFileWorkflowStore":
        from personaflow.storage import JSONFileWorkflowStore
        return JSONFileWorkflowStore
    elif name == "WorkflowRecord":
        from personaflow.storage import WorkflowRecord
        return WorkflowRecord

    # Resilience
    elif name == "TimeoutManager":
        from personaflow.resilience import TimeoutManager
        return TimeoutManager

    # Logging
    elif name == "get_logger":
        from personaflow.logging import get_logger
        return get_logger
    elif name == "configure_logging":
        from personaflow.logging import configure_logging
        return configure_logging

    raise AttributeError(f"module 'personaflow' has no attribute '{name}'")
