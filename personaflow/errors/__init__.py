"""PersonaFlow error types."""

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
