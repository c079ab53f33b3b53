"""PersonaFlow exception hierarchy.

All exceptions inherit from PersonaFlowError for easy catching.
Each exception includes a `retryable` flag to indicate if the operation can be retried.
"""

from __future__ import annotations


class PersonaFlowError(Exception):
    """Base exception for all PersonaFlow errors."""

    def __init__(self, message: str, *, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable


# Configuration Errors
class ConfigurationError(PersonaFlowError):
    """Configuration-related errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message, retryable=False)


class MissingAPIKeyError(ConfigurationError):
    """API key is missing or not configured."""

    def __init__(self, provider: str, env_var: str | None = None) -> None:
        env_var = env_var or f"{provider.upper()}_API_KEY"
        super().__init__(
            f"API key for '{provider}' is not configured. "
            f"Set the {env_var} environment variable."
        )
        self.provider = provider


class InvalidConfigError(ConfigurationError):
    """Invalid configuration value."""

    def __init__(self, field: str, value: object, reason: str) -> None:
        super().__init__(f"Invalid config for '{field}': {value}. {reason}")
        self.field = field
        self.value = value


# LLM Errors
class LLMError(PersonaFlowError):
    """Base class for errors raised by the generation call."""

    def __init__(
        self,
        message: str,
        *,
        provider: str,
        model: str | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message, retryable=retryable)
        self.provider = provider
        self.model = model


class RateLimitError(LLMError):
    """Rate limit exceeded. Can be retried after backoff."""

    def __init__(
        self,
        message: str,
        *,
        provider: str,
        model: str | None = None,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message, provider=provider, model=model, retryable=True)
        self.retry_after = retry_after


class AuthenticationError(LLMError):
    """Authentication failed. Cannot be retried without fixing credentials."""

    def __init__(self, message: str, *, provider: str) -> None:
        super().__init__(message, provider=provider, retryable=False)


class APIError(LLMError):
    """General API error. May be retried."""

    def __init__(
        self,
        message: str,
        *,
        provider: str,
        model: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, provider=provider, model=model, retryable=True)
        self.status_code = status_code


class TimeoutError(LLMError):
    """Generation call timed out. Can be retried."""

    def __init__(
        self,
        message: str,
        *,
        provider: str,
        model: str | None = None,
        timeout_seconds: float,
    ) -> None:
        super().__init__(message, provider=provider, model=model, retryable=True)
        self.timeout_seconds = timeout_seconds


class ModelNotFoundError(LLMError):
    """Model not found or not supported."""

    def __init__(self, model: str, provider: str | None = None) -> None:
        provider_str = provider or "unknown"
        super().__init__(
            f"Model '{model}' not found or not supported by provider '{provider_str}'.",
            provider=provider_str,
            model=model,
            retryable=False,
        )


# Workflow Errors
class WorkflowError(PersonaFlowError):
    """Base class for workflow graph and run errors."""

    def __init__(self, message: str, *, retryable: bool = False) -> None:
        super().__init__(message, retryable=retryable)


class InvalidGraphError(WorkflowError):
    """Workflow graph failed validation. Raised before a run starts."""

    def __init__(self, message: str) -> None:
        super().__init__(message, retryable=False)


class MissingStartNodeError(InvalidGraphError):
    """Graph has zero or more than one start node."""

    def __init__(self, count: int) -> None:
        if count == 0:
            message = "Workflow has no start node."
        else:
            message = f"Workflow has {count} start nodes, exactly one is required."
        super().__init__(message)
        self.count = count


class DanglingEdgeError(InvalidGraphError):
    """Edge references a node id that does not exist."""

    def __init__(self, edge_id: str, missing_node_id: str) -> None:
        super().__init__(
            f"Edge '{edge_id}' references unknown node '{missing_node_id}'."
        )
        self.edge_id = edge_id
        self.missing_node_id = missing_node_id


class DuplicateNodeIdError(InvalidGraphError):
    """Two nodes share the same id."""

    def __init__(self, node_id: str) -> None:
        super().__init__(f"Duplicate node id '{node_id}'.")
        self.node_id = node_id


class DuplicateEdgeIdError(InvalidGraphError):
    """Two edges share the same id."""

    def __init__(self, edge_id: str) -> None:
        super().__init__(f"Duplicate edge id '{edge_id}'.")
        self.edge_id = edge_id


class HandlerFailureError(WorkflowError):
    """A node handler failed. Contained by the interpreter's step loop."""

    def __init__(self, message: str, *, node_id: str, node_kind: str) -> None:
        super().__init__(message, retryable=True)
        self.node_id = node_id
        self.node_kind = node_kind


class UnsupportedNodeKindError(WorkflowError):
    """No handler is registered for a node kind."""

    def __init__(self, kind: str) -> None:
        super().__init__(f"No handler registered for node kind '{kind}'.")
        self.kind = kind


class InterpreterBusyError(WorkflowError):
    """run() was called while another run is in flight."""

    def __init__(self) -> None:
        super().__init__(
            "Interpreter is already running. Wait for the current run to halt."
        )


class GraphSynthesisError(WorkflowError):
    """A synthesized graph was missing or could not be parsed."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Workflow synthesis failed: {reason}", retryable=True)
        self.reason = reason


class WorkflowNotFoundError(WorkflowError):
    """Workflow id is unknown to the store."""

    def __init__(self, workflow_id: str) -> None:
        super().__init__(f"Workflow '{workflow_id}' not found.")
        self.workflow_id = workflow_id
