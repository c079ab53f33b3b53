"""Timeout management for external generation calls."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, TypeVar

from personaflow.errors.exceptions import TimeoutError as GenerationTimeoutError


T = TypeVar("T")


class TimeoutManager:
    """Per-step timeout for generation calls made by workflow nodes.

    Supports a default timeout with per-model overrides, matched exactly
    or by prefix for versioned model names.

    Example:
        >>> manager = TimeoutManager(
        ...     default_timeout=60.0,
        ...     per_model_timeouts={"gemini-2.5-pro": 120.0},
        ... )
        >>> text = await manager.execute(generator.generate, prompt, system, model="gemini-2.5-pro")
    """

    def __init__(
        self,
        default_timeout: float = 60.0,
        per_model_timeouts: dict[str, float] | None = None,
    ) -> None:
        """Initialize timeout manager.

        Args:
            default_timeout: Default timeout in seconds.
            per_model_timeouts: Model-specific timeout overrides.
        """
        if default_timeout <= 0:
            raise ValueError("default_timeout must be positive")

        self._default_timeout = default_timeout
        self._per_model_timeouts: dict[str, float] = dict(per_model_timeouts or {})

    @property
    def default_timeout(self) -> float:
        """Default timeout in seconds."""
        return self._default_timeout

    def get_timeout(self, model: str | None = None) -> float:
        """Get timeout for a model (None uses the default)."""
        if model is None:
            return self._default_timeout

        if model in self._per_model_timeouts:
            return self._per_model_timeouts[model]

        model_lower = model.lower()
        for known_model, timeout in self._per_model_timeouts.items():
            if model_lower.startswith(known_model.lower()):
                return timeout

        return self._default_timeout

    def set_timeout(self, model: str, timeout: float) -> None:
        """Set timeout for a specific model."""
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self._per_model_timeouts[model] = timeout

    async def execute(
        self,
        func: Callable[..., Awaitable[T]],
        *args: Any,
        timeout: float | None = None,
        model: str | None = None,
        **kwargs: Any,
    ) -> T:
        """Execute an async call with timeout protection.

        Args:
            func: Async function to execute.
            *args: Positional arguments.
            timeout: Explicit timeout (overrides model timeout).
            model: Model name for timeout lookup; not forwarded to ``func``.
            **kwargs: Keyword arguments.

        Raises:
            TimeoutError: If execution times out.
        """
        effective_timeout = timeout if timeout is not None else self.get_timeout(model)

        try:
            return await asyncio.wait_for(
                func(*args, **kwargs),
                timeout=effective_timeout,
            )
        except asyncio.TimeoutError as e:
            raise GenerationTimeoutError(
                f"Generation call timed out after {effective_timeout}s"
                + (f" for model {model}" if model else ""),
                provider="unknown",
                model=model,
                timeout_seconds=effective_timeout,
            ) from e
