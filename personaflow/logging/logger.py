"""PersonaFlow logger implementation."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from rich.console import Console
from rich.markup import escape


class LogLevel(str, Enum):
    """Log levels."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def rank(self) -> int:
        """Get numeric rank for comparison."""
        ranks = {"debug": 0, "info": 1, "warning": 2, "error": 3}
        return ranks[self.value]


class PersonaFlowLogger:
    """Structured logger for PersonaFlow.

    Provides Rich-formatted logging for workflow run tracking. This is the
    operator-facing console log; the per-run execution log returned to
    callers lives in ``personaflow.runtime.context``.

    Example:
        >>> logger = PersonaFlowLogger(level=LogLevel.DEBUG)
        >>> logger.info("Graph loaded", nodes=4)
        >>> logger.node_start("llm-1", "llm", "Summarize")
    """

    def __init__(
        self,
        level: LogLevel = LogLevel.INFO,
        console: Console | None = None,
        show_timestamps: bool = True,
        show_level: bool = True,
        enabled: bool = True,
        preview_chars: int = 50,
    ) -> None:
        """Initialize logger.

        Args:
            level: Minimum log level to display.
            console: Rich console instance (created if None).
            show_timestamps: Whether to show timestamps.
            show_level: Whether to show log level.
            enabled: Whether logging is enabled.
            preview_chars: Maximum characters shown for input/output previews.
        """
        self._level = level
        self._console = console or Console()
        self._show_timestamps = show_timestamps
        self._show_level = show_level
        self._enabled = enabled
        self._preview_chars = preview_chars

    @property
    def level(self) -> LogLevel:
        """Current log level."""
        return self._level

    @level.setter
    def level(self, value: LogLevel) -> None:
        self._level = value

    @property
    def enabled(self) -> bool:
        """Whether logging is enabled."""
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        self._enabled = value

    def _should_log(self, level: LogLevel) -> bool:
        return self._enabled and level.rank >= self._level.rank

    def _format_prefix(self, level: LogLevel) -> str:
        parts = []

        if self._show_timestamps:
            timestamp = datetime.now().strftime("%H:%M:%S")
            parts.append(f"[dim]{timestamp}[/]")

        if self._show_level:
            level_colors = {
                LogLevel.DEBUG: "dim",
                LogLevel.INFO: "blue",
                LogLevel.WARNING: "yellow",
                LogLevel.ERROR: "red bold",
            }
            color = level_colors.get(level, "white")
            parts.append(f"[{color}]{level.value.upper():7}[/]")

        return " ".join(parts)

    def _preview(self, text: str) -> str:
        text = text.replace("\n", " ")
        if len(text) > self._preview_chars:
            text = text[: self._preview_chars] + "..."
        return escape(text)

    def _log(self, level: LogLevel, message: str, **context: Any) -> None:
        if not self._should_log(level):
            return

        prefix = self._format_prefix(level)

        if context:
            context_str = " ".join(f"[dim]{k}=[/]{escape(str(v))}" for k, v in context.items())
            message = f"{message} {context_str}"

        self._console.print(f"{prefix} {message}")

    def debug(self, message: str, **context: Any) -> None:
        """Log debug message."""
        self._log(LogLevel.DEBUG, message, **context)

    def info(self, message: str, **context: Any) -> None:
        """Log info message."""
        self._log(LogLevel.INFO, message, **context)

    def warning(self, message: str, **context: Any) -> None:
        """Log warning message."""
        self._log(LogLevel.WARNING, message, **context)

    def error(self, message: str, **context: Any) -> None:
        """Log error message."""
        self._log(LogLevel.ERROR, message, **context)

    # Workflow-specific logging methods

    def run_start(self, run_id: str, node_count: int, input_preview: str | None = None) -> None:
        """Log the start of a workflow run."""
        if not self._should_log(LogLevel.INFO):
            return

        preview = f' "{self._preview(input_preview)}"' if input_preview else ""
        self._console.print(
            f"{self._format_prefix(LogLevel.INFO)} "
            f"[bold cyan]◆ Run {run_id}[/] starting with {node_count} nodes{preview}"
        )

    def node_start(self, node_id: str, kind: str, label: str | None = None) -> None:
        """Log a node becoming active."""
        if not self._should_log(LogLevel.INFO):
            return

        name = f" {escape(label)}" if label else ""
        self._console.print(
            f"{self._format_prefix(LogLevel.INFO)} "
            f"[bold blue]▶ {node_id}[/] ({kind}){name}"
        )

    def node_output(self, node_id: str, output: str, duration_ms: int | None = None) -> None:
        """Log a node's output."""
        if not self._should_log(LogLevel.DEBUG):
            return

        duration = f" ({duration_ms}ms)" if duration_ms is not None else ""
        self._console.print(
            f"{self._format_prefix(LogLevel.DEBUG)} "
            f"  [green]✓ {node_id}[/]{duration} {self._preview(output)}"
        )

    def node_error(self, node_id: str, error: str) -> None:
        """Log a node failure."""
        if not self._should_log(LogLevel.ERROR):
            return

        self._console.print(
            f"{self._format_prefix(LogLevel.ERROR)} "
            f"[bold red]✗ {node_id}[/] failed: {escape(error)}"
        )

    def edge_traversed(
        self,
        edge_id: str,
        source: str,
        target: str,
        label: str | None = None,
    ) -> None:
        """Log an edge traversal."""
        if not self._should_log(LogLevel.DEBUG):
            return

        branch = " " + escape(f"[{label}]") if label else ""
        self._console.print(
            f"{self._format_prefix(LogLevel.DEBUG)} "
            f"  [dim]Edge {edge_id}:[/] {source} → {target}{branch}"
        )

    def run_end(self, run_id: str, status: str, steps: int, duration_ms: int) -> None:
        """Log the end of a workflow run."""
        if not self._should_log(LogLevel.INFO):
            return

        color = "cyan" if status == "completed" else "red"
        self._console.print(
            f"{self._format_prefix(LogLevel.INFO)} "
            f"[bold {color}]◆ Run {run_id}[/] {status} ({steps} steps | {duration_ms}ms)"
        )
