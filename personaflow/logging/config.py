"""Global logging configuration."""

from __future__ import annotations

from typing import Any

from personaflow.logging.logger import LogLevel, PersonaFlowLogger


# Global logger instance
_logger: PersonaFlowLogger | None = None


def get_logger() -> PersonaFlowLogger:
    """Get the global logger instance.

    Creates a default logger if none exists.
    """
    global _logger
    if _logger is None:
        _logger = PersonaFlowLogger()
    return _logger


def configure_logging(
    level: LogLevel | str = LogLevel.INFO,
    enabled: bool = True,
    show_timestamps: bool = True,
    show_level: bool = True,
    **kwargs: Any,
) -> PersonaFlowLogger:
    """Configure the global logger.

    Args:
        level: Minimum log level (LogLevel or string).
        enabled: Whether logging is enabled.
        show_timestamps: Whether to show timestamps.
        show_level: Whether to show log level.
        **kwargs: Additional arguments passed to PersonaFlowLogger.

    Returns:
        The configured logger instance.

    Example:
        >>> configure_logging(level="debug", show_timestamps=False)
        >>> get_logger().info("Hello")
    """
    global _logger

    if isinstance(level, str):
        level = LogLevel(level.lower())

    _logger = PersonaFlowLogger(
        level=level,
        enabled=enabled,
        show_timestamps=show_timestamps,
        show_level=show_level,
        **kwargs,
    )

    return _logger


def disable_logging() -> None:
    """Disable all logging."""
    get_logger().enabled = False


def enable_logging() -> None:
    """Enable logging."""
    get_logger().enabled = True
