"""Logging module for PersonaFlow.

Provides structured logging with Rich console support.
"""

from personaflow.logging.logger import LogLevel, PersonaFlowLogger
from personaflow.logging.config import (
    configure_logging,
    disable_logging,
    enable_logging,
    get_logger,
)

__all__ = [
    "LogLevel",
    "PersonaFlowLogger",
    "get_logger",
    "configure_logging",
    "disable_logging",
    "enable_logging",
]
