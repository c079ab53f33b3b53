"""Unit tests for Logging module."""

from __future__ import annotations

from io import StringIO

from rich.console import Console

from personaflow.logging.logger import LogLevel, PersonaFlowLogger
from personaflow.logging.config import (
    get_logger,
    configure_logging,
    disable_logging,
    enable_logging,
)


def make_logger(**kwargs) -> tuple[PersonaFlowLogger, StringIO]:
    output = StringIO()
    console = Console(file=output, force_terminal=False, width=200)
    return PersonaFlowLogger(console=console, **kwargs), output


class TestLogLevel:
    """Tests for LogLevel."""

    def test_level_ranking(self) -> None:
        """Levels should have correct rank order."""
        assert LogLevel.DEBUG.rank < LogLevel.INFO.rank
        assert LogLevel.INFO.rank < LogLevel.WARNING.rank
        assert LogLevel.WARNING.rank < LogLevel.ERROR.rank


class TestPersonaFlowLogger:
    """Tests for PersonaFlowLogger."""

    def test_default_creation(self) -> None:
        logger = PersonaFlowLogger()

        assert logger.level == LogLevel.INFO
        assert logger.enabled is True

    def test_level_filtering(self) -> None:
        """Should filter messages below level."""
        logger, output = make_logger(level=LogLevel.WARNING)

        logger.debug("Debug message")
        logger.info("Info message")
        logger.warning("Warning message")

        result = output.getvalue()
        assert "Debug message" not in result
        assert "Info message" not in result
        assert "Warning message" in result

    def test_disabled_logging(self) -> None:
        logger, output = make_logger(enabled=False)

        logger.info("Should not appear")
        logger.run_start("run-1", 3)

        assert output.getvalue() == ""

    def test_context_fields(self) -> None:
        logger, output = make_logger(show_timestamps=False)

        logger.info("Graph loaded", nodes=4)

        assert "Graph loaded" in output.getvalue()
        assert "nodes=4" in output.getvalue()

    def test_context_markup_is_escaped(self) -> None:
        logger, output = make_logger(show_timestamps=False)

        logger.info("Prompt", value="[bold]raw[/bold]")

        assert "[bold]raw[/bold]" in output.getvalue()


class TestRunLogging:
    """Tests for workflow-specific log lines."""

    def test_run_start_and_end(self) -> None:
        logger, output = make_logger()

        logger.run_start("run-1", 4, "I want a refund")
        logger.run_end("run-1", "completed", 4, 120)

        result = output.getvalue()
        assert "Run run-1" in result
        assert "starting with 4 nodes" in result
        assert '"I want a refund"' in result
        assert "completed (4 steps | 120ms)" in result

    def test_node_start(self) -> None:
        logger, output = make_logger()

        logger.node_start("llm-1", "llm", "Summarize")

        assert "llm-1" in output.getvalue()
        assert "(llm) Summarize" in output.getvalue()

    def test_node_output_preview_truncated(self) -> None:
        logger, output = make_logger(level=LogLevel.DEBUG, preview_chars=10)

        logger.node_output("llm-1", "a" * 50, duration_ms=12)

        result = output.getvalue()
        assert "(12ms)" in result
        assert "a" * 10 + "..." in result
        assert "a" * 11 not in result

    def test_node_output_hidden_at_info(self) -> None:
        logger, output = make_logger()

        logger.node_output("llm-1", "hidden")
        logger.edge_traversed("e1", "start-1", "llm-1")

        assert output.getvalue() == ""

    def test_node_error(self) -> None:
        logger, output = make_logger(level=LogLevel.ERROR)

        logger.node_error("cls-1", "Classifier node has no intents")

        assert "cls-1" in output.getvalue()
        assert "failed: Classifier node has no intents" in output.getvalue()

    def test_edge_traversed_with_label(self) -> None:
        logger, output = make_logger(level=LogLevel.DEBUG)

        logger.edge_traversed("e-true", "cond-1", "llm-refund", "True")

        result = output.getvalue()
        assert "Edge e-true:" in result
        assert "cond-1 → llm-refund [True]" in result


class TestLoggingConfig:
    """Tests for global logging configuration."""

    def test_configure_from_string(self) -> None:
        logger = configure_logging(level="WARNING")

        assert logger.level == LogLevel.WARNING
        assert get_logger() is logger

    def test_disable_and_enable(self) -> None:
        configure_logging()

        disable_logging()
        assert get_logger().enabled is False

        enable_logging()
        assert get_logger().enabled is True

    def test_configure_passes_console(self) -> None:
        output = StringIO()
        configure_logging(console=Console(file=output, force_terminal=False), show_timestamps=False)

        get_logger().info("Routed")

        assert "Routed" in output.getvalue()
