"""Pytest configuration and fixtures for PersonaFlow tests."""

from __future__ import annotations

from collections.abc import AsyncIterator
from io import StringIO
from typing import Any

import pytest
from rich.console import Console

from personaflow.core.types import LLMResponse, Message, StreamChunk, Usage
from personaflow.graph.model import (
    ClassifierNode,
    ConditionNode,
    Edge,
    EndNode,
    LLMNode,
    StartNode,
    WorkflowGraph,
)
from personaflow.llm.base import BaseLLMProvider
from personaflow.logging import configure_logging


class MockLLMProvider(BaseLLMProvider):
    """Mock LLM provider for testing."""

    def __init__(
        self,
        model: str = "mock-model",
        response_content: str = "Mock response",
    ) -> None:
        self._model = model
        self._response_content = response_content
        self.call_count = 0
        self.received_messages: list[list[Message]] = []
        self.received_options: list[dict[str, Any]] = []

    async def complete(
        self,
        messages: list[Message],
        *,
        temperature: float = 0.7,
        max_tokens: int = 1024,
        **kwargs: Any,
    ) -> LLMResponse:
        """Mock complete implementation."""
        self.call_count += 1
        self.received_messages.append(list(messages))
        self.received_options.append({"temperature": temperature, "max_tokens": max_tokens})
        return LLMResponse(
            content=self._response_content,
            model=self._model,
            usage=Usage(prompt_tokens=10, completion_tokens=5),
            finish_reason="stop",
        )

    async def stream(
        self,
        messages: list[Message],
        *,
        temperature: float = 0.7,
        max_tokens: int = 1024,
        **kwargs: Any,
    ) -> AsyncIterator[StreamChunk]:
        """Mock stream implementation: one chunk per word."""
        self.call_count += 1
        self.received_messages.append(list(messages))
        accumulated = ""
        words = self._response_content.split(" ")
        for i, word in enumerate(words):
            delta = word if i == 0 else f" {word}"
            accumulated += delta
            yield StreamChunk(
                content=accumulated,
                delta=delta,
                finish_reason="stop" if i == len(words) - 1 else None,
            )

    @property
    def model(self) -> str:
        return self._model

    @property
    def provider_name(self) -> str:
        return "mock"


class ScriptedGenerator:
    """TextGenerator fake that replays scripted replies and records calls.

    Replies are consumed in order; the last one repeats. An Exception
    instance in the script is raised instead of returned.
    """

    def __init__(self, replies: list[str | Exception] | None = None) -> None:
        self._replies: list[str | Exception] = list(replies or ["Mock response"])
        self.calls: list[dict[str, Any]] = []

    def _next_reply(self) -> str:
        index = min(len(self.calls) - 1, len(self._replies) - 1)
        reply = self._replies[index]
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def generate(
        self,
        prompt: str,
        system_instruction: str,
        model_id: str | None = None,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        self.calls.append(
            {
                "prompt": prompt,
                "system_instruction": system_instruction,
                "model_id": model_id,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        return self._next_reply()

    async def stream(
        self,
        prompt: str,
        system_instruction: str,
        model_id: str | None = None,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> AsyncIterator[str]:
        self.calls.append(
            {
                "prompt": prompt,
                "system_instruction": system_instruction,
                "model_id": model_id,
                "temperature": temperature,
                "max_tokens": max_tokens,
                "stream": True,
            }
        )
        for word in self._next_reply().split(" "):
            yield word + " "


@pytest.fixture(autouse=True)
def quiet_logging():
    """Route the global logger to an in-memory console for every test."""
    output = StringIO()
    configure_logging(level="debug", console=Console(file=output, force_terminal=False, width=200))
    yield output
    configure_logging()


@pytest.fixture
def mock_provider() -> MockLLMProvider:
    """Create a mock LLM provider."""
    return MockLLMProvider()


@pytest.fixture
def mock_provider_factory():
    """Factory fixture for providers with custom model or content."""

    def _factory(**kwargs: Any) -> MockLLMProvider:
        return MockLLMProvider(**kwargs)

    return _factory


@pytest.fixture
def generator_factory():
    """Factory fixture for scripted generators."""

    def _factory(*replies: str | Exception) -> ScriptedGenerator:
        return ScriptedGenerator(list(replies) or None)

    return _factory


@pytest.fixture
def pass_through_graph() -> WorkflowGraph:
    """start -> end."""
    return WorkflowGraph(
        nodes=[StartNode(id="start-1"), EndNode(id="end-1")],
        edges=[Edge(id="e1", source="start-1", target="end-1")],
    )


@pytest.fixture
def refund_graph() -> WorkflowGraph:
    """start -> condition(input contains "refund") -True-> refund llm -> end.

    The False branch goes to a general llm with its own end.
    """
    return WorkflowGraph(
        nodes=[
            StartNode(id="start-1"),
            ConditionNode(
                id="cond-1",
                data={"label": "Is refund?", "variable": "input", "operator": "contains", "value": "refund"},
            ),
            LLMNode(id="llm-refund", data={"label": "Refund", "systemPrompt": "Handle refunds."}),
            LLMNode(id="llm-general", data={"label": "General", "systemPrompt": "Answer generally."}),
            EndNode(id="end-refund"),
            EndNode(id="end-general"),
        ],
        edges=[
            Edge(id="e1", source="start-1", target="cond-1"),
            Edge(id="e-true", source="cond-1", target="llm-refund", label="True"),
            Edge(id="e-false", source="cond-1", target="llm-general", label="False"),
            Edge(id="e2", source="llm-refund", target="end-refund"),
            Edge(id="e3", source="llm-general", target="end-general"),
        ],
    )


@pytest.fixture
def classifier_graph() -> WorkflowGraph:
    """start -> classifier[Sales, Support] -> one end per intent."""
    return WorkflowGraph(
        nodes=[
            StartNode(id="start-1"),
            ClassifierNode(id="cls-1", data={"label": "Route", "intents": ["Sales", "Support"]}),
            EndNode(id="end-sales"),
            EndNode(id="end-support"),
        ],
        edges=[
            Edge(id="e1", source="start-1", target="cls-1"),
            Edge(id="e-sales", source="cls-1", target="end-sales", label="Sales"),
            Edge(id="e-support", source="cls-1", target="end-support", label="Support"),
        ],
    )
