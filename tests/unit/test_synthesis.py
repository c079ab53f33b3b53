"""Unit tests for LLM-assisted workflow synthesis."""

from __future__ import annotations

import json

import pytest

from personaflow.errors.exceptions import GraphSynthesisError, InvalidGraphError
from personaflow.graph.authoring import GraphEditor
from personaflow.graph.model import NodeKind
from personaflow.graph.synthesis import WorkflowSynthesizer, parse_graph_payload

VALID_PAYLOAD = {
    "nodes": [
        {"id": "start-1", "type": "start", "position": {"x": 100, "y": 300}, "data": {"label": "Start"}},
        {
            "id": "llm-1",
            "type": "llm",
            "position": {"x": 400, "y": 300},
            "data": {"label": "Extract", "systemPrompt": "Extract fields from {{input}} as JSON."},
        },
        {"id": "end-1", "type": "end", "position": {"x": 700, "y": 300}, "data": {"label": "End"}},
    ],
    "edges": [
        {"id": "e1", "source": "start-1", "target": "llm-1"},
        {"id": "e2", "source": "llm-1", "target": "end-1"},
    ],
}


class TestParseGraphPayload:
    """Tests for parse_graph_payload."""

    def test_dict(self) -> None:
        graph = parse_graph_payload(VALID_PAYLOAD)

        assert graph is not None
        assert graph.get_node("llm-1").data.system_prompt.startswith("Extract")

    def test_json_string_with_fences(self) -> None:
        text = "```json\n" + json.dumps(VALID_PAYLOAD) + "\n```"
        graph = parse_graph_payload(text)

        assert graph is not None
        assert len(graph.nodes) == 3

    @pytest.mark.parametrize(
        "raw",
        [
            None,
            "not json",
            "[1, 2, 3]",
            {"nodes": [{"id": "x", "type": "retrieval"}], "edges": []},
            {"nodes": [{"type": "start"}]},
        ],
    )
    def test_unparseable_returns_none(self, raw) -> None:
        assert parse_graph_payload(raw) is None


class TestWorkflowSynthesizer:
    """Tests for WorkflowSynthesizer."""

    @pytest.mark.asyncio
    async def test_propose(self, generator_factory) -> None:
        generator = generator_factory(json.dumps(VALID_PAYLOAD))
        synthesizer = WorkflowSynthesizer(generator, model_id="gemini-2.5-flash")

        graph = await synthesizer.propose("Extract user data", "zh")

        assert graph is not None
        call = generator.calls[0]
        assert call["model_id"] == "gemini-2.5-flash"
        assert 'User Description: "Extract user data"' in call["prompt"]
        assert "Chinese (Simplified)" in call["prompt"]
        assert "{{input}}" in call["prompt"]

    @pytest.mark.asyncio
    async def test_propose_failure_returns_none(self, generator_factory, quiet_logging) -> None:
        synthesizer = WorkflowSynthesizer(generator_factory(RuntimeError("offline")))

        assert await synthesizer.propose("anything") is None
        assert "synthesis call failed" in quiet_logging.getvalue()

    @pytest.mark.asyncio
    async def test_propose_empty_graph_returns_none(self, generator_factory) -> None:
        synthesizer = WorkflowSynthesizer(generator_factory('{"nodes": [], "edges": []}'))
        assert await synthesizer.propose("anything") is None

    @pytest.mark.asyncio
    async def test_synthesize_into_installs_graph(self, generator_factory) -> None:
        editor = GraphEditor()
        synthesizer = WorkflowSynthesizer(generator_factory(json.dumps(VALID_PAYLOAD)))

        graph = await synthesizer.synthesize_into(editor, "Extract user data")

        assert [n.kind for n in editor.graph.nodes] == [NodeKind.START, NodeKind.LLM, NodeKind.END]
        assert graph == editor.snapshot()

    @pytest.mark.asyncio
    async def test_synthesize_into_null_keeps_graph(self, generator_factory) -> None:
        editor = GraphEditor()
        editor.add_node(NodeKind.START)
        before = editor.snapshot()
        synthesizer = WorkflowSynthesizer(generator_factory("sorry, I cannot"))

        with pytest.raises(GraphSynthesisError):
            await synthesizer.synthesize_into(editor, "anything")
        assert editor.snapshot() == before

    @pytest.mark.asyncio
    async def test_synthesize_into_invalid_keeps_graph(self, generator_factory) -> None:
        payload = {"nodes": [{"id": "end-1", "type": "end"}], "edges": []}
        editor = GraphEditor()
        synthesizer = WorkflowSynthesizer(generator_factory(json.dumps(payload)))

        with pytest.raises(InvalidGraphError):
            await synthesizer.synthesize_into(editor, "anything")
        assert editor.graph.nodes == []
