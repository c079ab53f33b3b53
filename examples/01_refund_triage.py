#!/usr/bin/env python3
"""Refund Triage Example.

This example builds a small workflow in code with GraphEditor and runs it
with the Gemini provider:

    start -> condition(input contains "refund") -True-> refund agent -> end
                                                 -False-> general llm -> end

Before running:
    export GOOGLE_API_KEY="your-api-key"

Run:
    python examples/01_refund_triage.py
"""

from personaflow import (
    AgentProfile,
    AgentRegistry,
    GraphEditor,
    NodeKind,
    Position,
    ProviderGenerator,
    WorkflowInterpreter,
)
from personaflow.llm.gemini import GeminiProvider


def build_editor() -> GraphEditor:
    """Assemble the refund triage graph."""
    editor = GraphEditor()

    start = editor.add_node(NodeKind.START, Position(x=100, y=300))
    check = editor.add_node(
        NodeKind.CONDITION,
        Position(x=350, y=300),
        data={"label": "Is refund?", "operator": "contains", "value": "refund"},
        source_id=start.id,
    )
    refund = editor.add_node(
        NodeKind.AGENT,
        Position(x=600, y=200),
        data={"label": "Refund desk", "agent_id": "refund-desk"},
        source_id=check.id,
        edge_label="True",
    )
    general = editor.add_node(
        NodeKind.LLM,
        Position(x=600, y=400),
        data={
            "label": "General answer",
            "system_prompt": "Answer the customer briefly. Their profile: {{user_profile}}",
        },
        source_id=check.id,
        edge_label="False",
    )
    editor.add_node(NodeKind.END, Position(x=850, y=200), source_id=refund.id)
    editor.add_node(NodeKind.END, Position(x=850, y=400), source_id=general.id)
    return editor


def main() -> None:
    """Run the refund triage workflow twice."""
    agents = AgentRegistry([
        AgentProfile(
            id="refund-desk",
            display_name="Refund desk",
            system_instruction="You process refund requests politely and ask for the order number.",
        ),
    ])
    generator = ProviderGenerator(GeminiProvider(model="gemini-2.0-flash"))
    interpreter = WorkflowInterpreter(build_editor().snapshot(), generator, agents=agents)

    print("=" * 60)
    print("PersonaFlow Refund Triage")
    print("=" * 60)

    for message in ["I want a refund for order 1042", "What are your opening hours?"]:
        print(f"\nInput: {message}")
        print("-" * 60)

        result = interpreter.run_sync(message, user_profile={"tier": "gold"})

        for entry in result.log:
            print(f"  [{entry.kind.value}] {entry.message}")
        print(f"\nOutput: {result.output}")
        print(f"Path: {' -> '.join(result.visited_node_ids)} ({result.duration_ms}ms)")


if __name__ == "__main__":
    main()
