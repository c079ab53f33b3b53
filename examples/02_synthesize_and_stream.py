#!/usr/bin/env python3
"""Synthesize, Store and Stream Example.

This example asks Gemini to draft a workflow from a plain-language
description, saves it as a draft, publishes it, and streams a run's
events as they happen.

Before running:
    export GOOGLE_API_KEY="your-api-key"

Run:
    python examples/02_synthesize_and_stream.py
"""

import asyncio
from pathlib import Path

from personaflow import (
    EngineConfig,
    ExecutionEventType,
    GraphEditor,
    GraphSynthesisError,
    InvalidGraphError,
    ProviderGenerator,
    WorkflowInterpreter,
    WorkflowSynthesizer,
)
from personaflow.llm.gemini import GeminiProvider
from personaflow.storage import JSONFileWorkflowStore


async def main() -> None:
    """Draft a workflow, persist it, then stream one run."""
    generator = ProviderGenerator(GeminiProvider(model="gemini-2.0-flash"))
    editor = GraphEditor()
    synthesizer = WorkflowSynthesizer(generator, model_id="gemini-2.0-flash")

    description = "Classify a support ticket as Sales or Support and answer it with a matching tone."
    print(f"Description: {description}\n")

    try:
        graph = await synthesizer.synthesize_into(editor, description)
    except (GraphSynthesisError, InvalidGraphError) as e:
        print(f"Synthesis failed: {e}")
        return

    print(f"Synthesized {len(graph.nodes)} nodes and {len(graph.edges)} edges")

    store = JSONFileWorkflowStore(Path(".personaflow") / "workflows")
    workflow_id = await store.save(graph, name="Ticket router", description=description)
    record = await store.publish(workflow_id)
    print(f"Saved {record.id} ({record.status.value})\n")

    interpreter = WorkflowInterpreter(
        record.graph,
        generator,
        config=EngineConfig(stream_tokens=True, max_steps=20),
    )

    async for event in interpreter.stream("Can I get a discount on the annual plan?"):
        if event.type == ExecutionEventType.TOKEN:
            print(event.data["delta"], end="", flush=True)
        elif event.type == ExecutionEventType.NODE_STARTED:
            print(f"\n▶ {event.node_id}")
        elif event.type == ExecutionEventType.RUN_FINISHED:
            print(f"\n\nFinished: {event.data}")


if __name__ == "__main__":
    asyncio.run(main())
