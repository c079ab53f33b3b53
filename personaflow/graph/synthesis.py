"""LLM-assisted workflow synthesis from a natural-language description."""

from __future__ import annotations

import json
import re
from typing import Any, Literal

from pydantic import ValidationError

from personaflow.graph.authoring import GraphEditor
from personaflow.graph.model import WorkflowGraph
from personaflow.llm.generation import TextGenerator
from personaflow.logging import get_logger

Language = Literal["en", "zh"]

_FENCE_PATTERN = re.compile(r"^\s*```(?:json)?\s*|\s*```\s*$", re.IGNORECASE)

SYNTHESIS_INSTRUCTION = (
    "You are an AI Workflow Architect. Design a workflow graph and return it "
    "as a single JSON object."
)

SYNTHESIS_PROMPT = """User Description: "{description}"
Target Language: {language_name}

Available Node Types:
- start: The entry point. Exactly one.
- end: The final response.
- llm: A generic LLM call. Use this for extraction, analysis or summarization.
- agent: A specialized agent referenced by "agentId".
- classifier: Routes input into one of "intents" (e.g. Sales, Support, Tech).
  Each outgoing edge is labeled with an intent.
- condition: Checks "variable" with "operator" (contains, equals, empty,
  not_empty, greater, less) against "value". Outgoing edges are labeled
  "True" and "False".
- user_profile: Loads user context fields listed in "outputFields".

Instructions may use {{{{input}}}}, {{{{context}}}} and {{{{user_profile}}}}.

Output Rules:
1. Return a JSON object with "nodes" and "edges".
2. Nodes need a unique "id", a "type", a "position" ({{"x", "y"}}) and
   "data" ({{"label", "description", "systemPrompt", ...}}).
3. Edges need a unique "id", "source", "target" and an optional "label".
4. Layout: position nodes left to right starting at x=100, adding ~300 to x
   for each step.
5. Labels and descriptions must be written in the target language.

Return ONLY the raw JSON. Do not wrap it in markdown code blocks.
"""

_LANGUAGE_NAMES = {"en": "English", "zh": "Chinese (Simplified)"}


def _strip_code_fences(text: str) -> str:
    return _FENCE_PATTERN.sub("", text).strip()


def parse_graph_payload(raw: dict[str, Any] | str | None) -> WorkflowGraph | None:
    """Parse an LLM-produced graph.

    Accepts a dict or a JSON string, optionally wrapped in markdown code
    fences. Returns None when the payload is not JSON or does not match the
    graph schema.
    """
    if raw is None:
        return None

    if isinstance(raw, str):
        try:
            raw = json.loads(_strip_code_fences(raw))
        except json.JSONDecodeError:
            return None

    if not isinstance(raw, dict):
        return None

    try:
        return WorkflowGraph.from_dict(raw)
    except ValidationError:
        return None


class WorkflowSynthesizer:
    """Proposes a workflow graph for a description.

    Example:
        >>> synthesizer = WorkflowSynthesizer(generator)
        >>> graph = await synthesizer.synthesize_into(
        ...     editor, "Route refund requests to billing", "en"
        ... )
    """

    def __init__(self, generator: TextGenerator, model_id: str | None = None) -> None:
        self._generator = generator
        self._model_id = model_id
        self._logger = get_logger()

    def build_prompt(self, description: str, language: Language = "en") -> str:
        return SYNTHESIS_PROMPT.format(
            description=description,
            language_name=_LANGUAGE_NAMES.get(language, "English"),
        )

    async def propose(self, description: str, language: Language = "en") -> WorkflowGraph | None:
        """Ask the model for a graph. Any failure yields None."""
        try:
            text = await self._generator.generate(
                self.build_prompt(description, language),
                SYNTHESIS_INSTRUCTION,
                self._model_id,
            )
        except Exception as e:
            self._logger.warning("Workflow synthesis call failed", error=str(e))
            return None

        graph = parse_graph_payload(text)
        if graph is None:
            self._logger.warning("Workflow synthesis returned an unparseable graph")
        elif not graph.nodes:
            self._logger.warning("Workflow synthesis returned an empty graph")
            return None
        return graph

    async def synthesize_into(
        self,
        editor: GraphEditor,
        description: str,
        language: Language = "en",
    ) -> WorkflowGraph:
        """Propose a graph and install it in ``editor``.

        Raises:
            GraphSynthesisError: If no graph could be produced.
            InvalidGraphError: If the proposed graph fails validation.
        """
        candidate = await self.propose(description, language)
        return editor.replace_graph(candidate)
