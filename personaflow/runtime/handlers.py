"""Node handlers: one async function per node kind.

Every handler has the signature ``handler(node, context, env) -> NodeOutcome``.
Handlers never mutate the context directly; they return a ``ContextPatch``
that the interpreter merges. ``execute_node`` dispatches through
``NODE_HANDLERS`` and wraps any handler exception in ``HandlerFailureError``.
"""

from __future__ import annotations

import inspect
import json
import math
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from personaflow.agents.registry import AgentLookup
from personaflow.core.config import EngineConfig
from personaflow.errors.exceptions import HandlerFailureError, UnsupportedNodeKindError
from personaflow.graph.model import (
    DEFAULT_CLASSIFIER_INSTRUCTION,
    FALSE_LABEL,
    TRUE_LABEL,
    AgentNode,
    BaseNode,
    ClassifierNode,
    ConditionNode,
    ConditionOperator,
    LLMNode,
    NodeKind,
    UserProfileNode,
)
from personaflow.llm.generation import TextGenerator
from personaflow.logging import get_logger
from personaflow.resilience.timeout import TimeoutManager
from personaflow.runtime.context import ContextPatch, ExecutionContext
from personaflow.runtime.templating import render_instruction

TokenCallback = Callable[[str, str], "Awaitable[None] | None"]

CLASSIFIER_PROMPT = (
    "Classify the following user message into one of these categories: {intents}\n\n"
    'User message: "{input}"\n\n'
    "Respond with ONLY the category name, nothing else."
)


@dataclass
class NodeOutcome:
    """Result of a handler.

    ``branch_label`` selects the outgoing edge for condition and classifier
    nodes; other kinds leave it None and follow their first edge.
    """

    output: Any
    patch: ContextPatch = field(default_factory=ContextPatch)
    branch_label: str | None = None


@dataclass
class HandlerEnvironment:
    """Collaborators shared by all handlers of a run."""

    generator: TextGenerator
    agents: AgentLookup | None = None
    config: EngineConfig = field(default_factory=EngineConfig)
    timeouts: TimeoutManager | None = None
    on_token: TokenCallback | None = None

    def __post_init__(self) -> None:
        if self.timeouts is None:
            self.timeouts = TimeoutManager(default_timeout=self.config.step_timeout)


Handler = Callable[[BaseNode, ExecutionContext, HandlerEnvironment], Awaitable[NodeOutcome]]


async def generate_text(
    env: HandlerEnvironment,
    node_id: str,
    prompt: str,
    system_instruction: str,
    model: str | None = None,
    temperature: float | None = None,
    max_tokens: int | None = None,
) -> str:
    """Run one generation call under the per-step timeout.

    Uses the streaming variant when ``config.stream_tokens`` is set, forwarding
    each delta to ``env.on_token``.
    """
    config = env.config
    model_id = model or config.default_model
    options = {
        "temperature": config.default_temperature if temperature is None else temperature,
        "max_tokens": max_tokens or config.default_max_tokens,
    }

    if not config.stream_tokens:
        return await env.timeouts.execute(
            env.generator.generate,
            prompt,
            system_instruction,
            model_id,
            model=model_id,
            **options,
        )

    async def consume() -> str:
        parts: list[str] = []
        async for delta in env.generator.stream(prompt, system_instruction, model_id, **options):
            parts.append(delta)
            if env.on_token is not None:
                result = env.on_token(node_id, delta)
                if inspect.isawaitable(result):
                    await result
        return "".join(parts)

    return await env.timeouts.execute(consume, model=model_id)


# Handlers


async def handle_start(node: BaseNode, context: ExecutionContext, env: HandlerEnvironment) -> NodeOutcome:
    return NodeOutcome(output=context.input)


async def handle_end(node: BaseNode, context: ExecutionContext, env: HandlerEnvironment) -> NodeOutcome:
    """Output the last generated text, or the input when that is missing or empty."""
    return NodeOutcome(output=context.last_output or context.input)


async def handle_llm(node: LLMNode, context: ExecutionContext, env: HandlerEnvironment) -> NodeOutcome:
    data = node.data
    instruction = render_instruction(
        data.system_prompt or env.config.fallback_system_instruction, context
    )
    text = await generate_text(
        env,
        node.id,
        context.input,
        instruction,
        model=data.model,
        temperature=data.temperature,
        max_tokens=data.max_tokens,
    )
    return NodeOutcome(output=text, patch=ContextPatch(last_output=text))


async def handle_agent(node: AgentNode, context: ExecutionContext, env: HandlerEnvironment) -> NodeOutcome:
    """Call the referenced agent persona.

    Instruction resolution: registry profile, then the node's own
    ``system_prompt``, then the configured fallback.
    """
    data = node.data
    profile = None
    if data.agent_id and env.agents is not None:
        profile = env.agents.lookup(data.agent_id)
        if profile is None:
            get_logger().warning(
                "Agent not found, using node instruction",
                node_id=node.id,
                agent_id=data.agent_id,
            )

    if profile is not None:
        template = profile.system_instruction
    else:
        template = data.system_prompt or env.config.fallback_system_instruction

    text = await generate_text(
        env,
        node.id,
        context.input,
        render_instruction(template, context),
        model=data.model,
        temperature=data.temperature,
        max_tokens=data.max_tokens,
    )
    return NodeOutcome(output=text, patch=ContextPatch(last_output=text))


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def resolve_variable(name: str, context: ExecutionContext) -> str:
    """Resolve a condition variable to text.

    Order: ``input``, ``last_output``, ``user_profile.<key>``, then
    ``variables[name]``. Anything unresolved falls back to the input.
    """
    name = name.strip() or "input"
    if name == "input":
        return context.input
    if name == "last_output" and context.last_output is not None:
        return context.last_output
    if name.startswith("user_profile."):
        key = name[len("user_profile."):]
        if key in context.user_profile:
            return _stringify(context.user_profile[key])
    if name in context.variables:
        return _stringify(context.variables[name])
    return context.input


def _as_number(text: str) -> float | None:
    """Parse finite numeric text; nan, inf and digit separators stay text."""
    text = text.strip()
    if "_" in text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def evaluate_condition(operator: ConditionOperator, actual: str, expected: str) -> bool:
    if operator == ConditionOperator.CONTAINS:
        return expected.lower() in actual.lower()

    if operator == ConditionOperator.EQUALS:
        left, right = _as_number(actual), _as_number(expected)
        if left is not None and right is not None:
            return left == right
        return actual.strip().lower() == expected.strip().lower()

    if operator == ConditionOperator.EMPTY:
        return not actual.strip()

    if operator == ConditionOperator.NOT_EMPTY:
        return bool(actual.strip())

    left, right = _as_number(actual), _as_number(expected)
    if left is None or right is None:
        return False
    if operator == ConditionOperator.GREATER:
        return left > right
    return left < right


async def handle_condition(
    node: ConditionNode, context: ExecutionContext, env: HandlerEnvironment
) -> NodeOutcome:
    data = node.data
    actual = resolve_variable(data.variable, context)
    result = evaluate_condition(data.operator, actual, data.value)
    return NodeOutcome(output=result, branch_label=TRUE_LABEL if result else FALSE_LABEL)


def match_intent(response: str, intents: list[str]) -> str | None:
    """Exact match first, then substring; both case-insensitive, in declared order."""
    cleaned = response.strip().strip("\"'.").lower()
    for intent in intents:
        if intent.lower() == cleaned:
            return intent
    lowered = response.lower()
    for intent in intents:
        if intent.lower() in lowered:
            return intent
    return None


async def handle_classifier(
    node: ClassifierNode, context: ExecutionContext, env: HandlerEnvironment
) -> NodeOutcome:
    intents = node.data.intents
    if not intents:
        raise ValueError("Classifier has no intents")

    instruction = render_instruction(
        node.data.system_prompt or DEFAULT_CLASSIFIER_INSTRUCTION, context
    )
    prompt = CLASSIFIER_PROMPT.format(intents=", ".join(intents), input=context.input)
    response = await generate_text(env, node.id, prompt, instruction, model=node.data.model)

    matched = match_intent(response, intents)
    if matched is None:
        matched = intents[0]
        get_logger().warning(
            "Classifier response matched no intent, using first intent",
            node_id=node.id,
            response=response[:50],
            intent=matched,
        )
    return NodeOutcome(output=matched, branch_label=matched)


async def handle_user_profile(
    node: UserProfileNode, context: ExecutionContext, env: HandlerEnvironment
) -> NodeOutcome:
    profile = context.user_profile
    fields = node.data.output_fields or list(profile.keys())
    values = {key: profile[key] for key in fields if key in profile}
    return NodeOutcome(
        output=json.dumps(values, ensure_ascii=False, default=str),
        patch=ContextPatch(variables={node.id: values}),
    )


NODE_HANDLERS: dict[NodeKind, Handler] = {
    NodeKind.START: handle_start,
    NodeKind.END: handle_end,
    NodeKind.LLM: handle_llm,
    NodeKind.AGENT: handle_agent,
    NodeKind.CONDITION: handle_condition,
    NodeKind.CLASSIFIER: handle_classifier,
    NodeKind.USER_PROFILE: handle_user_profile,
}

_missing = set(NodeKind) - set(NODE_HANDLERS)
if _missing:
    raise RuntimeError(f"No handler registered for node kinds: {sorted(k.value for k in _missing)}")


def get_handler(kind: NodeKind | str) -> Handler:
    try:
        return NODE_HANDLERS[NodeKind(kind)]
    except (KeyError, ValueError):
        raise UnsupportedNodeKindError(str(kind)) from None


async def execute_node(
    node: BaseNode, context: ExecutionContext, env: HandlerEnvironment
) -> NodeOutcome:
    """Dispatch ``node`` to its handler.

    Raises:
        UnsupportedNodeKindError: If no handler exists for the node's kind.
        HandlerFailureError: If the handler raised.
    """
    handler = get_handler(node.type)  # type: ignore[attr-defined]
    try:
        return await handler(node, context, env)
    except HandlerFailureError:
        raise
    except Exception as e:
        raise HandlerFailureError(
            str(e) or type(e).__name__,
            node_id=node.id,
            node_kind=node.type,  # type: ignore[attr-defined]
        ) from e
