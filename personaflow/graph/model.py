"""Workflow graph data model.

Nodes are a tagged union: one pydantic model per node kind, discriminated by
the ``type`` field, each with its own typed ``data`` payload. The wire format
is the plain ``{nodes, edges}`` JSON produced by the editor, with camelCase
keys inside ``data``.

Example:
    >>> graph = WorkflowGraph(
    ...     nodes=[StartNode(id="start-1"), EndNode(id="end-1")],
    ...     edges=[Edge(id="e1", source="start-1", target="end-1")],
    ... )
    >>> graph.outgoing_edges("start-1")[0].target
    'end-1'
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Annotated, Any, Iterable, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

if TYPE_CHECKING:
    from personaflow.graph.validation import ValidationResult


class NodeKind(str, Enum):
    """Closed set of node kinds."""

    START = "start"
    END = "end"
    LLM = "llm"
    AGENT = "agent"
    CONDITION = "condition"
    CLASSIFIER = "classifier"
    USER_PROFILE = "user_profile"


class ConditionOperator(str, Enum):
    """Comparison applied by condition nodes."""

    CONTAINS = "contains"
    EQUALS = "equals"
    EMPTY = "empty"
    NOT_EMPTY = "not_empty"
    GREATER = "greater"
    LESS = "less"


TRUE_LABEL = "True"
FALSE_LABEL = "False"

DEFAULT_INTENTS = ["General", "Technical", "Billing"]
DEFAULT_CLASSIFIER_INSTRUCTION = (
    "You are an intelligent classifier. Analyze the user's input and map it "
    "to exactly one of the provided intents."
)
DEFAULT_LLM_INSTRUCTION = "You are a helpful assistant."


class Position(BaseModel):
    """Editor canvas coordinate. Ignored by execution."""

    x: float = 0.0
    y: float = 0.0


# Node payloads


class NodeData(BaseModel):
    """Fields shared by every node payload."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    label: str = Field(default="", description="Display label")
    description: str = Field(default="", description="Free-text description")


class LLMNodeData(NodeData):
    system_prompt: str | None = Field(
        default=None,
        description="System instruction template ({{input}}, {{context}}, {{user_profile}})",
    )
    model: str | None = Field(default=None, description="Model identifier override")
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    max_tokens: int | None = Field(default=None, gt=0)


class AgentNodeData(LLMNodeData):
    agent_id: str | None = Field(default=None, description="Referenced agent persona")


class ConditionNodeData(NodeData):
    variable: str = Field(default="input", description="Context variable to test")
    operator: ConditionOperator = Field(default=ConditionOperator.CONTAINS)
    value: str = Field(default="", description="Comparison value")


class ClassifierNodeData(NodeData):
    intents: list[str] = Field(default_factory=list, description="Ordered intent labels")
    system_prompt: str | None = Field(
        default=None, description="Classification instruction"
    )
    model: str | None = Field(default=None, description="Model identifier override")


class UserProfileNodeData(NodeData):
    output_fields: list[str] = Field(
        default_factory=list,
        description="Profile keys to expose; empty exposes the whole profile",
    )


# Nodes


class BaseNode(BaseModel):
    """Common node fields. Use the per-kind subclasses."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., min_length=1, description="Unique, stable node id")
    position: Position = Field(default_factory=Position)
    data: NodeData = Field(default_factory=NodeData)

    @property
    def kind(self) -> NodeKind:
        return NodeKind(self.type)  # type: ignore[attr-defined]

    @property
    def label(self) -> str:
        """Display label, falling back to the node id."""
        return self.data.label or self.id


class StartNode(BaseNode):
    type: Literal["start"] = Field(default="start", frozen=True)


class EndNode(BaseNode):
    type: Literal["end"] = Field(default="end", frozen=True)


class LLMNode(BaseNode):
    type: Literal["llm"] = Field(default="llm", frozen=True)
    data: LLMNodeData = Field(default_factory=LLMNodeData)


class AgentNode(BaseNode):
    type: Literal["agent"] = Field(default="agent", frozen=True)
    data: AgentNodeData = Field(default_factory=AgentNodeData)


class ConditionNode(BaseNode):
    type: Literal["condition"] = Field(default="condition", frozen=True)
    data: ConditionNodeData = Field(default_factory=ConditionNodeData)


class ClassifierNode(BaseNode):
    type: Literal["classifier"] = Field(default="classifier", frozen=True)
    data: ClassifierNodeData = Field(default_factory=ClassifierNodeData)


class UserProfileNode(BaseNode):
    type: Literal["user_profile"] = Field(default="user_profile", frozen=True)
    data: UserProfileNodeData = Field(default_factory=UserProfileNodeData)


WorkflowNode = Annotated[
    Union[
        StartNode,
        EndNode,
        LLMNode,
        AgentNode,
        ConditionNode,
        ClassifierNode,
        UserProfileNode,
    ],
    Field(discriminator="type"),
]

NODE_TYPES: dict[NodeKind, type[BaseNode]] = {
    NodeKind.START: StartNode,
    NodeKind.END: EndNode,
    NodeKind.LLM: LLMNode,
    NodeKind.AGENT: AgentNode,
    NodeKind.CONDITION: ConditionNode,
    NodeKind.CLASSIFIER: ClassifierNode,
    NodeKind.USER_PROFILE: UserProfileNode,
}


def create_node(
    kind: NodeKind | str,
    node_id: str,
    position: Position | None = None,
    data: dict[str, Any] | NodeData | None = None,
) -> BaseNode:
    """Construct the node model for ``kind``."""
    node_cls = NODE_TYPES[NodeKind(kind)]
    fields: dict[str, Any] = {"id": node_id, "position": position or Position()}
    if data is not None:
        fields["data"] = data
    return node_cls.model_validate(fields)


class Edge(BaseModel):
    """Directed, optionally labeled connection between two nodes."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1)
    source: str = Field(..., description="Source node id")
    target: str = Field(..., description="Target node id")
    label: str | None = Field(
        default=None,
        description="Branch discriminator ('True'/'False' or an intent name)",
    )


def outgoing_edges(
    nodes: Iterable[BaseNode],
    edges: Iterable[Edge],
    node_id: str,
) -> list[Edge]:
    """All edges leaving ``node_id``, in insertion order.

    ``nodes`` is accepted for signature symmetry with validation; an
    unknown ``node_id`` simply has no outgoing edges.
    """
    return [edge for edge in edges if edge.source == node_id]


class WorkflowGraph(BaseModel):
    """The finalized ``{nodes, edges}`` pair handed to the interpreter."""

    nodes: list[WorkflowNode] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)

    def get_node(self, node_id: str) -> BaseNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_edge(self, edge_id: str) -> Edge | None:
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        return None

    def nodes_of_kind(self, kind: NodeKind) -> list[BaseNode]:
        return [node for node in self.nodes if node.kind == kind]

    def outgoing_edges(self, node_id: str) -> list[Edge]:
        """Edges leaving ``node_id`` in insertion order."""
        return outgoing_edges(self.nodes, self.edges, node_id)

    def incoming_edges(self, node_id: str) -> list[Edge]:
        return [edge for edge in self.edges if edge.target == node_id]

    def validate_graph(self) -> ValidationResult:
        """Run structural validation (see ``personaflow.graph.validation``)."""
        from personaflow.graph.validation import validate_graph

        return validate_graph(self.nodes, self.edges)

    def snapshot(self) -> WorkflowGraph:
        """Deep copy, detached from any editor state."""
        return self.model_copy(deep=True)

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible ``{nodes, edges}`` in the editor wire format."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorkflowGraph:
        """Parse the editor wire format.

        Raises:
            pydantic.ValidationError: If the payload does not match the schema.
        """
        return cls.model_validate(data)
