"""Workflow graph model, validation, authoring and synthesis."""

from personaflow.graph.authoring import GraphEditor
from personaflow.graph.model import (
    FALSE_LABEL,
    NODE_TYPES,
    TRUE_LABEL,
    AgentNode,
    AgentNodeData,
    BaseNode,
    ClassifierNode,
    ClassifierNodeData,
    ConditionNode,
    ConditionNodeData,
    ConditionOperator,
    Edge,
    EndNode,
    LLMNode,
    LLMNodeData,
    NodeData,
    NodeKind,
    Position,
    StartNode,
    UserProfileNode,
    UserProfileNodeData,
    WorkflowGraph,
    WorkflowNode,
    create_node,
    outgoing_edges,
)
from personaflow.graph.synthesis import WorkflowSynthesizer, parse_graph_payload
from personaflow.graph.validation import ValidationResult, validate_graph

__all__ = [
    # Model
    "NodeKind",
    "ConditionOperator",
    "Position",
    "NodeData",
    "LLMNodeData",
    "AgentNodeData",
    "ConditionNodeData",
    "ClassifierNodeData",
    "UserProfileNodeData",
    "BaseNode",
    "StartNode",
    "EndNode",
    "LLMNode",
    "AgentNode",
    "ConditionNode",
    "ClassifierNode",
    "UserProfileNode",
    "WorkflowNode",
    "NODE_TYPES",
    "TRUE_LABEL",
    "FALSE_LABEL",
    "create_node",
    "Edge",
    "WorkflowGraph",
    "outgoing_edges",
    # Validation
    "ValidationResult",
    "validate_graph",
    # Authoring
    "GraphEditor",
    # Synthesis
    "WorkflowSynthesizer",
    "parse_graph_payload",
]
