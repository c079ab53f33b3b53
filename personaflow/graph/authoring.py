"""Editor-side operations on a working workflow graph.

``GraphEditor`` owns the graph being edited. Runs and persistence only ever
see ``snapshot()`` copies. Rejected operations return ``None`` or ``False``
instead of raising.
"""

from __future__ import annotations

from typing import Any
from uuid import uuid4

from personaflow.errors.exceptions import GraphSynthesisError
from personaflow.graph.model import (
    DEFAULT_CLASSIFIER_INSTRUCTION,
    DEFAULT_INTENTS,
    DEFAULT_LLM_INSTRUCTION,
    BaseNode,
    ClassifierNode,
    Edge,
    NodeKind,
    Position,
    WorkflowGraph,
    create_node,
)
from personaflow.logging import get_logger

_DEFAULT_LABELS = {
    NodeKind.START: "Start",
    NodeKind.END: "End",
    NodeKind.LLM: "LLM",
    NodeKind.AGENT: "Agent",
    NodeKind.CONDITION: "Condition",
    NodeKind.CLASSIFIER: "Classifier",
    NodeKind.USER_PROFILE: "User Profile",
}


def _default_data(kind: NodeKind) -> dict[str, Any]:
    data: dict[str, Any] = {"label": _DEFAULT_LABELS[kind]}
    if kind == NodeKind.CLASSIFIER:
        data["intents"] = list(DEFAULT_INTENTS)
        data["system_prompt"] = DEFAULT_CLASSIFIER_INSTRUCTION
    elif kind == NodeKind.CONDITION:
        data["operator"] = "contains"
    elif kind == NodeKind.LLM:
        data["system_prompt"] = DEFAULT_LLM_INSTRUCTION
    return data


class GraphEditor:
    """Mutable working graph for the visual editor.

    Example:
        >>> editor = GraphEditor()
        >>> start = editor.add_node(NodeKind.START)
        >>> end = editor.add_node(NodeKind.END, source_id=start.id)
        >>> len(editor.graph.edges)
        1
    """

    def __init__(self, graph: WorkflowGraph | None = None) -> None:
        self._graph = graph.snapshot() if graph is not None else WorkflowGraph()
        self._logger = get_logger()

    @property
    def graph(self) -> WorkflowGraph:
        """The live working graph. Do not hand it to a run; use ``snapshot``."""
        return self._graph

    def snapshot(self) -> WorkflowGraph:
        """Deep copy of the working graph."""
        return self._graph.snapshot()

    def is_protected(self, node_id: str) -> bool:
        """Whether the UI should refuse to delete this node (the start node)."""
        node = self._graph.get_node(node_id)
        return node is not None and node.kind == NodeKind.START

    # Nodes

    def add_node(
        self,
        kind: NodeKind | str,
        position: Position | None = None,
        *,
        data: dict[str, Any] | None = None,
        source_id: str | None = None,
        edge_label: str | None = None,
    ) -> BaseNode:
        """Create a node with kind defaults, optionally wired from ``source_id``.

        ``data`` overrides the defaults key by key.
        """
        kind = NodeKind(kind)
        node_id = f"{kind.value}-{uuid4().hex[:8]}"
        payload = _default_data(kind)
        if data:
            payload.update(data)

        node = create_node(kind, node_id, position, payload)
        self._graph.nodes.append(node)

        if source_id is not None:
            self.add_edge(source_id, node.id, edge_label)
        return node

    def delete_node(self, node_id: str) -> bool:
        """Delete a node and every edge touching it."""
        node = self._graph.get_node(node_id)
        if node is None:
            return False

        self._graph.nodes = [n for n in self._graph.nodes if n.id != node_id]
        self._graph.edges = [
            e for e in self._graph.edges if e.source != node_id and e.target != node_id
        ]
        return True

    def relabel_node(self, node_id: str, label: str) -> bool:
        return self.update_node_data(node_id, label=label)

    def update_node_data(self, node_id: str, **changes: Any) -> bool:
        """Apply validated changes to a node's data payload.

        Keys are the snake_case field names. The node's kind cannot change.
        Returns False for an unknown node or a change the payload rejects.
        """
        node = self._graph.get_node(node_id)
        if node is None:
            return False

        merged = node.data.model_dump()
        merged.update(changes)
        try:
            node.data = type(node.data).model_validate(merged)
        except ValueError as e:
            self._logger.warning("Rejected node data update", node_id=node_id, error=str(e))
            return False
        return True

    # Edges

    def _has_edge(self, source_id: str, target_id: str, label: str | None) -> bool:
        return any(
            e.source == source_id and e.target == target_id and e.label == label
            for e in self._graph.edges
        )

    def add_edge(
        self,
        source_id: str,
        target_id: str,
        label: str | None = None,
    ) -> Edge | None:
        """Connect two nodes.

        Returns None for a self-loop, an unknown endpoint, or an exact
        ``(source, target, label)`` duplicate.
        """
        if source_id == target_id:
            return None
        if self._graph.get_node(source_id) is None or self._graph.get_node(target_id) is None:
            return None
        if self._has_edge(source_id, target_id, label):
            return None

        edge = Edge(
            id=f"e-{source_id}-{target_id}-{uuid4().hex[:6]}",
            source=source_id,
            target=target_id,
            label=label,
        )
        self._graph.edges.append(edge)
        return edge

    def delete_edge(self, edge_id: str) -> bool:
        before = len(self._graph.edges)
        self._graph.edges = [e for e in self._graph.edges if e.id != edge_id]
        return len(self._graph.edges) != before

    def relabel_edge(self, edge_id: str, label: str | None) -> Edge | None:
        """Change an edge label. Returns None if that would duplicate an edge."""
        edge = self._graph.get_edge(edge_id)
        if edge is None:
            return None
        if edge.label == label:
            return edge
        if self._has_edge(edge.source, edge.target, label):
            return None

        edge.label = label
        return edge

    # Classifier intents

    def _classifier(self, node_id: str) -> ClassifierNode | None:
        node = self._graph.get_node(node_id)
        return node if isinstance(node, ClassifierNode) else None

    def add_intent(self, node_id: str, intent: str = "New Intent") -> bool:
        node = self._classifier(node_id)
        if node is None or intent in node.data.intents:
            return False
        node.data.intents.append(intent)
        return True

    def rename_intent(self, node_id: str, old: str, new: str) -> bool:
        """Rename an intent and the labels of its outgoing edges.

        Rejected if relabeling any edge would duplicate an existing one.
        """
        node = self._classifier(node_id)
        if node is None or old not in node.data.intents or new in node.data.intents:
            return False
        if any(
            e.source == node_id and e.label == old and self._has_edge(node_id, e.target, new)
            for e in self._graph.edges
        ):
            return False

        intents = node.data.intents
        intents[intents.index(old)] = new
        for edge in self._graph.edges:
            if edge.source == node_id and edge.label == old:
                edge.label = new
        return True

    def remove_intent(self, node_id: str, intent: str) -> bool:
        """Remove an intent and delete its outgoing edges."""
        node = self._classifier(node_id)
        if node is None or intent not in node.data.intents:
            return False

        node.data.intents.remove(intent)
        self._graph.edges = [
            e for e in self._graph.edges if not (e.source == node_id and e.label == intent)
        ]
        return True

    # Whole-graph replacement

    def replace_graph(self, candidate: WorkflowGraph | None) -> WorkflowGraph:
        """Install a new graph, e.g. one produced by synthesis.

        Raises:
            GraphSynthesisError: If ``candidate`` is None.
            InvalidGraphError: If ``candidate`` fails validation.

        The working graph is unchanged when either is raised.
        """
        if candidate is None:
            raise GraphSynthesisError("no graph was produced")

        candidate = candidate.snapshot()
        result = candidate.validate_graph()
        result.raise_for_errors()
        for warning in result.warnings:
            self._logger.warning(warning)

        self._graph = candidate
        return self.snapshot()
