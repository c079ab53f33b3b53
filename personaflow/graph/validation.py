"""Structural validation of workflow graphs."""

from __future__ import annotations

from collections import Counter, deque
from dataclasses import dataclass, field
from typing import Sequence

from personaflow.errors.exceptions import (
    DanglingEdgeError,
    DuplicateEdgeIdError,
    DuplicateNodeIdError,
    InvalidGraphError,
    MissingStartNodeError,
)
from personaflow.graph.model import BaseNode, Edge, NodeKind, outgoing_edges

__all__ = ["ValidationResult", "validate_graph", "outgoing_edges"]


@dataclass
class ValidationResult:
    """Outcome of ``validate_graph``.

    ``errors`` make the graph unrunnable. ``warnings`` describe shapes the
    editor allows but that are probably mistakes.
    """

    errors: list[InvalidGraphError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        """Raise the first error, if any."""
        if self.errors:
            raise self.errors[0]


def _reachable_from(start_id: str, edges: Sequence[Edge]) -> set[str]:
    seen = {start_id}
    queue = deque([start_id])
    while queue:
        current = queue.popleft()
        for edge in edges:
            if edge.source == current and edge.target not in seen:
                seen.add(edge.target)
                queue.append(edge.target)
    return seen


def validate_graph(nodes: Sequence[BaseNode], edges: Sequence[Edge]) -> ValidationResult:
    """Check a ``{nodes, edges}`` pair before it is run or published.

    Errors:
        - zero or several ``start`` nodes
        - duplicate node or edge ids
        - edges whose source or target does not exist

    Warnings:
        - nodes unreachable from ``start``
        - incoming edges on ``start``
        - outgoing edges on ``end``
    """
    result = ValidationResult()

    starts = [node for node in nodes if node.kind == NodeKind.START]
    if len(starts) != 1:
        result.errors.append(MissingStartNodeError(len(starts)))

    for node_id, count in Counter(node.id for node in nodes).items():
        if count > 1:
            result.errors.append(DuplicateNodeIdError(node_id))

    for edge_id, count in Counter(edge.id for edge in edges).items():
        if count > 1:
            result.errors.append(DuplicateEdgeIdError(edge_id))

    node_ids = {node.id for node in nodes}
    for edge in edges:
        for endpoint in (edge.source, edge.target):
            if endpoint not in node_ids:
                result.errors.append(DanglingEdgeError(edge.id, endpoint))
                break

    kinds = {node.id: node.kind for node in nodes}
    for edge in edges:
        if kinds.get(edge.target) == NodeKind.START:
            result.warnings.append(f"Start node '{edge.target}' has incoming edge '{edge.id}'.")
        if kinds.get(edge.source) == NodeKind.END:
            result.warnings.append(f"End node '{edge.source}' has outgoing edge '{edge.id}'.")

    if len(starts) == 1:
        reachable = _reachable_from(starts[0].id, edges)
        for node in nodes:
            if node.id not in reachable:
                result.warnings.append(f"Node '{node.id}' is unreachable from start.")

    return result
