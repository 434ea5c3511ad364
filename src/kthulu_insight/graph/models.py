"""Data models for the module dependency graph.

Edges are directed: an edge A -> B means module A depends on module B.
Nodes are project modules; endpoints that name no project module become
``external`` nodes so every edge references an existing node.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..exceptions import GraphError
from ..tags.models import Tag

NODE_MODULE = "module"
NODE_EXTERNAL = "external"


@dataclass
class Node:
    id: str
    name: str
    kind: str = NODE_MODULE
    tags: list[Tag] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    in_degree: int = 0
    out_degree: int = 0


@dataclass
class Edge:
    source: str
    target: str
    kind: str
    weight: int = 1
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.source, self.target, self.kind)


# ── Derived structures ─────────────────────────────────────────────


@dataclass
class LayerViolation:
    """An edge pointing from an inner layer back to an outer one."""

    source: str
    source_layer: str
    target: str
    target_layer: str

    def __str__(self) -> str:
        return (
            f"layer violation: {self.source} ({self.source_layer}) depends on "
            f"{self.target} ({self.target_layer})"
        )


@dataclass
class DependencyGraph:
    """Labelled digraph with levels, canonical cycles and SCCs."""

    nodes: dict[str, Node] = field(default_factory=dict)
    edges: list[Edge] = field(default_factory=list)
    cycles: list[list[str]] = field(default_factory=list)
    levels: dict[str, int] = field(default_factory=dict)
    # Strongly connected components with more than one node
    components: list[list[str]] = field(default_factory=list)

    def add_node(self, node: Node) -> Node:
        existing = self.nodes.get(node.id)
        if existing is not None:
            return existing
        self.nodes[node.id] = node
        return node

    def add_edge(
        self,
        source: str,
        target: str,
        kind: str,
        weight: int = 1,
        metadata: dict[str, Any] | None = None,
    ) -> Edge:
        """Add an edge, or bump the weight of an identical (source, target, kind) edge."""
        if source not in self.nodes:
            raise GraphError(f"Unknown edge source: {source}", details={"target": target})
        if target not in self.nodes:
            raise GraphError(f"Unknown edge target: {target}", details={"source": source})

        for edge in self.edges:
            if edge.key == (source, target, kind):
                edge.weight += weight
                return edge

        edge = Edge(source, target, kind, weight, dict(metadata or {}))
        self.edges.append(edge)
        self.nodes[source].out_degree += 1
        self.nodes[target].in_degree += 1
        return edge

    @property
    def adjacency(self) -> dict[str, list[str]]:
        """node -> sorted distinct successors (every node present)."""
        adj: dict[str, set[str]] = {node_id: set() for node_id in self.nodes}
        for edge in self.edges:
            adj[edge.source].add(edge.target)
        return {node_id: sorted(targets) for node_id, targets in adj.items()}

    @property
    def max_depth(self) -> int:
        return max(self.levels.values(), default=0)

    def successors(self, node_id: str) -> list[str]:
        return sorted({e.target for e in self.edges if e.source == node_id})

    def predecessors(self, node_id: str) -> list[str]:
        return sorted({e.source for e in self.edges if e.target == node_id})
