"""DOT and stable JSON forms of a DependencyGraph.

JSON output is deterministic: nodes sorted by id, edges by (from, to, kind),
cycles canonicalized and sorted. ``from_json(to_json(g))`` reproduces the
graph.
"""

from __future__ import annotations

import json
from typing import Any

from ..tags.models import Tag
from .algorithms import canonicalize_cycle
from .models import NODE_EXTERNAL, DependencyGraph, Node


def _quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def to_dot(graph: DependencyGraph, name: str = "kthulu") -> str:
    lines = [f"digraph {_quote(name)} {{", "  rankdir=LR;", "  node [shape=box];"]
    for node_id in sorted(graph.nodes):
        node = graph.nodes[node_id]
        attrs = [f"label={_quote(node.name)}"]
        if node.kind == NODE_EXTERNAL:
            attrs.append("style=dashed")
        lines.append(f"  {_quote(node_id)} [{', '.join(attrs)}];")
    for edge in sorted(graph.edges, key=lambda e: e.key):
        lines.append(f"  {_quote(edge.source)} -> {_quote(edge.target)} [label={_quote(edge.kind)}];")
    lines.append("}")
    return "\n".join(lines) + "\n"


def graph_to_dict(graph: DependencyGraph) -> dict[str, Any]:
    nodes = []
    for node_id in sorted(graph.nodes):
        node = graph.nodes[node_id]
        nodes.append(
            {
                "id": node.id,
                "name": node.name,
                "kind": node.kind,
                "tags": [t.to_dict() for t in node.tags],
                "metadata": dict(node.metadata),
                "in_degree": node.in_degree,
                "out_degree": node.out_degree,
            }
        )
    edges = [
        {
            "from": e.source,
            "to": e.target,
            "kind": e.kind,
            "weight": e.weight,
            "metadata": dict(e.metadata),
        }
        for e in sorted(graph.edges, key=lambda e: e.key)
    ]
    return {
        "nodes": nodes,
        "edges": edges,
        "cycles": sorted(canonicalize_cycle(c) for c in graph.cycles),
        "levels": {k: graph.levels[k] for k in sorted(graph.levels)},
        "components": sorted(sorted(c) for c in graph.components),
    }


def to_json(graph: DependencyGraph, indent: int | None = 2) -> str:
    return json.dumps(graph_to_dict(graph), sort_keys=True, indent=indent)


def graph_from_dict(data: dict[str, Any]) -> DependencyGraph:
    graph = DependencyGraph()
    for item in data.get("nodes", []):
        graph.add_node(
            Node(
                id=item["id"],
                name=item.get("name", item["id"]),
                kind=item.get("kind", "module"),
                tags=[Tag.from_dict(t) for t in item.get("tags", [])],
                metadata=dict(item.get("metadata") or {}),
            )
        )
    for item in data.get("edges", []):
        graph.add_edge(
            item["from"],
            item["to"],
            item["kind"],
            weight=int(item.get("weight", 1)),
            metadata=item.get("metadata"),
        )

    seen: set[tuple[str, ...]] = set()
    for cycle in data.get("cycles", []):
        canonical = canonicalize_cycle(cycle)
        if tuple(canonical) not in seen:
            seen.add(tuple(canonical))
            graph.cycles.append(canonical)
    graph.levels = {k: int(v) for k, v in (data.get("levels") or {}).items()}
    graph.components = [list(c) for c in data.get("components", [])]
    return graph


def from_json(text: str) -> DependencyGraph:
    return graph_from_dict(json.loads(text))
