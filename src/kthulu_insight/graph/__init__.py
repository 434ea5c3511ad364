"""Module dependency graph: construction, algorithms, serialization."""

from .algorithms import (
    analyze_graph,
    canonicalize_cycle,
    check_layers,
    compute_levels,
    cyclic_components,
    find_cycles,
)
from .builder import build_graph
from .models import NODE_EXTERNAL, NODE_MODULE, DependencyGraph, Edge, LayerViolation, Node
from .serialization import from_json, graph_from_dict, graph_to_dict, to_dot, to_json

__all__ = [
    "NODE_EXTERNAL",
    "NODE_MODULE",
    "DependencyGraph",
    "Edge",
    "LayerViolation",
    "Node",
    "analyze_graph",
    "build_graph",
    "canonicalize_cycle",
    "check_layers",
    "compute_levels",
    "cyclic_components",
    "find_cycles",
    "from_json",
    "graph_from_dict",
    "graph_to_dict",
    "to_dot",
    "to_json",
]
