"""Build the module dependency graph from a ProjectAnalysis."""

from __future__ import annotations

from ..analysis.models import ProjectAnalysis
from ..logging_config import get_logger
from ..tags.models import TagType
from .algorithms import analyze_graph
from .models import NODE_EXTERNAL, NODE_MODULE, DependencyGraph, Node

logger = get_logger(__name__)


def build_graph(analysis: ProjectAnalysis, detect_cycles: bool = True) -> DependencyGraph:
    """One node per module, one edge per dependency (kind preserved).

    Module node metadata merges the attributes of the module's own
    ``module`` tags with its package name and file count.
    """
    graph = DependencyGraph()

    for module in analysis.modules.values():
        metadata: dict = {}
        for tag in module.tags:
            if tag.type == TagType.MODULE.value and tag.value == module.name:
                metadata.update(tag.attributes)
        metadata["package"] = module.package_name
        metadata["files"] = len(module.files)
        graph.add_node(
            Node(
                id=module.name,
                name=module.name,
                kind=NODE_MODULE,
                tags=list(module.tags),
                metadata=metadata,
            )
        )

    for dep in analysis.dependencies:
        for endpoint in (dep.source, dep.target):
            if endpoint not in graph.nodes:
                graph.add_node(Node(id=endpoint, name=endpoint, kind=NODE_EXTERNAL))
        edge_meta = {k: v for k, v in (("file", dep.file), ("line", dep.line)) if v is not None}
        graph.add_edge(dep.source, dep.target, dep.kind, metadata=edge_meta)

    analyze_graph(graph, detect_cycles=detect_cycles)
    logger.debug(
        f"Graph: {len(graph.nodes)} nodes, {len(graph.edges)} edges, "
        f"{len(graph.cycles)} cycles, max depth {graph.max_depth}"
    )
    return graph
