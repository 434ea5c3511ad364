"""Module and project metrics. All scores are clamped to [0, 1]."""

from __future__ import annotations

from collections import Counter

import numpy as np

from ..analysis.models import ProjectAnalysis
from ..graph.models import DependencyGraph
from .models import ModuleMetrics, ProjectMetrics

# Distinct tag types that count as full diversity
DIVERSITY_CAP = 5


def clamp(value: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return float(np.clip(value, lo, hi))


def dependency_discount(dependency_count: int) -> float:
    if dependency_count <= 5:
        return 1.0
    if dependency_count <= 10:
        return 0.5
    return 0.2


def quality_score(coverage: float, distinct_types: int, dependency_count: int) -> float:
    diversity = min(distinct_types / DIVERSITY_CAP, 1.0)
    return clamp(0.4 * coverage + 0.3 * diversity + 0.3 * dependency_discount(dependency_count))


def complexity_score(module_count: int, dependency_count: int, cycle_count: int, depth: int) -> float:
    return clamp(
        0.3 * clamp(module_count * 0.1)
        + 0.3 * clamp(dependency_count * 0.05)
        + 0.2 * clamp(cycle_count * 0.2)
        + 0.2 * clamp(depth * 0.1)
    )


def module_footprint(analysis: ProjectAnalysis, module_name: str) -> list[str]:
    """The module's files plus every scanned file sharing one of their directories."""
    module = analysis.modules[module_name]
    directories = {f.rsplit("/", 1)[0] if "/" in f else "" for f in module.files}
    footprint = list(module.files)
    for fa in analysis.files:
        if fa.directory in directories and fa.path not in footprint:
            footprint.append(fa.path)
    return footprint


def compute_module_metrics(
    analysis: ProjectAnalysis, graph: DependencyGraph, name: str
) -> ModuleMetrics:
    module = analysis.modules[name]
    by_path = {fa.path: fa for fa in analysis.files}

    footprint = module_footprint(analysis, name)
    tagged = sum(1 for path in footprint if path in by_path and by_path[path].tags)
    coverage = clamp(tagged / len(footprint)) if footprint else 0.0

    distribution = Counter(t.type for t in module.tags)
    node = graph.nodes.get(name)
    return ModuleMetrics(
        name=name,
        file_count=len(module.files),
        line_count=sum(by_path[f].line_count for f in module.files if f in by_path),
        tag_count=len(module.tags),
        dependency_count=len(module.dependencies),
        coverage=coverage,
        quality=quality_score(coverage, len(distribution), len(module.dependencies)),
        in_degree=node.in_degree if node else 0,
        out_degree=node.out_degree if node else 0,
        level=graph.levels.get(name, 0),
        tag_distribution=dict(sorted(distribution.items())),
    )


def compute_metrics(analysis: ProjectAnalysis, graph: DependencyGraph) -> ProjectMetrics:
    modules = {name: compute_module_metrics(analysis, graph, name) for name in analysis.modules}
    total_files = len(analysis.files)
    tagged_files = sum(1 for fa in analysis.files if fa.tags)
    qualities = [m.quality for m in modules.values()]

    return ProjectMetrics(
        total_files=total_files,
        tagged_files=tagged_files,
        total_lines=sum(fa.line_count for fa in analysis.files),
        module_count=len(modules),
        dependency_count=len(analysis.dependencies),
        tag_count=len(analysis.tags),
        cycle_count=len(graph.cycles),
        max_depth=graph.max_depth,
        coverage=clamp(tagged_files / total_files) if total_files else 0.0,
        quality=clamp(float(np.mean(qualities))) if qualities else 0.0,
        complexity=complexity_score(
            len(modules), len(analysis.dependencies), len(graph.cycles), graph.max_depth
        ),
        tag_distribution=dict(sorted(Counter(t.type for t in analysis.tags).items())),
        modules=modules,
    )
