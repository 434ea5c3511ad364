"""Recommendation rules over metrics, patterns and the graph.

Each rule is a plain function returning a list of Recommendations. Rules
read from a RuleContext so thresholds live in one place.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from ..analysis.models import ProjectAnalysis
from ..graph.algorithms import check_layers
from ..graph.models import NODE_MODULE, DependencyGraph
from ..tags.models import TagType
from .models import ProjectMetrics, Recommendation, RecommendationSeverity

INFO = RecommendationSeverity.INFO.value
WARNING = RecommendationSeverity.WARNING.value

# Thresholds
COVERAGE_THRESHOLD = 0.5
COUPLING_THRESHOLD = 8
QUALITY_THRESHOLD = 0.6
TAG_USAGE_THRESHOLD = 5
DEPTH_THRESHOLD = 5
CONNECTIVITY_THRESHOLD = 10
ATTRIBUTE_USAGE_THRESHOLD = 2

# Outermost first
LAYER_ORDER = ("handler", "service", "repository", "domain")

ARCHITECTURE_LAYERS = (
    (TagType.HANDLER.value, "handlers"),
    (TagType.SERVICE.value, "services"),
    (TagType.REPOSITORY.value, "repositories"),
    (TagType.DOMAIN.value, "domain models"),
)


@dataclass
class RuleContext:
    analysis: ProjectAnalysis
    graph: DependencyGraph
    metrics: ProjectMetrics


Rule = Callable[[RuleContext], list[Recommendation]]


def module_rules(ctx: RuleContext) -> list[Recommendation]:
    """Coverage, coupling and quality per module."""
    recs = []
    for name, m in ctx.metrics.modules.items():
        if m.coverage < COVERAGE_THRESHOLD:
            recs.append(
                Recommendation(
                    kind="module_coverage",
                    severity=INFO,
                    message=f"Module '{name}' has low tag coverage ({m.coverage:.0%})",
                    suggestions=[
                        "Add @kthulu:service tags to service files",
                        "Add @kthulu:repository tags to repository files",
                        "Add @kthulu:handler tags to handler files",
                    ],
                    metadata={"module": name, "coverage": m.coverage},
                )
            )
        if m.dependency_count > COUPLING_THRESHOLD:
            recs.append(
                Recommendation(
                    kind="module_coupling",
                    severity=WARNING,
                    message=f"Module '{name}' has {m.dependency_count} dependencies",
                    suggestions=[
                        "Extract shared functionality into a common module",
                        "Apply dependency inversion to reduce direct coupling",
                        "Break the module down into smaller modules",
                    ],
                    metadata={"module": name, "dependencies": m.dependency_count},
                )
            )
        if m.quality < QUALITY_THRESHOLD:
            recs.append(
                Recommendation(
                    kind="module_quality",
                    severity=WARNING,
                    message=f"Module '{name}' has a low quality score ({m.quality:.2f})",
                    suggestions=[
                        "Improve tag coverage across the module's files",
                        "Reduce the number of module dependencies",
                        "Add documentation tags describing the module",
                    ],
                    metadata={"module": name, "quality": m.quality},
                )
            )
    return recs


def architecture_rules(ctx: RuleContext) -> list[Recommendation]:
    present = set(ctx.metrics.tag_distribution)
    recs = []
    for tag_type, label in ARCHITECTURE_LAYERS:
        if tag_type in present:
            continue
        recs.append(
            Recommendation(
                kind="architecture_completeness",
                severity=INFO,
                message=f"No {label} found in the project",
                suggestions=[
                    "Implement a layered architecture",
                    f"Add @kthulu:{tag_type} tags to existing {label}",
                    "Follow hexagonal architecture principles",
                ],
                metadata={"missing": tag_type},
            )
        )

    tag_count = ctx.metrics.tag_count
    if 0 < tag_count < TAG_USAGE_THRESHOLD:
        recs.append(
            Recommendation(
                kind="tag_usage",
                severity=INFO,
                message=f"Only {tag_count} tags found in the project",
                suggestions=[
                    "Tag modules, services and repositories to improve analysis",
                    "Document module dependencies with @kthulu:dependency tags",
                ],
                metadata={"tags": tag_count},
            )
        )
    return recs


def _cycle_suggestions(cycle: list[str]) -> list[str]:
    suggestions = [
        "Extract common functionality into a shared module",
        "Use dependency inversion to break the cycle",
        "Introduce interfaces between the modules",
        "Use event-driven communication instead of direct calls",
    ]
    if len(cycle) == 2:
        suggestions.append("Consider merging the two modules if they are tightly coupled")
    elif len(cycle) > 4:
        suggestions.append("This cycle spans many modules and may need major architectural refactoring")
    return suggestions


def graph_rules(ctx: RuleContext) -> list[Recommendation]:
    """Cycles, depth, connectivity and layer ordering."""
    graph = ctx.graph
    recs = []
    for cycle in graph.cycles:
        path = " -> ".join(cycle + cycle[:1])
        recs.append(
            Recommendation(
                kind="circular_dependency",
                severity=WARNING,
                message=f"Circular dependency detected: {path}",
                suggestions=_cycle_suggestions(cycle),
                metadata={"cycle": list(cycle), "length": len(cycle)},
            )
        )

    if graph.max_depth > DEPTH_THRESHOLD:
        recs.append(
            Recommendation(
                kind="dependency_depth",
                severity=WARNING,
                message=f"Dependency chain depth is {graph.max_depth} (threshold {DEPTH_THRESHOLD})",
                suggestions=[
                    "Flatten the dependency hierarchy",
                    "Move shared code closer to the modules that use it",
                ],
                metadata={"depth": graph.max_depth},
            )
        )

    for node_id in sorted(graph.nodes):
        node = graph.nodes[node_id]
        connections = node.in_degree + node.out_degree
        if node.kind == NODE_MODULE and connections > CONNECTIVITY_THRESHOLD:
            recs.append(
                Recommendation(
                    kind="module_connectivity",
                    severity=WARNING,
                    message=f"Module '{node_id}' has {connections} connections",
                    suggestions=[
                        "Split the module along its responsibilities",
                        "Introduce a facade to reduce direct connections",
                    ],
                    metadata={
                        "module": node_id,
                        "in_degree": node.in_degree,
                        "out_degree": node.out_degree,
                    },
                )
            )

    layer_of = {
        node_id: str(node.metadata["layer"])
        for node_id, node in graph.nodes.items()
        if "layer" in node.metadata
    }
    for violation in check_layers(graph, layer_of, LAYER_ORDER):
        recs.append(
            Recommendation(
                kind="layer_violation",
                severity=WARNING,
                message=(
                    f"Module '{violation.source}' ({violation.source_layer}) depends on "
                    f"outer module '{violation.target}' ({violation.target_layer})"
                ),
                suggestions=[
                    "Invert the dependency so inner layers do not know outer ones",
                    "Move the shared contract into the inner layer",
                ],
                metadata={"from": violation.source, "to": violation.target},
            )
        )
    return recs


def attribute_rules(ctx: RuleContext) -> list[Recommendation]:
    security = sum(1 for t in ctx.analysis.tags if "security" in t.attributes)
    observable = sum(1 for t in ctx.analysis.tags if "observable" in t.attributes)
    recs = []
    if security > ATTRIBUTE_USAGE_THRESHOLD:
        recs.append(
            Recommendation(
                kind="security_usage",
                severity=INFO,
                message=f"{security} tags declare security attributes",
                suggestions=[
                    "Implement centralized security middleware",
                    "Add security audit logging",
                ],
                metadata={"count": security},
            )
        )
    if observable > ATTRIBUTE_USAGE_THRESHOLD:
        recs.append(
            Recommendation(
                kind="observability_usage",
                severity=INFO,
                message=f"{observable} tags declare observability attributes",
                suggestions=[
                    "Add distributed tracing",
                    "Export metrics for observable components",
                    "Expose health checks",
                ],
                metadata={"count": observable},
            )
        )
    return recs


RULES: tuple[Rule, ...] = (module_rules, architecture_rules, graph_rules, attribute_rules)


def generate_recommendations(
    analysis: ProjectAnalysis, graph: DependencyGraph, metrics: ProjectMetrics
) -> list[Recommendation]:
    if not analysis.tags:
        return []
    ctx = RuleContext(analysis, graph, metrics)
    recs = [rec for rule in RULES for rec in rule(ctx)]
    return sorted(recs, key=lambda r: r.sort_key)
