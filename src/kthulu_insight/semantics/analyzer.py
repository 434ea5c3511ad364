"""SemanticAnalyzer: patterns + metrics + recommendations."""

from __future__ import annotations

from typing import Optional

from ..analysis.models import ProjectAnalysis
from ..graph.builder import build_graph
from ..graph.models import DependencyGraph
from ..logging_config import get_logger
from .metrics import compute_metrics
from .models import SemanticInsights
from .patterns import detect_patterns
from .recommendations import generate_recommendations

logger = get_logger(__name__)


class SemanticAnalyzer:
    """Derives SemanticInsights from an analysis and its graph.

    Usage:
        insights = SemanticAnalyzer().analyze(analysis, graph)
    """

    def analyze(
        self, analysis: ProjectAnalysis, graph: Optional[DependencyGraph] = None
    ) -> SemanticInsights:
        if graph is None:
            graph = build_graph(analysis)

        patterns = detect_patterns(analysis)
        metrics = compute_metrics(analysis, graph)
        recommendations = generate_recommendations(analysis, graph, metrics)

        logger.debug(
            f"Semantics: {len(patterns)} patterns, {len(recommendations)} recommendations, "
            f"quality={metrics.quality:.2f} complexity={metrics.complexity:.2f}"
        )
        return SemanticInsights(patterns=patterns, metrics=metrics, recommendations=recommendations)
