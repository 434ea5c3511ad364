"""Semantic analysis: architectural patterns, metrics and recommendations."""

from .analyzer import SemanticAnalyzer
from .metrics import complexity_score, compute_metrics, quality_score
from .models import (
    CodePattern,
    ModuleMetrics,
    PatternKind,
    ProjectMetrics,
    Recommendation,
    RecommendationSeverity,
    SemanticInsights,
)
from .patterns import detect_patterns
from .recommendations import generate_recommendations

__all__ = [
    "CodePattern",
    "ModuleMetrics",
    "PatternKind",
    "ProjectMetrics",
    "Recommendation",
    "RecommendationSeverity",
    "SemanticAnalyzer",
    "SemanticInsights",
    "complexity_score",
    "compute_metrics",
    "detect_patterns",
    "generate_recommendations",
    "quality_score",
]
