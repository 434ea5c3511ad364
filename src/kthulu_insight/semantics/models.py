"""Semantic analysis results: patterns, metrics, recommendations."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Optional


class PatternKind(str, Enum):
    ARCHITECTURAL = "architectural"
    DOMAIN = "domain"
    INFRASTRUCTURAL = "infrastructural"


class RecommendationSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


SEVERITY_RANK = {
    RecommendationSeverity.ERROR.value: 0,
    RecommendationSeverity.WARNING.value: 1,
    RecommendationSeverity.INFO.value: 2,
}


@dataclass
class CodePattern:
    name: str
    kind: str
    occurrences: int
    files: list[str] = field(default_factory=list)
    confidence: float = 0.0
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class Recommendation:
    kind: str
    severity: str
    message: str
    file: Optional[str] = None
    line: Optional[int] = None
    suggestions: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def sort_key(self) -> tuple:
        return (SEVERITY_RANK.get(self.severity, 3), self.kind, self.message)


@dataclass
class ModuleMetrics:
    name: str
    file_count: int = 0
    line_count: int = 0
    tag_count: int = 0
    dependency_count: int = 0
    coverage: float = 0.0
    quality: float = 0.0
    in_degree: int = 0
    out_degree: int = 0
    level: int = 0
    tag_distribution: dict[str, int] = field(default_factory=dict)


@dataclass
class ProjectMetrics:
    total_files: int = 0
    tagged_files: int = 0
    total_lines: int = 0
    module_count: int = 0
    dependency_count: int = 0
    tag_count: int = 0
    cycle_count: int = 0
    max_depth: int = 0
    coverage: float = 0.0
    quality: float = 0.0
    complexity: float = 0.0
    tag_distribution: dict[str, int] = field(default_factory=dict)
    modules: dict[str, ModuleMetrics] = field(default_factory=dict)


@dataclass
class SemanticInsights:
    patterns: list[CodePattern] = field(default_factory=list)
    metrics: ProjectMetrics = field(default_factory=ProjectMetrics)
    recommendations: list[Recommendation] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
