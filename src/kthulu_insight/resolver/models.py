"""Resolution plan records."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass
class Conflict:
    type: str
    modules: list[str]
    description: str
    suggestions: list[str] = field(default_factory=list)


@dataclass
class ResolverRecommendation:
    """Suggested plan change. ``type`` is add/configure; ``impact`` low/medium/high."""

    type: str
    module: str
    reason: str
    impact: str
    auto_apply: bool = False


@dataclass
class ResolutionPlan:
    required_modules: set[str] = field(default_factory=set)
    install_order: list[str] = field(default_factory=list)
    optional_modules: list[str] = field(default_factory=list)
    conflicts: list[Conflict] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    recommendations: list[ResolverRecommendation] = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "required_modules": sorted(self.required_modules),
            "install_order": list(self.install_order),
            "optional_modules": list(self.optional_modules),
            "conflicts": [asdict(c) for c in self.conflicts],
            "warnings": list(self.warnings),
            "recommendations": [asdict(r) for r in self.recommendations],
        }


@dataclass
class ModuleInfo:
    name: str
    package: str
    dependencies: list[str]
    description: str
    category: str
    complexity: str
    line_count: int
    tags: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
