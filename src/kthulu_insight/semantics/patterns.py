"""Architectural pattern detectors.

Each detector returns at most one CodePattern. Detectors dispatch on tag
type only; custom tag types never trigger a pattern.
"""

from __future__ import annotations

from typing import Callable, Optional

from ..analysis.models import ProjectAnalysis
from ..tags.models import TagType
from .metrics import clamp
from .models import CodePattern, PatternKind

# Module count above which modular wiring suggests dependency injection
DI_MODULE_THRESHOLD = 2

LAYER_TAGS = (
    TagType.HANDLER.value,
    TagType.SERVICE.value,
    TagType.REPOSITORY.value,
    TagType.DOMAIN.value,
)

Detector = Callable[[ProjectAnalysis], Optional[CodePattern]]


def _files_with_tag(analysis: ProjectAnalysis, tag_type: str) -> list[str]:
    return sorted({fa.path for fa in analysis.files if any(t.type == tag_type for t in fa.tags)})


def _count(analysis: ProjectAnalysis, tag_type: str) -> int:
    return sum(1 for t in analysis.tags if t.type == tag_type)


def _role_pattern(tag_type: str, name: str, description: str) -> Detector:
    """Repository / service / handler detector for one tag type."""

    def detect(analysis: ProjectAnalysis) -> Optional[CodePattern]:
        count = _count(analysis, tag_type)
        if count == 0:
            return None
        named_symbols = sorted(
            {
                s.name
                for fa in analysis.files
                for s in fa.symbols
                if tag_type in s.name.lower()
            }
        )
        confidence = 0.5 + min(0.1 * count, 0.3)
        if named_symbols:
            confidence += 0.15
        return CodePattern(
            name=name,
            kind=PatternKind.ARCHITECTURAL.value,
            occurrences=count,
            files=_files_with_tag(analysis, tag_type),
            confidence=clamp(confidence),
            metadata={"description": description, "symbols": named_symbols},
        )

    return detect


detect_repository = _role_pattern(
    TagType.REPOSITORY.value, "Repository Pattern", "Data access behind repository abstractions"
)
detect_service = _role_pattern(
    TagType.SERVICE.value, "Service Layer Pattern", "Business logic encapsulated in services"
)
detect_handler = _role_pattern(
    TagType.HANDLER.value, "Handler Pattern", "Request handling separated into handlers"
)


def detect_domain_driven(analysis: ProjectAnalysis) -> Optional[CodePattern]:
    domain_tags = [t for t in analysis.tags if t.type == TagType.DOMAIN.value]
    if not domain_tags:
        return None
    aggregates = sorted({t.value or "" for t in domain_tags if t.attr("aggregate") == "true"})
    return CodePattern(
        name="Domain-Driven Design",
        kind=PatternKind.DOMAIN.value,
        occurrences=len(domain_tags),
        files=_files_with_tag(analysis, TagType.DOMAIN.value),
        confidence=0.9 if aggregates else 0.7,
        metadata={"description": "Domain entities and aggregates", "aggregates": aggregates},
    )


def detect_dependency_injection(analysis: ProjectAnalysis) -> Optional[CodePattern]:
    provides = _count(analysis, TagType.PROVIDES.value)
    if provides == 0 and len(analysis.modules) <= DI_MODULE_THRESHOLD:
        return None
    return CodePattern(
        name="Dependency Injection",
        kind=PatternKind.INFRASTRUCTURAL.value,
        occurrences=provides + len(analysis.modules),
        files=_files_with_tag(analysis, TagType.PROVIDES.value),
        confidence=0.8,
        metadata={
            "description": "Components wired through providers and modules",
            "providers": provides,
            "modules": len(analysis.modules),
        },
    )


def detect_layered(analysis: ProjectAnalysis) -> Optional[CodePattern]:
    present = {t.type for t in analysis.tags}
    if not all(layer in present for layer in LAYER_TAGS):
        return None
    files = sorted({f for layer in LAYER_TAGS for f in _files_with_tag(analysis, layer)})
    return CodePattern(
        name="Hexagonal Architecture",
        kind=PatternKind.ARCHITECTURAL.value,
        occurrences=sum(_count(analysis, layer) for layer in LAYER_TAGS),
        files=files,
        confidence=0.8,
        metadata={"description": "Handler, service, repository and domain layers present"},
    )


def detect_microservices(analysis: ProjectAnalysis) -> Optional[CodePattern]:
    roles = set(LAYER_TAGS[:3])
    modules = sorted(
        name for name, m in analysis.modules.items() if any(t.type in roles for t in m.tags)
    )
    if len(modules) < 2:
        return None
    return CodePattern(
        name="Microservices Pattern",
        kind=PatternKind.ARCHITECTURAL.value,
        occurrences=len(modules),
        files=sorted({f for name in modules for f in analysis.modules[name].files}),
        confidence=0.7,
        metadata={"description": "Independent modules with their own layers", "modules": modules},
    )


DETECTORS: tuple[Detector, ...] = (
    detect_repository,
    detect_service,
    detect_handler,
    detect_domain_driven,
    detect_dependency_injection,
    detect_layered,
    detect_microservices,
)


def detect_patterns(analysis: ProjectAnalysis) -> list[CodePattern]:
    patterns = []
    for detector in DETECTORS:
        pattern = detector(analysis)
        if pattern is not None:
            patterns.append(pattern)
    return patterns
