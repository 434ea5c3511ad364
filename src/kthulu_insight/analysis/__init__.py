"""Project analysis: merge per-file results into modules and dependencies."""

from .engine import ProjectAnalyzer, module_from_import, read_module_path
from .models import (
    DECLARED_KINDS,
    Dependency,
    DependencyKind,
    FileAnalysis,
    Module,
    ProjectAnalysis,
)

__all__ = [
    "DECLARED_KINDS",
    "Dependency",
    "DependencyKind",
    "FileAnalysis",
    "Module",
    "ProjectAnalysis",
    "ProjectAnalyzer",
    "module_from_import",
    "read_module_path",
]
