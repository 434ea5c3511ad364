"""Exception hierarchy for Kthulu Insight."""

from .analysis import (
    AnalysisCancelledError,
    AnalysisError,
    CircularDependencyError,
    DeadlineExceededError,
    FileAccessError,
    GraphError,
    ParseError,
)
from .base import InternalError, KthuluInsightError
from .config import (
    ConfigurationError,
    InvalidConfigError,
    InvalidInputError,
    InvalidRootError,
    NotFoundError,
    RoleHierarchyError,
)
from .taxonomy import ErrorCode, Severity

__all__ = [
    "KthuluInsightError",
    "InternalError",
    "ErrorCode",
    "Severity",
    "AnalysisError",
    "AnalysisCancelledError",
    "CircularDependencyError",
    "DeadlineExceededError",
    "FileAccessError",
    "GraphError",
    "ParseError",
    "ConfigurationError",
    "InvalidConfigError",
    "InvalidInputError",
    "InvalidRootError",
    "NotFoundError",
    "RoleHierarchyError",
]
