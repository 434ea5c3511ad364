"""Analysis-related exceptions: file access, parsing, cycles, cancellation."""

from pathlib import Path
from typing import List, Optional

from .base import KthuluInsightError
from .taxonomy import ErrorCode


class AnalysisError(KthuluInsightError):
    """Base class for analysis-related errors."""

    pass


class FileAccessError(AnalysisError):
    """Raised when a file cannot be accessed or read."""

    code = ErrorCode.KT200

    def __init__(self, filepath: Path, reason: str):
        super().__init__(
            f"Cannot access file: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason


class ParseError(AnalysisError):
    """Raised when a source file has syntax errors."""

    code = ErrorCode.KT201

    def __init__(self, filepath: str, line: int, reason: str = "syntax error"):
        super().__init__(
            f"Failed to parse {filepath}:{line}",
            details={"filepath": str(filepath), "line": str(line), "reason": reason},
        )
        self.filepath = filepath
        self.line = line
        self.reason = reason


class GraphError(AnalysisError):
    """Raised when a graph operation references unknown nodes."""

    code = ErrorCode.KT300


class CircularDependencyError(AnalysisError):
    """Raised when install order cannot be computed because of a cycle."""

    code = ErrorCode.KT301

    def __init__(self, modules: List[str]):
        super().__init__(
            "Circular dependency detected",
            details={"modules": ", ".join(modules)},
        )
        self.modules = modules


class AnalysisCancelledError(AnalysisError):
    """Raised when a cancellation signal is observed."""

    code = ErrorCode.KT901

    def __init__(self, stage: Optional[str] = None):
        details = {"stage": stage} if stage else None
        super().__init__("Operation cancelled", details=details)
        self.stage = stage


class DeadlineExceededError(AnalysisCancelledError):
    """Raised when an operation runs past its deadline."""

    code = ErrorCode.KT401

    def __init__(self, stage: Optional[str] = None):
        super().__init__(stage)
        self.message = "Deadline exceeded"
