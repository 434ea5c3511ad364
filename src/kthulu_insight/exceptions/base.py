"""Base exception for Kthulu Insight."""

from typing import Any, Dict, Optional

from .taxonomy import ErrorCode


class KthuluInsightError(Exception):
    """Base exception for all Kthulu Insight errors."""

    code: ErrorCode = ErrorCode.KT900

    def __init__(self, message: str, details: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Structured logging format."""
        return {
            "error_code": self.code.value,
            "message": self.message,
            "details": dict(self.details),
        }


class InternalError(KthuluInsightError):
    """Raised on an unexpected invariant violation."""

    code = ErrorCode.KT900
