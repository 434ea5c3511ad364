"""Input and configuration exceptions: roots, settings, lookups."""

from pathlib import Path
from typing import Any, List

from .base import KthuluInsightError
from .taxonomy import ErrorCode


class InvalidInputError(KthuluInsightError):
    """Raised for malformed input: bad roots, bad requests, bad config."""

    code = ErrorCode.KT100


class ConfigurationError(InvalidInputError):
    """Base class for configuration-related errors."""

    code = ErrorCode.KT101


class InvalidConfigError(ConfigurationError):
    """Raised when configuration values are invalid."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid configuration for {key}: {value}",
            details={"key": key, "value": str(value), "reason": reason},
        )
        self.key = key
        self.value = value
        self.reason = reason


class InvalidRootError(InvalidInputError):
    """Raised when the project root does not exist or is not a directory."""

    code = ErrorCode.KT102

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Invalid project root: {path}", details={"path": str(path), "reason": reason})
        self.path = path
        self.reason = reason


class NotFoundError(KthuluInsightError):
    """Raised when a policy, role, module, or cached entry is missing."""

    code = ErrorCode.KT103

    def __init__(self, kind: str, key: str):
        super().__init__(f"{kind} not found: {key}", details={"kind": kind, "key": key})
        self.kind = kind
        self.key = key


class RoleHierarchyError(InvalidInputError):
    """Raised when a role's parents lead back to the role itself."""

    code = ErrorCode.KT400

    def __init__(self, role: str, parents: List[str]):
        super().__init__(
            f"Role '{role}' would inherit from itself",
            details={"role": role, "parents": ", ".join(parents)},
        )
        self.role = role
        self.parents = parents
