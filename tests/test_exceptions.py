"""Tests for the exception hierarchy."""

from pathlib import Path

import pytest

from kthulu_insight.exceptions import (
    AnalysisCancelledError,
    CircularDependencyError,
    DeadlineExceededError,
    ErrorCode,
    FileAccessError,
    InvalidConfigError,
    InvalidInputError,
    InvalidRootError,
    KthuluInsightError,
    NotFoundError,
    ParseError,
    RoleHierarchyError,
)


@pytest.mark.parametrize(
    "error, code",
    [
        (InvalidInputError("bad"), ErrorCode.KT100),
        (InvalidConfigError("workers", 0, "must be at least 1"), ErrorCode.KT101),
        (InvalidRootError(Path("/nope"), "does not exist"), ErrorCode.KT102),
        (NotFoundError("policy", "p1"), ErrorCode.KT103),
        (FileAccessError(Path("a.go"), "denied"), ErrorCode.KT200),
        (ParseError("a.go", 3), ErrorCode.KT201),
        (CircularDependencyError(["a", "b"]), ErrorCode.KT301),
        (RoleHierarchyError("a", ["b"]), ErrorCode.KT400),
        (DeadlineExceededError("scan"), ErrorCode.KT401),
        (AnalysisCancelledError(), ErrorCode.KT901),
    ],
)
def test_codes(error, code):
    assert isinstance(error, KthuluInsightError)
    assert error.code is code
    assert error.to_dict()["error_code"] == code.value


def test_message_includes_details():
    error = ParseError("pkg/a.go", 12)
    assert str(error) == "Failed to parse pkg/a.go:12 (filepath=pkg/a.go, line=12, reason=syntax error)"
    assert error.line == 12


def test_hierarchy():
    assert issubclass(InvalidConfigError, InvalidInputError)
    assert issubclass(RoleHierarchyError, InvalidInputError)
    assert issubclass(DeadlineExceededError, AnalysisCancelledError)


def test_deadline_message():
    assert str(DeadlineExceededError("graph")) == "Deadline exceeded (stage=graph)"
    assert str(AnalysisCancelledError()) == "Operation cancelled"


def test_circular_dependency_carries_modules():
    error = CircularDependencyError(["a", "b"])
    assert error.modules == ["a", "b"]
    assert error.details == {"modules": "a, b"}
