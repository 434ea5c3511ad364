"""Syntax models for parsed Go source files.

FileSyntax carries what the tag layer needs from a file:
    - package name and unquoted import paths (source order)
    - comment groups with 1-based lines, linked to the symbol they document
    - exported symbols (name starts with an uppercase letter)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class SymbolKind(str, Enum):
    FUNCTION = "function"
    TYPE = "type"
    VARIABLE = "variable"
    CONSTANT = "constant"


@dataclass(frozen=True)
class Symbol:
    """An exported, named declaration."""

    name: str
    kind: str
    line: int

    def to_dict(self) -> dict:
        return {"name": self.name, "kind": self.kind, "line": self.line}

    @classmethod
    def from_dict(cls, data: dict) -> Symbol:
        return cls(name=data["name"], kind=data["kind"], line=int(data["line"]))


@dataclass
class Comment:
    """A single ``//`` or ``/* */`` comment and the line it starts on."""

    text: str
    line: int
    end_line: int


@dataclass
class CommentGroup:
    """Comments on consecutive lines with no code between them.

    ``symbol`` names the exported declaration the group documents, when the
    group ends on the line directly above a top-level declaration.
    """

    comments: list[Comment] = field(default_factory=list)
    symbol: str | None = None

    @property
    def line(self) -> int:
        return self.comments[0].line if self.comments else 0

    @property
    def end_line(self) -> int:
        return self.comments[-1].end_line if self.comments else 0

    @property
    def text(self) -> str:
        return "\n".join(c.text for c in self.comments)


@dataclass
class FileSyntax:
    """Parsed structure of a single source file."""

    path: str
    package_name: str = ""
    imports: list[str] = field(default_factory=list)
    comment_groups: list[CommentGroup] = field(default_factory=list)
    symbols: list[Symbol] = field(default_factory=list)
    line_count: int = 0
