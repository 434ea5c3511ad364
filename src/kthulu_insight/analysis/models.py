"""Project model produced by the analyzer.

FileAnalysis is the per-file unit (cached, serialized as JSON bytes);
ProjectAnalysis is the merged view over one scan of a root.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from ..scanning.syntax import Symbol
from ..tags.models import Tag, TagType


class DependencyKind(str, Enum):
    MODULE = "module"
    IMPORT = "import"
    REQUIRES = "requires"


DECLARED_KINDS = frozenset({DependencyKind.MODULE.value, DependencyKind.REQUIRES.value})


@dataclass
class FileAnalysis:
    """Everything extracted from one source file."""

    path: str
    package_name: str = ""
    imports: list[str] = field(default_factory=list)
    tags: list[Tag] = field(default_factory=list)
    symbols: list[Symbol] = field(default_factory=list)
    line_count: int = 0

    @property
    def module_names(self) -> list[str]:
        """Names from ``module`` tags, first occurrence order, no duplicates."""
        names: list[str] = []
        for tag in self.tags:
            if tag.type == TagType.MODULE.value and tag.value and tag.value not in names:
                names.append(tag.value)
        return names

    @property
    def directory(self) -> str:
        return self.path.rsplit("/", 1)[0] if "/" in self.path else ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "package_name": self.package_name,
            "imports": list(self.imports),
            "tags": [t.to_dict() for t in self.tags],
            "symbols": [s.to_dict() for s in self.symbols],
            "line_count": self.line_count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FileAnalysis:
        return cls(
            path=data["path"],
            package_name=data.get("package_name", ""),
            imports=list(data.get("imports", [])),
            tags=[Tag.from_dict(t) for t in data.get("tags", [])],
            symbols=[Symbol.from_dict(s) for s in data.get("symbols", [])],
            line_count=int(data.get("line_count", 0)),
        )

    def to_bytes(self) -> bytes:
        return json.dumps(self.to_dict(), sort_keys=True).encode("utf-8")

    @classmethod
    def from_bytes(cls, raw: bytes) -> FileAnalysis:
        return cls.from_dict(json.loads(raw.decode("utf-8")))


@dataclass
class Module:
    """A named grouping declared by ``@kthulu:module:<name>`` tags."""

    name: str
    package_name: str = ""
    files: list[str] = field(default_factory=list)
    dependencies: list[str] = field(default_factory=list)
    tags: list[Tag] = field(default_factory=list)

    def add_file(self, path: str) -> bool:
        if path in self.files:
            return False
        self.files.append(path)
        return True

    def add_dependency(self, name: str) -> None:
        if name not in self.dependencies:
            self.dependencies.append(name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "package_name": self.package_name,
            "files": list(self.files),
            "dependencies": list(self.dependencies),
            "tags": [t.to_dict() for t in self.tags],
        }


@dataclass(frozen=True)
class Dependency:
    """Directed relation ``source -> target`` between modules."""

    source: str
    target: str
    kind: str = DependencyKind.MODULE.value
    line: Optional[int] = None
    file: Optional[str] = None

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.source, self.target, self.kind)

    def to_dict(self) -> dict[str, Any]:
        return {
            "from": self.source,
            "to": self.target,
            "kind": self.kind,
            "line": self.line,
            "file": self.file,
        }


@dataclass
class ProjectAnalysis:
    """Merged result of analysing a project root."""

    root: str
    modules: dict[str, Module] = field(default_factory=dict)
    dependencies: list[Dependency] = field(default_factory=list)
    tags: list[Tag] = field(default_factory=list)
    files: list[FileAnalysis] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    module_path: Optional[str] = None
    scanned_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def add_dependency(self, dependency: Dependency) -> bool:
        """Append unless an edge with the same (source, target, kind) exists."""
        if any(d.key == dependency.key for d in self.dependencies):
            return False
        self.dependencies.append(dependency)
        return True

    def module_for_file(self, path: str) -> Optional[str]:
        for fa in self.files:
            if fa.path == path:
                names = fa.module_names
                return names[0] if names else None
        return None

    def file(self, path: str) -> Optional[FileAnalysis]:
        for fa in self.files:
            if fa.path == path:
                return fa
        return None

    @property
    def is_empty(self) -> bool:
        return not self.modules and not self.tags

    def to_dict(self, include_timestamp: bool = True) -> dict[str, Any]:
        data: dict[str, Any] = {
            "root": self.root,
            "module_path": self.module_path,
            "modules": [m.to_dict() for m in self.modules.values()],
            "dependencies": [d.to_dict() for d in self.dependencies],
            "tags": [t.to_dict() for t in self.tags],
            "files": [f.to_dict() for f in self.files],
            "warnings": list(self.warnings),
        }
        if include_timestamp:
            data["scanned_at"] = self.scanned_at.isoformat()
        return data

    def to_json(self, include_timestamp: bool = True, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(include_timestamp), sort_keys=True, indent=indent)
