"""Scanner records: discovered files and non-fatal faults."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..exceptions import ErrorCode, Severity


@dataclass(frozen=True)
class ScannedFile:
    """A source file yielded by the scanner.

    ``rel_path`` is POSIX-style and relative to the scan root.
    """

    path: Path
    rel_path: str
    mtime: float
    size: int


@dataclass(frozen=True)
class ScanFault:
    """A per-file problem that did not abort the scan."""

    path: str
    code: ErrorCode
    message: str
    severity: Severity = Severity.WARNING

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.path}: {self.message}"
