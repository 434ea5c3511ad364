"""Source scanner: lazy, sorted directory walk with ignore filtering."""

from __future__ import annotations

import os
from fnmatch import fnmatch
from pathlib import Path
from typing import Callable, Iterator, Optional, Sequence

from ..config import DEFAULT_IGNORE_PATTERNS
from ..exceptions import ErrorCode, InvalidRootError
from ..logging_config import get_logger
from .models import ScanFault, ScannedFile

logger = get_logger(__name__)

FaultHandler = Callable[[ScanFault], None]

_GLOB_CHARS = frozenset("*?[")


def is_ignored(rel_path: str, patterns: Sequence[str], is_dir: bool = False) -> bool:
    """Match a relative POSIX path against ignore patterns.

    Patterns containing glob characters match the base name. Other patterns
    match as a path fragment anchored at a segment boundary, so ``vendor/``
    ignores ``vendor/x.go`` and ``a/vendor/y.go`` but not ``myvendor/z.go``.
    """
    name = rel_path.rsplit("/", 1)[-1]
    candidate = f"/{rel_path}/" if is_dir else f"/{rel_path}"
    for pattern in patterns:
        if any(c in _GLOB_CHARS for c in pattern):
            if fnmatch(name, pattern):
                return True
        elif f"/{pattern.lstrip('/')}" in candidate:
            return True
    return False


class SourceScanner:
    """Walks a root directory and yields matching source files.

    Files are yielded lazily in sorted relative-path order. Per-file stat
    errors and oversized files are reported as ScanFaults through
    ``on_fault`` (and kept in ``faults``), never raised.
    """

    def __init__(
        self,
        root: Path,
        extension: str = ".go",
        ignore_patterns: Optional[Sequence[str]] = None,
        max_file_size: Optional[int] = None,
        on_fault: Optional[FaultHandler] = None,
    ):
        self.root = Path(root)
        self.extension = extension
        self.ignore_patterns = list(
            DEFAULT_IGNORE_PATTERNS if ignore_patterns is None else ignore_patterns
        )
        self.max_file_size = max_file_size
        self.faults: list[ScanFault] = []
        self._on_fault = on_fault

        if not self.root.exists():
            raise InvalidRootError(self.root, "does not exist")
        if not self.root.is_dir():
            raise InvalidRootError(self.root, "not a directory")

    def _report(self, fault: ScanFault) -> None:
        self.faults.append(fault)
        logger.warning(str(fault))
        if self._on_fault is not None:
            self._on_fault(fault)

    def scan(self) -> Iterator[ScannedFile]:
        """Yield ScannedFile records lazily, sorted by relative path."""
        yield from self._walk(self.root, "")

    def _walk(self, directory: Path, rel_dir: str) -> Iterator[ScannedFile]:
        try:
            with os.scandir(directory) as it:
                entries = list(it)
        except OSError as e:
            self._report(ScanFault(rel_dir or ".", ErrorCode.KT200, e.strerror or str(e)))
            return

        # Directories sort as "name/" so walk order equals sorted full paths
        entries.sort(key=lambda e: e.name + "/" if _is_dir(e) else e.name)

        for entry in entries:
            rel_path = f"{rel_dir}/{entry.name}" if rel_dir else entry.name
            if _is_dir(entry):
                if not is_ignored(rel_path, self.ignore_patterns, is_dir=True):
                    yield from self._walk(Path(entry.path), rel_path)
                continue

            if not entry.name.endswith(self.extension):
                continue
            if is_ignored(rel_path, self.ignore_patterns):
                continue

            try:
                stat = entry.stat()
            except OSError as e:
                self._report(ScanFault(rel_path, ErrorCode.KT200, e.strerror or str(e)))
                continue

            if self.max_file_size is not None and stat.st_size > self.max_file_size:
                self._report(
                    ScanFault(
                        rel_path,
                        ErrorCode.KT202,
                        f"skipped: {stat.st_size} bytes exceeds limit of {self.max_file_size}",
                    )
                )
                continue

            yield ScannedFile(
                path=Path(entry.path), rel_path=rel_path, mtime=stat.st_mtime, size=stat.st_size
            )


def _is_dir(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir(follow_symlinks=False)
    except OSError:
        return False
