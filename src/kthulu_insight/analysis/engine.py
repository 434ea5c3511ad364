"""ProjectAnalyzer: scan -> parse -> tag -> merge.

Files are parsed on a thread pool; results are merged on the calling thread
in scan order, so module insertion order and tag order follow the sorted
walk regardless of worker timing.

Usage:
    analyzer = ProjectAnalyzer(load_config())
    analysis = analyzer.analyze("/path/to/project")
"""

from __future__ import annotations

import os
import re
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from threading import Lock
from typing import Optional, Union

from ..cache import FileCache, create_cache, fingerprint
from ..cancellation import CancellationToken
from ..config import AnalyzerConfig
from ..exceptions import ErrorCode, FileAccessError, KthuluInsightError
from ..logging_config import get_logger
from ..scanning.models import ScannedFile
from ..scanning.scanner import SourceScanner
from ..scanning.syntax_extractor import GoSyntaxExtractor
from ..tags.models import TagType
from ..tags.parser import TagParser
from .models import Dependency, DependencyKind, FileAnalysis, Module, ProjectAnalysis

logger = get_logger(__name__)

# Default worker count: use CPU count, capped at 8 to avoid overwhelming I/O
_DEFAULT_WORKERS = min(os.cpu_count() or 4, 8)

_GO_MODULE_RE = re.compile(r"^module\s+(\S+)", re.MULTILINE)

_DEPENDENCY_TAGS = {
    TagType.DEPENDENCY.value: DependencyKind.MODULE.value,
    TagType.REQUIRES.value: DependencyKind.REQUIRES.value,
}

_FileResult = Union[FileAnalysis, KthuluInsightError]


def read_module_path(root: Path) -> Optional[str]:
    """Module path declared in ``<root>/go.mod``, if any."""
    go_mod = root / "go.mod"
    try:
        text = go_mod.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None
    match = _GO_MODULE_RE.search(text)
    return match.group(1).strip("\"`") if match else None


def module_from_import(import_path: str, module_path: Optional[str]) -> Optional[str]:
    """Target module of a project-local ``.../modules/<name>`` import."""
    if module_path:
        if not import_path.startswith(module_path.rstrip("/") + "/"):
            return None
    elif "/internal/" not in import_path and "/cmd/" not in import_path:
        return None

    segments = import_path.split("/")
    if len(segments) >= 2 and segments[-2] == "modules" and segments[-1]:
        return segments[-1]
    return None


class ProjectAnalyzer:
    """Builds a ProjectAnalysis for a project root.

    Attributes:
        cache_hits: Files served from the cache in the last run
        parsed: Files parsed in the last run
    """

    def __init__(
        self,
        config: Optional[AnalyzerConfig] = None,
        cache: Optional[FileCache] = None,
        extractor: Optional[GoSyntaxExtractor] = None,
        tag_parser: Optional[TagParser] = None,
    ) -> None:
        self.config = config or AnalyzerConfig()
        self.cache = cache if cache is not None else create_cache(self.config)
        self._extractor = extractor or GoSyntaxExtractor()
        self._tag_parser = tag_parser or TagParser()
        self._max_workers = self.config.workers or _DEFAULT_WORKERS
        self._lock = Lock()  # Thread-safe counter updates
        self.cache_hits = 0
        self.parsed = 0

    def analyze(
        self, root: Union[str, Path], cancel: Optional[CancellationToken] = None
    ) -> ProjectAnalysis:
        """Analyze every source file under ``root``.

        Raises:
            InvalidRootError: If root is missing or not a directory
            AnalysisCancelledError: If ``cancel`` fires between files
        """
        cancel = cancel or CancellationToken()
        root_path = Path(root)
        analysis = ProjectAnalysis(root=str(root_path))

        scanner = SourceScanner(
            root_path,
            extension=self.config.extension,
            ignore_patterns=self.config.ignore_patterns,
            max_file_size=self.config.max_file_size,
            on_fault=lambda fault: analysis.warnings.append(str(fault)),
        )
        analysis.module_path = self.config.module_path or read_module_path(root_path)
        self.cache_hits = 0
        self.parsed = 0

        window = self._max_workers * 4
        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            pending: deque[Future] = deque()
            try:
                for scanned in scanner.scan():
                    cancel.raise_if_cancelled("scan")
                    pending.append(executor.submit(self._analyze_file, scanned))
                    while len(pending) >= window:
                        self._merge(analysis, pending.popleft().result())
                        cancel.raise_if_cancelled("merge")
                while pending:
                    self._merge(analysis, pending.popleft().result())
                    cancel.raise_if_cancelled("merge")
            except BaseException:
                for future in pending:
                    future.cancel()
                raise

        logger.info(
            f"Analyzed {len(analysis.files)} files under {root_path}: "
            f"{len(analysis.modules)} modules, {len(analysis.dependencies)} dependencies, "
            f"{len(analysis.tags)} tags ({self.cache_hits} cached)"
        )
        return analysis

    def _analyze_file(self, scanned: ScannedFile) -> _FileResult:
        """Worker: cached FileAnalysis or a fresh parse. Errors are returned."""
        key = fingerprint(str(scanned.path), scanned.mtime)
        raw, hit = self.cache.get(key)
        if hit and raw is not None:
            try:
                cached = FileAnalysis.from_bytes(raw)
            except (ValueError, KeyError) as e:
                logger.debug(f"Discarding unreadable cache entry for {scanned.rel_path}: {e}")
                self.cache.delete(key)
            else:
                with self._lock:
                    self.cache_hits += 1
                return cached

        try:
            source = scanned.path.read_bytes()
        except OSError as e:
            return FileAccessError(Path(scanned.rel_path), e.strerror or str(e))

        try:
            syntax = self._extractor.extract(source, scanned.rel_path)
        except KthuluInsightError as e:
            return e

        file_analysis = FileAnalysis(
            path=scanned.rel_path,
            package_name=syntax.package_name,
            imports=syntax.imports,
            tags=self._tag_parser.parse_groups(syntax.comment_groups),
            symbols=syntax.symbols,
            line_count=syntax.line_count,
        )
        with self._lock:
            self.parsed += 1
        self.cache.set(key, file_analysis.to_bytes())
        return file_analysis

    def _merge(self, analysis: ProjectAnalysis, result: _FileResult) -> None:
        if isinstance(result, KthuluInsightError):
            logger.warning(f"Skipping file: {result}")
            analysis.warnings.append(f"[{result.code.value}] {result}")
            return

        fa = result
        analysis.files.append(fa)
        analysis.tags.extend(fa.tags)

        module_names = fa.module_names
        for name in module_names:
            module = analysis.modules.get(name)
            if module is None:
                module = Module(name=name, package_name=fa.package_name)
                analysis.modules[name] = module
            elif fa.package_name != module.package_name:
                analysis.warnings.append(
                    f"[{ErrorCode.KT203.value}] {fa.path}: package '{fa.package_name}' "
                    f"conflicts with package '{module.package_name}' of module '{name}'"
                )
            if module.add_file(fa.path):
                module.tags.extend(fa.tags)

        source = module_names[0] if module_names else fa.package_name
        for tag in fa.tags:
            kind = _DEPENDENCY_TAGS.get(tag.type)
            if kind is None or not tag.value:
                continue
            analysis.add_dependency(
                Dependency(source=source, target=tag.value, kind=kind, line=tag.line, file=fa.path)
            )
            if source in analysis.modules:
                analysis.modules[source].add_dependency(tag.value)

        for import_path in fa.imports:
            target = module_from_import(import_path, analysis.module_path)
            if target is None or target == source:
                continue
            analysis.add_dependency(
                Dependency(
                    source=source, target=target, kind=DependencyKind.IMPORT.value, file=fa.path
                )
            )
