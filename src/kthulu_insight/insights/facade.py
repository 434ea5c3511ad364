"""Text reports over a ProjectAnalysis.

The ``render_*`` functions are pure; ``InsightsFacade`` analyses a root and
renders it. Every enumerated section is explicitly sorted and renders
``<none>`` when empty.
"""

from __future__ import annotations

from collections import Counter
from pathlib import Path
from typing import Optional, Union

from ..analysis.engine import ProjectAnalyzer
from ..analysis.models import FileAnalysis, ProjectAnalysis
from ..cancellation import CancellationToken
from ..config import AnalyzerConfig
from ..scanning.syntax import SymbolKind

NONE = "<none>"
BULLET = "•"


def _section(title: str, lines: list[str]) -> list[str]:
    return [f"{title}:"] + (lines or [f"  {NONE}"])


def _sorted_edges(analysis: ProjectAnalysis) -> list[tuple[str, str, str]]:
    return sorted(d.key for d in analysis.dependencies)


def render_overview(analysis: ProjectAnalysis, include_dependencies: bool = True) -> str:
    lines = [
        f"Kthulu project overview for {analysis.root}",
        f"Modules: {len(analysis.modules)}",
        f"Dependencies: {len(analysis.dependencies)}",
        f"Tags: {len(analysis.tags)}",
        "",
    ]
    listing = [
        f"  {BULLET} {m.name} (package {m.package_name or NONE}, {len(m.files)} files)"
        for m in sorted(analysis.modules.values(), key=lambda m: m.name)
    ]
    lines += _section("Module listing", listing)
    if include_dependencies:
        edges = [f"  {BULLET} {src} -> {dst} ({kind})" for src, dst, kind in _sorted_edges(analysis)]
        lines += [""] + _section("Dependency edges", edges)
    return "\n".join(lines)


def render_modules(analysis: ProjectAnalysis) -> str:
    if not analysis.modules:
        return "\n".join(_section("Modules", []))

    lines: list[str] = []
    for module in sorted(analysis.modules.values(), key=lambda m: m.name):
        if lines:
            lines.append("")
        lines.append(f"Module: {module.name}")
        lines.append(f"  Package: {module.package_name or NONE}")
        lines.append(f"  Files: {len(module.files)}")
        for path in sorted(module.files):
            lines.append(f"    {BULLET} {path}")
        deps = sorted(module.dependencies)
        lines.append(f"  Dependencies: {', '.join(deps) if deps else NONE}")
    return "\n".join(lines)


def render_tags(analysis: ProjectAnalysis) -> str:
    counts = Counter(t.type for t in analysis.tags)
    rows = [f"  {BULLET} {tag_type}: {counts[tag_type]}" for tag_type in sorted(counts)]
    return "\n".join(_section("Tags", rows))


def render_dependencies(analysis: ProjectAnalysis) -> str:
    rows = [f"  {BULLET} {src} -> {dst} ({kind})" for src, dst, kind in _sorted_edges(analysis)]
    return "\n".join(_section("Dependencies", rows))


def infer_module_name(fa: FileAnalysis, analysis: ProjectAnalysis) -> str:
    """Package name when it names an existing module, else the parent directory."""
    known = {name.lower() for name in analysis.modules}
    if fa.package_name and fa.package_name.lower() in known:
        return fa.package_name
    directory = fa.directory
    if directory:
        return directory.rsplit("/", 1)[-1]
    return fa.package_name or "main"


def symbol_hints(fa: FileAnalysis) -> list[str]:
    hints = set()
    for symbol in fa.symbols:
        lowered = symbol.name.lower()
        if "handler" in lowered:
            hints.add(f"@kthulu:handler:{symbol.name}")
        elif "service" in lowered:
            hints.add(f"@kthulu:service:{symbol.name}")
        elif "repository" in lowered or "repo" in lowered:
            hints.add(f"@kthulu:repository:{symbol.name}")
        elif symbol.kind == SymbolKind.TYPE.value:
            hints.add(f"@kthulu:domain:{symbol.name}")
    return sorted(hints)


def render_guide(analysis: ProjectAnalysis) -> str:
    untagged = sorted((fa for fa in analysis.files if not fa.tags), key=lambda fa: fa.path)
    lines = [f"Tagging guide for {analysis.root}", ""]
    if not untagged:
        return "\n".join(lines + _section("Untagged files", []))

    lines.append("Untagged files:")
    for fa in untagged:
        lines.append(f"  {BULLET} {fa.path} (package {fa.package_name or NONE})")
        lines.append(f"      suggest: @kthulu:module:{infer_module_name(fa, analysis)}")
        for hint in symbol_hints(fa):
            lines.append(f"      suggest: {hint}")
    return "\n".join(lines)


class InsightsFacade:
    """Analyse a root and render one of the text reports.

    Usage:
        facade = InsightsFacade()
        print(facade.overview("./my-service"))
    """

    def __init__(
        self,
        config: Optional[AnalyzerConfig] = None,
        analyzer: Optional[ProjectAnalyzer] = None,
    ) -> None:
        self.analyzer = analyzer or ProjectAnalyzer(config)

    def analyze(
        self, root: Union[str, Path], cancel: Optional[CancellationToken] = None
    ) -> ProjectAnalysis:
        return self.analyzer.analyze(root, cancel)

    def overview(self, root: Union[str, Path], include_dependencies: bool = True) -> str:
        return render_overview(self.analyze(root), include_dependencies)

    def modules(self, root: Union[str, Path]) -> str:
        return render_modules(self.analyze(root))

    def tags(self, root: Union[str, Path]) -> str:
        return render_tags(self.analyze(root))

    def dependencies(self, root: Union[str, Path]) -> str:
        return render_dependencies(self.analyze(root))

    def guide(self, root: Union[str, Path]) -> str:
        return render_guide(self.analyze(root))
