"""Public API for Kthulu Insight.

Composition root: each function builds the component it needs from a
loaded configuration and runs it. Collaborators (the CLI, scripts, tests)
should call these instead of wiring components by hand.

Example:
    >>> from kthulu_insight import analyze_project, build_graph, analyze_semantics
    >>>
    >>> analysis = analyze_project("/path/to/service")
    >>> graph = build_graph(analysis)
    >>> insights = analyze_semantics(analysis, graph)
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Union

from .analysis.engine import ProjectAnalyzer
from .analysis.models import ProjectAnalysis
from .cancellation import CancellationToken
from .config import AnalyzerConfig, AuthorizationConfig, load_config
from .graph.builder import build_graph as _build_graph
from .graph.models import DependencyGraph
from .logging_config import get_logger
from .resolver.models import ResolutionPlan
from .resolver.resolver import DependencyResolver
from .security.authorization import AuthorizationCore
from .security.models import Role, SecurityPolicy
from .security.synthesizer import PolicySynthesizer
from .semantics.analyzer import SemanticAnalyzer
from .semantics.models import SemanticInsights

logger = get_logger(__name__)


def analyze_project(
    root: Union[str, Path] = ".",
    config: Optional[AnalyzerConfig] = None,
    cancel: Optional[CancellationToken] = None,
    config_file: Optional[Path] = None,
    **overrides,
) -> ProjectAnalysis:
    """Scan ``root`` and merge every file into a ProjectAnalysis.

    Args:
        root: Project root directory
        config: Ready-made configuration; when omitted it is loaded from
            TOML files, environment and ``overrides``
        cancel: Optional cancellation token checked between files
        config_file: Explicit TOML file passed to ``load_config``
        **overrides: Configuration overrides (e.g. cache_enabled=False)

    Raises:
        InvalidRootError: If root is missing or not a directory
        InvalidConfigError: If the configuration is invalid
        AnalysisCancelledError: If ``cancel`` fires
    """
    if config is None:
        config = load_config(config_file, **overrides)
    return ProjectAnalyzer(config).analyze(root, cancel)


def build_graph(
    analysis: ProjectAnalysis,
    config: Optional[AnalyzerConfig] = None,
    cancel: Optional[CancellationToken] = None,
) -> DependencyGraph:
    config = config or AnalyzerConfig()
    if cancel is not None:
        cancel.raise_if_cancelled("graph")
    return _build_graph(analysis, detect_cycles=config.circular_detection)


def analyze_semantics(
    analysis: ProjectAnalysis,
    graph: Optional[DependencyGraph] = None,
    cancel: Optional[CancellationToken] = None,
) -> SemanticInsights:
    if cancel is not None:
        cancel.raise_if_cancelled("semantic")
    if graph is None:
        graph = build_graph(analysis, cancel=cancel)
    return SemanticAnalyzer().analyze(analysis, graph)


def resolve_dependencies(
    requested: Iterable[str], analysis: Optional[ProjectAnalysis] = None
) -> ResolutionPlan:
    """Resolve ``requested`` modules against the built-in rules.

    Raises:
        CircularDependencyError: If the required set cannot be ordered
    """
    return DependencyResolver(analysis).resolve(requested)


def synthesize_policies(analysis: ProjectAnalysis) -> tuple[list[SecurityPolicy], list[Role]]:
    return PolicySynthesizer().synthesize(analysis)


def create_authorization_core(
    analysis: Optional[ProjectAnalysis] = None,
    config: Optional[AuthorizationConfig] = None,
) -> AuthorizationCore:
    """AuthorizationCore, preloaded with policies synthesized from ``analysis``."""
    core = AuthorizationCore(config)
    if analysis is not None:
        policies, roles = synthesize_policies(analysis)
        core.apply_batch(policies, roles)
    return core


def run_pipeline(
    root: Union[str, Path] = ".",
    config: Optional[AnalyzerConfig] = None,
    cancel: Optional[CancellationToken] = None,
) -> tuple[ProjectAnalysis, DependencyGraph, Optional[SemanticInsights]]:
    """Scan, graph and (when enabled) semantic phases with cancellation between them."""
    config = config or load_config()
    cancel = cancel or CancellationToken()
    analysis = analyze_project(root, config=config, cancel=cancel)
    cancel.raise_if_cancelled("scan")
    graph = build_graph(analysis, config, cancel)
    insights = None
    if config.semantic_analysis:
        insights = analyze_semantics(analysis, graph, cancel)
        cancel.raise_if_cancelled("metrics")
    logger.debug(f"Pipeline finished for {root}")
    return analysis, graph, insights
