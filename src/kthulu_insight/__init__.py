"""
Kthulu Insight - Annotation-Driven Project Intelligence

Reads ``@kthulu:`` annotations from Go source trees and turns them into a
module model, a dependency graph with cycle detection, architectural
insights, install plans, and authorization policies.
"""

__version__ = "0.1.0"

from .analysis import FileAnalysis, ProjectAnalysis, ProjectAnalyzer
from .api import (
    analyze_project,
    analyze_semantics,
    build_graph,
    create_authorization_core,
    resolve_dependencies,
    run_pipeline,
    synthesize_policies,
)
from .cancellation import CancellationToken
from .config import AnalyzerConfig, AuthorizationConfig, load_config
from .insights import InsightsFacade

__all__ = [
    "analyze_project",  # Main entry point
    "analyze_semantics",
    "build_graph",
    "create_authorization_core",
    "resolve_dependencies",
    "run_pipeline",
    "synthesize_policies",
    "AnalyzerConfig",
    "AuthorizationConfig",
    "CancellationToken",
    "FileAnalysis",
    "InsightsFacade",
    "ProjectAnalysis",
    "ProjectAnalyzer",
    "load_config",
]
