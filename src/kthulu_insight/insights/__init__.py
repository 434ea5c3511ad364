"""Text insights over an analysed project."""

from .facade import (
    InsightsFacade,
    infer_module_name,
    render_dependencies,
    render_guide,
    render_modules,
    render_overview,
    render_tags,
    symbol_hints,
)

__all__ = [
    "InsightsFacade",
    "infer_module_name",
    "render_dependencies",
    "render_guide",
    "render_modules",
    "render_overview",
    "render_tags",
    "symbol_hints",
]
