"""Module dependency resolution."""

from .models import Conflict, ModuleInfo, ResolutionPlan, ResolverRecommendation
from .resolver import DependencyResolver
from .rules import DEPENDENCY_RULES, INCOMPATIBLE_MODULES, OPTIONAL_MODULES

__all__ = [
    "DEPENDENCY_RULES",
    "INCOMPATIBLE_MODULES",
    "OPTIONAL_MODULES",
    "Conflict",
    "DependencyResolver",
    "ModuleInfo",
    "ResolutionPlan",
    "ResolverRecommendation",
]
