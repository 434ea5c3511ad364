"""DependencyResolver: closure, install order, conflicts and advice.

Usage:
    resolver = DependencyResolver(analysis)
    plan = resolver.resolve(["invoice"])
    plan.install_order  # ['user', 'auth', 'organization', ...]
"""

from __future__ import annotations

from typing import Iterable, Mapping, Optional, Sequence

from ..analysis.models import DECLARED_KINDS, ProjectAnalysis
from ..exceptions import CircularDependencyError, InvalidInputError, NotFoundError
from ..logging_config import get_logger
from .models import Conflict, ModuleInfo, ResolutionPlan, ResolverRecommendation
from .rules import (
    CORE_MODULES,
    DEFAULT_CATEGORY,
    DEFAULT_DESCRIPTION,
    DEPENDENCY_RULES,
    FINANCIAL_MODULES,
    INCOMPATIBLE_MODULES,
    INTERACTIVE_MODULES,
    MODULE_CATALOGUE,
    OBSERVABILITY_THRESHOLD,
    OPTIONAL_MODULES,
    complexity_label,
)

logger = get_logger(__name__)


class DependencyResolver:
    """Resolves requested modules into an ordered installation plan.

    Rules are the built-in table, extended with the ``module`` and
    ``requires`` dependencies declared in ``analysis`` when one is given.
    """

    def __init__(
        self,
        analysis: Optional[ProjectAnalysis] = None,
        rules: Optional[Mapping[str, Sequence[str]]] = None,
    ) -> None:
        self.analysis = analysis
        base = DEPENDENCY_RULES if rules is None else rules
        self.rules: dict[str, list[str]] = {name: list(deps) for name, deps in base.items()}

        if analysis is not None:
            for dep in analysis.dependencies:
                if dep.kind not in DECLARED_KINDS or dep.source == dep.target:
                    continue
                targets = self.rules.setdefault(dep.source, [])
                if dep.target not in targets:
                    targets.append(dep.target)

    def resolve(self, requested: Iterable[str]) -> ResolutionPlan:
        """Build a ResolutionPlan for ``requested``.

        Raises:
            InvalidInputError: If a requested name is empty
            CircularDependencyError: If the required set cannot be ordered
        """
        requested = list(requested)
        if any(not name for name in requested):
            raise InvalidInputError("Module names must be non-empty")

        plan = ResolutionPlan(required_modules=self._closure(requested))
        plan.install_order = self._install_order(plan.required_modules)
        plan.conflicts = self._conflicts(plan.required_modules)
        if plan.required_modules and not any(m in plan.required_modules for m in CORE_MODULES):
            plan.warnings.append(
                "No core authentication modules detected - consider adding 'user' and 'auth' modules"
            )
        plan.recommendations = self._recommendations(requested, plan.required_modules)
        plan.optional_modules = self._optionals(plan.required_modules)

        logger.info(
            f"Resolved {', '.join(requested) or '<none>'}: {len(plan.required_modules)} required, "
            f"{len(plan.optional_modules)} optional, {len(plan.conflicts)} conflicts"
        )
        return plan

    def _closure(self, requested: Sequence[str]) -> set[str]:
        required: set[str] = set()
        stack = list(reversed(requested))
        while stack:
            name = stack.pop()
            if name in required:
                continue
            required.add(name)
            stack.extend(self.rules.get(name, ()))
        return required

    def _install_order(self, modules: set[str]) -> list[str]:
        """Kahn's algorithm, one layer at a time, names sorted within a layer."""
        in_degree = {m: 0 for m in modules}
        dependents: dict[str, list[str]] = {m: [] for m in modules}
        for module in modules:
            for dep in set(self.rules.get(module, ())):
                if dep in modules and dep != module:
                    dependents[dep].append(module)
                    in_degree[module] += 1

        order: list[str] = []
        layer = sorted(m for m, d in in_degree.items() if d == 0)
        while layer:
            order.extend(layer)
            next_layer = []
            for module in layer:
                for dependent in dependents[module]:
                    in_degree[dependent] -= 1
                    if in_degree[dependent] == 0:
                        next_layer.append(dependent)
            layer = sorted(next_layer)

        if len(order) != len(modules):
            unsettled = sorted(m for m, d in in_degree.items() if d > 0)
            raise CircularDependencyError(unsettled)
        return order

    @staticmethod
    def _conflicts(modules: set[str]) -> list[Conflict]:
        conflicts = []
        seen: set[frozenset[str]] = set()
        for module in sorted(INCOMPATIBLE_MODULES):
            if module not in modules:
                continue
            for other in INCOMPATIBLE_MODULES[module]:
                pair = frozenset((module, other))
                if other not in modules or pair in seen:
                    continue
                seen.add(pair)
                conflicts.append(
                    Conflict(
                        type="incompatible",
                        modules=[module, other],
                        description=f"Modules '{module}' and '{other}' are incompatible",
                        suggestions=[
                            f"Choose either '{module}' or '{other}', not both",
                            "Consider using a different approach that supports both",
                        ],
                    )
                )
        return conflicts

    @staticmethod
    def _recommendations(
        requested: Sequence[str], modules: set[str]
    ) -> list[ResolverRecommendation]:
        recs = []
        if any(m in requested for m in FINANCIAL_MODULES) and "audit" not in modules:
            recs.append(
                ResolverRecommendation(
                    type="add",
                    module="audit",
                    reason="Financial modules benefit from audit logging for compliance",
                    impact="medium",
                )
            )
        if len(modules) > OBSERVABILITY_THRESHOLD:
            recs.append(
                ResolverRecommendation(
                    type="configure",
                    module="observability",
                    reason="Multiple modules benefit from centralized monitoring",
                    impact="high",
                    auto_apply=True,
                )
            )
        if any(m in requested for m in INTERACTIVE_MODULES) and "realtime" not in modules:
            recs.append(
                ResolverRecommendation(
                    type="add",
                    module="realtime",
                    reason="Interactive modules work better with real-time capabilities",
                    impact="high",
                )
            )
        return sorted(recs, key=lambda r: (r.type, r.module))

    @staticmethod
    def _optionals(modules: set[str]) -> list[str]:
        optionals = {opt for m in modules for opt in OPTIONAL_MODULES.get(m, ())}
        return sorted(optionals - modules)

    def module_info(self, name: str) -> ModuleInfo:
        """Describe a project module.

        Raises:
            NotFoundError: If no analysis is attached or it has no such module
        """
        module = self.analysis.modules.get(name) if self.analysis is not None else None
        if module is None:
            raise NotFoundError("module", name)

        description, category = MODULE_CATALOGUE.get(name, (DEFAULT_DESCRIPTION, DEFAULT_CATEGORY))
        line_count = 0
        for path in module.files:
            fa = self.analysis.file(path)
            if fa is not None:
                line_count += fa.line_count

        return ModuleInfo(
            name=module.name,
            package=module.package_name,
            dependencies=sorted(module.dependencies),
            description=description,
            category=category,
            complexity=complexity_label(len(module.dependencies), len(module.files)),
            line_count=line_count,
            tags=len(module.tags),
        )
