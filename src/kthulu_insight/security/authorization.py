"""AuthorizationCore: policy/role stores and cached access decisions.

Usage:
    core = AuthorizationCore(AuthorizationConfig())
    core.apply_batch(policies, roles)
    result = core.check_access(AccessRequest("u1", "docs/42", "read", roles=["user"]))
"""

from __future__ import annotations

import time
import uuid
from collections import deque
from dataclasses import replace
from threading import Lock
from typing import Any, Iterable, Optional

from ..cancellation import CancellationToken
from ..config import AuthorizationConfig
from ..exceptions import AnalysisCancelledError, NotFoundError, RoleHierarchyError
from ..locks import ReadWriteLock
from ..logging_config import get_logger
from .cache import DecisionCache
from .models import (
    AccessRequest,
    AccessResult,
    AuditEntry,
    Permission,
    Role,
    SecurityPolicy,
    utcnow,
)

logger = get_logger(__name__)

REASON_GRANTED = "Access granted by policy {}"
REASON_DENIED = "User lacks required roles or conditions not met"
REASON_NO_POLICY = "No applicable security policies found"
REASON_TIMEOUT = "timeout"
REASON_ERROR = "authorization_error"
REASON_INVALID = "invalid request"

# Audit entries kept in memory
AUDIT_LOG_SIZE = 10000


class AuthorizationCore:
    """Evaluates AccessRequests against the stored policies and roles.

    Policy and role stores share one readers-writer lock; the decision
    cache has its own lock. ``check_access`` never raises.
    """

    def __init__(self, config: Optional[AuthorizationConfig] = None) -> None:
        self.config = config or AuthorizationConfig()
        self._policies: dict[str, SecurityPolicy] = {}
        self._roles: dict[str, Role] = {}
        self._permissions: dict[str, Permission] = {}
        self._lock = ReadWriteLock()
        self._cache = DecisionCache(self.config.cache_ttl, self.config.cache_max_entries)
        self._audit: deque[AuditEntry] = deque(maxlen=AUDIT_LOG_SIZE)
        self._checks = 0
        self._checks_lock = Lock()

    # ── Decisions ──────────────────────────────────────────────────

    def check_access(self, request: AccessRequest, timeout: Optional[float] = None) -> AccessResult:
        """Decide ``request``. Denials, timeouts and internal errors are results."""
        start = time.perf_counter()
        with self._checks_lock:
            self._checks += 1

        if self.config.strict_mode and (not request.subject or not request.action):
            return self._finish(request, AccessResult(False, REASON_INVALID), start)

        key = request.cache_key
        if self.config.cache_enabled:
            cached = self._cache.get(key)
            if cached is not None:
                return self._finish(request, replace(cached, cache_hit=True, audit=None), start)

        try:
            result = self._evaluate(request, CancellationToken(timeout))
        except AnalysisCancelledError:
            logger.debug(f"Access check for {request.subject} timed out")
            return self._finish(request, AccessResult(False, REASON_TIMEOUT), start)
        except Exception as e:
            logger.error(f"Authorization check failed for {request.subject}: {e}")
            return self._finish(request, AccessResult(False, REASON_ERROR, error=str(e)), start)
        return self._finish(request, result, start)

    def _evaluate(self, request: AccessRequest, cancel: CancellationToken) -> AccessResult:
        # Stored under the read lock; writers invalidate under the write lock.
        with self._lock.read():
            result = self._decide(request, cancel)
            if self.config.cache_enabled:
                self._cache.set(request.cache_key, result)
        return result

    def _decide(self, request: AccessRequest, cancel: CancellationToken) -> AccessResult:
        effective = self._effective_roles(request.roles)
        matched: list[str] = []
        for policy in self._policies.values():
            cancel.raise_if_cancelled("authorization")
            if not policy.matches(request.resource, request.action):
                continue
            matched.append(policy.id)
            if not any(role in effective for role in policy.required_roles):
                continue
            if self._conditions_hold(policy.conditions, request.context):
                return AccessResult(True, REASON_GRANTED.format(policy.id), matched)
        cancel.raise_if_cancelled("authorization")

        if matched:
            return AccessResult(False, REASON_DENIED, matched)
        return AccessResult(False, REASON_NO_POLICY)

    def _effective_roles(self, declared: Iterable[str]) -> set[str]:
        """Declared roles plus transitive parents; deactivated roles drop out."""
        effective: set[str] = set()
        stack = list(declared)
        while stack:
            name = stack.pop()
            role = self._roles.get(name)
            if name in effective or (role is not None and not role.active):
                continue
            effective.add(name)
            if role is not None and self.config.hierarchical_roles:
                stack.extend(role.parent_roles)
        return effective

    def _conditions_hold(self, conditions: dict[str, Any], context: dict[str, Any]) -> bool:
        if not self.config.contextual_security:
            return True
        return all(key in context and context[key] == value for key, value in conditions.items())

    def _finish(self, request: AccessRequest, result: AccessResult, start: float) -> AccessResult:
        result.duration = time.perf_counter() - start
        if self.config.audit_enabled:
            entry = AuditEntry(
                id=request.request_id or uuid.uuid4().hex,
                timestamp=utcnow(),
                subject=request.subject,
                action=request.action,
                resource=request.resource,
                result=result.allowed,
                reason=result.reason,
                context=dict(request.context),
                policy_id=result.applied_policies[0] if result.applied_policies else None,
            )
            result.audit = entry
            self._audit.append(entry)
        return result

    # ── Policy store ───────────────────────────────────────────────

    def add_policy(self, policy: SecurityPolicy) -> None:
        """Insert or replace by id; replacing keeps created_at and bumps updated_at."""
        with self._lock.write():
            self._put_policy(policy)
            self._invalidate_for(policy)

    def _put_policy(self, policy: SecurityPolicy) -> None:
        existing = self._policies.get(policy.id)
        if existing is not None:
            policy.created_at = existing.created_at
            policy.updated_at = utcnow()
        self._policies[policy.id] = policy

    def _invalidate_for(self, policy: SecurityPolicy) -> None:
        def affected(key: Any, result: AccessResult) -> bool:
            _, resource, action, _ = key
            return policy.id in result.applied_policies or policy.matches(resource, action)

        dropped = self._cache.invalidate(affected)
        if dropped:
            logger.debug(f"Policy {policy.id} invalidated {dropped} cached decisions")

    def get_policy(self, policy_id: str) -> SecurityPolicy:
        with self._lock.read():
            policy = self._policies.get(policy_id)
        if policy is None:
            raise NotFoundError("policy", policy_id)
        return policy

    def remove_policy(self, policy_id: str) -> None:
        with self._lock.write():
            policy = self._policies.pop(policy_id, None)
            if policy is not None:
                self._invalidate_for(policy)
        if policy is None:
            raise NotFoundError("policy", policy_id)

    def list_policies(self) -> list[SecurityPolicy]:
        with self._lock.read():
            return sorted(self._policies.values(), key=lambda p: p.id)

    # ── Role store ─────────────────────────────────────────────────

    def add_role(self, role: Role) -> None:
        """Insert or replace a role.

        Raises:
            RoleHierarchyError: If the role's parents lead back to itself
        """
        with self._lock.write():
            self._check_parents({**self._roles, role.id: role}, role)
            self._roles[role.id] = role
            self._cache.clear()

    @staticmethod
    def _check_parents(roles: dict[str, Role], role: Role) -> None:
        seen: set[str] = set()
        stack = list(role.parent_roles)
        while stack:
            name = stack.pop()
            if name == role.id:
                raise RoleHierarchyError(role.id, role.parent_roles)
            if name in seen:
                continue
            seen.add(name)
            parent = roles.get(name)
            if parent is not None:
                stack.extend(parent.parent_roles)

    def get_role(self, role_id: str) -> Role:
        with self._lock.read():
            role = self._roles.get(role_id)
        if role is None:
            raise NotFoundError("role", role_id)
        return role

    def deactivate_role(self, role_id: str) -> None:
        self._set_active(role_id, False)

    def activate_role(self, role_id: str) -> None:
        self._set_active(role_id, True)

    def _set_active(self, role_id: str, active: bool) -> None:
        with self._lock.write():
            role = self._roles.get(role_id)
            if role is None:
                raise NotFoundError("role", role_id)
            role.active = active
            self._cache.clear()

    def add_permission(self, permission: Permission) -> None:
        with self._lock.write():
            self._permissions[permission.id] = permission

    def apply_batch(self, policies: Iterable[SecurityPolicy], roles: Iterable[Role]) -> None:
        """Add roles and policies under one write lock; nothing changes on error."""
        policies = list(policies)
        roles = list(roles)
        with self._lock.write():
            staged = dict(self._roles)
            for role in roles:
                staged[role.id] = role
            for role in roles:
                self._check_parents(staged, role)
            self._roles = staged
            for policy in policies:
                self._put_policy(policy)
            self._cache.clear()
        logger.debug(f"Applied batch of {len(policies)} policies and {len(roles)} roles")

    # ── Introspection ──────────────────────────────────────────────

    def audit_log(self) -> list[AuditEntry]:
        return list(self._audit)

    def clear_cache(self) -> None:
        self._cache.clear()

    def stats(self) -> dict[str, Any]:
        with self._lock.read():
            counts = {
                "policies": len(self._policies),
                "roles": len(self._roles),
                "active_roles": sum(1 for r in self._roles.values() if r.active),
                "permissions": len(self._permissions),
            }
        return {
            **counts,
            "checks": self._checks,
            "audit_entries": len(self._audit),
            "cache": self._cache.stats(),
        }
