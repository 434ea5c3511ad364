"""Authorization records: policies, roles, permissions, requests, results."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SecurityPolicy:
    """Grants ``actions`` on ``resource`` to holders of any ``required_roles``.

    ``resource`` is ``*``, a prefix ending in ``*``, or an exact name. Empty
    ``actions`` or ``*`` match every action.
    """

    id: str
    resource: str
    actions: list[str] = field(default_factory=list)
    required_roles: list[str] = field(default_factory=list)
    conditions: dict[str, Any] = field(default_factory=dict)
    module: str = ""
    name: str = ""
    description: str = ""
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def matches_resource(self, resource: str) -> bool:
        if self.resource == "*":
            return True
        if self.resource.endswith("*"):
            return resource.startswith(self.resource[:-1])
        return self.resource == resource

    def matches_action(self, action: str) -> bool:
        return not self.actions or "*" in self.actions or action in self.actions

    def matches(self, resource: str, action: str) -> bool:
        return self.matches_resource(resource) and self.matches_action(action)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["created_at"] = self.created_at.isoformat()
        data["updated_at"] = self.updated_at.isoformat()
        return data


@dataclass
class Role:
    id: str
    name: str = ""
    description: str = ""
    permissions: list[str] = field(default_factory=list)
    parent_roles: list[str] = field(default_factory=list)
    level: int = 0
    active: bool = True
    created_at: datetime = field(default_factory=utcnow)

    def grants(self, permission: str) -> bool:
        return "*" in self.permissions or permission in self.permissions

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["created_at"] = self.created_at.isoformat()
        return data


@dataclass
class Permission:
    id: str
    resource: str
    action: str
    name: str = ""
    scope: str = ""
    conditions: dict[str, Any] = field(default_factory=dict)
    description: str = ""


@dataclass
class AccessRequest:
    subject: str
    resource: str
    action: str
    roles: list[str] = field(default_factory=list)
    context: dict[str, Any] = field(default_factory=dict)
    request_id: str = ""

    @property
    def cache_key(self) -> tuple[str, str, str, tuple[str, ...]]:
        return (self.subject, self.resource, self.action, tuple(sorted(self.roles)))


@dataclass
class AuditEntry:
    id: str
    timestamp: datetime
    subject: str
    action: str
    resource: str
    result: bool
    reason: str
    context: dict[str, Any] = field(default_factory=dict)
    policy_id: Optional[str] = None


@dataclass
class AccessResult:
    allowed: bool
    reason: str
    applied_policies: list[str] = field(default_factory=list)
    cache_hit: bool = False
    duration: float = 0.0
    audit: Optional[AuditEntry] = None
    error: Optional[str] = None


@dataclass
class SecurityTagInfo:
    """Security-relevant facts extracted from one tag."""

    file: str
    line: int
    tag_type: str
    module: str = ""
    resource: str = ""
    actions: list[str] = field(default_factory=list)
    roles: list[str] = field(default_factory=list)
    permissions: list[str] = field(default_factory=list)
    conditions: dict[str, Any] = field(default_factory=dict)
    value: str = ""
