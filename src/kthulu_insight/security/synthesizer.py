"""PolicySynthesizer: turns security-relevant tags into policies and roles.

Explicit input is any tag whose type starts with ``security``. Other tags
whose content or value mentions a security keyword produce implicit policies
inferred from the keyword (admin, user, auth).

Usage:
    policies, roles = PolicySynthesizer().synthesize(analysis)
"""

from __future__ import annotations

import hashlib
from typing import Any, Optional

from ..analysis.models import FileAnalysis, ProjectAnalysis
from ..config import AuthorizationConfig
from ..logging_config import get_logger
from ..tags.models import Tag, TagType
from .models import Role, SecurityPolicy, SecurityTagInfo, utcnow

logger = get_logger(__name__)

SECURITY_KEYWORDS = (
    "admin",
    "auth",
    "user",
    "permission",
    "role",
    "private",
    "protected",
    "secure",
    "sensitive",
    "token",
    "session",
    "credential",
    "secret",
)

# keyword -> (role, actions); first match wins
IMPLICIT_RULES = (
    ("admin", "admin", ("read", "write", "delete")),
    ("user", "user", ("read",)),
    ("auth", "authenticated", ("read",)),
)

IMPLICIT_TAG_TYPE = "implicit_security"
DEFAULT_ACTION = "read"
DEFAULT_RESOURCE = "default"
DISCOVERED_ROLE_LEVEL = 20


def builtin_roles() -> dict[str, Role]:
    """Fresh copies of the built-in roles, highest level first. None has parents."""
    return {
        "admin": Role(
            id="admin",
            name="Administrator",
            description="Full system access",
            permissions=["*"],
            level=100,
        ),
        "user": Role(
            id="user",
            name="Regular User",
            description="Standard user access",
            permissions=["read", "write:own"],
            level=10,
        ),
        "authenticated": Role(
            id="authenticated",
            name="Authenticated User",
            description="Basic authenticated access",
            permissions=["read:public"],
            level=5,
        ),
        "guest": Role(
            id="guest",
            name="Guest User",
            description="Anonymous access",
            permissions=["read:public:limited"],
            level=1,
        ),
    }


def split_list(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def parse_conditions(value: str) -> dict[str, str]:
    """``"k=v,k2=v2"`` -> ``{"k": "v", "k2": "v2"}``; malformed pairs are dropped."""
    conditions = {}
    for pair in value.split(","):
        parts = pair.split("=")
        if len(parts) == 2 and parts[0].strip():
            conditions[parts[0].strip()] = parts[1].strip()
    return conditions


def infer_resource(tag: Tag) -> str:
    return tag.value or tag.type or DEFAULT_RESOURCE


def policy_id(info: SecurityTagInfo) -> str:
    digest = hashlib.sha1(
        f"{info.file}:{info.line}:{info.tag_type}:{info.value}".encode("utf-8")
    ).hexdigest()
    return f"policy_{digest[:12]}"


def _first(attributes: dict[str, str], *keys: str) -> Optional[str]:
    for key in keys:
        if key in attributes:
            return attributes[key]
    return None


class PolicySynthesizer:
    def extract(self, analysis: ProjectAnalysis) -> list[SecurityTagInfo]:
        """SecurityTagInfos in file scan order, then tag order."""
        infos = []
        for fa in analysis.files:
            for tag in fa.tags:
                info = self._extract_tag(fa, tag)
                if info is not None:
                    infos.append(info)
        return infos

    def _extract_tag(self, fa: FileAnalysis, tag: Tag) -> Optional[SecurityTagInfo]:
        module_names = fa.module_names
        base = {
            "file": fa.path,
            "line": tag.line,
            "module": module_names[0] if module_names else "",
            "value": tag.value or "",
        }
        attrs = tag.attributes

        if tag.type.startswith(TagType.SECURITY.value):
            info = SecurityTagInfo(tag_type=tag.type, **base)
            info.roles = split_list(_first(attrs, "role", "roles"))
            info.permissions = split_list(_first(attrs, "permission", "permissions"))
            info.actions = split_list(_first(attrs, "action", "actions"))
            info.resource = attrs.get("resource") or infer_resource(tag)
            if "condition" in attrs:
                info.conditions.update(parse_conditions(attrs["condition"]))
            if "level" in attrs:
                info.conditions["security_level"] = attrs["level"]
            if "scope" in attrs:
                info.conditions["scope"] = attrs["scope"]
            return info

        if _first(attrs, "role", "roles", "permission", "permissions") is not None:
            return None
        text = f"{tag.content} {tag.value or ''}".lower()
        if not any(keyword in text for keyword in SECURITY_KEYWORDS):
            return None
        for keyword, role, actions in IMPLICIT_RULES:
            if keyword in text:
                return SecurityTagInfo(
                    tag_type=IMPLICIT_TAG_TYPE,
                    resource=infer_resource(tag),
                    roles=[role],
                    actions=list(actions),
                    **base,
                )
        return None

    def synthesize(self, analysis: ProjectAnalysis) -> tuple[list[SecurityPolicy], list[Role]]:
        infos = self.extract(analysis)
        roles = self.roles_for(infos)
        policies = self.policies_for(infos, roles)
        logger.info(
            f"Synthesized {len(policies)} policies and {len(roles)} roles "
            f"from {len(infos)} security-relevant tags"
        )
        return policies, roles

    @staticmethod
    def roles_for(infos: list[SecurityTagInfo]) -> list[Role]:
        roles = builtin_roles()
        for info in infos:
            for name in info.roles:
                if name not in roles:
                    roles[name] = Role(
                        id=name,
                        name=name.replace("_", " ").title(),
                        description=f"Discovered role: {name}",
                        permissions=[DEFAULT_ACTION],
                        level=DISCOVERED_ROLE_LEVEL,
                    )
        return list(roles.values())

    @staticmethod
    def policies_for(infos: list[SecurityTagInfo], roles: list[Role]) -> list[SecurityPolicy]:
        policies: dict[str, SecurityPolicy] = {}
        for info in infos:
            if not info.roles and not info.permissions:
                continue
            required = list(info.roles)
            if not required:
                required = [
                    role.id
                    for role in roles
                    if any(role.grants(permission) for permission in info.permissions)
                ]
            resource = info.resource or DEFAULT_RESOURCE
            now = utcnow()
            pid = policy_id(info)
            policies[pid] = SecurityPolicy(
                id=pid,
                resource=resource,
                actions=list(info.actions) or [DEFAULT_ACTION],
                required_roles=required,
                conditions=dict(info.conditions),
                module=info.module,
                name=f"Policy for {resource}",
                description=f"Generated from {info.tag_type} tag at {info.file}:{info.line}",
                created_at=now,
                updated_at=now,
            )
        return list(policies.values())


def generate_security_config(
    policies: list[SecurityPolicy],
    roles: list[Role],
    config: Optional[AuthorizationConfig] = None,
) -> dict[str, Any]:
    """JSON-ready bundle of policies, roles and authorization settings."""
    config = config or AuthorizationConfig()
    return {
        "policies": [p.to_dict() for p in sorted(policies, key=lambda p: p.id)],
        "roles": [r.to_dict() for r in sorted(roles, key=lambda r: (-r.level, r.id))],
        "settings": {
            "rbac": {
                "enabled": True,
                "cache_enabled": config.cache_enabled,
                "cache_ttl": config.cache_ttl,
                "audit_enabled": config.audit_enabled,
                "strict_mode": config.strict_mode,
                "default_deny": config.default_deny,
                "hierarchical_roles": config.hierarchical_roles,
                "contextual_security": config.contextual_security,
            },
            "audit": {"enabled": config.audit_enabled, "log_level": "INFO", "retention_days": 90},
            "session": {"timeout": "30m", "secure_cookie": True, "same_site": "strict"},
        },
    }
