"""Policy synthesis from security tags and the runtime authorization core."""

from .authorization import AuthorizationCore
from .cache import DecisionCache
from .models import (
    AccessRequest,
    AccessResult,
    AuditEntry,
    Permission,
    Role,
    SecurityPolicy,
    SecurityTagInfo,
)
from .synthesizer import PolicySynthesizer, builtin_roles, generate_security_config

__all__ = [
    "AccessRequest",
    "AccessResult",
    "AuditEntry",
    "AuthorizationCore",
    "DecisionCache",
    "Permission",
    "PolicySynthesizer",
    "Role",
    "SecurityPolicy",
    "SecurityTagInfo",
    "builtin_roles",
    "generate_security_config",
]
