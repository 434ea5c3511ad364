"""Built-in module tables: requirements, incompatibilities, optionals, catalogue."""

from __future__ import annotations

DEPENDENCY_RULES: dict[str, tuple[str, ...]] = {
    "auth": ("user",),
    "organization": ("user", "auth"),
    "contact": ("user", "organization"),
    "product": ("user", "organization"),
    "invoice": ("user", "organization", "product", "contact"),
    "payment": ("user", "invoice"),
    "inventory": ("user", "organization", "product"),
    "calendar": ("user", "organization", "contact"),
    "verifactu": ("invoice", "organization"),
    "oauthsso": ("user", "auth"),
    "realtime": ("user", "auth"),
    "audit": ("user",),
    "notification": ("user",),
}

INCOMPATIBLE_MODULES: dict[str, tuple[str, ...]] = {
    "sqlite": ("mysql", "postgresql"),
    "mysql": ("postgresql",),
    "local_auth": ("oauthsso",),
}

OPTIONAL_MODULES: dict[str, tuple[str, ...]] = {
    "user": ("notification", "audit"),
    "organization": ("contact", "calendar"),
    "product": ("inventory", "pricing"),
    "invoice": ("payment", "verifactu"),
    "contact": ("calendar", "communication"),
}

CORE_MODULES = ("user", "auth")
FINANCIAL_MODULES = ("payment", "invoice")
INTERACTIVE_MODULES = ("chat", "collaboration")

# Required module count above which observability is recommended
OBSERVABILITY_THRESHOLD = 3

MODULE_CATALOGUE: dict[str, tuple[str, str]] = {
    "user": ("User management and authentication core", "Core"),
    "auth": ("Authentication and authorization system", "Core"),
    "organization": ("Multi-tenant organization management", "Core"),
    "contact": ("Customer and vendor contact management", "Business"),
    "product": ("Product catalog and management", "Business"),
    "invoice": ("Invoice generation and management", "Business"),
    "payment": ("Payment processing and gateway integration", "Integration"),
    "inventory": ("Inventory and warehouse management", "Business"),
    "calendar": ("Scheduling and calendar management", "Business"),
    "verifactu": ("Spanish fiscal compliance (VeriFACTU)", "Compliance"),
    "oauthsso": ("OAuth and SSO integration", "Integration"),
    "realtime": ("Real-time communication and WebSocket support", "Infrastructure"),
    "audit": ("Audit logging and compliance tracking", "Compliance"),
    "notification": ("Multi-channel notification system", "Infrastructure"),
}

DEFAULT_DESCRIPTION = "Custom module"
DEFAULT_CATEGORY = "Custom"


def complexity_label(dependency_count: int, file_count: int) -> str:
    score = dependency_count * 2 + file_count
    if score < 5:
        return "Low"
    if score < 15:
        return "Medium"
    return "High"
