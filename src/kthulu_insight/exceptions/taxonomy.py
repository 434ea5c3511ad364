"""Error codes for Kthulu Insight.

Error Code Convention:
    KT1xx - Input and configuration errors
    KT2xx - Scanning and parsing errors
    KT3xx - Graph and resolution errors
    KT4xx - Authorization errors
    KT9xx - Internal errors
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(Enum):
    """Structured error codes for observability and debugging."""

    # Input errors (KT1xx)
    KT100 = "KT100"  # Invalid input
    KT101 = "KT101"  # Invalid configuration value
    KT102 = "KT102"  # Invalid project root
    KT103 = "KT103"  # Entity not found

    # Scanning errors (KT2xx)
    KT200 = "KT200"  # File read/stat error
    KT201 = "KT201"  # Tree-sitter parse failed
    KT202 = "KT202"  # File skipped (too large)
    KT203 = "KT203"  # Package name conflict within a module

    # Graph / resolver errors (KT3xx)
    KT300 = "KT300"  # Edge references unknown node
    KT301 = "KT301"  # Circular dependency

    # Authorization errors (KT4xx)
    KT400 = "KT400"  # Role hierarchy cycle
    KT401 = "KT401"  # Deadline exceeded

    # Internal errors (KT9xx)
    KT900 = "KT900"  # Unexpected invariant violation
    KT901 = "KT901"  # Operation cancelled


class Severity(Enum):
    """Severity attached to non-fatal scan faults."""

    WARNING = "warning"
    ERROR = "error"
