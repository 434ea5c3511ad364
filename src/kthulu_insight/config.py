"""Configuration loading and management for Kthulu Insight.

Configuration sources are merged in priority order:
    1. Defaults (defined in AnalyzerConfig / AuthorizationConfig)
    2. Global config (~/.kthulu-insight.toml)
    3. Project config (./kthulu-insight.toml)
    4. Explicit config file
    5. Environment variables (KTHULU_* and KTHULU_AUTH_*)
    6. Keyword overrides (typically CLI flags)

Example:
    >>> config = load_config(cache_enabled=False)
    >>> config.cache_enabled
    False
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import InvalidConfigError

CacheBackend = Literal["memory", "disk"]

DEFAULT_IGNORE_PATTERNS = [
    "vendor/",
    ".git/",
    ".hg/",
    ".svn/",
    "node_modules/",
    "testdata/",
    "fixtures/",
    "*_test.go",
]


@dataclass(frozen=True)
class AuthorizationConfig:
    """Settings for the authorization core.

    Attributes:
        cache_enabled: Keep decisions in the TTL decision cache
        cache_ttl: Decision lifetime in seconds
        cache_max_entries: Decision cache capacity
        audit_enabled: Attach an audit entry to every decision
        strict_mode: Reject requests with an empty subject or action
        default_deny: Published in the generated security config settings
        hierarchical_roles: Expand roles with their transitive parents
        contextual_security: Evaluate policy conditions against request context
    """

    cache_enabled: bool = True
    cache_ttl: float = 300.0
    cache_max_entries: int = 1000
    audit_enabled: bool = True
    strict_mode: bool = True
    default_deny: bool = True
    hierarchical_roles: bool = True
    contextual_security: bool = True

    def __post_init__(self) -> None:
        if self.cache_ttl < 0:
            raise InvalidConfigError("cache_ttl", self.cache_ttl, "must be non-negative")
        if self.cache_max_entries < 1:
            raise InvalidConfigError(
                "cache_max_entries", self.cache_max_entries, "must be at least 1"
            )


@dataclass(frozen=True)
class AnalyzerConfig:
    """Configuration for project analysis.

    Attributes:
        Caching:
            cache_enabled: Reuse per-file analyses keyed by (path, mtime)
            cache_backend: "memory" (default) or "disk" (diskcache)
            cache_dir: Directory for the disk cache
            cache_ttl: Entry lifetime in seconds
            cache_max_entries: In-memory cache capacity

        Analysis phases:
            circular_detection: Compute graph cycles
            semantic_analysis: Run pattern detection, metrics and recommendations

        File filtering:
            extension: Source file extension to scan
            max_file_size: Files above this many bytes are skipped with a warning
            ignore_patterns: Base-name globs or path fragments to skip

        Project layout:
            module_path: Import prefix of the project (default: read from go.mod)

        Performance:
            workers: Parallel parser workers (None = auto-detect)
    """

    # Caching
    cache_enabled: bool = True
    cache_backend: CacheBackend = "memory"
    cache_dir: str = ".kthulu-cache"
    cache_ttl: float = 3600.0
    cache_max_entries: int = 10000

    # Analysis phases
    circular_detection: bool = True
    semantic_analysis: bool = True

    # File filtering
    extension: str = ".go"
    max_file_size: int = 10 * 1024 * 1024
    ignore_patterns: list[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_PATTERNS))

    # Project layout
    module_path: Optional[str] = None

    # Performance
    workers: Optional[int] = None

    authorization: AuthorizationConfig = field(default_factory=AuthorizationConfig)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.cache_backend not in ("memory", "disk"):
            raise InvalidConfigError(
                "cache_backend", self.cache_backend, "expected 'memory' or 'disk'"
            )
        if self.cache_ttl < 0:
            raise InvalidConfigError("cache_ttl", self.cache_ttl, "must be non-negative")
        if self.cache_max_entries < 1:
            raise InvalidConfigError(
                "cache_max_entries", self.cache_max_entries, "must be at least 1"
            )
        if self.max_file_size <= 0:
            raise InvalidConfigError("max_file_size", self.max_file_size, "must be positive")
        if not self.extension.startswith("."):
            raise InvalidConfigError("extension", self.extension, "must start with '.'")
        if self.workers is not None and self.workers < 1:
            raise InvalidConfigError("workers", self.workers, "must be at least 1")


def load_config(config_file: Optional[Path] = None, **overrides) -> AnalyzerConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags)

    Returns:
        Validated AnalyzerConfig instance

    Raises:
        InvalidConfigError: If a config file is missing or holds invalid values
    """
    merged: dict = {}

    global_config = Path.home() / ".kthulu-insight.toml"
    if global_config.exists():
        _merge(merged, _load_toml_file(global_config))

    project_config = Path.cwd() / "kthulu-insight.toml"
    if project_config.exists():
        _merge(merged, _load_toml_file(project_config))

    if config_file is not None:
        if not config_file.exists():
            raise InvalidConfigError("config_file", config_file, "file not found")
        _merge(merged, _load_toml_file(config_file))

    _merge(merged, _load_env_vars(AnalyzerConfig, "KTHULU_"))
    auth_env = _load_env_vars(AuthorizationConfig, "KTHULU_AUTH_")
    if auth_env:
        _merge(merged, {"authorization": auth_env})

    _merge(merged, overrides)

    # Handle [authorization] section from TOML
    auth_section = merged.pop("authorization", None)
    if isinstance(auth_section, dict):
        try:
            merged["authorization"] = AuthorizationConfig(**auth_section)
        except TypeError as e:
            raise InvalidConfigError("authorization", auth_section, str(e))
    elif isinstance(auth_section, AuthorizationConfig):
        merged["authorization"] = auth_section

    try:
        return AnalyzerConfig(**merged)
    except TypeError as e:
        # Unknown field in config
        raise InvalidConfigError("config", sorted(merged), str(e))


def _merge(target: dict, source: dict) -> None:
    """Shallow merge with one level of nesting for the [authorization] table."""
    for key, value in source.items():
        if key == "authorization" and isinstance(value, dict) and isinstance(
            target.get(key), dict
        ):
            target[key] = {**target[key], **value}
        else:
            target[key] = value


def _load_env_vars(config_cls: type, prefix: str) -> dict[str, Any]:
    """Load configuration fields of ``config_cls`` from ``<prefix><FIELD>`` variables.

    Examples:
        KTHULU_CACHE_ENABLED=false
        KTHULU_MAX_FILE_SIZE=2048
        KTHULU_AUTH_DEFAULT_DENY=0
    """
    type_hints = get_type_hints(config_cls)

    result: dict[str, Any] = {}

    for field_name in config_cls.__dataclass_fields__:
        env_key = f"{prefix}{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse an environment variable string to the field's type.

    Returns None for types that cannot come from the environment.

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    # Handle Optional[X] which is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    # Lists are comma separated
    if origin is list or type_hint is list:
        return [part.strip() for part in value.split(",") if part.strip()]

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Raises:
        InvalidConfigError: If TOML parsing fails
    """
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise InvalidConfigError("config_file", path, str(e))
