"""Tests for configuration loading."""

import os

import pytest

from kthulu_insight.config import AnalyzerConfig, AuthorizationConfig, load_config
from kthulu_insight.exceptions import InvalidConfigError


@pytest.fixture(autouse=True)
def clean_env(tmp_path, monkeypatch):
    """Empty HOME and working directory, no KTHULU_* variables."""
    home = tmp_path / "home"
    work = tmp_path / "work"
    home.mkdir()
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(work)
    for key in list(os.environ):
        if key.startswith("KTHULU_"):
            monkeypatch.delenv(key)
    return home, work


class TestDefaults:
    def test_analyzer_defaults(self):
        config = load_config()
        assert config == AnalyzerConfig()
        assert config.cache_backend == "memory"
        assert config.extension == ".go"
        assert "vendor/" in config.ignore_patterns
        assert config.authorization == AuthorizationConfig()

    def test_authorization_defaults(self):
        auth = AuthorizationConfig()
        assert auth.cache_enabled
        assert auth.cache_ttl == 300.0
        assert auth.strict_mode
        assert auth.default_deny
        assert auth.hierarchical_roles
        assert auth.contextual_security


class TestSources:
    def test_project_file(self, clean_env):
        _, work = clean_env
        (work / "kthulu-insight.toml").write_text(
            'cache_backend = "disk"\nworkers = 3\n\n[authorization]\ndefault_deny = false\n'
        )
        config = load_config()
        assert config.cache_backend == "disk"
        assert config.workers == 3
        assert config.authorization.default_deny is False
        assert config.authorization.strict_mode is True

    def test_project_overrides_global(self, clean_env):
        home, work = clean_env
        (home / ".kthulu-insight.toml").write_text("workers = 2\nmax_file_size = 1024\n")
        (work / "kthulu-insight.toml").write_text("workers = 4\n")
        config = load_config()
        assert config.workers == 4
        assert config.max_file_size == 1024

    def test_authorization_tables_merge(self, clean_env):
        home, work = clean_env
        (home / ".kthulu-insight.toml").write_text("[authorization]\ncache_ttl = 10.0\n")
        (work / "kthulu-insight.toml").write_text("[authorization]\naudit_enabled = false\n")
        auth = load_config().authorization
        assert auth.cache_ttl == 10.0
        assert auth.audit_enabled is False

    def test_explicit_file(self, tmp_path):
        path = tmp_path / "custom.toml"
        path.write_text('module_path = "example.com/app"\n')
        assert load_config(path).module_path == "example.com/app"

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(InvalidConfigError):
            load_config(tmp_path / "absent.toml")

    def test_env_vars(self, monkeypatch):
        monkeypatch.setenv("KTHULU_CACHE_ENABLED", "false")
        monkeypatch.setenv("KTHULU_MAX_FILE_SIZE", "2048")
        monkeypatch.setenv("KTHULU_IGNORE_PATTERNS", "gen/, *_mock.go")
        monkeypatch.setenv("KTHULU_AUTH_DEFAULT_DENY", "0")
        config = load_config()
        assert config.cache_enabled is False
        assert config.max_file_size == 2048
        assert config.ignore_patterns == ["gen/", "*_mock.go"]
        assert config.authorization.default_deny is False

    def test_overrides_beat_env(self, monkeypatch):
        monkeypatch.setenv("KTHULU_WORKERS", "2")
        assert load_config(workers=6).workers == 6


class TestValidation:
    def test_bad_env_bool(self, monkeypatch):
        monkeypatch.setenv("KTHULU_CACHE_ENABLED", "maybe")
        with pytest.raises(InvalidConfigError):
            load_config()

    def test_unknown_key(self, clean_env):
        _, work = clean_env
        (work / "kthulu-insight.toml").write_text("colour = true\n")
        with pytest.raises(InvalidConfigError):
            load_config()

    def test_unknown_authorization_key(self, clean_env):
        _, work = clean_env
        (work / "kthulu-insight.toml").write_text("[authorization]\nmode = 1\n")
        with pytest.raises(InvalidConfigError):
            load_config()

    def test_malformed_toml(self, clean_env):
        _, work = clean_env
        (work / "kthulu-insight.toml").write_text("workers = \n")
        with pytest.raises(InvalidConfigError):
            load_config()

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"cache_backend": "redis"},
            {"cache_ttl": -1},
            {"cache_max_entries": 0},
            {"max_file_size": 0},
            {"extension": "go"},
            {"workers": 0},
        ],
    )
    def test_invalid_analyzer_values(self, kwargs):
        with pytest.raises(InvalidConfigError):
            AnalyzerConfig(**kwargs)

    def test_invalid_authorization_values(self):
        with pytest.raises(InvalidConfigError):
            AuthorizationConfig(cache_ttl=-5)
        with pytest.raises(InvalidConfigError):
            AuthorizationConfig(cache_max_entries=0)
