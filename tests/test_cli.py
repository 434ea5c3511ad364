"""Tests for the typer CLI."""

import json

import pytest
from typer.testing import CliRunner

from kthulu_insight import __version__
from kthulu_insight.cli import app

from conftest import write_tree

runner = CliRunner()

SECURED = {
    "admin/admin.go": """
        // @kthulu:module:admin
        // @kthulu:security:billing permissions=write:own
        package admin
    """,
}


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep user and project config files out of CLI runs."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(home)


@pytest.fixture
def secured_root(tmp_path):
    return write_tree(tmp_path / "secured", SECURED)


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert f"kthulu-insight {__version__}" in result.output


class TestInsightCommands:
    def test_overview(self, payments_root):
        result = runner.invoke(app, ["overview", str(payments_root), "--no-cache"])
        assert result.exit_code == 0
        assert "Modules: 1" in result.stdout
        assert "payments -> core (module)" in result.stdout

    def test_overview_no_deps(self, payments_root):
        result = runner.invoke(app, ["overview", str(payments_root), "--no-deps"])
        assert result.exit_code == 0
        assert "Dependency edges:" not in result.stdout

    def test_modules(self, payments_root):
        result = runner.invoke(app, ["modules", str(payments_root)])
        assert result.exit_code == 0
        assert "Module: payments" in result.stdout
        assert "Files: 1" in result.stdout

    def test_tags_and_deps(self, payments_root):
        tags = runner.invoke(app, ["tags", str(payments_root)])
        deps = runner.invoke(app, ["deps", str(payments_root)])
        assert "service: 1" in tags.stdout
        assert "payments -> core" in deps.stdout

    def test_guide(self, guide_root):
        result = runner.invoke(app, ["guide", str(guide_root)])
        assert result.exit_code == 0
        assert "order/service.go" in result.stdout
        assert "@kthulu:module:order" in result.stdout
        assert "OrderService" in result.stdout

    def test_invalid_root(self, tmp_path):
        result = runner.invoke(app, ["overview", str(tmp_path / "missing")])
        assert result.exit_code == 1
        assert "Invalid project root" in result.output


class TestGraphCommand:
    def test_json(self, cycle_root):
        result = runner.invoke(app, ["graph", str(cycle_root), "--format", "json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["cycles"] == [["A", "B", "C"]]
        assert [n["id"] for n in data["nodes"]] == ["A", "B", "C"]

    def test_dot(self, payments_root):
        result = runner.invoke(app, ["graph", str(payments_root)])
        assert result.exit_code == 0
        assert '"payments" -> "core"' in result.stdout

    def test_unknown_format(self, payments_root):
        result = runner.invoke(app, ["graph", str(payments_root), "--format", "svg"])
        assert result.exit_code == 1


class TestAnalyzeCommand:
    def test_json(self, shop_root):
        result = runner.invoke(app, ["analyze", str(shop_root), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["metrics"]["module_count"] == 2
        assert data["recommendations"] == []
        assert "Hexagonal Architecture" in [p["name"] for p in data["patterns"]]

    def test_rich_report(self, cycle_root):
        result = runner.invoke(app, ["analyze", str(cycle_root)])
        assert result.exit_code == 0
        assert "Recommendations" in result.stdout
        assert "Circular dependency detected" in result.stdout

    def test_log_file(self, shop_root, tmp_path):
        log_file = tmp_path / "analyze.log"
        result = runner.invoke(
            app, ["analyze", str(shop_root), "--json", "--log-file", str(log_file)]
        )
        assert result.exit_code == 0
        json.loads(result.stdout)
        assert "Analyzed 3 files" in log_file.read_text(encoding="utf-8")


class TestPlanCommand:
    def test_text(self):
        result = runner.invoke(app, ["plan", "invoice"])
        assert result.exit_code == 0
        assert (
            "Install order: user -> auth -> organization -> contact -> product -> invoice"
            in result.stdout
        )
        assert "Recommend add audit [medium]" in result.stdout

    def test_json_conflict(self):
        result = runner.invoke(app, ["plan", "sqlite", "postgresql", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert len(data["conflicts"]) == 1
        assert data["install_order"] == ["postgresql", "sqlite"]

    def test_project_cycle_fails(self, cycle_root):
        result = runner.invoke(app, ["plan", "A", "--project", str(cycle_root)])
        assert result.exit_code == 1
        assert "Circular dependency" in result.output


class TestSecurityCommands:
    def test_policies_json(self, secured_root):
        result = runner.invoke(app, ["policies", str(secured_root), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert len(data["policies"]) == 2
        assert len(data["roles"]) == 4
        assert data["settings"]["rbac"]["default_deny"] is True

    def test_policies_table(self, secured_root):
        result = runner.invoke(app, ["policies", str(secured_root)])
        assert result.exit_code == 0
        assert "2 policies, 4 roles" in result.stdout

    def test_check_allowed(self, secured_root):
        result = runner.invoke(
            app,
            ["check", "-s", "u1", "-r", "billing", "--role", "user", "--path", str(secured_root)],
        )
        assert result.exit_code == 0
        assert "ALLOWED" in result.stdout

    def test_check_denied(self, secured_root):
        result = runner.invoke(
            app,
            ["check", "-s", "u1", "-r", "billing", "--role", "guest", "--path", str(secured_root)],
        )
        assert result.exit_code == 1
        assert "DENIED" in result.stdout

    def test_check_bad_context(self, secured_root):
        result = runner.invoke(
            app,
            ["check", "-s", "u1", "-r", "billing", "--context", "oops", "--path", str(secured_root)],
        )
        assert result.exit_code == 2


def test_cache_info_without_disk_backend():
    result = runner.invoke(app, ["cache-info"])
    assert result.exit_code == 0
    assert "No persistent cache" in result.stdout
