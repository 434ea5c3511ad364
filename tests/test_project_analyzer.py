"""Tests for analysis/engine.py."""

import pytest

from kthulu_insight.analysis import ProjectAnalyzer
from kthulu_insight.analysis.engine import module_from_import, read_module_path
from kthulu_insight.analysis.models import FileAnalysis
from kthulu_insight.cache import MemoryCache, NullCache
from kthulu_insight.cancellation import CancellationToken
from kthulu_insight.config import AnalyzerConfig
from kthulu_insight.exceptions import AnalysisCancelledError, InvalidRootError


class TestImportResolution:
    def test_module_path_prefix(self):
        assert module_from_import("example.com/shop/internal/modules/user", "example.com/shop") == "user"

    def test_foreign_prefix_ignored(self):
        assert module_from_import("github.com/x/internal/modules/user", "example.com/shop") is None

    def test_requires_modules_segment(self):
        assert module_from_import("example.com/shop/internal/user", "example.com/shop") is None

    def test_fallback_without_module_path(self):
        assert module_from_import("example.com/shop/internal/modules/auth", None) == "auth"
        assert module_from_import("github.com/lib/modules/auth", None) is None

    def test_read_module_path(self, tmp_path):
        (tmp_path / "go.mod").write_text("module example.com/shop\n\ngo 1.22\n")
        assert read_module_path(tmp_path) == "example.com/shop"
        assert read_module_path(tmp_path / "missing") is None


class TestProjectAnalyzer:
    def test_payments_fixture(self, analyze, payments_root):
        analysis = analyze(payments_root)

        assert list(analysis.modules) == ["payments"]
        module = analysis.modules["payments"]
        assert module.files == ["payments/charge.go"]
        assert module.package_name == "payments"
        assert module.dependencies == ["core"]
        assert [t.type for t in analysis.tags] == ["module", "dependency", "service"]
        assert [d.key for d in analysis.dependencies] == [("payments", "core", "module")]
        assert [fa.path for fa in analysis.files] == ["payments/charge.go", "payments/refund.go"]

    def test_module_files_carry_their_module_tag(self, analyze, shop_root):
        analysis = analyze(shop_root)
        for name, module in analysis.modules.items():
            assert module.files
            for path in module.files:
                assert name in analysis.file(path).module_names

    def test_module_order_follows_walk(self, analyze, shop_root):
        analysis = analyze(shop_root)
        assert list(analysis.modules) == ["order", "user"]
        assert analysis.modules["order"].files == [
            "internal/modules/order/handler.go",
            "internal/modules/order/service.go",
        ]

    def test_import_dependencies(self, analyze, shop_root):
        analysis = analyze(shop_root)
        assert analysis.module_path == "example.com/shop"
        assert [d.key for d in analysis.dependencies] == [("order", "user", "import")]

    def test_requires_tag(self, analyze, make_project):
        root = make_project(
            {
                "billing/billing.go": """
                    // @kthulu:module:billing
                    // @kthulu:requires:user
                    package billing
                """
            }
        )
        analysis = analyze(root)
        assert [d.key for d in analysis.dependencies] == [("billing", "user", "requires")]

    def test_untagged_dependency_source_is_package(self, analyze, make_project):
        root = make_project(
            {
                "misc/misc.go": """
                    // @kthulu:dependency:core
                    package misc
                """
            }
        )
        analysis = analyze(root)
        assert analysis.modules == {}
        assert [d.key for d in analysis.dependencies] == [("misc", "core", "module")]

    def test_self_import_skipped(self, analyze, make_project):
        root = make_project(
            {
                "go.mod": "module example.com/app\n",
                "internal/modules/user/a.go": """
                    // @kthulu:module:user
                    package user

                    import _ "example.com/app/internal/modules/user"
                """,
            }
        )
        assert analyze(root).dependencies == []

    def test_parse_error_is_a_warning(self, analyze, make_project):
        root = make_project(
            {
                "ok/ok.go": """
                    // @kthulu:module:ok
                    package ok
                """,
                "bad/bad.go": """
                    package bad

                    func Broken( {
                """,
            }
        )
        analysis = analyze(root)
        assert list(analysis.modules) == ["ok"]
        assert any("KT201" in w and "bad/bad.go" in w for w in analysis.warnings)

    def test_oversized_file_is_a_warning(self, make_project):
        root = make_project({"big.go": "package big\n" + "// filler line\n" * 50})
        config = AnalyzerConfig(cache_enabled=False, max_file_size=64)
        analysis = ProjectAnalyzer(config).analyze(root)
        assert analysis.files == []
        assert any("KT202" in w for w in analysis.warnings)

    def test_package_conflict_warning(self, analyze, make_project):
        root = make_project(
            {
                "one/a.go": """
                    // @kthulu:module:shared
                    package one
                """,
                "two/b.go": """
                    // @kthulu:module:shared
                    package two
                """,
            }
        )
        analysis = analyze(root)
        assert analysis.modules["shared"].files == ["one/a.go", "two/b.go"]
        assert any("KT203" in w for w in analysis.warnings)

    def test_empty_project(self, analyze, tmp_path):
        analysis = analyze(tmp_path)
        assert analysis.is_empty
        assert analysis.dependencies == []

    def test_invalid_root(self, analyze, tmp_path):
        with pytest.raises(InvalidRootError):
            analyze(tmp_path / "nope")

    def test_cancelled_token(self, config, payments_root):
        token = CancellationToken()
        token.cancel()
        with pytest.raises(AnalysisCancelledError):
            ProjectAnalyzer(config, cache=NullCache()).analyze(payments_root, token)

    def test_idempotent_serialization(self, analyze, shop_root):
        first = analyze(shop_root).to_json(include_timestamp=False)
        second = analyze(shop_root).to_json(include_timestamp=False)
        assert first == second


class TestCachedAnalysis:
    def test_second_run_served_from_cache(self, shop_root):
        cache = MemoryCache()
        analyzer = ProjectAnalyzer(AnalyzerConfig(workers=2), cache=cache)

        first = analyzer.analyze(shop_root)
        assert analyzer.parsed == 3
        assert analyzer.cache_hits == 0

        second = analyzer.analyze(shop_root)
        assert analyzer.cache_hits == 3
        assert analyzer.parsed == 0
        assert first.to_json(include_timestamp=False) == second.to_json(include_timestamp=False)

    def test_file_analysis_bytes_round_trip(self, analyze, shop_root):
        for fa in analyze(shop_root).files:
            assert FileAnalysis.from_bytes(fa.to_bytes()) == fa
