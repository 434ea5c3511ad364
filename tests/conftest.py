"""Shared test fixtures for Kthulu Insight tests."""

from pathlib import Path
from textwrap import dedent

import pytest

from kthulu_insight.analysis import ProjectAnalyzer
from kthulu_insight.cache import NullCache
from kthulu_insight.config import AnalyzerConfig


def write_tree(root: Path, files: dict) -> Path:
    """Write ``{relative path: source}`` under root, dedenting each source."""
    for rel_path, source in files.items():
        target = root / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(dedent(source).lstrip("\n"), encoding="utf-8")
    return root


@pytest.fixture
def make_project(tmp_path):
    """Factory writing a Go tree into a fresh directory."""

    def _make(files: dict, name: str = "project") -> Path:
        return write_tree(tmp_path / name, files)

    return _make


@pytest.fixture
def config():
    """Analyzer config without caching, two workers."""
    return AnalyzerConfig(cache_enabled=False, workers=2)


@pytest.fixture
def analyze(config):
    """Analyse a root with a cache-free analyzer."""

    def _analyze(root):
        return ProjectAnalyzer(config, cache=NullCache()).analyze(root)

    return _analyze


# ── Fixture trees ─────────────────────────────────────────────────


PAYMENTS = {
    "payments/charge.go": """
        // @kthulu:module:payments
        // @kthulu:dependency:core
        // @kthulu:service:charge
        package payments

        func Charge(amount int) error {
            return nil
        }
    """,
    "payments/refund.go": """
        package payments

        func Refund(id string) error {
            return nil
        }
    """,
}

CYCLE = {
    "a/a.go": """
        // @kthulu:module:A
        // @kthulu:dependency:B
        package a
    """,
    "b/b.go": """
        // @kthulu:module:B
        // @kthulu:dependency:C
        package b
    """,
    "c/c.go": """
        // @kthulu:module:C
        // @kthulu:dependency:A
        package c
    """,
}

GUIDE = {
    "user.go": """
        // @kthulu:module:user
        package user

        type User struct {
            ID string
        }
    """,
    "order/service.go": """
        package order

        type OrderService struct{}

        func (s *OrderService) Place() error {
            return nil
        }
    """,
}

SHOP = {
    "go.mod": """
        module example.com/shop

        go 1.22
    """,
    "internal/modules/user/user.go": """
        // @kthulu:module:user layer=domain
        package user

        // User is an account holder.
        // @kthulu:domain:User aggregate=true
        type User struct {
            ID string
        }

        // UserRepository stores users.
        // @kthulu:repository:users
        type UserRepository struct{}
    """,
    "internal/modules/order/service.go": """
        // @kthulu:module:order layer=service
        package order

        import (
            "fmt"

            "example.com/shop/internal/modules/user"
        )

        // OrderService places orders.
        // @kthulu:service:orders observable
        type OrderService struct {
            owner user.User
        }

        func (s *OrderService) Place() error {
            return fmt.Errorf("not implemented")
        }
    """,
    "internal/modules/order/handler.go": """
        // @kthulu:module:order
        package order

        // OrderHandler serves order requests.
        // @kthulu:handler:orders
        func OrderHandler() {}
    """,
}


@pytest.fixture
def payments_root(make_project):
    return make_project(PAYMENTS, "payments_project")


@pytest.fixture
def cycle_root(make_project):
    return make_project(CYCLE, "cycle_project")


@pytest.fixture
def guide_root(make_project):
    return make_project(GUIDE, "guide_project")


@pytest.fixture
def shop_root(make_project):
    return make_project(SHOP, "shop")
