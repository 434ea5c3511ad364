"""Tests for security/authorization.py and the decision cache."""

import threading

import pytest

from kthulu_insight.config import AuthorizationConfig
from kthulu_insight.exceptions import NotFoundError, RoleHierarchyError
from kthulu_insight.security import (
    AccessRequest,
    AccessResult,
    AuthorizationCore,
    DecisionCache,
    Permission,
    Role,
    SecurityPolicy,
    builtin_roles,
)


@pytest.fixture
def core():
    core = AuthorizationCore()
    core.apply_batch(
        [
            SecurityPolicy(id="p-docs", resource="docs/*", actions=["read"], required_roles=["user"]),
            SecurityPolicy(
                id="p-admin", resource="admin", actions=["*"], required_roles=["admin"]
            ),
            SecurityPolicy(
                id="p-tenant",
                resource="reports",
                actions=["read"],
                required_roles=["user"],
                conditions={"tenant": "acme"},
            ),
        ],
        builtin_roles().values(),
    )
    return core


def request(resource, action="read", roles=("user",), subject="u1", **context):
    return AccessRequest(subject, resource, action, roles=list(roles), context=context)


class TestDecisions:
    def test_granted(self, core):
        result = core.check_access(request("docs/42"))
        assert result.allowed
        assert result.reason == "Access granted by policy p-docs"
        assert result.applied_policies == ["p-docs"]
        assert not result.cache_hit

    def test_denied_missing_role(self, core):
        result = core.check_access(request("admin", "delete"))
        assert not result.allowed
        assert result.reason == "User lacks required roles or conditions not met"
        assert result.applied_policies == ["p-admin"]

    def test_no_policy(self, core):
        result = core.check_access(request("unknown"))
        assert not result.allowed
        assert result.reason == "No applicable security policies found"
        assert result.applied_policies == []

    def test_no_policy_denied_without_default_deny(self):
        core = AuthorizationCore(AuthorizationConfig(default_deny=False))
        result = core.check_access(request("anything", roles=["guest"]))
        assert not result.allowed
        assert result.reason == "No applicable security policies found"
        assert result.applied_policies == []

    def test_hierarchy_grants_parent_permissions(self, core):
        core.add_role(Role(id="editor", parent_roles=["user"]))
        result = core.check_access(request("docs/1", roles=["editor"]))
        assert result.allowed
        assert result.applied_policies == ["p-docs"]

    def test_builtin_roles_do_not_inherit(self):
        core = AuthorizationCore()
        core.apply_batch(
            [SecurityPolicy(id="p", resource="public/*", actions=["read"], required_roles=["guest"])],
            builtin_roles().values(),
        )
        assert not core.check_access(request("public/index", roles=["admin"])).allowed
        assert core.check_access(request("public/index", roles=["guest"])).allowed

    def test_hierarchy_can_be_disabled(self):
        core = AuthorizationCore(AuthorizationConfig(hierarchical_roles=False))
        core.apply_batch(
            [SecurityPolicy(id="p", resource="docs", required_roles=["user"])],
            [*builtin_roles().values(), Role(id="editor", parent_roles=["user"])],
        )
        assert not core.check_access(request("docs", roles=["editor"])).allowed

    def test_conditions(self, core):
        assert core.check_access(request("reports", tenant="acme")).allowed
        assert not core.check_access(request("reports", subject="u2", tenant="other")).allowed
        assert not core.check_access(request("reports", subject="u3")).allowed

    def test_conditions_ignored_without_contextual_security(self):
        core = AuthorizationCore(AuthorizationConfig(contextual_security=False))
        core.add_policy(
            SecurityPolicy(id="p", resource="r", required_roles=["user"], conditions={"k": "v"})
        )
        assert core.check_access(request("r")).allowed

    def test_strict_mode_rejects_empty_subject(self, core):
        result = core.check_access(request("docs/1", subject=""))
        assert not result.allowed
        assert result.reason == "invalid request"

    def test_lenient_mode_evaluates_empty_subject(self):
        core = AuthorizationCore(AuthorizationConfig(strict_mode=False))
        core.add_policy(SecurityPolicy(id="p", resource="*", required_roles=["guest"]))
        assert core.check_access(request("x", subject="", roles=["guest"])).allowed

    def test_timeout(self, core):
        result = core.check_access(request("docs/1"), timeout=0)
        assert not result.allowed
        assert result.reason == "timeout"
        assert core.check_access(request("docs/1")).cache_hit is False

    def test_internal_error_is_a_result(self, core, monkeypatch):
        def boom(req, cancel):
            raise RuntimeError("store corrupted")

        monkeypatch.setattr(core, "_evaluate", boom)
        result = core.check_access(request("docs/1"))
        assert not result.allowed
        assert result.reason == "authorization_error"
        assert result.error == "store corrupted"

    def test_duration_recorded(self, core):
        assert core.check_access(request("docs/1")).duration >= 0.0


class TestCaching:
    def test_second_check_is_cache_hit(self, core):
        first = core.check_access(request("docs/1"))
        second = core.check_access(request("docs/1"))
        assert not first.cache_hit
        assert second.cache_hit
        assert second.allowed == first.allowed
        assert second.reason == first.reason

    def test_role_order_does_not_matter(self, core):
        core.check_access(request("docs/1", roles=["user", "guest"]))
        assert core.check_access(request("docs/1", roles=["guest", "user"])).cache_hit

    def test_cache_disabled(self):
        core = AuthorizationCore(AuthorizationConfig(cache_enabled=False))
        core.check_access(request("x"))
        assert not core.check_access(request("x")).cache_hit

    def test_policy_update_invalidates(self, core):
        assert core.check_access(request("admin", "read")).allowed is False
        core.add_policy(
            SecurityPolicy(id="p-admin", resource="admin", actions=["*"], required_roles=["user"])
        )
        result = core.check_access(request("admin", "read"))
        assert result.allowed
        assert not result.cache_hit

    def test_new_matching_policy_invalidates(self, core):
        assert not core.check_access(request("wiki")).allowed
        core.add_policy(SecurityPolicy(id="p-wiki", resource="wiki", required_roles=["user"]))
        assert core.check_access(request("wiki")).allowed

    def test_unrelated_policy_keeps_cache(self, core):
        core.check_access(request("docs/1"))
        core.add_policy(SecurityPolicy(id="p-other", resource="other", required_roles=["user"]))
        assert core.check_access(request("docs/1")).cache_hit

    def test_remove_policy(self, core):
        assert core.check_access(request("docs/1")).allowed
        core.remove_policy("p-docs")
        assert not core.check_access(request("docs/1")).allowed
        with pytest.raises(NotFoundError):
            core.remove_policy("p-docs")

    def test_policy_write_during_check_leaves_no_stale_decision(self, core, monkeypatch):
        store = core._cache.set
        writer = threading.Thread(
            target=core.add_policy,
            args=(SecurityPolicy(id="p-wiki", resource="wiki", required_roles=["user"]),),
        )

        def store_while_writer_waits(key, result):
            writer.start()
            writer.join(timeout=0.1)
            store(key, result)

        monkeypatch.setattr(core._cache, "set", store_while_writer_waits)
        first = core.check_access(request("wiki"))
        monkeypatch.setattr(core._cache, "set", store)
        writer.join()

        assert not first.allowed
        second = core.check_access(request("wiki"))
        assert second.allowed
        assert not second.cache_hit


class TestRoles:
    def test_deactivated_role_grants_nothing(self, core):
        core.add_role(Role(id="editor", parent_roles=["user"]))
        core.deactivate_role("user")
        assert not core.check_access(request("docs/1")).allowed
        assert not core.check_access(request("docs/1", roles=["editor"])).allowed
        core.activate_role("user")
        assert core.check_access(request("docs/1")).allowed

    def test_role_cycle_rejected(self, core):
        core.add_role(Role(id="editor", parent_roles=["user"]))
        with pytest.raises(RoleHierarchyError):
            core.add_role(Role(id="user", parent_roles=["editor"]))
        assert core.get_role("user").parent_roles == []

    def test_self_parent_rejected(self, core):
        with pytest.raises(RoleHierarchyError):
            core.add_role(Role(id="loop", parent_roles=["loop"]))

    def test_batch_is_atomic(self, core):
        before = core.stats()
        with pytest.raises(RoleHierarchyError):
            core.apply_batch(
                [SecurityPolicy(id="p-new", resource="new", required_roles=["x"])],
                [Role(id="x", parent_roles=["y"]), Role(id="y", parent_roles=["x"])],
            )
        after = core.stats()
        assert after["policies"] == before["policies"]
        assert after["roles"] == before["roles"]
        with pytest.raises(NotFoundError):
            core.get_policy("p-new")

    def test_missing_role(self, core):
        with pytest.raises(NotFoundError):
            core.get_role("nobody")
        with pytest.raises(NotFoundError):
            core.deactivate_role("nobody")


class TestStore:
    def test_replace_keeps_created_at(self, core):
        original = core.get_policy("p-docs")
        created = original.created_at
        core.add_policy(SecurityPolicy(id="p-docs", resource="docs/*", required_roles=["guest"]))
        replaced = core.get_policy("p-docs")
        assert replaced.created_at == created
        assert replaced.updated_at >= created

    def test_list_policies_sorted(self, core):
        assert [p.id for p in core.list_policies()] == ["p-admin", "p-docs", "p-tenant"]

    def test_permissions_counted(self, core):
        core.add_permission(Permission(id="docs:read", resource="docs", action="read"))
        assert core.stats()["permissions"] == 1

    def test_stats(self, core):
        core.check_access(request("docs/1"))
        core.check_access(request("docs/1"))
        stats = core.stats()
        assert stats["policies"] == 3
        assert stats["roles"] == 4
        assert stats["active_roles"] == 4
        assert stats["checks"] == 2
        assert stats["cache"]["hits"] == 1


class TestAudit:
    def test_every_decision_is_audited(self, core):
        core.check_access(request("docs/1"))
        core.check_access(request("admin", "delete", subject="u2"))
        log = core.audit_log()
        assert [(e.subject, e.result) for e in log] == [("u1", True), ("u2", False)]
        assert log[0].policy_id == "p-docs"
        assert log[1].reason == "User lacks required roles or conditions not met"

    def test_request_id_used_for_audit(self, core):
        req = AccessRequest("u1", "docs/1", "read", roles=["user"], request_id="req-7")
        assert core.check_access(req).audit.id == "req-7"

    def test_audit_disabled(self):
        core = AuthorizationCore(AuthorizationConfig(audit_enabled=False))
        result = core.check_access(request("x"))
        assert result.audit is None
        assert core.audit_log() == []


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestDecisionCache:
    def test_ttl(self):
        clock = FakeClock()
        cache = DecisionCache(ttl=5.0, clock=clock)
        cache.set("k", AccessResult(True, "ok"))
        clock.now = 4.9
        assert cache.get("k").allowed
        clock.now = 5.0
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_eviction_prefers_expired(self):
        clock = FakeClock()
        cache = DecisionCache(ttl=5.0, max_entries=2, clock=clock)
        cache.set("old", AccessResult(True, "ok"))
        clock.now = 3.0
        cache.set("fresh", AccessResult(True, "ok"))
        clock.now = 6.0
        cache.set("new", AccessResult(True, "ok"))
        assert cache.get("fresh") is not None
        assert cache.get("new") is not None
        assert cache.stats()["evictions"] == 1

    def test_eviction_drops_oldest(self):
        cache = DecisionCache(ttl=100.0, max_entries=2, clock=FakeClock())
        for key in ("a", "b", "c"):
            cache.set(key, AccessResult(True, "ok"))
        assert cache.get("a") is None
        assert cache.get("c") is not None

    def test_invalidate(self):
        cache = DecisionCache(clock=FakeClock())
        cache.set("a", AccessResult(True, "ok", ["p1"]))
        cache.set("b", AccessResult(True, "ok", ["p2"]))
        assert cache.invalidate(lambda key, result: "p1" in result.applied_policies) == 1
        assert cache.get("a") is None
        assert cache.get("b") is not None
