"""Unit tests for PermissionResolver (union, inheritance depth, dangling names, cycles)."""

from collections.abc import Collection
from unittest.mock import AsyncMock

import pytest

from rbac.application.dtos.role import RoleResult
from rbac.application.services.permission_resolver import PermissionResolver
from tests.conftest import make_role


def _resolver(
    assigned: list[RoleResult],
    catalog: list[RoleResult],
    *,
    max_depth: int = 1,
) -> tuple[PermissionResolver, AsyncMock, AsyncMock]:
    """Resolver whose user holds `assigned`; inherited lookups search `catalog` (active only)."""
    role_repo = AsyncMock()
    user_role_repo = AsyncMock()
    user_role_repo.get_roles_for_user.return_value = assigned

    async def get_active_by_names(
        names: Collection[str], tenant_id: str | None
    ) -> list[RoleResult]:
        return [
            r
            for r in catalog
            if r.name in names and r.tenant_id == tenant_id and r.is_active
        ]

    role_repo.get_active_by_names.side_effect = get_active_by_names
    resolver = PermissionResolver(role_repo, user_role_repo, max_depth=max_depth)
    return resolver, role_repo, user_role_repo


def _chain() -> tuple[RoleResult, RoleResult, RoleResult]:
    base = make_role("BASE", permissions={"leads:read"})
    mid = make_role("MID", permissions={"leads:update"}, inherited_roles={"BASE"})
    top = make_role("TOP", permissions={"leads:export"}, inherited_roles={"MID"})
    return base, mid, top


async def test_union_of_assigned_role_permissions() -> None:
    a = make_role("a", permissions={"leads:read", "buyers:read"})
    b = make_role("b", permissions={"leads:read", "reports:read"})
    resolver, _, _ = _resolver([a, b], [a, b])

    assert await resolver.get_user_permissions("u1") == {
        "leads:read",
        "buyers:read",
        "reports:read",
    }


async def test_no_grants_yields_empty_set() -> None:
    resolver, role_repo, _ = _resolver([], [])
    assert await resolver.get_user_permissions("u1", "t1") == set()
    role_repo.get_active_by_names.assert_not_awaited()


async def test_inheritance_expands_exactly_one_level_by_default() -> None:
    """TOP -> MID -> BASE: MID's permissions are reachable, BASE's are not."""
    base, mid, top = _chain()
    resolver, role_repo, _ = _resolver([top], [base, mid, top])

    assert await resolver.get_user_permissions("u1") == {"leads:export", "leads:update"}
    role_repo.get_active_by_names.assert_awaited_once()


async def test_deeper_policy_follows_the_chain() -> None:
    base, mid, top = _chain()
    resolver, _, _ = _resolver([top], [base, mid, top], max_depth=2)

    assert await resolver.get_user_permissions("u1") == {
        "leads:export",
        "leads:update",
        "leads:read",
    }


async def test_depth_zero_ignores_inheritance() -> None:
    base, mid, top = _chain()
    resolver, role_repo, _ = _resolver([top], [base, mid, top], max_depth=0)

    assert await resolver.get_user_permissions("u1") == {"leads:export"}
    role_repo.get_active_by_names.assert_not_awaited()


async def test_cycle_terminates_with_deep_policy() -> None:
    a = make_role("a", permissions={"leads:read"}, inherited_roles={"b"})
    b = make_role("b", permissions={"leads:update"}, inherited_roles={"a"})
    resolver, role_repo, _ = _resolver([a], [a, b], max_depth=10)

    assert await resolver.get_user_permissions("u1") == {"leads:read", "leads:update"}
    assert role_repo.get_active_by_names.await_count <= 2


async def test_dangling_and_inactive_inherited_names_are_skipped() -> None:
    inactive = make_role("retired", permissions={"users:delete"}, is_active=False)
    role = make_role(
        "editor", permissions={"leads:read"}, inherited_roles={"ghost", "retired"}
    )
    resolver, _, _ = _resolver([role], [role, inactive])

    assert await resolver.get_user_permissions("u1") == {"leads:read"}


async def test_inherited_names_resolve_in_requested_scope() -> None:
    """A global role named in inherited_roles is not visible when resolving a tenant scope."""
    global_base = make_role("base", permissions={"leads:read"})
    tenant_base = make_role("base", role_id="t-base", tenant_id="t1", permissions={"buyers:read"})
    role = make_role("editor", tenant_id="t1", inherited_roles={"base"})
    resolver, _, user_role_repo = _resolver([role], [global_base, tenant_base])

    assert await resolver.get_user_permissions("u1", "t1") == {"buyers:read"}
    assert user_role_repo.get_roles_for_user.await_args.args[:2] == ("u1", "t1")


async def test_has_permission_helpers() -> None:
    role = make_role("editor", permissions={"leads:read", "leads:update"})
    resolver, _, _ = _resolver([role], [role])

    assert await resolver.has_permission("u1", "leads:read")
    assert not await resolver.has_permission("u1", "leads:delete")
    assert await resolver.has_any_permission("u1", ["leads:delete", "leads:update"])
    assert not await resolver.has_any_permission("u1", ["leads:delete"])
    assert await resolver.has_all_permissions("u1", ["leads:read", "leads:update"])
    assert not await resolver.has_all_permissions("u1", ["leads:read", "leads:delete"])


async def test_empty_permission_lists() -> None:
    """Empty any-of is False; empty all-of is vacuously True without a store read."""
    resolver, _, user_role_repo = _resolver([], [])

    assert await resolver.has_any_permission("u1", []) is False
    assert await resolver.has_all_permissions("u1", []) is True
    user_role_repo.get_roles_for_user.assert_not_awaited()


def test_negative_depth_rejected() -> None:
    with pytest.raises(ValueError):
        PermissionResolver(AsyncMock(), AsyncMock(), max_depth=-1)
