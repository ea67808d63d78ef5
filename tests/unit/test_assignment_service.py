"""Unit tests for AssignmentService (grant preconditions, revoke, cache invalidation)."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from rbac.application.dtos.user_role import AssignRoleOptions
from rbac.application.services.assignment_service import AssignmentService
from rbac.domain.exceptions import (
    AssignmentNotFoundException,
    DuplicateAssignmentException,
    InactiveRoleAssignmentException,
    RoleNotFoundException,
)
from rbac.shared.utils.datetime import utc_now
from tests.conftest import make_grant, make_role


def _service(
    authorization: AsyncMock | None = None,
) -> tuple[AssignmentService, AsyncMock, AsyncMock]:
    role_repo = AsyncMock()
    user_role_repo = AsyncMock()
    return AssignmentService(role_repo, user_role_repo, authorization), role_repo, user_role_repo


async def test_assign_role_creates_grant_and_invalidates_user_cache() -> None:
    authorization = AsyncMock()
    svc, role_repo, user_role_repo = _service(authorization)
    role_repo.get_by_id.return_value = make_role("editor", role_id="r1")
    user_role_repo.get_active.return_value = None
    user_role_repo.create_assignment.return_value = make_grant("u1", "r1", tenant_id="t1")
    expires = datetime(2030, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))

    grant = await svc.assign_role_to_user(
        "u1",
        "r1",
        tenant_id="t1",
        actor_id="admin-1",
        options=AssignRoleOptions(expires_at=expires, reason="on-call", metadata={"k": 1}),
    )

    assert grant.role_id == "r1"
    kwargs = user_role_repo.create_assignment.await_args.kwargs
    assert kwargs["user_id"] == "u1"
    assert kwargs["tenant_id"] == "t1"
    assert kwargs["assigned_by"] == "admin-1"
    assert kwargs["expires_at"] == expires
    assert kwargs["expires_at"].utcoffset() == timedelta(0)
    assert kwargs["reason"] == "on-call"
    assert kwargs["metadata"] == {"k": 1}
    authorization.invalidate_user_cache.assert_awaited_once_with("u1", "t1")


async def test_assign_role_missing_role() -> None:
    svc, role_repo, user_role_repo = _service()
    role_repo.get_by_id.return_value = None
    with pytest.raises(RoleNotFoundException):
        await svc.assign_role_to_user("u1", "missing")
    user_role_repo.create_assignment.assert_not_awaited()


async def test_assign_role_inactive_role() -> None:
    svc, role_repo, user_role_repo = _service()
    role_repo.get_by_id.return_value = make_role("old", is_active=False)
    with pytest.raises(InactiveRoleAssignmentException):
        await svc.assign_role_to_user("u1", "role-old")
    user_role_repo.get_active.assert_not_awaited()


async def test_assign_role_blocked_by_expired_but_unrevoked_grant() -> None:
    """An is_active grant blocks a new one even after its expiry passed."""
    svc, role_repo, user_role_repo = _service()
    role_repo.get_by_id.return_value = make_role("editor", role_id="r1")
    user_role_repo.get_active.return_value = make_grant(
        "u1", "r1", expires_at=utc_now() - timedelta(days=1)
    )

    with pytest.raises(DuplicateAssignmentException) as exc_info:
        await svc.assign_role_to_user("u1", "r1")
    assert exc_info.value.details == {"user_id": "u1", "role_id": "r1", "tenant_id": None}
    user_role_repo.create_assignment.assert_not_awaited()


async def test_revoke_role_soft_closes_grant() -> None:
    authorization = AsyncMock()
    svc, _, user_role_repo = _service(authorization)
    user_role_repo.get_active.return_value = make_grant("u1", "r1", grant_id="g1")
    user_role_repo.revoke.return_value = make_grant("u1", "r1", grant_id="g1", is_active=False)

    revoked = await svc.revoke_role_from_user("u1", "r1", actor_id="admin-1", reason="left team")

    assert revoked.is_active is False
    args, kwargs = user_role_repo.revoke.await_args
    assert args == ("g1",)
    assert kwargs["revoked_by"] == "admin-1"
    assert kwargs["reason"] == "left team"
    assert kwargs["revoked_at"].tzinfo is not None
    authorization.invalidate_user_cache.assert_awaited_once_with("u1", None)


async def test_revoke_role_without_active_grant() -> None:
    svc, _, user_role_repo = _service()
    user_role_repo.get_active.return_value = None
    with pytest.raises(AssignmentNotFoundException) as exc_info:
        await svc.revoke_role_from_user("u1", "r1", tenant_id="t1")
    assert exc_info.value.details["tenant_id"] == "t1"
    user_role_repo.revoke.assert_not_awaited()


async def test_get_user_roles_reads_live_grants_now() -> None:
    svc, _, user_role_repo = _service()
    user_role_repo.get_roles_for_user.return_value = [make_role("editor")]

    roles = await svc.get_user_roles("u1", "t1")

    assert [r.name for r in roles] == ["editor"]
    user_id, tenant_id, now = user_role_repo.get_roles_for_user.await_args.args
    assert (user_id, tenant_id) == ("u1", "t1")
    assert abs((utc_now() - now).total_seconds()) < 5


async def test_list_user_assignments_passes_history_flag() -> None:
    svc, _, user_role_repo = _service()
    user_role_repo.list_by_user.return_value = []
    await svc.list_user_assignments("u1", include_revoked=True)
    user_role_repo.list_by_user.assert_awaited_once_with("u1", None, include_revoked=True)
