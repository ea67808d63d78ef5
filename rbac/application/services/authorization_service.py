"""Authorization service: permission checks with optional caching (IPermissionResolver + cache)."""

from __future__ import annotations

from collections.abc import Iterable
from urllib.parse import quote

from rbac.application.interfaces.services import ICacheService, IPermissionResolver
from rbac.core.constants import CACHE_KEY_SEP, CACHE_PREFIX_PERMISSION, GLOBAL_SCOPE_KEY
from rbac.domain.exceptions import PermissionDeniedException


def _key_component(value: str) -> str:
    """Percent-encode an id so separators and glob characters stay literal."""
    return quote(value, safe="")


def _scope_component(tenant_id: str | None) -> str:
    return GLOBAL_SCOPE_KEY if tenant_id is None else _key_component(tenant_id)


def permission_cache_key(user_id: str, tenant_id: str | None) -> str:
    """Cache key for a user's resolved permissions in one scope."""
    return (
        f"{CACHE_PREFIX_PERMISSION}{CACHE_KEY_SEP}{_scope_component(tenant_id)}"
        f"{CACHE_KEY_SEP}{_key_component(user_id)}"
    )


def permission_scope_pattern(tenant_id: str | None) -> str:
    """Glob pattern matching every cached permission set in one scope."""
    return f"{CACHE_PREFIX_PERMISSION}{CACHE_KEY_SEP}{_scope_component(tenant_id)}{CACHE_KEY_SEP}*"


class AuthorizationService:
    """Centralized permission checking; uses cache when available (5 min TTL typical).

    Without a cache every call goes to the resolver and reflects current
    store state. With a cache, grant and role writes made through
    AssignmentService / RoleService invalidate the affected keys.

    With defer_invalidation=True, invalidations are queued instead of sent
    and only reach the cache through apply_pending_invalidations(), which
    the caller runs once the transaction has committed. Otherwise a
    concurrent reader could re-cache the pre-commit permission set.
    """

    def __init__(
        self,
        permission_resolver: IPermissionResolver,
        cache: ICacheService | None = None,
        cache_ttl: int = 300,
        defer_invalidation: bool = False,
    ) -> None:
        self.permission_resolver = permission_resolver
        self.cache = cache
        self.cache_ttl = cache_ttl
        self.defer_invalidation = defer_invalidation
        self._pending_keys: set[str] = set()
        self._pending_patterns: set[str] = set()

    def _cache_ready(self) -> bool:
        return self.cache is not None and self.cache.is_available()

    async def get_user_permissions(
        self, user_id: str, tenant_id: str | None = None
    ) -> set[str]:
        """Return set of permission ids (e.g. leads:read). Uses cache if available."""
        if not self._cache_ready():
            return await self.permission_resolver.get_user_permissions(user_id, tenant_id)

        key = permission_cache_key(user_id, tenant_id)
        cached = await self.cache.get(key)
        if cached is not None:
            return set(cached)

        permissions = await self.permission_resolver.get_user_permissions(
            user_id, tenant_id
        )
        await self.cache.set(key, sorted(permissions), ttl=self.cache_ttl)
        return permissions

    async def check_permission(
        self, user_id: str, permission: str, tenant_id: str | None = None
    ) -> bool:
        """Return True if user holds permission in scope."""
        return permission in await self.get_user_permissions(user_id, tenant_id)

    async def check_any_permission(
        self, user_id: str, permissions: Iterable[str], tenant_id: str | None = None
    ) -> bool:
        wanted = set(permissions)
        if not wanted:
            return False
        return not wanted.isdisjoint(await self.get_user_permissions(user_id, tenant_id))

    async def check_all_permissions(
        self, user_id: str, permissions: Iterable[str], tenant_id: str | None = None
    ) -> bool:
        wanted = set(permissions)
        return wanted <= await self.get_user_permissions(user_id, tenant_id)

    async def require_permission(
        self, user_id: str, permission: str, tenant_id: str | None = None
    ) -> None:
        """Raise PermissionDeniedException if user lacks permission."""
        if not await self.check_permission(user_id, permission, tenant_id):
            raise PermissionDeniedException(permission, user_id=user_id)

    async def _drop_key(self, key: str) -> None:
        if self.defer_invalidation:
            self._pending_keys.add(key)
        elif self._cache_ready():
            await self.cache.delete(key)

    async def _drop_pattern(self, pattern: str) -> None:
        if self.defer_invalidation:
            self._pending_patterns.add(pattern)
        elif self._cache_ready():
            await self.cache.delete_pattern(pattern)

    async def invalidate_user_cache(self, user_id: str, tenant_id: str | None = None) -> None:
        """Invalidate cached permissions for one user in one scope."""
        if self.cache is not None:
            await self._drop_key(permission_cache_key(user_id, tenant_id))

    async def invalidate_scope_cache(self, tenant_id: str | None = None) -> None:
        """Invalidate all cached permissions for a scope (after a role change)."""
        if self.cache is not None:
            await self._drop_pattern(permission_scope_pattern(tenant_id))

    async def invalidate_all_cache(self) -> None:
        """Invalidate every cached permission set (global roles can be granted in any scope)."""
        if self.cache is not None:
            await self._drop_pattern(f"{CACHE_PREFIX_PERMISSION}{CACHE_KEY_SEP}*")

    async def invalidate_for_role(self, tenant_id: str | None) -> None:
        """Invalidate what a change to a role in this scope can affect."""
        if tenant_id is None:
            await self.invalidate_all_cache()
        else:
            await self.invalidate_scope_cache(tenant_id)

    def has_pending_invalidations(self) -> bool:
        return bool(self._pending_keys or self._pending_patterns)

    def discard_pending_invalidations(self) -> None:
        """Forget queued invalidations (the transaction rolled back)."""
        self._pending_keys.clear()
        self._pending_patterns.clear()

    async def apply_pending_invalidations(self) -> None:
        """Send queued invalidations to the cache. Call after commit."""
        keys, patterns = self._pending_keys, self._pending_patterns
        self._pending_keys, self._pending_patterns = set(), set()
        if not self._cache_ready():
            return
        for pattern in sorted(patterns):
            await self.cache.delete_pattern(pattern)
        for key in sorted(keys):
            await self.cache.delete(key)
