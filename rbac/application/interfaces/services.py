"""Service interfaces (ports) for the application layer."""

from __future__ import annotations

from typing import Any, Protocol


class IPermissionResolver(Protocol):
    """Protocol for computing a user's effective permission set."""

    async def get_user_permissions(
        self, user_id: str, tenant_id: str | None = None
    ) -> set[str]:
        """Return permission ids for user in scope (active, unexpired grants + inheritance)."""


class ICacheService(Protocol):
    """Protocol for cache backends (e.g. Redis) used for permission sets."""

    def is_available(self) -> bool:
        """Return True if cache is connected and usable."""

    async def get(self, key: str) -> Any:
        """Return cached value or None."""

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        """Store value with TTL in seconds."""

    async def delete(self, key: str) -> bool:
        """Remove key from cache."""

    async def delete_pattern(self, pattern: str) -> int:
        """Remove all keys matching a glob pattern; return count."""
