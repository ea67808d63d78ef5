"""Cache: Redis service for resolved permission sets.

Key format lives with AuthorizationService (permission_cache_key).
"""

from rbac.infrastructure.cache.redis_cache import CacheService

__all__ = ["CacheService"]
