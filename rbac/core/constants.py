"""Core constants: cache key prefixes and shared literal values.

Single source of truth for cache key structure.
"""

# Cache key prefix for resolved permission sets
CACHE_PREFIX_PERMISSION = "permission"

# Delimiter for composite keys
CACHE_KEY_SEP = ":"

# Cache key component standing in for the global (tenant-less) scope
GLOBAL_SCOPE_KEY = "global"

# Role search
DEFAULT_SEARCH_LIMIT = 10
MAX_SEARCH_LIMIT = 100
ROLE_SORT_FIELDS = ("name", "display_name", "created_at", "updated_at")
