"""Library configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Values are validated at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_SUPPORTED_DATABASE_SCHEMES = ("sqlite+aiosqlite", "postgresql+asyncpg")

# Upper bound for role_inheritance_depth; deeper chains are a modelling error.
MAX_ROLE_INHERITANCE_DEPTH = 10


class Settings(BaseSettings):
    """Settings loaded from environment and .env.

    All settings have defaults; validate_database_and_inheritance rejects
    unsupported database drivers and out-of-range inheritance depth.
    """

    # App
    app_name: str = "rbac"
    app_version: str = "1.0.0"
    debug: bool = False

    # Database (async SQLAlchemy URL)
    database_url: str = "sqlite+aiosqlite:///./rbac.db"
    database_echo: bool = False
    # Optional pool overrides (None = use defaults in database.py; ignored for SQLite)
    db_pool_size: int | None = None
    db_max_overflow: int | None = None

    # Permission resolution: how many levels of inherited_roles are expanded.
    # 1 expands only the roles named directly on an assigned role.
    role_inheritance_depth: int = 1

    # Redis cache for resolved permission sets (off by default)
    redis_enabled: bool = False
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None
    cache_ttl_permissions: int = 300

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_database_and_inheritance(self) -> "Settings":
        """Validate database driver and inheritance depth.

        - DATABASE_URL must use an async driver (aiosqlite or asyncpg).
        - ROLE_INHERITANCE_DEPTH must be between 0 and MAX_ROLE_INHERITANCE_DEPTH.
        """
        scheme = self.database_url.split("://", 1)[0]
        if scheme not in _SUPPORTED_DATABASE_SCHEMES:
            raise ValueError(
                f"DATABASE_URL must start with one of {_SUPPORTED_DATABASE_SCHEMES}, "
                f"got: {scheme!r}"
            )
        if not 0 <= self.role_inheritance_depth <= MAX_ROLE_INHERITANCE_DEPTH:
            raise ValueError(
                "ROLE_INHERITANCE_DEPTH must be between 0 and "
                f"{MAX_ROLE_INHERITANCE_DEPTH}, got: {self.role_inheritance_depth}"
            )
        if self.cache_ttl_permissions <= 0:
            raise ValueError("CACHE_TTL_PERMISSIONS must be a positive number of seconds")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
