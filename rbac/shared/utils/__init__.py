"""Shared utilities: datetime and id generators."""

from rbac.shared.utils.datetime import ensure_utc, is_expired, utc_now
from rbac.shared.utils.generators import generate_cuid

__all__ = [
    "generate_cuid",
    "utc_now",
    "ensure_utc",
    "is_expired",
]
