"""Shared utilities: telemetry and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from rbac.shared.utils import ensure_utc, generate_cuid, is_expired, utc_now

__all__ = [
    "generate_cuid",
    "utc_now",
    "ensure_utc",
    "is_expired",
]
