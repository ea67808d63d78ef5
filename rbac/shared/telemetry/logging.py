"""Logging configuration for entrypoints (seed script, embedding services)."""

import logging
import sys

from rbac.core.config import Settings, get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(settings: Settings | None = None) -> None:
    """Configure process-wide logging on stdout.

    rbac loggers run at DEBUG when settings.debug is True, otherwise INFO.
    SQLAlchemy engine logging stays at WARNING unless database_echo is on,
    and the redis client is kept at WARNING.
    """
    settings = settings or get_settings()
    log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logging.getLogger("rbac").setLevel(log_level)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.database_echo else logging.WARNING
    )
    logging.getLogger("redis").setLevel(logging.WARNING)
