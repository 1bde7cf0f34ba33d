# app/core/logging_config.py
"""
Logging setup shared by the API process and the CLI commands.

Pipeline modules log stage transitions at INFO, soft failures (cache writes,
aspect-miss inserts, taxonomy fallbacks) at WARNING and rollback failures at
ERROR. Transport and driver libraries are held at WARNING so a publish run
reads as one short trace per SKU.
"""

import logging

from app.core.config import get_settings

QUIET_LOGGERS = ("httpx", "httpcore", "sqlalchemy", "sqlalchemy.engine", "asyncpg", "aiosqlite")


def configure_logging(level: str = None):
    """
    Configure the root logger.

    Args:
        level: Explicit level name. Defaults to LOG_LEVEL, then DEBUG when
            DEBUG is set, then INFO.
    """
    settings = get_settings()
    level_name = (level or settings.LOG_LEVEL or ("DEBUG" if settings.DEBUG else "INFO")).upper()
    app_level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=app_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("app").setLevel(app_level)

    logging.getLogger(__name__).debug(f"Logging configured at level: {level_name}")
