"""
Logging configuration for the HRMS leave service
"""
import logging
import sys
from app.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers that are too chatty at the application level
_LIBRARY_LEVELS = {
    "uvicorn": logging.INFO,
    "uvicorn.access": logging.WARNING,
    "alembic": logging.INFO,
}


def setup_logging() -> None:
    """
    Configure stdout logging once for the process.

    The level comes from LOG_LEVEL; SQL statements are only logged when
    SQL_ECHO is set.
    """
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    for name, level in _LIBRARY_LEVELS.items():
        logging.getLogger(name).setLevel(level)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if settings.SQL_ECHO else logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging configured: level=%s env=%s sql_echo=%s",
        settings.LOG_LEVEL, settings.APP_ENV, settings.SQL_ECHO,
    )
