"""
Process-wide logging setup.

Modules log through ``logging.getLogger(__name__)``; this only decides
level and format once at startup.
"""
import logging

from app.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    resolved = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    # SQL echo is noisy; only surface it when explicitly asked for.
    if resolved != "DEBUG":
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
