"""
SQLAlchemy engine + session factory.
Import *get_db* as a FastAPI dependency in route handlers.

The engine is built lazily: with no DATABASE_URL the app still boots and
*get_db* yields ``None`` so handlers can answer in "not configured" mode.
"""
import logging
from collections.abc import Generator
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import ArgumentError, NoSuchModuleError
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import settings
from app.services.review_store import StoreUnavailableError

logger = logging.getLogger(__name__)


@lru_cache(maxsize=4)
def get_engine(database_url: str) -> Engine:
    return create_engine(
        database_url,
        # Neon suspends idle computes; drop dead connections before use
        pool_pre_ping=True,
        # Serverless-sized pool: few persistent connections per worker
        pool_size=5,
        max_overflow=10,
    )


def get_session_factory() -> sessionmaker | None:
    """
    Return a session factory for the configured database, or None.

    Raises StoreUnavailableError when DATABASE_URL is set but no engine can
    be built from it.
    """
    if not settings.database_configured:
        return None
    try:
        engine = get_engine(settings.DATABASE_URL)
    except (ArgumentError, NoSuchModuleError, ImportError) as exc:
        # A malformed URL or a driver that is not installed
        logger.error("Cannot build a database engine from DATABASE_URL: %s", exc)
        raise StoreUnavailableError(f"DATABASE_URL is unusable: {exc}") from exc
    return sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,  # Avoid lazy-load errors after commit
    )


def get_db() -> Generator[Session | None, None, None]:
    """
    FastAPI dependency that yields a scoped DB session, or None when the
    database is not configured.

    Usage:
        @router.get("/items")
        def list_items(db: Session | None = Depends(get_db)):
            ...
    """
    factory = get_session_factory()
    if factory is None:
        yield None
        return
    db = factory()
    try:
        yield db
    finally:
        db.close()
