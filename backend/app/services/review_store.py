"""
Review Store — persistence for submitted movie reviews.

Three operations only: ensure the table exists, insert a row, list rows
newest first. Each is a standalone statement; there is no transaction
spanning them, so a crash between ensure_schema and insert is harmless.
"""
import logging

from sqlalchemy import inspect
from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.models import MovieReview

logger = logging.getLogger(__name__)


class StoreUnavailableError(Exception):
    """Raised when the database cannot be reached."""


class StoreNotConfiguredError(StoreUnavailableError):
    """Raised when no database connection string is configured."""


class WriteFailedError(Exception):
    """Raised when an insert is rejected by the database."""


class ReadFailedError(Exception):
    """Raised when listing rows fails for a reason other than connectivity."""


def _require(db: Session | None) -> Session:
    if db is None:
        raise StoreNotConfiguredError("DATABASE_URL is not set")
    return db


def _is_connection_error(exc: SQLAlchemyError) -> bool:
    if isinstance(exc, OperationalError):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


def ensure_schema(db: Session | None) -> None:
    """
    Create the movie_reviews table if it does not exist.

    Safe to call on every request. Two callers racing on a fresh database
    may both try the CREATE; the loser's error is ignored as long as the
    table is there afterwards.
    """
    db = _require(db)
    try:
        MovieReview.__table__.create(bind=db.connection(), checkfirst=True)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        # SQLite reports a lost CREATE race as OperationalError too, so look
        # for the table before deciding the database is unreachable.
        try:
            exists = inspect(db.connection()).has_table(MovieReview.__tablename__)
        except SQLAlchemyError as inner:
            raise StoreUnavailableError(str(inner)) from inner
        finally:
            db.rollback()
        if not exists:
            raise StoreUnavailableError(str(exc)) from exc
        logger.info("movie_reviews created concurrently by another worker")


def insert_review(db: Session | None, name: str, movie_name: str, movie_review: str) -> MovieReview:
    """Insert one review and return it with id and submitted_at populated."""
    db = _require(db)
    review = MovieReview(name=name, movie_name=movie_name, movie_review=movie_review)
    try:
        db.add(review)
        db.commit()
        db.refresh(review)
    except SQLAlchemyError as exc:
        db.rollback()
        if _is_connection_error(exc):
            raise StoreUnavailableError(str(exc)) from exc
        raise WriteFailedError(str(exc)) from exc

    logger.info("Stored review id=%s for movie %r", review.id, review.movie_name)
    return review


def list_reviews(db: Session | None) -> list[MovieReview]:
    """Return every review, newest first. An empty table yields []."""
    db = _require(db)
    try:
        return (
            db.query(MovieReview)
            .order_by(MovieReview.submitted_at.desc(), MovieReview.id.desc())
            .all()
        )
    except SQLAlchemyError as exc:
        db.rollback()
        if _is_connection_error(exc):
            raise StoreUnavailableError(str(exc)) from exc
        raise ReadFailedError(str(exc)) from exc
