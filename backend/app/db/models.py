"""
SQLAlchemy ORM models.

A single append-only table. Column names match the table the Netlify
function created with ``CREATE TABLE IF NOT EXISTS`` so existing Neon
databases keep working.
"""
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Index, Integer, Text, func
from sqlalchemy.orm import DeclarativeBase


# ── Base ──────────────────────────────────────────────────────────────────────

class Base(DeclarativeBase):
    pass


# ── Timestamp helper ──────────────────────────────────────────────────────────

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── movie_reviews ─────────────────────────────────────────────────────────────

class MovieReview(Base):
    """
    One submitted review. Rows are never updated or deleted; id and
    submitted_at are assigned on insert.
    """
    __tablename__ = "movie_reviews"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    movie_name = Column(Text, nullable=False)
    movie_review = Column(Text, nullable=False)
    submitted_at = Column(
        DateTime(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        Index("idx_movie_reviews_submitted_at", "submitted_at"),
    )

    def __repr__(self) -> str:
        return f"<MovieReview id={self.id} movie_name={self.movie_name!r}>"
