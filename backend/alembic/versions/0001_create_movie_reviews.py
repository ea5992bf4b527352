"""Create movie_reviews

Revision ID: 0001
Revises: —
Create Date: 2026-10-19 00:00:00

Uses IF NOT EXISTS so databases where the table was already created
lazily by the API (or by the old Netlify function) upgrade cleanly.
"""
from typing import Sequence, Union

from alembic import op

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE IF NOT EXISTS movie_reviews (
          id            SERIAL PRIMARY KEY,
          name          TEXT NOT NULL,
          movie_name    TEXT NOT NULL,
          movie_review  TEXT NOT NULL,
          submitted_at  TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    """)
    op.execute(
        "CREATE INDEX IF NOT EXISTS idx_movie_reviews_submitted_at "
        "ON movie_reviews (submitted_at)"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS movie_reviews")
