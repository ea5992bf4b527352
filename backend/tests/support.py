"""Shared test helpers: an in-memory SQLite store standing in for Neon."""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool


def make_session_factory() -> sessionmaker:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def db_override(factory: sessionmaker):
    """A get_db replacement that opens one session per request, like the real one."""
    def _get_db():
        db = factory()
        try:
            yield db
        finally:
            db.close()
    return _get_db


VALID_REVIEW = {"name": "Ann", "movie-name": "Dune", "movie-review": "Great pacing"}


def make_file_session_factory(path: str) -> sessionmaker:
    """A SQLite file shared by several threads, each with its own connection."""
    engine = create_engine(
        f"sqlite:///{path}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
