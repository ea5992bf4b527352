"""
Migrations run online only, against the same DATABASE_URL the app uses.

  cd backend
  alembic upgrade head
"""
from logging.config import fileConfig

from sqlalchemy import create_engine, pool
from alembic import context

from app.core.config import settings

if not settings.database_configured:
    raise RuntimeError("DATABASE_URL (or NETLIFY_DATABASE_URL) must be set to run migrations")

if context.config.config_file_name is not None:
    fileConfig(context.config.config_file_name)

engine = create_engine(settings.DATABASE_URL, poolclass=pool.NullPool)
with engine.connect() as connection:
    context.configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()
