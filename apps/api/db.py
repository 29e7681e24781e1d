"""Database session factory and bootstrap."""

import os
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from apps.api.models import Base
from apps.api.services.settings import settings

DATABASE_URL = settings.DATABASE_URL


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        # crawl workers and orchestration threads share the engine
        return {"check_same_thread": False, "timeout": 30}
    return {}


engine = create_engine(
    DATABASE_URL,
    pool_pre_ping=True,
    connect_args=_connect_args(DATABASE_URL),
    echo=os.getenv("SQL_ECHO", "").lower() in ("1", "true", "yes"),
)

if engine.dialect.name == "sqlite":

    @event.listens_for(engine, "connect")
    def _configure_sqlite_connection(dbapi_conn, _record):
        # transactions are begun explicitly below
        dbapi_conn.isolation_level = None
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        # take the write lock up front: read-then-write batches from several site threads
        # would otherwise fail with "database is locked" instead of waiting
        conn.exec_driver_sql("BEGIN IMMEDIATE")


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


@contextmanager
def get_db() -> Generator[Session, None, None]:
    """Provide a transactional scope for DB operations."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def ensure_tables(bind=None):
    """Create all tables if they do not exist. Idempotent (checkfirst=True).
    Postgres deployments use the Alembic revisions instead, unless ENV=test.
    bind: optional engine/connection; if None, uses global engine.
    """
    bind = bind if bind is not None else engine
    in_test = os.environ.get("ENV") == "test" or os.environ.get("PYTEST_RUNNING") == "1"
    if bind.dialect.name == "postgresql" and not in_test:
        return
    Base.metadata.create_all(bind=bind, checkfirst=True)


def drop_tables(bind=None) -> None:
    """Drop all tables. Test helper."""
    Base.metadata.drop_all(bind=bind if bind is not None else engine)
