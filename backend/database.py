"""Database setup and session management."""

import logging
from functools import lru_cache

from sqlalchemy import create_engine, text
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


@lru_cache
def get_engine():
    """Get or create the database engine (cached)."""
    connect_args = {}
    database_url = settings.DATABASE_URL

    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False

    return create_engine(
        database_url,
        connect_args=connect_args,
        echo=False,
    )


def get_session_local():
    """Get a sessionmaker bound to the engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine())


def init_db() -> None:
    """Create any missing tables."""
    import models  # noqa: F401  (registers the mappers on Base.metadata)

    Base.metadata.create_all(bind=get_engine())
    logger.info("Database schema ready")


def acquire_write_lock(db: Session) -> None:
    """Start the read-modify-write section of a CheckrAccount update.

    On SQLite this issues ``BEGIN IMMEDIATE`` so the whole cycle holds the
    database write lock and two webhooks for the same account can't
    interleave.  Other backends rely on the ``SELECT ... FOR UPDATE`` row
    locks taken by the lookup queries.

    Callers must end the transaction with ``commit()`` or ``rollback()``.
    """
    if db.get_bind().dialect.name == "sqlite":
        db.execute(text("BEGIN IMMEDIATE"))


def get_db():
    """Dependency that provides a database session.

    Transaction conventions:
    - Services that update a CheckrAccount take the write lock with
      ``acquire_write_lock()`` and end their own transaction
      (``commit()`` on a state change, ``rollback()`` on a no-op).
    - Plain account CRUD: API layer ``commit()``.
    """
    SessionLocal = get_session_local()
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
