"""
Database connection and session management module.

Uses SQLAlchemy for ORM operations. Supports PostgreSQL (production/Docker)
and SQLite (local development fallback).
Provides session factory and dependency injection for FastAPI routes.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from gameprogress.config import DATABASE_URL, STORE_TIMEOUT_SECONDS


def build_engine(url: str):
    """
    Create an engine with settings appropriate for the database type.

    SQLite does not support pool_size, max_overflow, or pool_pre_ping, and
    gets its busy timeout from the driver instead of the pool.
    """
    engine_kwargs = {"echo": False}

    if url.startswith("postgresql"):
        engine_kwargs.update({
            "pool_size": 10,
            "max_overflow": 20,
            "pool_pre_ping": True,
            "pool_timeout": STORE_TIMEOUT_SECONDS,
            "connect_args": {"connect_timeout": max(1, int(STORE_TIMEOUT_SECONDS))},
        })
    elif url.startswith("sqlite"):
        # check_same_thread=False because FastAPI runs sync routes in a threadpool
        engine_kwargs["connect_args"] = {
            "check_same_thread": False,
            "timeout": STORE_TIMEOUT_SECONDS,
        }

    new_engine = create_engine(url, **engine_kwargs)

    # Enable WAL mode and foreign keys for SQLite (better concurrency,
    # and badge rows cascade with their student)
    if url.startswith("sqlite"):
        @event.listens_for(new_engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return new_engine


engine = build_engine(DATABASE_URL)

# Session factory - creates new database sessions
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


def get_db():
    """
    FastAPI dependency that provides a database session.

    Yields a session and ensures proper cleanup after request completion.
    This pattern guarantees connections are returned to the pool even if
    an exception occurs during request processing.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind=None):
    """
    Create all database tables directly (used for SQLite local dev).
    For PostgreSQL, use Alembic migrations instead.
    """
    Base.metadata.create_all(bind=bind or engine)
