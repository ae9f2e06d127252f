"""
Database Session Management

Engine creation and session lifecycle for PostgreSQL (production) and
SQLite (local development and tests).
"""

import logging
import os
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from ..utils.config import get_settings
from .models import Base

logger = logging.getLogger(__name__)

# =============================================================================
# DATABASE URL CONFIGURATION
# =============================================================================

def get_database_url(url: Optional[str] = None) -> str:
    """
    Resolve the database URL.

    Priority:
    1. Explicit url argument
    2. DATABASE_URL setting
    3. SQLite fallback for local development
    """
    url = url or get_settings().DATABASE_URL

    if url:
        # Hosted PostgreSQL URLs use postgres:// but SQLAlchemy needs postgresql://
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql://", 1)
        return url

    sqlite_path = os.getenv("SQLITE_PATH", "visibility_dev.db")
    logger.warning(f"No DATABASE_URL found, using SQLite: {sqlite_path}")
    return f"sqlite:///{sqlite_path}"


# =============================================================================
# ENGINE CONFIGURATION
# =============================================================================

def create_db_engine(url: Optional[str] = None) -> Engine:
    """
    Create database engine with appropriate settings.

    PostgreSQL: Connection pooling
    SQLite: Single shared connection for in-memory databases, foreign keys on
    """
    url = get_database_url(url)
    echo = os.getenv("SQL_DEBUG", "false").lower() == "true"

    if url.startswith("postgresql://"):
        engine = create_engine(
            url,
            poolclass=QueuePool,
            pool_size=5,
            max_overflow=10,
            pool_timeout=30,
            pool_recycle=1800,
            pool_pre_ping=True,
            echo=echo,
        )
        logger.info("Created PostgreSQL engine with connection pooling")
        return engine

    kwargs = {"connect_args": {"check_same_thread": False}, "echo": echo}
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    engine = create_engine(url, **kwargs)

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    logger.info("Created SQLite engine")
    return engine


_engine: Optional[Engine] = None


def get_engine() -> Engine:
    """Get or create the process-wide engine."""
    global _engine
    if _engine is None:
        _engine = create_db_engine()
    return _engine


# =============================================================================
# SESSION MANAGEMENT
# =============================================================================

def create_session_factory(engine: Optional[Engine] = None) -> sessionmaker:
    return sessionmaker(
        bind=engine or get_engine(),
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


@contextmanager
def session_scope(factory: sessionmaker) -> Generator[Session, None, None]:
    """
    Context manager for database sessions.

    Usage:
        with session_scope(factory) as db:
            db.add(item)
    """
    db = factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


# =============================================================================
# DATABASE INITIALIZATION
# =============================================================================

def init_db(engine: Optional[Engine] = None, drop_all: bool = False) -> None:
    """
    Create all tables.

    Args:
        engine: Engine to use, defaults to the process-wide engine
        drop_all: If True, drop all tables first (USE WITH CAUTION!)
    """
    engine = engine or get_engine()

    if drop_all:
        logger.warning("Dropping all database tables!")
        Base.metadata.drop_all(bind=engine)

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")


def check_db_connection(engine: Optional[Engine] = None) -> bool:
    """
    Check if database connection is working.

    Returns:
        True if connection successful, False otherwise
    """
    try:
        with (engine or get_engine()).connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False
