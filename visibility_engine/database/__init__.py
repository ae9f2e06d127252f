"""
Database Module

SQLAlchemy models, session management and the ScanStore persistence client.
"""

from .models import Base, Scan, ScanQuerySet, CompetitorTracking, ScanResult
from .session import (
    get_database_url,
    create_db_engine,
    get_engine,
    create_session_factory,
    session_scope,
    init_db,
    check_db_connection,
)
from .store import ScanStore

__all__ = [
    # Models
    "Base",
    "Scan",
    "ScanQuerySet",
    "CompetitorTracking",
    "ScanResult",
    # Session
    "get_database_url",
    "create_db_engine",
    "get_engine",
    "create_session_factory",
    "session_scope",
    "init_db",
    "check_db_connection",
    # Store
    "ScanStore",
]
