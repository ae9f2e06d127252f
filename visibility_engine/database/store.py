"""
Scan Store - Table-Style Persistence

Small, explicit operations over the four scan tables. Rows go in and come
out as plain dicts so callers never touch SQLAlchemy objects. Every
database failure is raised as StoreError.
"""

import logging
from datetime import datetime
from functools import wraps
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..errors import StoreError
from .models import CompetitorTracking, Scan, ScanQuerySet, ScanResult
from .session import create_session_factory, session_scope

logger = logging.getLogger(__name__)


def _raises_store_error(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except SQLAlchemyError as e:
            raise StoreError(f"{fn.__name__} failed: {e}") from e
    return wrapper


def _row_to_dict(row) -> Dict[str, Any]:
    return {c.name: getattr(row, c.name) for c in row.__table__.columns}


class ScanStore:
    """
    Persistence client for scans and their derived data.

    Usage:
        store = ScanStore()
        store.update_scan(scan_id, status="running")
        scan = store.get_scan(scan_id)
    """

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self.session_factory = session_factory or create_session_factory()

    # =========================================================================
    # SCANS
    # =========================================================================

    @_raises_store_error
    def update_scan(self, scan_id: str, **fields: Any) -> None:
        """Update a scan row, creating it on first write."""
        with session_scope(self.session_factory) as db:
            scan = db.get(Scan, scan_id)
            if scan is None:
                scan = Scan(id=scan_id, created_at=datetime.utcnow())
                db.add(scan)
            for key, value in fields.items():
                if not hasattr(Scan, key):
                    raise StoreError(f"Unknown scan column: {key}")
                setattr(scan, key, value)
            scan.updated_at = datetime.utcnow()

    @_raises_store_error
    def get_scan(self, scan_id: str) -> Optional[Dict[str, Any]]:
        with session_scope(self.session_factory) as db:
            scan = db.get(Scan, scan_id)
            return _row_to_dict(scan) if scan else None

    @_raises_store_error
    def get_previous_scan(
        self,
        brand_domain: str,
        exclude_scan_id: str,
        statuses: List[str],
    ) -> Optional[Dict[str, Any]]:
        """Most recent scan of a brand in one of the given statuses, other than exclude_scan_id."""
        with session_scope(self.session_factory) as db:
            scan = (
                db.query(Scan)
                .filter(
                    Scan.brand_domain == brand_domain,
                    Scan.id != exclude_scan_id,
                    Scan.status.in_(statuses),
                )
                .order_by(Scan.created_at.desc())
                .first()
            )
            return _row_to_dict(scan) if scan else None

    @_raises_store_error
    def list_scored_scans(self, brand_domain: str, limit: int = 12) -> List[Dict[str, Any]]:
        """Most recent scans of a brand that have a score, newest first."""
        with session_scope(self.session_factory) as db:
            rows = (
                db.query(Scan)
                .filter(Scan.brand_domain == brand_domain, Scan.score.isnot(None))
                .order_by(Scan.created_at.desc())
                .limit(limit)
                .all()
            )
            return [_row_to_dict(r) for r in rows]

    # =========================================================================
    # QUERY SETS
    # =========================================================================

    @_raises_store_error
    def upsert_query_set(
        self,
        scan_id: str,
        queries: List[Dict[str, Any]],
        total_generated: int,
        total_validated: int,
    ) -> None:
        with session_scope(self.session_factory) as db:
            query_set = db.get(ScanQuerySet, scan_id)
            if query_set is None:
                query_set = ScanQuerySet(scan_id=scan_id)
                db.add(query_set)
            query_set.queries = queries
            query_set.total_generated = total_generated
            query_set.total_validated = total_validated

    @_raises_store_error
    def get_query_set(self, scan_id: str) -> Optional[Dict[str, Any]]:
        with session_scope(self.session_factory) as db:
            query_set = db.get(ScanQuerySet, scan_id)
            return _row_to_dict(query_set) if query_set else None

    # =========================================================================
    # COMPETITOR TRACKING
    # =========================================================================

    @_raises_store_error
    def select_competitors(self, brand_domain: str) -> List[Dict[str, Any]]:
        with session_scope(self.session_factory) as db:
            rows = (
                db.query(CompetitorTracking)
                .filter(CompetitorTracking.brand_domain == brand_domain)
                .order_by(CompetitorTracking.rank.asc())
                .all()
            )
            return [_row_to_dict(r) for r in rows]

    @_raises_store_error
    def delete_competitors(self, brand_domain: str) -> int:
        with session_scope(self.session_factory) as db:
            return (
                db.query(CompetitorTracking)
                .filter(CompetitorTracking.brand_domain == brand_domain)
                .delete(synchronize_session=False)
            )

    @_raises_store_error
    def insert_competitors(self, rows: List[Dict[str, Any]]) -> None:
        with session_scope(self.session_factory) as db:
            db.add_all([CompetitorTracking(**row) for row in rows])

    # =========================================================================
    # SCAN RESULTS
    # =========================================================================

    @_raises_store_error
    def insert_scan_results(self, rows: List[Dict[str, Any]]) -> None:
        with session_scope(self.session_factory) as db:
            db.add_all([ScanResult(**row) for row in rows])
        logger.debug(f"Inserted {len(rows)} scan result rows")

    @_raises_store_error
    def get_scan_results(self, scan_id: str) -> List[Dict[str, Any]]:
        with session_scope(self.session_factory) as db:
            rows = (
                db.query(ScanResult)
                .filter(ScanResult.scan_id == scan_id)
                .order_by(ScanResult.id.asc())
                .all()
            )
            return [_row_to_dict(r) for r in rows]
