"""
Query Repository

Stores the validated query set of a scan as one row, so a retried scan
can reuse exactly the same queries.
"""

import logging
from typing import List, Optional

from ..errors import StoreError
from .models import ValidatedQuery

logger = logging.getLogger(__name__)


class QueryRepository:
    """Persists and retrieves per-scan query sets through a ScanStore."""

    def __init__(self, scan_store):
        self.scan_store = scan_store

    def store(self, scan_id: str, queries: List[ValidatedQuery]) -> None:
        """
        Store (or replace) the query set for a scan.

        Raises:
            StoreError: When the write fails
        """
        self.scan_store.upsert_query_set(
            scan_id,
            queries=[q.to_dict() for q in queries],
            total_generated=len(queries),
            total_validated=sum(1 for q in queries if q.is_relevant and not q.has_brand_bias),
        )
        logger.debug(f"Stored {len(queries)} queries for scan {scan_id}")

    def retrieve(self, scan_id: str) -> Optional[List[ValidatedQuery]]:
        """Load the query set for a scan; None when missing or unreadable."""
        try:
            row = self.scan_store.get_query_set(scan_id)
        except StoreError as e:
            logger.warning(f"Could not read query set for scan {scan_id}: {e}")
            return None
        if not row:
            return None
        return [ValidatedQuery.from_dict(q) for q in row.get("queries") or []]
