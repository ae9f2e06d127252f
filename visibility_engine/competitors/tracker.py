"""
Competitor Tracker

Keeps the top-3 competitors mentioned alongside a brand, with a trend
against the previous scan of the same domain.
"""

import logging
from datetime import datetime
from typing import Dict, List, Tuple

from ..detection.models import ResponseAnalysis
from ..errors import StoreError
from ..scoring.weights import round_half_up
from .models import CompetitorRecord, CompetitorSnapshot, Trend

logger = logging.getLogger(__name__)

TOP_N = 3
UNRANKED_POSITION = 99.0


class CompetitorTracker:
    """Aggregates competitor detections and replaces the stored top list."""

    def __init__(self, store):
        self.store = store

    def track(self, brand_domain: str, analyses: List[ResponseAnalysis]) -> List[CompetitorRecord]:
        """
        Compute and store the top competitors for a scan.

        Returns:
            Up to three records, ordered by mention count desc then average rank asc
        """
        snapshots = self.snapshot(analyses)
        previous = self._previous_counts(brand_domain)
        now = datetime.utcnow()

        records = []
        for rank, snap in enumerate(snapshots, start=1):
            records.append(CompetitorRecord(
                brand_domain=brand_domain,
                competitor_name=snap.name,
                rank=rank,
                last_mention_count=snap.mention_count,
                last_avg_position=snap.avg_position,
                trend=_trend(snap.mention_count, previous.get(snap.name)),
                updated_at=now,
            ))

        try:
            self.store.delete_competitors(brand_domain)
            if records:
                self.store.insert_competitors([r.to_dict() for r in records])
        except StoreError as e:
            logger.error(f"Failed to persist competitors for {brand_domain}: {e}")

        logger.info(f"Tracked {len(records)} competitors for {brand_domain}")
        return records

    def get_competitors(self, brand_domain: str) -> List[CompetitorRecord]:
        """Stored competitors for a domain ordered by rank; empty on read failure."""
        try:
            rows = self.store.select_competitors(brand_domain)
        except StoreError as e:
            logger.error(f"Failed to load competitors for {brand_domain}: {e}")
            return []
        return [CompetitorRecord.from_dict(r) for r in rows]

    @staticmethod
    def snapshot(analyses: List[ResponseAnalysis]) -> List[CompetitorSnapshot]:
        """Aggregate detected competitors by lowercase name and keep the top 3."""
        mentions: Dict[str, Tuple[int, List[int]]] = {}
        for analysis in analyses:
            for detection in analysis.detected_competitors:
                name = detection.brand_name.lower()
                count, positions = mentions.get(name, (0, []))
                if detection.position is not None:
                    positions.append(detection.position)
                mentions[name] = (count + 1, positions)

        snapshots = [
            CompetitorSnapshot(
                name=name,
                mention_count=count,
                avg_position=sum(positions) / len(positions) if positions else UNRANKED_POSITION,
                visibility_estimate=min(100, round_half_up(count / len(analyses) * 100)),
            )
            for name, (count, positions) in mentions.items()
        ]
        snapshots.sort(key=lambda s: (-s.mention_count, s.avg_position))
        return snapshots[:TOP_N]

    def _previous_counts(self, brand_domain: str) -> Dict[str, int]:
        try:
            rows = self.store.select_competitors(brand_domain)
        except StoreError as e:
            logger.warning(f"Could not read previous competitors for {brand_domain}, treating as new: {e}")
            return {}
        return {r["competitor_name"].lower(): r.get("last_mention_count", 0) for r in rows}


def _trend(count: int, previous_count) -> Trend:
    if previous_count is None:
        return Trend.NEW
    if count > previous_count:
        return Trend.UP
    if count < previous_count:
        return Trend.DOWN
    return Trend.STABLE
