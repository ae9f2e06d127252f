"""
Score Trend History

The last scored scans of a brand as chart points, oldest first.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

TREND_LIMIT = 12


@dataclass
class ScanTrendPoint:
    scan_id: str
    date: str
    overall_score: int
    mention_rate: float
    consistency_score: float
    provider_scores: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class ScanTrend:
    brand_domain: str
    points: List[ScanTrendPoint] = field(default_factory=list)

    @property
    def total_scans(self) -> int:
        return len(self.points)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["total_scans"] = self.total_scans
        return data


def compute_scan_trend(brand_domain: str, scans: List[Dict[str, Any]]) -> ScanTrend:
    """
    Build trend points from stored scan rows.

    Args:
        brand_domain: Brand the scans belong to
        scans: Scored scan rows, newest first (as the store returns them)

    Returns:
        ScanTrend with points in chronological order
    """
    points = []
    for scan in reversed(scans):
        breakdown = scan.get("score_breakdown") or {}
        created_at = scan.get("created_at")
        points.append(ScanTrendPoint(
            scan_id=scan.get("id", ""),
            date=created_at.isoformat() if hasattr(created_at, "isoformat") else (created_at or ""),
            overall_score=scan.get("score") or 0,
            mention_rate=breakdown.get("mention_rate", 0.0),
            consistency_score=breakdown.get("cross_model_consistency", 1.0),
            provider_scores=scan.get("provider_scores") or [],
        ))
    return ScanTrend(brand_domain=brand_domain, points=points)


def scan_trend_for_brand(store, brand_domain: str, limit: int = TREND_LIMIT) -> ScanTrend:
    """Load the latest scored scans of a brand and turn them into a trend."""
    trend = compute_scan_trend(brand_domain, store.list_scored_scans(brand_domain, limit=limit))
    if trend.points:
        logger.info(
            f"Trend for {brand_domain}: {trend.total_scans} scans, "
            f"latest score {trend.points[-1].overall_score}"
        )
    else:
        logger.info(f"No scored scans for {brand_domain}")
    return trend
