"""
Score Deltas and Scan Status

Compares a scan with the most recent completed scan of the same brand,
and classifies a finished scan into a status bucket.
"""

import logging
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .models import ScoringBreakdown

logger = logging.getLogger(__name__)

LOW_VISIBILITY_BELOW = 40


class ScanStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    FAILED = "failed"
    NOT_MENTIONED = "not_mentioned"
    LOW_VISIBILITY = "low_visibility"
    RECOMMENDED = "recommended"


COMPLETED_STATUSES: List[str] = [
    ScanStatus.NOT_MENTIONED.value,
    ScanStatus.LOW_VISIBILITY.value,
    ScanStatus.RECOMMENDED.value,
]


def classify_scan_status(breakdown: ScoringBreakdown) -> ScanStatus:
    if breakdown.mention_rate == 0:
        return ScanStatus.NOT_MENTIONED
    if breakdown.final_score < LOW_VISIBILITY_BELOW:
        return ScanStatus.LOW_VISIBILITY
    return ScanStatus.RECOMMENDED


@dataclass
class Delta:
    current: float
    previous: Optional[float] = None
    delta: Optional[float] = None

    @classmethod
    def between(cls, current: float, previous: Optional[float]) -> "Delta":
        if previous is None:
            return cls(current=current)
        return cls(current=current, previous=previous, delta=current - previous)


@dataclass
class ScoreDeltas:
    overall: Delta
    mention_rate: Delta
    consistency: Delta
    providers: Dict[str, Delta] = field(default_factory=dict)
    previous_scan_id: Optional[str] = None
    previous_scan_date: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def summarize_scan(scan: Dict[str, Any]) -> Dict[str, Any]:
    """
    Reduce a stored scan row to the values deltas compare.

    Mention rate is the mean provider mention rate; consistency and
    per-provider values come from the stored provider comparison.
    """
    comparison = (scan.get("summary") or {}).get("provider_comparison") or {}
    providers = comparison.get("providers") or []

    mention_rate = None
    if providers:
        mention_rate = sum(p.get("mention_rate", 0.0) for p in providers) / len(providers)

    return {
        "overall": scan.get("score") or 0,
        "mention_rate": mention_rate,
        "consistency": (comparison.get("cross_provider") or {}).get("consistency_score"),
        "providers": {p["provider"]: p.get("composite_score", 0) for p in providers if "provider" in p},
    }


def compute_score_deltas(
    current: Dict[str, Any],
    previous_scan: Optional[Dict[str, Any]],
) -> ScoreDeltas:
    """
    Compute deltas between a scan and its predecessor.

    Args:
        current: The stored scan row being viewed
        previous_scan: The previous completed scan row, or None

    Returns:
        ScoreDeltas; previous/delta are None wherever there is nothing to compare
    """
    now = summarize_scan(current)
    before = summarize_scan(previous_scan) if previous_scan else None

    def pick(key: str) -> Optional[float]:
        return before[key] if before else None

    providers = {
        name: Delta.between(value, before["providers"].get(name) if before else None)
        for name, value in now["providers"].items()
    }

    created_at = previous_scan.get("created_at") if previous_scan else None
    return ScoreDeltas(
        overall=Delta.between(now["overall"], pick("overall")),
        mention_rate=Delta.between(now["mention_rate"] or 0.0, pick("mention_rate")),
        consistency=Delta.between(now["consistency"] or 0, pick("consistency")),
        providers=providers,
        previous_scan_id=previous_scan.get("id") if previous_scan else None,
        previous_scan_date=created_at.isoformat() if hasattr(created_at, "isoformat") else created_at,
    )


def score_deltas_for_scan(store, scan_id: str) -> Optional[ScoreDeltas]:
    """Deltas for a stored scan against the latest completed scan of its brand."""
    scan = store.get_scan(scan_id)
    if not scan:
        return None

    previous = store.get_previous_scan(
        brand_domain=scan.get("brand_domain", ""),
        exclude_scan_id=scan_id,
        statuses=COMPLETED_STATUSES,
    )
    if previous is None:
        logger.info(f"No previous scan for {scan.get('brand_domain')}, deltas are empty")
    return compute_score_deltas(scan, previous)
