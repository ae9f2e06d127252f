"""
Share of Voice

How often the brand is mentioned relative to every competitor, overall
and per provider, computed from the per-response rows of a scan.
"""

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List

from .weights import round_half_up

logger = logging.getLogger(__name__)


@dataclass
class BrandShare:
    name: str
    is_self: bool
    total_mentions: int
    share: float
    share_pct: int
    per_provider: Dict[str, Dict[str, float]] = field(default_factory=dict)


@dataclass
class ShareOfVoice:
    brands: List[BrandShare] = field(default_factory=list)
    your_rank: int = 0
    total_responses: int = 0
    computed_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["computed_at"] = self.computed_at.isoformat()
        return data


def compute_share_of_voice(rows: List[Dict[str, Any]], brand_name: str) -> ShareOfVoice:
    """
    Compute share of voice from scan_results rows.

    Args:
        rows: Dicts with provider, brand_mentioned and competitors_detected
        brand_name: The scanned brand, always listed even with 0 mentions

    Returns:
        Brands sorted by share descending, with the brand's 1-based rank
    """
    if not rows:
        return ShareOfVoice()

    totals: Dict[str, int] = {brand_name: 0}
    by_provider: Dict[str, Dict[str, int]] = {brand_name: {}}

    def increment(name: str, provider: str) -> None:
        totals[name] = totals.get(name, 0) + 1
        counts = by_provider.setdefault(name, {})
        counts[provider] = counts.get(provider, 0) + 1

    for row in rows:
        provider = row.get("provider", "")
        if row.get("brand_mentioned") is True:
            increment(brand_name, provider)
        for competitor in row.get("competitors_detected") or []:
            name = competitor.get("name") if isinstance(competitor, dict) else None
            if name:
                increment(name, provider)

    total_mentions = sum(totals.values())
    provider_totals: Dict[str, int] = {}
    for counts in by_provider.values():
        for provider, count in counts.items():
            provider_totals[provider] = provider_totals.get(provider, 0) + count

    brands = []
    for name, total in totals.items():
        share = total / total_mentions if total_mentions > 0 else 0.0
        per_provider = {
            provider: {
                "mentions": count,
                "share": count / provider_totals[provider] if provider_totals[provider] else 0.0,
            }
            for provider, count in by_provider.get(name, {}).items()
        }
        brands.append(BrandShare(
            name=name,
            is_self=name == brand_name,
            total_mentions=total,
            share=share,
            share_pct=round_half_up(share * 100),
            per_provider=per_provider,
        ))

    brands.sort(key=lambda b: b.share, reverse=True)
    your_rank = next((i + 1 for i, b in enumerate(brands) if b.is_self), 0)

    return ShareOfVoice(brands=brands, your_rank=your_rank, total_responses=len(rows))


def share_of_voice_for_scan(store, scan_id: str, brand_name: str) -> ShareOfVoice:
    """Load the rows of a scan from the store and compute its share of voice."""
    rows = store.get_scan_results(scan_id)
    result = compute_share_of_voice(rows, brand_name)
    logger.info(f"Share of voice for scan {scan_id}: {len(result.brands)} brands, rank {result.your_rank}")
    return result
