"""
Provider Comparison

Side-by-side view of how each AI provider treats the brand, with
cross-provider metrics and short human-readable insights.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from ..detection.models import Sentiment
from .models import ProviderScore
from .weights import SCORING_WEIGHTS, ScoringWeights, round_half_up

logger = logging.getLogger(__name__)

MAX_INSIGHTS = 4
RANK_TOLERANCE = 0.05

SENTIMENT_VALUES = {
    Sentiment.POSITIVE: 1,
    Sentiment.NEUTRAL: 0,
    Sentiment.NEGATIVE: -1,
}


@dataclass
class ProviderComparisonEntry:
    provider: str
    mention_rate: float
    avg_position: int
    sentiment_avg: int
    total_queries: int
    mentions_count: int
    category_coverage: float
    composite_score: int


@dataclass
class CrossProviderMetrics:
    strongest_provider: Optional[str] = None
    weakest_provider: Optional[str] = None
    consistency_score: int = 0
    insights: List[str] = field(default_factory=list)


@dataclass
class ProviderComparison:
    providers: List[ProviderComparisonEntry] = field(default_factory=list)
    cross_provider: CrossProviderMetrics = field(default_factory=CrossProviderMetrics)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def position_score_to_avg_rank(
    position_score: float,
    has_mentions: bool,
    weights: ScoringWeights = SCORING_WEIGHTS,
) -> int:
    """Approximate the average rank a position score corresponds to (0 = never mentioned)."""
    if not has_mentions:
        return 0
    by_weight = sorted(weights.position.items(), key=lambda item: item[1], reverse=True)
    for rank, weight in by_weight:
        if position_score >= weight - RANK_TOLERANCE:
            return rank
    return by_weight[-1][0] + 1


def compute_provider_comparison(
    provider_scores: List[ProviderScore],
    weights: ScoringWeights = SCORING_WEIGHTS,
) -> ProviderComparison:
    """Build the comparison from per-provider scores of one scan."""
    if not provider_scores:
        return ProviderComparison()

    intent_count = len(weights.intent)
    entries = []
    for ps in provider_scores:
        coverage = 0.0
        if ps.mention_count > 0 and ps.total_queries > 0:
            coverage = min(1.0, ps.mention_count / max(1, intent_count))

        composite = weights.combine(ps.mention_rate, ps.weighted_position_score, ps.intent_weighted_score)
        entries.append(ProviderComparisonEntry(
            provider=ps.provider,
            mention_rate=ps.mention_rate,
            avg_position=position_score_to_avg_rank(ps.weighted_position_score, ps.mention_count > 0, weights),
            sentiment_avg=SENTIMENT_VALUES.get(ps.sentiment, 0),
            total_queries=ps.total_queries,
            mentions_count=ps.mention_count,
            category_coverage=round(coverage, 2),
            composite_score=min(100, round_half_up(composite * 100)),
        ))

    return ProviderComparison(providers=entries, cross_provider=_cross_provider_metrics(entries))


def provider_comparison_for_scan(store, scan_id: str) -> ProviderComparison:
    """Load the provider scores of a stored scan and compare them."""
    scan = store.get_scan(scan_id)
    if not scan:
        logger.error(f"Scan {scan_id} not found for provider comparison")
        return ProviderComparison()

    raw_scores = scan.get("provider_scores") or []
    if not raw_scores:
        logger.warning(f"No provider scores stored for scan {scan_id}")
        return ProviderComparison()

    comparison = compute_provider_comparison([ProviderScore.from_dict(s) for s in raw_scores])
    logger.info(
        f"Provider comparison for scan {scan_id}: "
        f"strongest={comparison.cross_provider.strongest_provider}, "
        f"consistency={comparison.cross_provider.consistency_score}"
    )
    return comparison


def _cross_provider_metrics(entries: List[ProviderComparisonEntry]) -> CrossProviderMetrics:
    ranked = sorted(entries, key=lambda e: e.composite_score, reverse=True)
    strongest, weakest = ranked[0], ranked[-1]

    rates = [e.mention_rate for e in entries]
    spread = max(rates) - min(rates)

    insights = []
    if strongest.composite_score > weakest.composite_score + 10:
        gap = strongest.composite_score - weakest.composite_score
        insights.append(f"{strongest.provider} outperforms {weakest.provider} by {gap} points")

    if spread > 0.3:
        insights.append(
            f"Large mention rate gap between providers "
            f"({round_half_up(max(rates) * 100)}% vs {round_half_up(min(rates) * 100)}%)"
        )
    elif spread < 0.1 and len(entries) > 1:
        insights.append("Mention rates are consistent across all providers")

    positive = [e.provider for e in entries if e.sentiment_avg > 0]
    negative = [e.provider for e in entries if e.sentiment_avg < 0]
    if positive and negative:
        insights.append(f"Mixed sentiment: {', '.join(positive)} positive vs {', '.join(negative)} negative")

    silent = [e.provider for e in entries if e.mentions_count == 0]
    if silent and len(silent) < len(entries):
        insights.append(f"Not mentioned by: {', '.join(silent)}")

    return CrossProviderMetrics(
        strongest_provider=strongest.provider,
        weakest_provider=weakest.provider,
        consistency_score=round_half_up((1 - spread) * 100),
        insights=insights[:MAX_INSIGHTS],
    )
