"""
Scoring Module

Visibility scoring plus the analytics views built on stored scans.
"""

from .weights import ScoringWeights, SCORING_WEIGHTS, round_half_up
from .models import ProviderScore, ScoringBreakdown
from .engine import ScoringEngine, derive_sentiment
from .share_of_voice import (
    BrandShare,
    ShareOfVoice,
    compute_share_of_voice,
    share_of_voice_for_scan,
)
from .provider_comparison import (
    CrossProviderMetrics,
    ProviderComparison,
    ProviderComparisonEntry,
    compute_provider_comparison,
    position_score_to_avg_rank,
    provider_comparison_for_scan,
)
from .deltas import (
    COMPLETED_STATUSES,
    Delta,
    ScanStatus,
    ScoreDeltas,
    classify_scan_status,
    compute_score_deltas,
    score_deltas_for_scan,
)
from .trend import ScanTrend, ScanTrendPoint, TREND_LIMIT, compute_scan_trend, scan_trend_for_brand
from .query_explorer import QueryExplorer, compute_query_explorer, query_explorer_for_scan

__all__ = [
    # Weights
    "ScoringWeights",
    "SCORING_WEIGHTS",
    "round_half_up",
    # Engine
    "ProviderScore",
    "ScoringBreakdown",
    "ScoringEngine",
    "derive_sentiment",
    # Share of voice
    "BrandShare",
    "ShareOfVoice",
    "compute_share_of_voice",
    "share_of_voice_for_scan",
    # Provider comparison
    "CrossProviderMetrics",
    "ProviderComparison",
    "ProviderComparisonEntry",
    "compute_provider_comparison",
    "position_score_to_avg_rank",
    "provider_comparison_for_scan",
    # Deltas
    "COMPLETED_STATUSES",
    "Delta",
    "ScanStatus",
    "ScoreDeltas",
    "classify_scan_status",
    "compute_score_deltas",
    "score_deltas_for_scan",
    # Trend
    "ScanTrend",
    "ScanTrendPoint",
    "TREND_LIMIT",
    "compute_scan_trend",
    "scan_trend_for_brand",
    # Query explorer
    "QueryExplorer",
    "compute_query_explorer",
    "query_explorer_for_scan",
]
