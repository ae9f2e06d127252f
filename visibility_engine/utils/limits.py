"""
Plan Limits

Scan sizing per plan tier: how many queries run, how many per intent
cluster, whether semantic confirmation is on, and how many provider
calls may be in flight at once.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Optional, Union


class PlanTier(str, Enum):
    """Subscription tier driving scan limits."""
    FREE = "free"
    PRO = "pro"
    ENTERPRISE = "enterprise"


@dataclass(frozen=True)
class ScanLimits:
    """Resolved limits for one scan."""
    max_queries: int
    max_queries_per_cluster: int
    enable_semantic_confirm: bool
    max_concurrent_calls: int


PLAN_LIMITS: Dict[PlanTier, ScanLimits] = {
    PlanTier.FREE: ScanLimits(
        max_queries=30,
        max_queries_per_cluster=6,
        enable_semantic_confirm=False,
        max_concurrent_calls=5,
    ),
    PlanTier.PRO: ScanLimits(
        max_queries=60,
        max_queries_per_cluster=12,
        enable_semantic_confirm=True,
        max_concurrent_calls=10,
    ),
    PlanTier.ENTERPRISE: ScanLimits(
        max_queries=100,
        max_queries_per_cluster=20,
        enable_semantic_confirm=True,
        max_concurrent_calls=15,
    ),
}


def resolve_limits(
    plan: Union[PlanTier, str] = PlanTier.FREE,
    max_queries_override: Optional[int] = None,
) -> ScanLimits:
    """
    Resolve scan limits from a plan tier.

    Args:
        plan: Plan tier (unknown names fall back to free)
        max_queries_override: Optional cap (e.g. MAX_QUERIES_PER_SCAN);
            it can only lower the plan's query limit

    Returns:
        ScanLimits for the scan
    """
    try:
        tier = PlanTier(plan)
    except ValueError:
        tier = PlanTier.FREE

    limits = PLAN_LIMITS[tier]
    if max_queries_override and max_queries_override > 0:
        limits = replace(limits, max_queries=min(max_queries_override, limits.max_queries))
    return limits
