"""
Scoring weights and lookup tables.
"""

import math
from dataclasses import dataclass, field
from typing import Dict


@dataclass(frozen=True)
class ScoringWeights:
    """All tunable weights used by the scoring engine."""

    # Rank -> weight; ranks beyond the table use max_rank's weight
    position: Dict[int, float] = field(default_factory=lambda: {
        1: 1.0,
        2: 0.7,
        3: 0.5,
        4: 0.3,
    })

    intent: Dict[str, float] = field(default_factory=lambda: {
        "user_provided": 2.0,
        "direct_recommendation": 1.5,
        "problem_based": 1.3,
        "alternatives": 1.3,
        "comparison": 1.2,
        "feature_based": 0.9,
        "budget_based": 0.8,
    })

    # Provider trust weights; unknown providers count as 1.0
    providers: Dict[str, float] = field(default_factory=lambda: {
        "openai": 1.0,
        "claude": 1.0,
        "gemini": 0.8,
    })

    mention_rate_weight: float = 0.35
    position_weight: float = 0.35
    intent_weight: float = 0.30

    unranked_position_factor: float = 0.5
    consistency_floor: float = 0.6
    density_penalty: float = 0.03
    density_floor: float = 0.85

    @property
    def max_rank(self) -> int:
        return max(self.position)

    def position_weight_for(self, rank: int) -> float:
        return self.position.get(min(rank, self.max_rank), self.position[self.max_rank])

    def intent_weight_for(self, intent: str) -> float:
        return self.intent.get(intent, 1.0)

    def provider_weight_for(self, provider: str) -> float:
        return self.providers.get(provider, 1.0)

    def combine(self, mention_rate: float, position: float, intent: float) -> float:
        return (
            self.mention_rate_weight * mention_rate
            + self.position_weight * position
            + self.intent_weight * intent
        )


SCORING_WEIGHTS = ScoringWeights()


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3, not 2)."""
    return math.floor(value + 0.5)
