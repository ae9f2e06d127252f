"""
Scoring Data Models
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List

from ..detection.models import Sentiment


@dataclass
class ProviderScore:
    """Unweighted score for a single provider."""
    provider: str
    mention_rate: float
    mention_count: int
    total_queries: int
    weighted_position_score: float
    intent_weighted_score: float
    sentiment: Sentiment
    visibility_score: int

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["sentiment"] = self.sentiment.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProviderScore":
        return cls(
            provider=data["provider"],
            mention_rate=data.get("mention_rate", 0.0),
            mention_count=data.get("mention_count", 0),
            total_queries=data.get("total_queries", 0),
            weighted_position_score=data.get("weighted_position_score", 0.0),
            intent_weighted_score=data.get("intent_weighted_score", 0.0),
            sentiment=Sentiment(data.get("sentiment", "neutral")),
            visibility_score=data.get("visibility_score", 0),
        )


@dataclass
class ScoringBreakdown:
    """Aggregate visibility score with its components."""
    mention_rate: float = 0.0
    weighted_position_score: float = 0.0
    intent_weighted_score: float = 0.0
    cross_model_consistency: float = 1.0
    competitor_density_factor: float = 1.0
    raw_score: float = 0.0
    final_score: int = 0
    provider_scores: List[ProviderScore] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["provider_scores"] = [p.to_dict() for p in self.provider_scores]
        return data
