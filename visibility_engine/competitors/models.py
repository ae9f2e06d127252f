"""
Competitor Tracking Models
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict


class Trend(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"
    NEW = "new"


@dataclass
class CompetitorSnapshot:
    """Competitor mentions aggregated over one scan."""
    name: str
    mention_count: int
    avg_position: float
    visibility_estimate: int


@dataclass
class CompetitorRecord:
    """Persisted top-3 competitor entry for a brand domain."""
    brand_domain: str
    competitor_name: str
    rank: int
    last_mention_count: int
    last_avg_position: float
    trend: Trend = Trend.NEW
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["trend"] = self.trend.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CompetitorRecord":
        return cls(
            brand_domain=data["brand_domain"],
            competitor_name=data["competitor_name"],
            rank=data["rank"],
            last_mention_count=data.get("last_mention_count", 0),
            last_avg_position=data.get("last_avg_position", 99.0),
            trend=Trend(data.get("trend", "new")),
            updated_at=data.get("updated_at") or datetime.utcnow(),
        )
