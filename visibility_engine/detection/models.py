"""
Detection Data Models
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from ..queries.models import ValidatedQuery

# Canonical lowercase brand name -> lowercase aliases
AliasRegistry = Dict[str, List[str]]


class DetectionMethod(str, Enum):
    REGEX = "regex"
    ALIAS = "alias"
    FUZZY = "fuzzy"
    SEMANTIC = "semantic"


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


@dataclass
class DetectionResult:
    """Outcome of detecting one brand in one response."""
    brand_name: str
    detected: bool = False
    confidence: float = 0.0
    method: DetectionMethod = DetectionMethod.REGEX
    position: Optional[int] = None
    snippet: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["method"] = self.method.value
        return data


@dataclass
class ResponseAnalysis:
    """One provider response to one query, with all detections."""
    query: ValidatedQuery
    provider: str
    raw_response: str
    brand_detection: DetectionResult
    competitor_detections: List[DetectionResult] = field(default_factory=list)
    sentiment: Optional[Sentiment] = None
    response_timestamp: datetime = field(default_factory=datetime.utcnow)

    @property
    def detected_competitors(self) -> List[DetectionResult]:
        return [c for c in self.competitor_detections if c.detected]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query": self.query.to_dict(),
            "provider": self.provider,
            "raw_response": self.raw_response,
            "brand_detection": self.brand_detection.to_dict(),
            "competitor_detections": [c.to_dict() for c in self.competitor_detections],
            "sentiment": self.sentiment.value if self.sentiment else None,
            "response_timestamp": self.response_timestamp.isoformat(),
        }
