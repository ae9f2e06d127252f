"""
Query Data Models
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict


class IntentCategory(str, Enum):
    """Query-generation strategy; also used to weight scoring."""
    DIRECT_RECOMMENDATION = "direct_recommendation"
    ALTERNATIVES = "alternatives"
    COMPARISON = "comparison"
    PROBLEM_BASED = "problem_based"
    FEATURE_BASED = "feature_based"
    BUDGET_BASED = "budget_based"
    USER_PROVIDED = "user_provided"


@dataclass
class GeneratedQuery:
    """Candidate test query before validation."""
    text: str
    intent: IntentCategory
    generated_by: str = "llm"


@dataclass
class ValidatedQuery:
    """Query that went through bias, de-duplication and relevance checks."""
    text: str
    intent: IntentCategory
    generated_by: str = "llm"
    is_relevant: bool = True
    intent_score: int = 3
    has_brand_bias: bool = False
    dedupe_hash: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["intent"] = self.intent.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ValidatedQuery":
        return cls(
            text=data["text"],
            intent=IntentCategory(data["intent"]),
            generated_by=data.get("generated_by", "llm"),
            is_relevant=data.get("is_relevant", True),
            intent_score=data.get("intent_score", 3),
            has_brand_bias=data.get("has_brand_bias", False),
            dedupe_hash=data.get("dedupe_hash", ""),
        )
