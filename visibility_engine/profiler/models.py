"""
Profile Data Models

The product profile built once per scan, and the optional form input
that overrides scraped values.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


@dataclass
class ScanInput:
    """Form input submitted with a scan request."""
    brand_name: str
    website_url: str
    core_problem: str = ""
    target_buyer: str = ""
    differentiators: Optional[str] = None
    competitors: List[str] = field(default_factory=list)
    buyer_questions: List[str] = field(default_factory=list)
    plan_tier: str = "free"


@dataclass(frozen=True)
class Profile:
    """
    Structured product profile, fixed once built.

    Invariants:
    - brand_aliases is never empty
    - competitors never contains brand_name (case-insensitive)
    """
    brand_name: str
    domain: str
    tagline: str = ""
    category: str = "software"
    subcategory: str = ""
    target_audience: str = ""
    core_features: List[str] = field(default_factory=list)
    pricing_model: str = "unknown"
    competitors: List[str] = field(default_factory=list)
    key_differentiators: List[str] = field(default_factory=list)
    use_cases: List[str] = field(default_factory=list)
    brand_aliases: List[str] = field(default_factory=list)

    # Form-sourced fields (higher signal than scraped equivalents)
    core_problem: str = ""
    target_buyer: str = ""
    user_differentiators: str = ""
    buyer_questions: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ProfileExtraction(BaseModel):
    """Schema of the structured-extraction response."""
    brand_name: str = ""
    domain: str = ""
    tagline: str = ""
    category: str = ""
    subcategory: str = ""
    target_audience: str = ""
    core_features: List[str] = Field(default_factory=list)
    pricing_model: str = ""
    competitors_mentioned: List[str] = Field(default_factory=list)
    key_differentiators: List[str] = Field(default_factory=list)
    use_cases: List[str] = Field(default_factory=list)
    brand_aliases: List[str] = Field(default_factory=list)
    core_problem: str = ""
    target_buyer: str = ""
