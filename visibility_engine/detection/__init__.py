"""
Detection Module

Finds the target brand and its competitors in provider responses.
"""

from .models import (
    AliasRegistry,
    DetectionMethod,
    DetectionResult,
    ResponseAnalysis,
    Sentiment,
)
from .similarity import edit_distance, similarity
from .aliases import build_alias_registry, enrich_aliases, generate_deterministic_aliases
from .engine import DetectionConfig, DetectionEngine
from .sentiment import classify_sentiment

__all__ = [
    # Models
    "AliasRegistry",
    "DetectionMethod",
    "DetectionResult",
    "ResponseAnalysis",
    "Sentiment",
    # Similarity
    "edit_distance",
    "similarity",
    # Aliases
    "build_alias_registry",
    "enrich_aliases",
    "generate_deterministic_aliases",
    # Engine
    "DetectionConfig",
    "DetectionEngine",
    "classify_sentiment",
]
