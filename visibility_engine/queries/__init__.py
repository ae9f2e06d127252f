"""
Queries Module

Generation, validation and storage of the intent-driven test queries.
"""

from .models import IntentCategory, GeneratedQuery, ValidatedQuery
from .intents import IntentConfig, INTENT_CONFIGS
from .generator import QueryGenerator
from .validator import QueryValidator, QueryRating
from .repository import QueryRepository

__all__ = [
    "IntentCategory",
    "GeneratedQuery",
    "ValidatedQuery",
    "IntentConfig",
    "INTENT_CONFIGS",
    "QueryGenerator",
    "QueryValidator",
    "QueryRating",
    "QueryRepository",
]
