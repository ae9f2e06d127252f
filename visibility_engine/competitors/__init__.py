"""
Competitors Module
"""

from .models import CompetitorRecord, CompetitorSnapshot, Trend
from .tracker import CompetitorTracker

__all__ = [
    "CompetitorRecord",
    "CompetitorSnapshot",
    "Trend",
    "CompetitorTracker",
]
