"""
Pytest Configuration and Shared Fixtures

Provides common fixtures and factories for all test modules.
"""

import json
import re
from typing import List, Optional
from unittest.mock import AsyncMock

import pytest

from visibility_engine.database import ScanStore, create_db_engine, create_session_factory, init_db
from visibility_engine.detection import DetectionMethod, DetectionResult, ResponseAnalysis
from visibility_engine.profiler import Profile
from visibility_engine.queries import IntentCategory, ValidatedQuery


# ============================================================================
# Profile Fixtures
# ============================================================================

@pytest.fixture
def cal_profile() -> Profile:
    """Scheduling product profile used across tests."""
    return Profile(
        brand_name="Cal.com",
        domain="cal.com",
        tagline="Open source scheduling infrastructure",
        category="scheduling software",
        subcategory="open source meeting scheduling",
        target_audience="developers and small teams",
        core_features=["Booking pages", "Calendar sync", "Team routing"],
        pricing_model="freemium",
        competitors=["Calendly", "Acuity Scheduling"],
        key_differentiators=["Open source", "Self-hostable"],
        use_cases=["Sales demos", "Interviews"],
        brand_aliases=["cal", "cal.com"],
        core_problem="Scheduling meetings takes too many emails",
        target_buyer="Engineering team leads",
    )


# ============================================================================
# Factories
# ============================================================================

def make_query(
    text: str = "What is the best scheduling tool for developers?",
    intent: IntentCategory = IntentCategory.DIRECT_RECOMMENDATION,
) -> ValidatedQuery:
    return ValidatedQuery(text=text, intent=intent, intent_score=4)


def make_analysis(
    provider: str = "openai",
    detected: bool = False,
    position: Optional[int] = None,
    query_text: str = "What is the best scheduling tool for developers?",
    intent: IntentCategory = IntentCategory.DIRECT_RECOMMENDATION,
    competitors: Optional[List[DetectionResult]] = None,
    brand: str = "Cal.com",
) -> ResponseAnalysis:
    return ResponseAnalysis(
        query=make_query(query_text, intent),
        provider=provider,
        raw_response="response text",
        brand_detection=DetectionResult(
            brand_name=brand,
            detected=detected,
            confidence=1.0 if detected else 0.0,
            method=DetectionMethod.REGEX,
            position=position,
        ),
        competitor_detections=competitors or [],
    )


def competitor(name: str, position: Optional[int] = None, detected: bool = True) -> DetectionResult:
    return DetectionResult(
        brand_name=name,
        detected=detected,
        confidence=1.0 if detected else 0.0,
        position=position,
    )


# ============================================================================
# Scripted Model and Providers
# ============================================================================

EXTRACTION = json.dumps({
    "brand_name": "Cal.com",
    "domain": "cal.com",
    "tagline": "Scheduling infrastructure for everyone",
    "category": "scheduling software",
    "competitors_mentioned": ["Calendly"],
    "brand_aliases": ["cal"],
})

OPENAI_ANSWER = "1. **Cal.com** is an excellent open source pick\n2. Calendly"
CLAUDE_ANSWER = "Calendly is the popular option here."


class ScriptedLLM:
    """Answers each prompt type with a canned response."""

    def __init__(self, extraction: str = EXTRACTION, ratings: str = "not json"):
        self.extraction = extraction
        self.ratings = ratings
        self.prompts = []

    async def __call__(self, prompt: str, **kwargs) -> str:
        self.prompts.append(prompt)
        if "extract a structured profile" in prompt:
            return self.extraction
        if "Rate each query" in prompt:
            return self.ratings
        intent = re.search(r"INTENT TYPE: (\w+)", prompt)
        if intent:
            name = intent.group(1)
            return json.dumps([f"{name} alpha{i} beta{i} gamma{i}" for i in range(2)])
        if "For each software product below" in prompt:
            return '{"Calendly": ["calendly.com"]}'
        if "Does the following text mention" in prompt:
            return "yes"
        return "[]"

    def count(self, marker: str) -> int:
        return sum(1 for p in self.prompts if marker in p)


async def answer(query: str, provider: str) -> str:
    return OPENAI_ANSWER if provider == "openai" else CLAUDE_ANSWER


# ============================================================================
# Collaborator Fixtures
# ============================================================================

@pytest.fixture
def mock_llm() -> AsyncMock:
    """Model call returning an empty JSON array unless reconfigured."""
    return AsyncMock(return_value="[]")


@pytest.fixture
def store() -> ScanStore:
    """ScanStore backed by a fresh in-memory SQLite database."""
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield ScanStore(create_session_factory(engine))
    engine.dispose()


# ============================================================================
# Test Markers
# ============================================================================

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests that run the full scan pipeline"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
