"""
Test Suite for Brand Detection

Tests:
- Regex, alias and fuzzy detection stages
- Rank extraction from numbered lists and bold spans
- Semantic confirmation of fuzzy hits
- Alias registry construction and enrichment
- Keyword sentiment classification
"""

import pytest
from unittest.mock import AsyncMock

from visibility_engine.detection import (
    DetectionEngine,
    DetectionMethod,
    DetectionResult,
    Sentiment,
    build_alias_registry,
    classify_sentiment,
    edit_distance,
    enrich_aliases,
    generate_deterministic_aliases,
    similarity,
)


RANKED_RESPONSE = """Here are the top scheduling tools:

1. **Cal.com** - open source and self-hostable
2. **Calendly** - the most popular option
3. Acuity Scheduling - good for service businesses
"""


class TestSimilarity:
    """Test Levenshtein helpers."""

    def test_edit_distance(self):
        assert edit_distance("kitten", "sitting") == 3
        assert edit_distance("", "abc") == 3
        assert edit_distance("same", "same") == 0

    @pytest.mark.parametrize("a,b", [
        ("kitten", "sitting"),
        ("calendly", "calendy"),
        ("", "notion"),
        ("Cal.com", "calcom"),
        ("hubspot", "hub spot"),
    ])
    def test_edit_distance_symmetric(self, a, b):
        assert edit_distance(a, b) == edit_distance(b, a)
        assert similarity(a, b) == similarity(b, a)

    def test_similarity_bounds(self):
        assert similarity("", "") == 1.0
        assert similarity("abc", "xyz") == 0.0
        assert similarity("calendy", "calendly") == pytest.approx(0.875)


class TestRegexDetection:
    """Test literal name matching."""

    def test_detects_brand_in_ranked_list(self):
        """Brand in first list item should rank 1."""
        engine = DetectionEngine()
        result = engine.detect(RANKED_RESPONSE, "Cal.com")

        assert result.detected is True
        assert result.method == DetectionMethod.REGEX
        assert result.confidence == 1.0
        assert result.position == 1
        assert "Cal.com" in result.snippet

    def test_competitor_ranks(self):
        engine = DetectionEngine()
        results = engine.detect_all(RANKED_RESPONSE, ["Calendly", "Acuity Scheduling"])

        assert [r.position for r in results] == [2, 3]
        assert all(r.detected for r in results)

    def test_case_insensitive(self):
        engine = DetectionEngine()
        assert engine.detect("try HUBSPOT today", "HubSpot").detected is True

    def test_requires_word_boundaries(self):
        """A brand embedded inside a longer word is not a mention."""
        engine = DetectionEngine()
        assert engine.detect("Calendlyish tools are everywhere", "Calendly").detected is False
        assert engine.detect("See MyCal.com for details", "Cal.com").detected is False

    def test_possessive_is_a_mention(self):
        engine = DetectionEngine()
        assert engine.detect("HubSpot's CRM is free", "HubSpot").detected is True

    def test_absent_brand(self):
        engine = DetectionEngine()
        result = engine.detect("Nothing relevant here.", "Cal.com")

        assert result.detected is False
        assert result.confidence == 0.0
        assert result.position is None


class TestAliasDetection:
    """Test the alias stage."""

    def test_alias_match(self):
        engine = DetectionEngine({"cal.com": ["cal"]})
        result = engine.detect("I would pick Cal for open source scheduling.", "Cal.com")

        assert result.detected is True
        assert result.method == DetectionMethod.ALIAS
        assert result.brand_name == "Cal.com"

    def test_alias_position(self):
        engine = DetectionEngine({"cal.com": ["cal"]})
        text = "1. Zoom\n2. Cal - open source"

        assert engine.detect(text, "Cal.com").position == 2

    def test_alias_respects_boundaries(self):
        engine = DetectionEngine({"cal.com": ["cal"]})
        assert engine.detect("Calendly is popular.", "Cal.com").detected is False


class TestFuzzyDetection:
    """Test fuzzy matching of misspellings."""

    def test_misspelling_detected(self):
        engine = DetectionEngine()
        result = engine.detect("Calendy is a good option.", "Calendly")

        assert result.detected is True
        assert result.method == DetectionMethod.FUZZY
        assert result.confidence == pytest.approx(0.88, abs=0.01)

    def test_short_names_never_fuzzy_matched(self):
        """Names under four characters only match literally."""
        engine = DetectionEngine()
        assert engine.detect("Bax is great for storage", "Box").detected is False

    def test_dissimilar_tokens_rejected(self):
        engine = DetectionEngine()
        assert engine.detect("Zoom and Slack are common.", "Calendly").detected is False

    def test_fuzzy_position_uses_cleaned_token(self):
        engine = DetectionEngine()
        result = engine.detect("1. Calendy, a scheduler", "Calendly")

        assert result.detected is True
        assert result.position == 1


class TestPositionExtraction:
    """Test rank extraction."""

    def test_numbered_list_with_parenthesis(self):
        assert DetectionEngine.extract_position("1) Zoom\n2) Cal.com", "Cal.com") == 2

    def test_bold_span_ordinal(self):
        text = "Consider **Calendly** or **Cal.com** for teams."
        assert DetectionEngine.extract_position(text, "Cal.com") == 2
        assert DetectionEngine.extract_position(text, "Calendly") == 1

    def test_list_takes_priority_over_bold(self):
        text = "**Cal.com** is popular.\n\n3. Cal.com"
        assert DetectionEngine.extract_position(text, "Cal.com") == 3

    def test_no_structure(self):
        assert DetectionEngine.extract_position("Cal.com is fine.", "Cal.com") is None
        assert DetectionEngine.extract_position("anything", "") is None


class TestSemanticConfirm:
    """Test model confirmation of fuzzy hits."""

    @pytest.fixture
    def fuzzy_hit(self) -> DetectionResult:
        return DetectionResult(
            brand_name="Calendly",
            detected=True,
            confidence=0.88,
            method=DetectionMethod.FUZZY,
            snippet="Calendy is a good option.",
        )

    @pytest.mark.asyncio
    async def test_yes_boosts_confidence(self, fuzzy_hit):
        engine = DetectionEngine(llm_call=AsyncMock(return_value="Yes"))
        result = await engine.semantic_confirm("text", "Calendly", fuzzy_hit)

        assert result.detected is True
        assert result.method == DetectionMethod.SEMANTIC
        assert result.confidence == 1.0

    @pytest.mark.asyncio
    async def test_other_answer_rejects(self, fuzzy_hit):
        engine = DetectionEngine(llm_call=AsyncMock(return_value="No, it refers to something else"))
        result = await engine.semantic_confirm("text", "Calendly", fuzzy_hit)

        assert result.detected is False
        assert result.confidence == 0.0
        assert result.method == DetectionMethod.SEMANTIC

    @pytest.mark.asyncio
    async def test_call_failure_keeps_fuzzy_result(self, fuzzy_hit):
        engine = DetectionEngine(llm_call=AsyncMock(side_effect=RuntimeError("timeout")))
        result = await engine.semantic_confirm("text", "Calendly", fuzzy_hit)

        assert result == fuzzy_hit

    @pytest.mark.asyncio
    async def test_without_model_keeps_fuzzy_result(self, fuzzy_hit):
        result = await DetectionEngine().semantic_confirm("text", "Calendly", fuzzy_hit)
        assert result is fuzzy_hit


class TestAliases:
    """Test alias generation and registry building."""

    @pytest.mark.parametrize("name,expected", [
        ("HubSpot", ["hub spot", "hub-spot"]),
        ("Cal.com", ["cal"]),
        ("Google Workspace", ["googleworkspace", "workspace"]),
        ("Monday-com", ["mondaycom"]),
        ("Calendly", []),
    ])
    def test_deterministic_aliases(self, name, expected):
        assert generate_deterministic_aliases(name) == expected

    def test_registry_covers_brand_and_competitors(self, cal_profile):
        registry = build_alias_registry(cal_profile)

        assert registry["cal.com"] == ["cal"]
        assert registry["calendly"] == []
        assert registry["acuity scheduling"] == ["acuityscheduling", "scheduling"]

    @pytest.mark.asyncio
    async def test_enrichment_merges_suggestions(self):
        registry = {"calendly": []}
        llm = AsyncMock(return_value='```json\n{"Calendly": ["calendly.com", "Calendly"]}\n```')

        result = await enrich_aliases(["Calendly"], llm, registry)

        assert result["calendly"] == ["calendly.com"]

    @pytest.mark.asyncio
    async def test_enrichment_failure_leaves_registry(self):
        registry = {"calendly": ["cal-endly"]}
        llm = AsyncMock(return_value="I cannot help with that")

        result = await enrich_aliases(["Calendly"], llm, registry)

        assert result == {"calendly": ["cal-endly"]}

    @pytest.mark.asyncio
    async def test_enrichment_skipped_without_competitors(self):
        llm = AsyncMock()
        await enrich_aliases([], llm, {})
        llm.assert_not_called()


class TestSentiment:
    """Test keyword-window sentiment."""

    def test_positive(self):
        text = "Cal.com is an excellent and reliable scheduler."
        assert classify_sentiment(text, "Cal.com") == Sentiment.POSITIVE

    def test_negative(self):
        text = "Cal.com is expensive and buggy compared to others."
        assert classify_sentiment(text, "Cal.com") == Sentiment.NEGATIVE

    def test_absent_brand_is_neutral(self):
        assert classify_sentiment("Calendly is excellent.", "Cal.com") == Sentiment.NEUTRAL

    def test_hedging_dampens_positive(self):
        text = (
            "Cal.com is reliable. However, keep in mind that setup takes time, "
            "although most teams manage."
        )
        assert classify_sentiment(text, "Cal.com") == Sentiment.NEUTRAL

    def test_window_limits_signals(self):
        text = "Cal.com exists." + " filler" * 100 + " excellent"
        assert classify_sentiment(text, "Cal.com") == Sentiment.NEUTRAL
