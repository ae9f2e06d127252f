"""
Test Suite for Product Profiling

Tests:
- Structured extraction and safe defaults
- Form input merge rules
- Competitor discovery
- Scan form validation
"""

import json
from dataclasses import FrozenInstanceError
from unittest.mock import AsyncMock

import pytest

from visibility_engine.errors import ProfileExtractionError
from visibility_engine.profiler import (
    ProductProfiler,
    ScanInput,
    ValidationIssue,
    validate_scan_input,
)


EXTRACTION = {
    "brand_name": "Cal.com",
    "domain": "cal.com",
    "tagline": "Scheduling infrastructure for everyone",
    "category": "scheduling software",
    "subcategory": "open source scheduling",
    "target_audience": "developers",
    "core_features": [f"Feature {i}" for i in range(10)],
    "pricing_model": "freemium",
    "competitors_mentioned": ["Calendly", "calendly", "Cal.com"],
    "key_differentiators": ["Self-hostable on your own servers and cloud", "Great UX"],
    "use_cases": ["Sales demos"],
    "brand_aliases": ["cal"],
    "core_problem": "Back-and-forth emails to book meetings",
    "target_buyer": "Founders",
}


def form_input(**overrides) -> ScanInput:
    values = dict(
        brand_name="Cal.com",
        website_url="https://cal.com",
        core_problem="Teams waste hours coordinating meeting times",
        target_buyer="Engineering managers at startups",
        differentiators="Fully open source. Self-hostable on your own servers",
        competitors=["SavvyCal", "Calendly"],
        buyer_questions=["short", "How do I avoid double bookings across calendars?"],
    )
    values.update(overrides)
    return ScanInput(**values)


@pytest.fixture
def fetch_page():
    return AsyncMock(return_value="<main>Cal.com scheduling</main>")


# ============================================================================
# Profiler
# ============================================================================

class TestProductProfiler:
    """Test profile extraction."""

    @pytest.mark.asyncio
    async def test_extraction(self, fetch_page):
        llm = AsyncMock(return_value=json.dumps(EXTRACTION))
        profile = await ProductProfiler(llm, fetch_page).profile("https://cal.com")

        assert profile.brand_name == "Cal.com"
        assert profile.category == "scheduling software"
        assert len(profile.core_features) == 8
        assert profile.competitors == ["Calendly"]
        assert profile.brand_aliases == ["cal", "cal.com"]
        fetch_page.assert_awaited_once_with("https://cal.com")

    @pytest.mark.asyncio
    async def test_content_truncated(self):
        llm = AsyncMock(return_value=json.dumps(EXTRACTION))
        fetch_page = AsyncMock(return_value="x" * 10000)

        await ProductProfiler(llm, fetch_page).profile("https://cal.com")

        prompt = llm.call_args.args[0]
        assert "x" * 6000 in prompt
        assert "x" * 6001 not in prompt

    @pytest.mark.asyncio
    async def test_unparsable_extraction_is_fatal(self, fetch_page):
        llm = AsyncMock(return_value="I could not read that page")

        with pytest.raises(ProfileExtractionError):
            await ProductProfiler(llm, fetch_page).profile("https://cal.com")

    @pytest.mark.asyncio
    async def test_defaults_and_discovery(self, fetch_page):
        llm = AsyncMock(side_effect=[
            "{}",
            '["Acme", "Rival", "rival", "Other"]',
        ])
        profile = await ProductProfiler(llm, fetch_page).profile("https://www.acme.io/pricing")

        assert profile.brand_name == "acme"
        assert profile.domain == "acme.io"
        assert profile.category == "software"
        assert profile.pricing_model == "unknown"
        assert profile.brand_aliases
        assert profile.competitors == ["Rival", "Other"]
        assert "List the best-known direct competitors" in llm.call_args_list[1].args[0]

    @pytest.mark.asyncio
    async def test_profile_is_frozen(self, fetch_page):
        llm = AsyncMock(side_effect=["{}", '["Rival"]'])
        profile = await ProductProfiler(llm, fetch_page).profile("https://acme.io")

        assert profile.competitors == ["Rival"]
        with pytest.raises(FrozenInstanceError):
            profile.competitors = []

    @pytest.mark.asyncio
    async def test_form_input_wins(self, fetch_page):
        llm = AsyncMock(return_value=json.dumps(EXTRACTION))
        profile = await ProductProfiler(llm, fetch_page).profile("https://cal.com", form_input())

        assert profile.core_problem == "Teams waste hours coordinating meeting times"
        assert profile.target_buyer == "Engineering managers at startups"
        assert profile.competitors == ["SavvyCal", "Calendly"]
        assert profile.user_differentiators == "Fully open source. Self-hostable on your own servers"
        assert profile.key_differentiators == [
            "Fully open source",
            "Self-hostable on your own servers",
            "Great UX",
        ]
        assert profile.buyer_questions == ["How do I avoid double bookings across calendars?"]
        # Competitors were known, no discovery call
        assert llm.call_count == 1

    @pytest.mark.asyncio
    async def test_scraped_values_fill_blank_form_fields(self, fetch_page):
        llm = AsyncMock(return_value=json.dumps(EXTRACTION))
        profile = await ProductProfiler(llm, fetch_page).profile(
            "https://cal.com", form_input(core_problem="", target_buyer="")
        )

        assert profile.core_problem == "Back-and-forth emails to book meetings"
        assert profile.target_buyer == "Founders"

    @pytest.mark.asyncio
    async def test_form_competitor_matching_brand_removed(self, fetch_page):
        extraction = dict(EXTRACTION, competitors_mentioned=[])
        llm = AsyncMock(return_value=json.dumps(extraction))

        profile = await ProductProfiler(llm, fetch_page).profile(
            "https://cal.com", form_input(competitors=["cal.com", "Calendly"])
        )

        assert profile.competitors == ["Calendly"]


class TestCompetitorDiscovery:
    """Test the discovery fallback."""

    @pytest.mark.asyncio
    async def test_call_failure_returns_empty(self, cal_profile, fetch_page):
        llm = AsyncMock(side_effect=RuntimeError("overloaded"))
        assert await ProductProfiler(llm, fetch_page).discover_competitors(cal_profile) == []

    @pytest.mark.asyncio
    async def test_unparsable_returns_empty(self, cal_profile, fetch_page):
        llm = AsyncMock(return_value="Calendly and Acuity")
        assert await ProductProfiler(llm, fetch_page).discover_competitors(cal_profile) == []

    @pytest.mark.asyncio
    async def test_capped_and_brand_free(self, cal_profile, fetch_page):
        names = ["CAL.COM"] + [f"Tool {i}" for i in range(12)]
        llm = AsyncMock(return_value=json.dumps(names))

        result = await ProductProfiler(llm, fetch_page).discover_competitors(cal_profile)

        assert len(result) == 8
        assert "CAL.COM" not in result


class TestProfilerHelpers:
    """Test static merge helpers."""

    def test_build_aliases_never_empty(self):
        assert ProductProfiler.build_aliases([], "HubSpot", "hubspot.com") == ["hubspot", "hubspot.com"]

    def test_build_aliases_keeps_existing_first(self):
        aliases = ProductProfiler.build_aliases(["Monday"], "monday.com", "monday.com")
        assert aliases == ["Monday", "monday", "monday.com"]

    def test_merge_differentiators_capped(self):
        scraped = [f"Capability {i} for teams" for i in range(12)]
        assert len(ProductProfiler.merge_differentiators(scraped, None)) == 8

    def test_merge_differentiators_drops_short_fragments(self):
        result = ProductProfiler.merge_differentiators([], "Fast. Fully open source")
        assert result == ["Fully open source"]


# ============================================================================
# Form Validation
# ============================================================================

class TestScanInputValidation:
    """Test scan form validation."""

    def fields(self, scan_input):
        return [issue.field for issue in validate_scan_input(scan_input)]

    def test_valid(self):
        assert validate_scan_input(form_input(buyer_questions=[])) == []

    def test_brand_required(self):
        assert self.fields(form_input(brand_name="  ", buyer_questions=[])) == ["brand_name"]

    def test_brand_too_long(self):
        assert "brand_name" in self.fields(form_input(brand_name="x" * 81))

    @pytest.mark.parametrize("url", ["", "ftp://cal.com", "cal.com", "https://"])
    def test_invalid_url(self, url):
        assert "website_url" in self.fields(form_input(website_url=url))

    def test_blocked_platform(self):
        issues = validate_scan_input(form_input(website_url="https://www.github.com/calcom"))
        assert ValidationIssue(
            "website_url",
            "Please enter your product URL, not a social media or platform site.",
        ) in issues

    def test_problem_length(self):
        assert "core_problem" in self.fields(form_input(core_problem="too short"))
        assert "core_problem" in self.fields(form_input(core_problem="x" * 301))

    def test_buyer_length(self):
        assert "target_buyer" in self.fields(form_input(target_buyer="devs"))

    def test_differentiators_optional(self):
        assert "differentiators" not in self.fields(form_input(differentiators=None))
        assert "differentiators" in self.fields(form_input(differentiators="tiny"))

    def test_too_many_competitors(self):
        assert "competitors" in self.fields(form_input(competitors=[f"C{i}" for i in range(6)]))

    def test_competitor_name_too_long(self):
        assert "competitors" in self.fields(form_input(competitors=["x" * 61]))

    def test_question_with_brand(self):
        issues = validate_scan_input(form_input(buyer_questions=["Is Cal.com good for teams?"]))
        assert [i.field for i in issues] == ["buyer_questions"]
        assert "Cal.com" in issues[0].message

    def test_short_question(self):
        assert "buyer_questions" in self.fields(form_input(buyer_questions=["why?"]))

    def test_reports_every_problem(self):
        issues = validate_scan_input(ScanInput(brand_name="", website_url=""))
        assert {i.field for i in issues} == {"brand_name", "website_url", "core_problem", "target_buyer"}
