"""
Product Profiler

Turns a URL (plus optional form input) into a structured product profile:
1. Fetches the page text and truncates it to a fixed length
2. Runs one structured-extraction call against the model
3. Merges form input over scraped values
4. Derives aliases and fills safe defaults
5. Discovers market competitors when none are known

Extraction parse failure is fatal. Competitor discovery failure is not.
"""

import logging
import re
from dataclasses import replace
from typing import List, Optional

from ..clients.base import LLMCall, PageFetch
from ..errors import ProfileExtractionError
from ..output import parse_json_response
from ..utils.domain import extract_domain, first_domain_label
from .models import Profile, ProfileExtraction, ScanInput

logger = logging.getLogger(__name__)

CONTENT_BUDGET = 6000
MAX_FEATURES = 8
MAX_DIFFERENTIATORS = 8
MAX_DISCOVERED_COMPETITORS = 8
MIN_QUESTION_LENGTH = 10


# =============================================================================
# PROMPTS
# =============================================================================


PROFILE_EXTRACTION_PROMPT = """You are a SaaS product analyst. Given the following website content, extract a structured profile.

Respond ONLY with valid JSON matching this exact schema:
{{
  "brand_name": "string",
  "domain": "string",
  "tagline": "string",
  "category": "string",
  "subcategory": "string",
  "target_audience": "string",
  "core_features": ["string"],
  "pricing_model": "string",
  "competitors_mentioned": ["string"],
  "key_differentiators": ["string"],
  "use_cases": ["string"],
  "brand_aliases": ["string"],
  "core_problem": "string",
  "target_buyer": "string"
}}

Rules:
- brand_aliases: common abbreviations, the domain without TLD, and alternate names found on the site
- core_features: max 8, ordered by prominence on the page
- competitors_mentioned: only products explicitly named on the site
- core_problem: the primary pain point the product addresses
- target_buyer: the specific person/role who would buy this
- If a field cannot be determined, use an empty string or empty array

Website content:
{content}"""


COMPETITOR_DISCOVERY_PROMPT = """List the best-known direct competitors of the product below.

Product: {brand_name}
Category: {category}
Description: {tagline}
Target audience: {audience}

Rules:
- Only real, well-known products that buyers compare against this one
- Use the product name, not the company's legal name
- Never include {brand_name} itself
- At most {limit} names

Respond ONLY with a JSON array of strings:
["Competitor 1", "Competitor 2"]"""


class ProductProfiler:
    """
    Builds a Profile from scraped site content and optional form input.

    Form data wins for fields the user filled in; scraped data fills
    everything else.
    """

    def __init__(self, llm_call: LLMCall, fetch_page: PageFetch):
        self.llm_call = llm_call
        self.fetch_page = fetch_page

    async def profile(self, url: str, scan_input: Optional[ScanInput] = None) -> Profile:
        """
        Build the profile for a URL.

        Args:
            url: Product website
            scan_input: Optional form input

        Returns:
            Profile satisfying the alias/competitor invariants

        Raises:
            ProfileExtractionError: When the extraction response is unparseable
        """
        logger.info(f"Profiling {url}")
        profile = await self._scrape_and_extract(url)

        if scan_input is not None:
            profile = self._merge_form_input(profile, scan_input)

        competitors = self._exclude_brand(profile.competitors, profile.brand_name)
        if not competitors:
            competitors = await self.discover_competitors(profile)
        profile = replace(profile, competitors=competitors)

        logger.info(
            f"Profile ready: {profile.brand_name} ({profile.category}), "
            f"{len(profile.competitors)} competitors, {len(profile.brand_aliases)} aliases"
        )
        return profile

    async def _scrape_and_extract(self, url: str) -> Profile:
        content = await self.fetch_page(url)
        truncated = (content or "")[:CONTENT_BUDGET]

        raw = await self.llm_call(PROFILE_EXTRACTION_PROMPT.format(content=truncated))
        result = parse_json_response(raw, ProfileExtraction)
        if not result.success:
            raise ProfileExtractionError(f"Failed to parse profile extraction: {result.error}")

        return self._apply_defaults(result.value, extract_domain(url))

    def _apply_defaults(self, extraction: ProfileExtraction, domain: str) -> Profile:
        brand_name = extraction.brand_name.strip() or first_domain_label(domain)
        profile_domain = extraction.domain.strip() or domain

        return Profile(
            brand_name=brand_name,
            domain=profile_domain,
            tagline=extraction.tagline,
            category=extraction.category or "software",
            subcategory=extraction.subcategory,
            target_audience=extraction.target_audience,
            core_features=extraction.core_features[:MAX_FEATURES],
            pricing_model=extraction.pricing_model or "unknown",
            competitors=self._unique([c.strip() for c in extraction.competitors_mentioned]),
            key_differentiators=extraction.key_differentiators,
            use_cases=extraction.use_cases,
            brand_aliases=self.build_aliases(extraction.brand_aliases, brand_name, profile_domain),
            core_problem=extraction.core_problem,
            target_buyer=extraction.target_buyer,
        )

    def _merge_form_input(self, scraped: Profile, scan_input: ScanInput) -> Profile:
        domain = extract_domain(scan_input.website_url) or scraped.domain
        brand_name = scan_input.brand_name.strip() or scraped.brand_name
        core_problem = (scan_input.core_problem or "").strip()
        target_buyer = (scan_input.target_buyer or "").strip()

        competitors = self._unique(
            [c.strip() for c in scan_input.competitors or []]
            + [c.strip() for c in scraped.competitors]
        )

        questions = [q.strip() for q in scan_input.buyer_questions or []]

        return Profile(
            brand_name=brand_name,
            domain=domain,
            tagline=scraped.tagline,
            category=scraped.category,
            subcategory=scraped.subcategory,
            target_audience=scraped.target_audience or target_buyer,
            core_features=scraped.core_features,
            pricing_model=scraped.pricing_model,
            competitors=competitors,
            key_differentiators=self.merge_differentiators(
                scraped.key_differentiators, scan_input.differentiators
            ),
            use_cases=scraped.use_cases,
            brand_aliases=self.build_aliases(scraped.brand_aliases, brand_name, domain),
            core_problem=core_problem or scraped.core_problem,
            target_buyer=target_buyer or scraped.target_buyer,
            user_differentiators=(scan_input.differentiators or "").strip(),
            buyer_questions=[q for q in questions if len(q) >= MIN_QUESTION_LENGTH],
        )

    async def discover_competitors(self, profile: Profile) -> List[str]:
        """
        Ask the model for well-known market competitors.

        Never returns the brand itself. Any failure returns an empty list.
        """
        prompt = COMPETITOR_DISCOVERY_PROMPT.format(
            brand_name=profile.brand_name,
            category=profile.subcategory or profile.category,
            tagline=profile.tagline or "n/a",
            audience=profile.target_audience or profile.target_buyer or "n/a",
            limit=MAX_DISCOVERED_COMPETITORS,
        )

        try:
            raw = await self.llm_call(prompt)
        except Exception as e:
            logger.warning(f"Competitor discovery failed for {profile.brand_name}: {e}")
            return []

        result = parse_json_response(raw, List[str])
        if not result.success:
            logger.warning(f"Could not parse competitor discovery response: {result.error}")
            return []

        names = self._unique([name.strip() for name in result.value])
        competitors = self._exclude_brand(names, profile.brand_name)[:MAX_DISCOVERED_COMPETITORS]
        logger.info(f"Discovered {len(competitors)} competitors for {profile.brand_name}")
        return competitors

    @staticmethod
    def merge_differentiators(scraped: List[str], user_provided: Optional[str]) -> List[str]:
        """User-stated differentiators first, scraped ones after unless they overlap."""
        result: List[str] = []

        if user_provided and user_provided.strip():
            parts = [p.strip() for p in re.split(r"[.\n]", user_provided)]
            result.extend(p for p in parts if len(p) > 5)

        for item in scraped or []:
            item_key = item.lower()[:20]
            is_dupe = any(
                item_key in existing.lower() or existing.lower()[:20] in item.lower()
                for existing in result
            )
            if not is_dupe:
                result.append(item)

        return result[:MAX_DIFFERENTIATORS]

    @staticmethod
    def build_aliases(existing: List[str], brand_name: str, domain: str) -> List[str]:
        """Profile aliases plus domain-derived fallbacks; never empty."""
        aliases: List[str] = []

        def add(alias: str):
            alias = alias.strip()
            if alias and alias not in aliases:
                aliases.append(alias)

        for alias in existing or []:
            add(alias)

        add(first_domain_label(domain))
        add(domain)
        if brand_name:
            add(brand_name.lower())
            first_word = re.split(r"[\s.]", brand_name)[0]
            if len(first_word) >= 3:
                add(first_word.lower())

        return aliases

    @staticmethod
    def _exclude_brand(names: List[str], brand_name: str) -> List[str]:
        brand_lower = brand_name.strip().lower()
        return [n for n in names if n and n.lower() != brand_lower]

    @staticmethod
    def _unique(names: List[str]) -> List[str]:
        """De-duplicate case-insensitively, keeping first spelling and order."""
        seen = set()
        result = []
        for name in names:
            key = name.lower()
            if name and key not in seen:
                seen.add(key)
                result.append(name)
        return result
