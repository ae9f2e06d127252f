"""
Query Generator

Produces candidate test queries grouped by intent category. Each
category is generated independently and concurrently; a failed
category contributes nothing instead of aborting generation.
"""

import asyncio
import logging
from typing import List

from ..clients.base import LLMCall
from ..output import parse_json_response
from ..profiler.models import Profile
from ..utils.limits import ScanLimits
from .intents import INTENT_CONFIGS, IntentConfig
from .models import GeneratedQuery, IntentCategory

logger = logging.getLogger(__name__)


GENERATION_PROMPT = """You are generating realistic questions that a real user might ask an AI assistant (ChatGPT, Claude, Gemini, Perplexity).

PRODUCT CONTEXT:
{context}

INTENT TYPE: {intent}
{instruction}

RULES:
1. NEVER include the brand name "{brand_name}" or any of these aliases in any query: {aliases}
2. Queries must sound like natural human questions to an AI assistant
3. Vary the phrasing; don't start every query the same way
4. Each query should be 5-20 words
5. Reference specific details from the PRODUCT CONTEXT above; no generic queries
6. Stay inside the product's specific niche rather than its broad category

Generate exactly {count} queries. Return ONLY a JSON array of strings:
["query 1", "query 2"]"""


# Prompt labels for the fields an intent may surface
FIELD_LABELS = {
    "core_problem": "CORE PROBLEM",
    "target_buyer": "TARGET BUYER",
    "target_audience": "Target audience",
    "competitors": "Known competitors",
    "key_differentiators": "DIFFERENTIATORS",
    "user_differentiators": "DIFFERENTIATORS (stated by the company)",
    "core_features": "Core features",
    "use_cases": "Use cases",
    "pricing_model": "Pricing model",
}


class QueryGenerator:
    """
    Generates intent-clustered test queries for a profile.

    Buyer questions from the form are injected first as the
    user_provided category; they cost no model call.
    """

    def __init__(self, llm_call: LLMCall, limits: ScanLimits):
        self.llm_call = llm_call
        self.limits = limits

    async def generate(self, profile: Profile) -> List[GeneratedQuery]:
        """
        Generate candidate queries for every intent category.

        Returns:
            Queries capped at the plan's overall query limit
        """
        queries: List[GeneratedQuery] = [
            GeneratedQuery(text=q, intent=IntentCategory.USER_PROVIDED, generated_by="user")
            for q in profile.buyer_questions
        ]

        intents = list(INTENT_CONFIGS.keys())
        results = await asyncio.gather(
            *(self._generate_cluster(profile, intent) for intent in intents),
            return_exceptions=True,
        )

        for intent, result in zip(intents, results):
            if isinstance(result, BaseException):
                logger.error(f"Query generation failed for {intent.value}: {result}")
                continue
            queries.extend(result)

        logger.info(f"Generated {len(queries)} candidate queries for {profile.brand_name}")
        return queries[:self.limits.max_queries]

    async def _generate_cluster(
        self,
        profile: Profile,
        intent: IntentCategory,
    ) -> List[GeneratedQuery]:
        config = INTENT_CONFIGS[intent]
        count = min(config.count, self.limits.max_queries_per_cluster)

        prompt = GENERATION_PROMPT.format(
            context=self.build_context(profile, config),
            intent=intent.value,
            instruction=config.instruction,
            brand_name=profile.brand_name,
            aliases=", ".join(profile.brand_aliases),
            count=count,
        )

        raw = await self.llm_call(prompt)
        result = parse_json_response(raw, List[str])
        if not result.success:
            logger.warning(f"Could not parse {intent.value} queries: {result.error}")
            return []

        texts = [t.strip() for t in result.value if t and t.strip()]
        return [GeneratedQuery(text=t, intent=intent) for t in texts[:count]]

    @staticmethod
    def build_context(profile: Profile, config: IntentConfig) -> str:
        """Category basics plus only the profile fields on the intent's allow-list."""
        lines = [f"Category: {profile.category}"]
        if profile.subcategory:
            lines.append(f"Specific niche: {profile.subcategory}")
        if profile.tagline:
            lines.append(f"Product description: {profile.tagline}")

        for field_name in config.profile_fields:
            value = getattr(profile, field_name, None)
            if isinstance(value, list):
                value = "; ".join(v for v in value if v)
            if value:
                lines.append(f"{FIELD_LABELS.get(field_name, field_name)}: {value}")

        return "\n".join(lines)
