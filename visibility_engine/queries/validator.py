"""
Query Validator

Stateless validation pipeline, reusable across profiles:
1. Brand-bias check (whole-word brand/alias match)
2. Exact de-duplication on a normalized hash
3. Near-duplicate removal by token-set Jaccard similarity
4. Batched relevance/intent scoring by the model (fails open)
"""

import asyncio
import hashlib
import logging
import re
from typing import Dict, Iterable, List, Set, TypeVar

from pydantic import BaseModel

from ..clients.base import LLMCall
from ..output import parse_json_response
from ..profiler.models import Profile
from .models import GeneratedQuery, ValidatedQuery

logger = logging.getLogger(__name__)

T = TypeVar("T")

BATCH_SIZE = 20
NEAR_DUPLICATE_THRESHOLD = 0.75
MIN_INTENT_SCORE = 3
NEUTRAL_INTENT_SCORE = 3


RATING_PROMPT = """Rate each query for:
1. is_relevant: Would a real user ask this to find {category} software? (true/false)
2. intent_score: How realistic is this as an actual user query? (1=artificial, 5=very natural)

Product context: {category} tool for {audience}.

Queries:
{queries}

Respond ONLY with a JSON array:
[{{"index": 1, "is_relevant": true, "intent_score": 4}}]"""


class QueryRating(BaseModel):
    """One rating entry from the scoring response."""
    index: int
    is_relevant: bool
    intent_score: int


class QueryValidator:
    """Removes brand-biased, duplicate and low-relevance queries."""

    def __init__(self, llm_call: LLMCall, batch_size: int = BATCH_SIZE):
        self.llm_call = llm_call
        self.batch_size = batch_size

    async def validate(
        self,
        queries: List[GeneratedQuery],
        profile: Profile,
    ) -> List[ValidatedQuery]:
        """
        Run the validation pipeline.

        Returns:
            Queries that are relevant, unbiased and score >= 3
        """
        candidates = [
            ValidatedQuery(
                text=q.text,
                intent=q.intent,
                generated_by=q.generated_by,
                has_brand_bias=self.has_brand_bias(q.text, profile),
            )
            for q in queries
        ]

        deduped = self.deduplicate(candidates)
        diverse = self.remove_near_duplicates(deduped)
        unbiased = [q for q in diverse if not q.has_brand_bias]

        batches = self.chunk(unbiased, self.batch_size)
        rated = await asyncio.gather(*(self._rate_batch(b, profile) for b in batches))

        validated = [
            q for batch in rated for q in batch
            if q.is_relevant and not q.has_brand_bias and q.intent_score >= MIN_INTENT_SCORE
        ]

        logger.info(
            f"Validated {len(validated)}/{len(queries)} queries "
            f"({len(candidates) - len(deduped)} exact dupes, "
            f"{len(deduped) - len(diverse)} near dupes, "
            f"{len(diverse) - len(unbiased)} brand-biased)"
        )
        return validated

    # =========================================================================
    # STATIC CHECKS
    # =========================================================================

    @staticmethod
    def has_brand_bias(text: str, profile: Profile) -> bool:
        """True when the brand name or any alias appears as a whole word."""
        terms = [profile.brand_name] + list(profile.brand_aliases)
        for term in terms:
            term = term.strip()
            if not term:
                continue
            pattern = r"(?<!\w)" + re.escape(term) + r"(?!\w)"
            if re.search(pattern, text, re.IGNORECASE):
                return True
        return False

    @staticmethod
    def normalize(text: str) -> str:
        """Lowercase, strip punctuation, collapse whitespace."""
        text = re.sub(r"[^\w\s]", "", text.lower())
        return re.sub(r"\s+", " ", text).strip()

    @classmethod
    def dedupe_hash(cls, text: str) -> str:
        return hashlib.md5(cls.normalize(text).encode()).hexdigest()[:12]

    @classmethod
    def deduplicate(cls, queries: List[ValidatedQuery]) -> List[ValidatedQuery]:
        """Drop exact duplicates after normalization; first occurrence wins."""
        seen: Set[str] = set()
        results = []
        for q in queries:
            digest = cls.dedupe_hash(q.text)
            if digest in seen:
                continue
            seen.add(digest)
            q.dedupe_hash = digest
            results.append(q)
        return results

    @classmethod
    def remove_near_duplicates(
        cls,
        queries: List[T],
        threshold: float = NEAR_DUPLICATE_THRESHOLD,
    ) -> List[T]:
        """Greedily reject queries too similar to an already-kept one."""
        kept: List[T] = []
        kept_tokens: List[Set[str]] = []

        for q in queries:
            tokens = cls.tokenize(q.text)
            if any(cls.jaccard_similarity(tokens, existing) > threshold for existing in kept_tokens):
                continue
            kept.append(q)
            kept_tokens.append(tokens)
        return kept

    @staticmethod
    def tokenize(text: str) -> Set[str]:
        cleaned = re.sub(r"[^\w\s]", "", text.lower())
        return {t for t in cleaned.split() if len(t) > 2}

    @staticmethod
    def jaccard_similarity(a: Set[str], b: Set[str]) -> float:
        if not a and not b:
            return 1.0
        union = len(a | b)
        return len(a & b) / union if union else 0.0

    @staticmethod
    def chunk(items: List[T], size: int) -> List[List[T]]:
        return [items[i:i + size] for i in range(0, len(items), size)]

    # =========================================================================
    # MODEL SCORING
    # =========================================================================

    async def _rate_batch(
        self,
        batch: List[ValidatedQuery],
        profile: Profile,
    ) -> List[ValidatedQuery]:
        prompt = RATING_PROMPT.format(
            category=profile.category,
            audience=profile.target_audience or profile.target_buyer or "its users",
            queries="\n".join(f'{i + 1}. "{q.text}"' for i, q in enumerate(batch)),
        )

        try:
            raw = await self.llm_call(prompt)
        except Exception as e:
            logger.warning(f"Query rating call failed, accepting batch of {len(batch)}: {e}")
            return self._fail_open(batch)

        result = parse_json_response(raw, List[QueryRating])
        if not result.success:
            logger.warning(f"Could not parse query ratings, accepting batch of {len(batch)}: {result.error}")
            return self._fail_open(batch)

        ratings: Dict[int, QueryRating] = {r.index: r for r in result.value}
        for i, q in enumerate(batch):
            rating = ratings.get(i + 1)
            q.is_relevant = rating.is_relevant if rating else False
            q.intent_score = rating.intent_score if rating else 1
        return batch

    @staticmethod
    def _fail_open(batch: Iterable[ValidatedQuery]) -> List[ValidatedQuery]:
        results = []
        for q in batch:
            q.is_relevant = True
            q.intent_score = NEUTRAL_INTENT_SCORE
            results.append(q)
        return results
