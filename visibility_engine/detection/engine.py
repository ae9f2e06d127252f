"""
Detection Engine

Multi-stage brand detection applied symmetrically to the target brand
and every competitor:
1. Regex - literal name with non-word boundaries
2. Alias - same boundary match for each registry alias
3. Fuzzy - Levenshtein similarity against whitespace tokens
4. Semantic - optional yes/no confirmation of a fuzzy hit by the model

Also extracts the rank of a mention from numbered lists or bold spans.
"""

import logging
import re
from dataclasses import dataclass, replace
from typing import List, Optional

from ..clients.base import LLMCall
from ..output import parse_yes_no
from .models import AliasRegistry, DetectionMethod, DetectionResult
from .similarity import similarity

logger = logging.getLogger(__name__)

_LIST_ITEM = re.compile(r"^\s*(\d+)[.)]\s")
_BOLD_SPAN = re.compile(r"\*\*([^*]+)\*\*")
_TOKEN_CLEAN = re.compile(r"[^a-zA-Z0-9.]")


SEMANTIC_PROMPT = """Does the following text mention or recommend the product "{brand}"?
Answer ONLY "yes" or "no".

Text: "{snippet}\""""


@dataclass
class DetectionConfig:
    """Thresholds for the detection cascade."""
    regex_accept_confidence: float = 0.95
    min_fuzzy_length: int = 4
    min_token_length: int = 3
    length_tolerance: float = 0.3
    short_name_length: int = 7
    short_name_threshold: float = 0.80
    long_name_threshold: float = 0.75
    semantic_boost: float = 0.2
    snippet_before: int = 50
    snippet_after: int = 100


class DetectionEngine:
    """
    Stateless brand detector.

    Usage:
        engine = DetectionEngine(registry, llm_call=claude.complete)
        result = engine.detect(response_text, "Cal.com")
        if result.method == DetectionMethod.FUZZY and result.detected:
            result = await engine.semantic_confirm(response_text, "Cal.com", result)
    """

    def __init__(
        self,
        alias_registry: Optional[AliasRegistry] = None,
        llm_call: Optional[LLMCall] = None,
        config: Optional[DetectionConfig] = None,
    ):
        self.alias_registry = alias_registry or {}
        self.llm_call = llm_call
        self.config = config or DetectionConfig()

    def detect(self, text: str, target: str) -> DetectionResult:
        """Run regex, alias and fuzzy stages for one brand."""
        regex_result = self._regex_match(text, target)
        if regex_result.detected and regex_result.confidence >= self.config.regex_accept_confidence:
            regex_result.position = self.extract_position(text, target)
            return regex_result

        for alias in self.alias_registry.get(target.lower(), []):
            alias_result = self._regex_match(text, alias)
            if alias_result.detected:
                return DetectionResult(
                    brand_name=target,
                    detected=True,
                    confidence=1.0,
                    method=DetectionMethod.ALIAS,
                    position=self.extract_position(text, alias),
                    snippet=alias_result.snippet,
                )

        fuzzy_result = self._fuzzy_match(text, target)
        if fuzzy_result.detected:
            return fuzzy_result

        return DetectionResult(brand_name=target)

    def detect_all(self, text: str, names: List[str]) -> List[DetectionResult]:
        """Detect every brand in names, in order."""
        return [self.detect(text, name) for name in names]

    async def semantic_confirm(
        self,
        text: str,
        target: str,
        fuzzy_result: DetectionResult,
    ) -> DetectionResult:
        """
        Ask the model whether a fuzzy hit really refers to the brand.

        Returns:
            Confirmed result with boosted confidence, a negative result on
            any answer but "yes", or the fuzzy result if the call fails
        """
        if self.llm_call is None:
            return fuzzy_result

        prompt = SEMANTIC_PROMPT.format(brand=target, snippet=fuzzy_result.snippet)
        try:
            answer = await self.llm_call(prompt)
        except Exception as e:
            logger.warning(f"Semantic confirmation failed for '{target}': {e}")
            return fuzzy_result

        if parse_yes_no(answer):
            return replace(
                fuzzy_result,
                method=DetectionMethod.SEMANTIC,
                confidence=min(fuzzy_result.confidence + self.config.semantic_boost, 1.0),
                detected=True,
            )
        return replace(
            fuzzy_result,
            method=DetectionMethod.SEMANTIC,
            confidence=0.0,
            detected=False,
        )

    # =========================================================================
    # STAGES
    # =========================================================================

    def _snippet(self, text: str, index: int) -> str:
        start = max(0, index - self.config.snippet_before)
        return text[start:index + self.config.snippet_after]

    def _regex_match(self, text: str, name: str) -> DetectionResult:
        match = _boundary_pattern(name).search(text) if name else None
        if not match:
            return DetectionResult(brand_name=name)
        return DetectionResult(
            brand_name=name,
            detected=True,
            confidence=1.0,
            method=DetectionMethod.REGEX,
            snippet=self._snippet(text, match.start()),
        )

    def _fuzzy_match(self, text: str, target: str) -> DetectionResult:
        cfg = self.config
        target_lower = target.lower()
        if len(target) < cfg.min_fuzzy_length:
            return DetectionResult(brand_name=target, method=DetectionMethod.FUZZY)

        best_score = 0.0
        best_word = ""
        best_clean = ""
        for word in text.split():
            clean = _TOKEN_CLEAN.sub("", word).lower().strip(".")
            if len(clean) < cfg.min_token_length:
                continue
            if abs(len(clean) - len(target_lower)) > len(target_lower) * cfg.length_tolerance:
                continue
            score = similarity(clean, target_lower)
            if score > best_score:
                best_score = score
                best_word = word
                best_clean = clean

        threshold = (
            cfg.short_name_threshold
            if len(target_lower) <= cfg.short_name_length
            else cfg.long_name_threshold
        )
        if best_score < threshold:
            return DetectionResult(brand_name=target, method=DetectionMethod.FUZZY)

        return DetectionResult(
            brand_name=target,
            detected=True,
            confidence=round(best_score, 2),
            method=DetectionMethod.FUZZY,
            position=self.extract_position(text, best_clean),
            snippet=self._snippet(text, text.find(best_word)),
        )

    # =========================================================================
    # RANK EXTRACTION
    # =========================================================================

    @staticmethod
    def extract_position(text: str, name: str) -> Optional[int]:
        """
        Rank of a brand in a response.

        Returns:
            The number of the first numbered-list line containing the name,
            else the ordinal of the first bold span containing it, else None
        """
        if not name:
            return None
        name_lower = name.lower()

        for line in text.split("\n"):
            match = _LIST_ITEM.match(line)
            if match and name_lower in line.lower():
                return int(match.group(1))

        for ordinal, span in enumerate(_BOLD_SPAN.findall(text), start=1):
            if name_lower in span.lower():
                return ordinal

        return None


def _boundary_pattern(name: str) -> "re.Pattern":
    return re.compile(r"(?<!\w)" + re.escape(name) + r"(?!\w)", re.IGNORECASE)
