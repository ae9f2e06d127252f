"""
Scoring Engine

Turns response analyses into a 0-100 visibility score:

    raw   = 0.35 * mention_rate + 0.35 * position + 0.30 * intent
    final = round_half_up(100 * raw * consistency * density), clamped to [0, 100]

- mention_rate, position and intent are provider-weighted
- consistency rewards providers agreeing on the same queries
- density penalizes responses crowded with competitors
"""

import logging
from itertools import combinations
from typing import Dict, List, Optional

from ..detection.models import ResponseAnalysis, Sentiment
from .models import ProviderScore, ScoringBreakdown
from .weights import SCORING_WEIGHTS, ScoringWeights, round_half_up

logger = logging.getLogger(__name__)


class ScoringEngine:
    """Pure, deterministic scoring over a list of ResponseAnalysis."""

    def __init__(self, weights: Optional[ScoringWeights] = None):
        self.weights = weights or SCORING_WEIGHTS

    def score(self, analyses: List[ResponseAnalysis], total_queries: int) -> ScoringBreakdown:
        """
        Score a scan.

        Args:
            analyses: Successful responses (failed provider calls excluded)
            total_queries: Number of validated queries; 0 yields an empty score

        Returns:
            ScoringBreakdown with per-provider scores
        """
        if total_queries == 0:
            return ScoringBreakdown()

        w = self.weights

        # 1. Mention rate
        weighted_total = sum(w.provider_weight_for(a.provider) for a in analyses)
        weighted_mentions = sum(
            w.provider_weight_for(a.provider) for a in analyses if a.brand_detection.detected
        )
        mention_rate = weighted_mentions / weighted_total if weighted_total > 0 else 0.0

        # 2. Position, only ranked mentions count
        position_sum = 0.0
        position_weight_sum = 0.0
        for a in analyses:
            rank = a.brand_detection.position
            if a.brand_detection.detected and rank is not None and rank >= 1:
                provider_w = w.provider_weight_for(a.provider)
                position_sum += w.position_weight_for(rank) * provider_w
                position_weight_sum += provider_w
        position_score = (
            position_sum / position_weight_sum
            if position_weight_sum > 0
            else mention_rate * w.unranked_position_factor
        )

        # 3. Intent
        intent_sum = 0.0
        intent_weight_sum = 0.0
        for a in analyses:
            combined = w.intent_weight_for(a.query.intent.value) * w.provider_weight_for(a.provider)
            intent_weight_sum += combined
            if a.brand_detection.detected:
                intent_sum += combined
        intent_score = intent_sum / intent_weight_sum if intent_weight_sum > 0 else mention_rate

        consistency = self.cross_model_consistency(analyses)
        density = self.competitor_density_factor(analyses)

        raw_score = w.combine(mention_rate, position_score, intent_score)
        final_score = _clamp_score(raw_score * consistency * density)

        breakdown = ScoringBreakdown(
            mention_rate=mention_rate,
            weighted_position_score=position_score,
            intent_weighted_score=intent_score,
            cross_model_consistency=consistency,
            competitor_density_factor=density,
            raw_score=raw_score,
            final_score=final_score,
            provider_scores=self.provider_scores(analyses),
        )

        logger.info(
            f"Scored {len(analyses)} analyses: final={final_score} "
            f"(mention={mention_rate:.2f}, position={position_score:.2f}, "
            f"intent={intent_score:.2f}, consistency={consistency:.2f}, density={density:.2f})"
        )
        return breakdown

    # =========================================================================
    # COMPONENTS
    # =========================================================================

    def cross_model_consistency(self, analyses: List[ResponseAnalysis]) -> float:
        """Pairwise provider agreement per query, mapped to [floor, 1.0]."""
        providers = _unique_providers(analyses)
        if len(providers) < 2:
            return 1.0

        by_query: Dict[str, Dict[str, bool]] = {}
        for a in analyses:
            by_query.setdefault(a.query.text, {})[a.provider] = a.brand_detection.detected

        agreements = 0
        pairs = 0
        for detections in by_query.values():
            present = [p for p in providers if p in detections]
            for left, right in combinations(present, 2):
                pairs += 1
                if detections[left] == detections[right]:
                    agreements += 1

        if pairs == 0:
            return 1.0
        floor = self.weights.consistency_floor
        return floor + (1.0 - floor) * (agreements / pairs)

    def competitor_density_factor(self, analyses: List[ResponseAnalysis]) -> float:
        if not analyses:
            return 1.0
        total = sum(len(a.detected_competitors) for a in analyses)
        avg = total / len(analyses)
        return max(self.weights.density_floor, 1.0 - self.weights.density_penalty * avg)

    def provider_scores(self, analyses: List[ResponseAnalysis]) -> List[ProviderScore]:
        """Unweighted per-provider scores, in first-seen provider order."""
        w = self.weights
        scores = []

        for provider in _unique_providers(analyses):
            subset = [a for a in analyses if a.provider == provider]
            mentions = [a for a in subset if a.brand_detection.detected]
            mention_rate = len(mentions) / len(subset) if subset else 0.0

            ranks = [
                a.brand_detection.position for a in mentions
                if a.brand_detection.position is not None and a.brand_detection.position >= 1
            ]
            position_score = (
                sum(w.position_weight_for(r) for r in ranks) / len(ranks)
                if ranks
                else mention_rate * w.unranked_position_factor
            )

            intent_total = sum(w.intent_weight_for(a.query.intent.value) for a in subset)
            intent_hit = sum(w.intent_weight_for(a.query.intent.value) for a in mentions)
            intent_score = intent_hit / intent_total if intent_total > 0 else mention_rate

            scores.append(ProviderScore(
                provider=provider,
                mention_rate=mention_rate,
                mention_count=len(mentions),
                total_queries=len(subset),
                weighted_position_score=position_score,
                intent_weighted_score=intent_score,
                sentiment=derive_sentiment(mention_rate, position_score),
                visibility_score=_clamp_score(w.combine(mention_rate, position_score, intent_score)),
            ))

        return scores


def derive_sentiment(mention_rate: float, position_score: float) -> Sentiment:
    if mention_rate >= 0.5 and position_score >= 0.4:
        return Sentiment.POSITIVE
    if mention_rate >= 0.2:
        return Sentiment.NEUTRAL
    return Sentiment.NEGATIVE


def _unique_providers(analyses: List[ResponseAnalysis]) -> List[str]:
    seen: List[str] = []
    for a in analyses:
        if a.provider not in seen:
            seen.append(a.provider)
    return seen


def _clamp_score(value: float) -> int:
    return max(0, min(100, round_half_up(value * 100)))
