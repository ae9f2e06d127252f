"""
Scan Orchestrator

Runs one visibility scan end to end:

1. profile          - scrape and structure the product (fatal)
2. queries          - generate, validate, cap to plan (fatal)
3. persist_queries  - store the query set (non-fatal)
4. aliases          - build the alias registry, optionally enrich (fatal)
5. execute          - every query x every provider, bounded concurrency (fatal)
6. score            - visibility score (fatal)
7. competitors      - track top competitors (non-fatal)
8. persist          - scan record and per-response rows (non-fatal)

Fatal failures raise ScanPhaseError. Non-fatal failures are logged and
the scan continues with default output, so a score is always returned
once the fatal phases succeed.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from ..clients.base import LLMCall, PageFetch, ProviderQuery
from ..competitors import CompetitorRecord, CompetitorTracker
from ..detection import (
    AliasRegistry,
    DetectionConfig,
    DetectionEngine,
    DetectionMethod,
    ResponseAnalysis,
    build_alias_registry,
    classify_sentiment,
    enrich_aliases,
)
from ..errors import ProviderError, ScanPhaseError
from ..profiler import Profile, ProductProfiler, ScanInput
from ..queries import QueryGenerator, QueryRepository, QueryValidator, ValidatedQuery
from ..scoring import (
    ScanStatus,
    ScoringBreakdown,
    ScoringEngine,
    ScoringWeights,
    classify_scan_status,
    compute_provider_comparison,
)
from ..utils.domain import extract_domain
from ..utils.limits import PlanTier, ScanLimits, resolve_limits
from ..utils.retry import RetryConfig, with_retry

logger = logging.getLogger(__name__)

DEFAULT_PROVIDERS = ["openai", "claude"]

# (phase, percent, message), synchronous or async
ProgressCallback = Callable[[str, int, str], Union[None, Awaitable[None]]]


class ScanPhase(str, Enum):
    PROFILE = "profile"
    QUERIES = "queries"
    PERSIST_QUERIES = "persist_queries"
    ALIASES = "aliases"
    EXECUTE = "execute"
    SCORE = "score"
    COMPETITORS = "competitors"
    PERSIST = "persist"
    COMPLETE = "complete"


class NoResultsError(Exception):
    """A phase finished without producing anything usable."""


@dataclass
class ScanResult:
    """In-memory outcome of a scan, independent of what was persisted."""
    scan_id: str
    profile: Profile
    queries: List[ValidatedQuery]
    analyses: List[ResponseAnalysis]
    score: ScoringBreakdown
    competitors: List[CompetitorRecord] = field(default_factory=list)
    status: ScanStatus = ScanStatus.RECOMMENDED
    completed_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def query_count(self) -> int:
        return len(self.queries)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scan_id": self.scan_id,
            "status": self.status.value,
            "profile": self.profile.to_dict(),
            "query_count": self.query_count,
            "responses_analyzed": len(self.analyses),
            "score": self.score.to_dict(),
            "competitors": [c.to_dict() for c in self.competitors],
            "completed_at": self.completed_at.isoformat(),
        }


class ScanOrchestrator:
    """
    Orchestrates a scan over injected collaborators.

    Usage:
        orchestrator = ScanOrchestrator(
            llm_call=claude.complete,
            query_provider=registry.query,
            fetch_page=fetcher.fetch_text,
            store=ScanStore(),
            providers=registry.names,
            plan="pro",
        )
        result = await asyncio.wait_for(orchestrator.run_scan(scan_id, url), timeout=600)
    """

    def __init__(
        self,
        llm_call: LLMCall,
        query_provider: ProviderQuery,
        fetch_page: PageFetch,
        store,
        providers: Optional[List[str]] = None,
        plan: Union[PlanTier, str] = PlanTier.FREE,
        max_queries_override: Optional[int] = None,
        retry_config: Optional[RetryConfig] = None,
        progress: Optional[ProgressCallback] = None,
        weights: Optional[ScoringWeights] = None,
        detection_config: Optional[DetectionConfig] = None,
    ):
        self.llm_call = llm_call
        self.query_provider = query_provider
        self.store = store
        self.providers = list(providers) if providers is not None else list(DEFAULT_PROVIDERS)
        self.limits: ScanLimits = resolve_limits(plan, max_queries_override)
        self.plan = plan.value if isinstance(plan, PlanTier) else plan
        self.retry_config = retry_config or RetryConfig()
        self.progress = progress
        self.detection_config = detection_config

        self.profiler = ProductProfiler(llm_call, fetch_page)
        self.generator = QueryGenerator(llm_call, self.limits)
        self.validator = QueryValidator(llm_call)
        self.query_repo = QueryRepository(store)
        self.scoring = ScoringEngine(weights)
        self.competitor_tracker = CompetitorTracker(store)

    async def run_scan(
        self,
        scan_id: str,
        url: str,
        scan_input: Optional[ScanInput] = None,
    ) -> ScanResult:
        """
        Run the full pipeline.

        Args:
            scan_id: Identifier used for every persisted row
            url: Product website
            scan_input: Optional form input that overrides scraped values

        Returns:
            ScanResult with profile, queries, analyses, score and competitors

        Raises:
            ScanPhaseError: A fatal phase failed
        """
        started = datetime.utcnow()
        logger.info(f"Starting scan {scan_id} for {url} (plan={self.plan})")

        # Phase 1: Profile
        await self._report(ScanPhase.PROFILE, 5, "Analyzing product")
        profile = await self._fatal(ScanPhase.PROFILE, self.profiler.profile(url, scan_input))

        # Phase 2: Generate + validate queries
        await self._report(ScanPhase.QUERIES, 15, "Generating buyer queries")
        queries = await self._fatal(ScanPhase.QUERIES, self._build_queries(profile))

        # Phase 3: Persist query set
        await self._report(ScanPhase.PERSIST_QUERIES, 30, f"Prepared {len(queries)} queries")
        try:
            self.query_repo.store(scan_id, queries)
        except Exception as e:
            logger.error(f"Failed to store query set for scan {scan_id}: {e}")

        # Phase 4: Alias registry
        await self._report(ScanPhase.ALIASES, 35, "Preparing brand detection")
        registry = await self._fatal(ScanPhase.ALIASES, self._build_registry(profile))
        detection = DetectionEngine(
            registry,
            llm_call=self.llm_call if self.limits.enable_semantic_confirm else None,
            config=self.detection_config,
        )

        # Phase 5: Execute
        await self._report(
            ScanPhase.EXECUTE, 40,
            f"Asking {len(self.providers)} AI assistants {len(queries)} questions",
        )
        analyses = await self._fatal(ScanPhase.EXECUTE, self._execute(queries, detection, profile))

        # Phase 6: Score
        await self._report(ScanPhase.SCORE, 85, "Calculating visibility score")
        score = await self._fatal(ScanPhase.SCORE, self._score(analyses, len(queries)))
        status = classify_scan_status(score)

        # Phase 7: Competitors
        await self._report(ScanPhase.COMPETITORS, 90, "Tracking competitors")
        brand_domain = extract_domain(url) or profile.domain
        try:
            competitors = self.competitor_tracker.track(brand_domain, analyses)
        except Exception as e:
            logger.error(f"Competitor tracking failed for scan {scan_id}: {e}")
            competitors = []

        result = ScanResult(
            scan_id=scan_id,
            profile=profile,
            queries=queries,
            analyses=analyses,
            score=score,
            competitors=competitors,
            status=status,
        )

        # Phase 8: Persist
        await self._report(ScanPhase.PERSIST, 95, "Saving results")
        self._persist(result, url, brand_domain, scan_input)

        elapsed = (datetime.utcnow() - started).total_seconds()
        logger.info(
            f"Scan {scan_id} complete in {elapsed:.1f}s: score={score.final_score}, "
            f"status={status.value}, {len(analyses)} analyses"
        )
        await self._report(ScanPhase.COMPLETE, 100, "Scan complete")
        return result

    # =========================================================================
    # PHASES
    # =========================================================================

    async def _build_queries(self, profile: Profile) -> List[ValidatedQuery]:
        generated = await self.generator.generate(profile)
        validated = await self.validator.validate(generated, profile)
        capped = validated[:self.limits.max_queries]
        if not capped:
            raise NoResultsError("No queries survived validation")
        return capped

    async def _build_registry(self, profile: Profile) -> AliasRegistry:
        registry = build_alias_registry(profile)
        if self.limits.enable_semantic_confirm and profile.competitors:
            registry = await enrich_aliases(profile.competitors, self.llm_call, registry)
        return registry

    async def _execute(
        self,
        queries: List[ValidatedQuery],
        detection: DetectionEngine,
        profile: Profile,
    ) -> List[ResponseAnalysis]:
        if not self.providers:
            raise NoResultsError("No active providers")

        semaphore = asyncio.Semaphore(self.limits.max_concurrent_calls)

        # Slots are held per attempt, never across a retry backoff
        async def ask(text: str, provider: str) -> str:
            async with semaphore:
                return await self.query_provider(text, provider)

        async def run_one(query: ValidatedQuery, provider: str) -> Optional[ResponseAnalysis]:
            try:
                return await self._analyze(query, provider, detection, profile, ask)
            except Exception as e:
                logger.warning(f"Query failed [{provider}]: {query.text[:60]}: {e}")
                return None

        tasks = [run_one(q, p) for q in queries for p in self.providers]
        results = await asyncio.gather(*tasks)
        analyses = [r for r in results if r is not None]

        logger.info(f"Executed {len(tasks)} provider calls, {len(analyses)} succeeded")
        if not analyses:
            raise NoResultsError(f"All {len(tasks)} provider calls failed")
        return analyses

    async def _analyze(
        self,
        query: ValidatedQuery,
        provider: str,
        detection: DetectionEngine,
        profile: Profile,
        ask: ProviderQuery,
    ) -> ResponseAnalysis:
        response = await with_retry(
            ask,
            query.text,
            provider,
            config=self.retry_config,
            should_retry=_is_retryable,
        )

        brand = detection.detect(response, profile.brand_name)
        if brand.detected and brand.method == DetectionMethod.FUZZY:
            brand = await detection.semantic_confirm(response, profile.brand_name, brand)

        sentiment = None
        if brand.detected:
            sentiment = classify_sentiment(response, _mentioned_term(response, profile))

        return ResponseAnalysis(
            query=query,
            provider=provider,
            raw_response=response,
            brand_detection=brand,
            competitor_detections=detection.detect_all(response, profile.competitors),
            sentiment=sentiment,
        )

    async def _score(self, analyses: List[ResponseAnalysis], total_queries: int) -> ScoringBreakdown:
        return self.scoring.score(analyses, total_queries)

    def _persist(
        self,
        result: ScanResult,
        url: str,
        brand_domain: str,
        scan_input: Optional[ScanInput],
    ) -> None:
        comparison = compute_provider_comparison(result.score.provider_scores)
        summary = {
            "queries_executed": result.query_count,
            "responses_analyzed": len(result.analyses),
            "competitors": [c.to_dict() for c in result.competitors],
            "provider_comparison": comparison.to_dict(),
        }
        if scan_input is not None:
            summary["form_input"] = {
                "core_problem": scan_input.core_problem or None,
                "target_buyer": scan_input.target_buyer or None,
                "differentiators": scan_input.differentiators or None,
                "buyer_questions": list(scan_input.buyer_questions),
            }

        try:
            self.store.update_scan(
                result.scan_id,
                brand_name=result.profile.brand_name,
                brand_domain=brand_domain,
                url=url,
                plan=self.plan,
                status=result.status.value,
                current_phase=ScanPhase.COMPLETE.value,
                progress_percent=100,
                score=result.score.final_score,
                score_breakdown=_jsonable(result.score.to_dict()),
                provider_scores=[p.to_dict() for p in result.score.provider_scores],
                profile=result.profile.to_dict(),
                summary=_jsonable(summary),
                completed_at=result.completed_at,
            )
        except Exception as e:
            logger.error(f"Failed to persist scan {result.scan_id}: {e}")
            return

        try:
            self.store.insert_scan_results([_result_row(result.scan_id, a) for a in result.analyses])
        except Exception as e:
            logger.error(f"Failed to persist scan results for {result.scan_id}: {e}")

    # =========================================================================
    # HELPERS
    # =========================================================================

    async def _fatal(self, phase: ScanPhase, awaitable: Awaitable[Any]) -> Any:
        try:
            return await awaitable
        except ScanPhaseError:
            raise
        except Exception as e:
            logger.error(f"Scan phase '{phase.value}' failed: {e}")
            raise ScanPhaseError(phase.value, e) from e

    async def _report(self, phase: ScanPhase, percent: int, message: str) -> None:
        """Invoke the progress callback; its errors never reach the pipeline."""
        if self.progress is None:
            return
        try:
            outcome = self.progress(phase.value, percent, message)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as e:
            logger.warning(f"Progress callback failed at {phase.value}: {e}")


def _is_retryable(error: BaseException) -> bool:
    if isinstance(error, ProviderError):
        return error.retryable
    return True


def _mentioned_term(text: str, profile: Profile) -> str:
    """The brand name, or the first alias that literally appears in the text."""
    lower = text.lower()
    for term in [profile.brand_name] + list(profile.brand_aliases):
        if term and term.lower() in lower:
            return term
    return profile.brand_name


def _result_row(scan_id: str, analysis: ResponseAnalysis) -> Dict[str, Any]:
    brand = analysis.brand_detection
    return {
        "scan_id": scan_id,
        "provider": analysis.provider,
        "query_text": analysis.query.text,
        "intent": analysis.query.intent.value,
        "response_text": analysis.raw_response,
        "brand_mentioned": brand.detected,
        "brand_position": brand.position,
        "detection_method": brand.method.value if brand.detected else None,
        "confidence": brand.confidence,
        "sentiment": analysis.sentiment.value if analysis.sentiment else None,
        "competitors_detected": [
            {"name": c.brand_name, "position": c.position, "method": c.method.value}
            for c in analysis.detected_competitors
        ],
        "created_at": analysis.response_timestamp,
    }


def _jsonable(value: Any) -> Any:
    """Convert datetimes nested in dicts and lists to ISO strings."""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    return value
