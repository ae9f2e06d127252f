"""
API Endpoints for AI Visibility Scans

FastAPI app that:
1. Validates scan requests and queues scans as background tasks
2. Reports scan status and score
3. Serves analytics views over stored scans (share of voice,
   provider comparison, score deltas, query explorer), brand score trends
   and tracked competitors
"""

import asyncio
import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from fastapi import BackgroundTasks, FastAPI, HTTPException
from pydantic import BaseModel, Field

from visibility_engine import __version__
from visibility_engine.clients import ClaudeClient, PageFetcher, ProviderRegistry
from visibility_engine.competitors import CompetitorTracker
from visibility_engine.database import ScanStore, check_db_connection, init_db
from visibility_engine.errors import ScanPhaseError, StoreError
from visibility_engine.profiler import ScanInput, validate_scan_input
from visibility_engine.scan import ScanOrchestrator, ScanPhase
from visibility_engine.scoring import (
    ScanStatus,
    provider_comparison_for_scan,
    query_explorer_for_scan,
    scan_trend_for_brand,
    score_deltas_for_scan,
    share_of_voice_for_scan,
)
from visibility_engine.utils import extract_domain, get_settings, setup_logging

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="AI Visibility Scanner",
    description="Measures how often AI assistants recommend a software product",
    version=__version__,
)


# ============================================================================
# STARTUP - Initialize Database
# ============================================================================

@app.on_event("startup")
async def startup_event():
    """Initialize database and the shared store on startup."""
    logger.info("Initializing database...")
    try:
        init_db()
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
    if not hasattr(app.state, "store"):
        app.state.store = ScanStore()


def get_store() -> ScanStore:
    store = getattr(app.state, "store", None)
    if store is None:
        store = app.state.store = ScanStore()
    return store


# ============================================================================
# REQUEST/RESPONSE MODELS
# ============================================================================

class ScanRequest(BaseModel):
    """Scan form submission."""
    brand_name: str
    website_url: str
    core_problem: str = ""
    target_buyer: str = ""
    differentiators: Optional[str] = None
    competitors: List[str] = Field(default_factory=list)
    buyer_questions: List[str] = Field(default_factory=list)
    plan_tier: Literal["free", "pro", "enterprise"] = "free"

    def to_scan_input(self) -> ScanInput:
        return ScanInput(
            brand_name=self.brand_name.strip(),
            website_url=self.website_url.strip(),
            core_problem=self.core_problem.strip(),
            target_buyer=self.target_buyer.strip(),
            differentiators=self.differentiators,
            competitors=[c.strip() for c in self.competitors if c.strip()],
            buyer_questions=[q.strip() for q in self.buyer_questions if q.strip()],
            plan_tier=self.plan_tier,
        )


class ScanAccepted(BaseModel):
    scan_id: str
    status: str
    message: str


# ============================================================================
# BACKGROUND JOB
# ============================================================================

async def run_scan_job(scan_id: str, scan_input: ScanInput, store: ScanStore) -> None:
    """Run a scan with real clients and record failures on the scan row."""
    settings = get_settings()
    fetcher = PageFetcher()
    registry = None

    def report(phase: str, percent: int, message: str) -> None:
        fields: Dict[str, Any] = {"current_phase": phase, "progress_percent": percent}
        # The final status is written by the orchestrator when it persists
        if phase != ScanPhase.COMPLETE.value:
            fields["status"] = ScanStatus.RUNNING.value
        store.update_scan(scan_id, **fields)

    try:
        claude = ClaudeClient(api_key=settings.ANTHROPIC_API_KEY, model=settings.CLAUDE_MODEL)
        registry = ProviderRegistry.from_settings(settings, claude)
        orchestrator = ScanOrchestrator(
            llm_call=claude.complete,
            query_provider=registry.query,
            fetch_page=fetcher.fetch_text,
            store=store,
            providers=registry.names,
            plan=scan_input.plan_tier,
            max_queries_override=settings.MAX_QUERIES_PER_SCAN,
            progress=report,
        )
        await asyncio.wait_for(
            orchestrator.run_scan(scan_id, scan_input.website_url, scan_input),
            timeout=settings.SCAN_TIMEOUT,
        )
    except ScanPhaseError as e:
        _mark_failed(store, scan_id, str(e), phase=e.phase)
    except asyncio.TimeoutError:
        _mark_failed(store, scan_id, f"Scan timed out after {settings.SCAN_TIMEOUT}s")
    except Exception as e:
        logger.exception(f"Scan {scan_id} crashed")
        _mark_failed(store, scan_id, f"Unexpected error: {e}")
    finally:
        await fetcher.close()
        if registry is not None:
            await registry.close()


def _mark_failed(store: ScanStore, scan_id: str, message: str, phase: Optional[str] = None) -> None:
    logger.error(f"Scan {scan_id} failed: {message}")
    fields: Dict[str, Any] = {"status": ScanStatus.FAILED.value, "error_message": message}
    if phase:
        fields["current_phase"] = phase
    try:
        store.update_scan(scan_id, **fields)
    except StoreError as e:
        logger.error(f"Could not record failure for scan {scan_id}: {e}")


# ============================================================================
# ENDPOINTS
# ============================================================================

@app.get("/health")
async def health():
    """Health check including database status."""
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "version": __version__,
        "database": "connected" if check_db_connection() else "disconnected",
    }


@app.post("/scan", response_model=ScanAccepted, status_code=202)
async def submit_scan(request: ScanRequest, background_tasks: BackgroundTasks):
    """Validate a scan request and run it in the background."""
    scan_input = request.to_scan_input()
    issues = validate_scan_input(scan_input)
    if issues:
        raise HTTPException(
            status_code=422,
            detail=[{"field": i.field, "message": i.message} for i in issues],
        )

    store = get_store()
    scan_id = str(uuid.uuid4())
    try:
        store.update_scan(
            scan_id,
            brand_name=scan_input.brand_name,
            brand_domain=extract_domain(scan_input.website_url),
            url=scan_input.website_url,
            plan=scan_input.plan_tier,
            status=ScanStatus.PENDING.value,
            progress_percent=0,
        )
    except StoreError as e:
        logger.error(f"Could not create scan: {e}")
        raise HTTPException(status_code=503, detail="Scan storage unavailable")

    background_tasks.add_task(run_scan_job, scan_id, scan_input, store)
    logger.info(f"Queued scan {scan_id} for {scan_input.website_url}")

    return ScanAccepted(scan_id=scan_id, status=ScanStatus.PENDING.value, message="Scan queued")


@app.get("/scan/{scan_id}")
async def get_scan(scan_id: str):
    return _load_scan(scan_id)


@app.get("/scan/{scan_id}/share-of-voice")
async def get_share_of_voice(scan_id: str):
    scan = _load_scan(scan_id)
    try:
        result = share_of_voice_for_scan(get_store(), scan_id, scan.get("brand_name") or "")
    except StoreError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return result.to_dict()


@app.get("/scan/{scan_id}/providers")
async def get_provider_comparison(scan_id: str):
    _load_scan(scan_id)
    try:
        return provider_comparison_for_scan(get_store(), scan_id).to_dict()
    except StoreError as e:
        raise HTTPException(status_code=503, detail=str(e))


@app.get("/scan/{scan_id}/deltas")
async def get_score_deltas(scan_id: str):
    try:
        deltas = score_deltas_for_scan(get_store(), scan_id)
    except StoreError as e:
        raise HTTPException(status_code=503, detail=str(e))
    if deltas is None:
        raise HTTPException(status_code=404, detail="Scan not found")
    return deltas.to_dict()


@app.get("/scan/{scan_id}/queries")
async def get_scan_queries(scan_id: str):
    """Per-response rows of a scan for the query explorer."""
    _load_scan(scan_id)
    try:
        return query_explorer_for_scan(get_store(), scan_id).to_dict()
    except StoreError as e:
        raise HTTPException(status_code=503, detail=str(e))


@app.get("/brands/{domain}/trend")
async def get_brand_trend(domain: str):
    """Score history of a brand over its latest scored scans."""
    try:
        return scan_trend_for_brand(get_store(), extract_domain(domain)).to_dict()
    except StoreError as e:
        raise HTTPException(status_code=503, detail=str(e))


@app.get("/competitors/{domain}")
async def get_competitors(domain: str):
    tracker = CompetitorTracker(get_store())
    records = tracker.get_competitors(extract_domain(domain))
    return {"brand_domain": extract_domain(domain), "competitors": [r.to_dict() for r in records]}


def _load_scan(scan_id: str) -> Dict[str, Any]:
    try:
        scan = get_store().get_scan(scan_id)
    except StoreError as e:
        raise HTTPException(status_code=503, detail=str(e))
    if scan is None:
        raise HTTPException(status_code=404, detail="Scan not found")
    return scan
