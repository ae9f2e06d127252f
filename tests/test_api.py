"""
Test Suite for the Scan API

Tests:
- Scan submission and validation errors
- Scan status, analytics, trend and query explorer endpoints
- Background job status and failure recording
"""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

import api.scan as scan_api
from visibility_engine.errors import ScanPhaseError, StoreError
from visibility_engine.profiler import ScanInput
from visibility_engine.utils.config import Settings

from conftest import ScriptedLLM, answer


VALID_REQUEST = {
    "brand_name": "Cal.com",
    "website_url": "https://cal.com",
    "core_problem": "Teams waste hours coordinating meeting times",
    "target_buyer": "Engineering managers at startups",
    "competitors": ["Calendly"],
}


@pytest.fixture
def client(store, monkeypatch):
    scan_api.app.state.store = store
    monkeypatch.setattr(scan_api, "run_scan_job", AsyncMock())
    monkeypatch.setattr(scan_api, "check_db_connection", lambda: True)
    yield TestClient(scan_api.app)
    del scan_api.app.state.store


class TestHealth:
    """Test the health endpoint."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["database"] == "connected"


class TestSubmitScan:
    """Test scan submission."""

    def test_queues_scan(self, client, store):
        response = client.post("/scan", json=VALID_REQUEST)

        assert response.status_code == 202
        body = response.json()
        assert body["status"] == "pending"

        scan = store.get_scan(body["scan_id"])
        assert scan["brand_domain"] == "cal.com"
        assert scan["plan"] == "free"
        scan_api.run_scan_job.assert_awaited_once()
        job_input = scan_api.run_scan_job.await_args.args[1]
        assert job_input.competitors == ["Calendly"]

    def test_invalid_form(self, client):
        response = client.post("/scan", json=dict(VALID_REQUEST, core_problem="slow", website_url="https://github.com/x"))

        assert response.status_code == 422
        fields = {issue["field"] for issue in response.json()["detail"]}
        assert fields == {"core_problem", "website_url"}
        scan_api.run_scan_job.assert_not_awaited()

    def test_unknown_plan_rejected(self, client):
        response = client.post("/scan", json=dict(VALID_REQUEST, plan_tier="platinum"))
        assert response.status_code == 422

    def test_store_unavailable(self, client):
        broken = MagicMock()
        broken.update_scan.side_effect = StoreError("down")
        scan_api.app.state.store = broken

        assert client.post("/scan", json=VALID_REQUEST).status_code == 503


class TestScanViews:
    """Test read endpoints."""

    @pytest.fixture
    def finished_scan(self, store):
        store.update_scan(
            "scan-1",
            brand_name="Cal.com",
            brand_domain="cal.com",
            status="recommended",
            score=72,
            provider_scores=[{
                "provider": "openai", "mention_rate": 0.8, "mention_count": 8, "total_queries": 10,
                "weighted_position_score": 0.7, "intent_weighted_score": 0.8,
                "sentiment": "positive", "visibility_score": 77,
            }],
            created_at=datetime(2026, 5, 1),
        )
        store.insert_scan_results([{
            "scan_id": "scan-1",
            "provider": "openai",
            "query_text": "best scheduling tool for engineers",
            "intent": "comparison",
            "brand_mentioned": True,
            "competitors_detected": [{"name": "Calendly", "position": 2}],
        }])
        return "scan-1"

    def test_get_scan(self, client, finished_scan):
        response = client.get(f"/scan/{finished_scan}")

        assert response.status_code == 200
        assert response.json()["score"] == 72

    def test_missing_scan(self, client):
        assert client.get("/scan/nope").status_code == 404
        assert client.get("/scan/nope/share-of-voice").status_code == 404
        assert client.get("/scan/nope/providers").status_code == 404
        assert client.get("/scan/nope/deltas").status_code == 404

    def test_share_of_voice(self, client, finished_scan):
        body = client.get(f"/scan/{finished_scan}/share-of-voice").json()

        assert body["your_rank"] == 1
        assert {b["name"] for b in body["brands"]} == {"Cal.com", "Calendly"}

    def test_provider_comparison(self, client, finished_scan):
        body = client.get(f"/scan/{finished_scan}/providers").json()

        assert body["cross_provider"]["strongest_provider"] == "openai"
        assert body["providers"][0]["avg_position"] == 2

    def test_deltas_without_history(self, client, finished_scan):
        body = client.get(f"/scan/{finished_scan}/deltas").json()

        assert body["overall"] == {"current": 72, "previous": None, "delta": None}
        assert body["previous_scan_id"] is None

    def test_query_explorer(self, client, finished_scan):
        body = client.get(f"/scan/{finished_scan}/queries").json()

        assert body["total"] == 1
        assert body["filters"] == {"providers": ["openai"], "intents": ["comparison"]}
        row = body["results"][0]
        assert row["query_text"] == "best scheduling tool for engineers"
        assert row["competitors_detected"] == [{"name": "Calendly", "position": 2}]

    def test_query_explorer_missing_scan(self, client):
        assert client.get("/scan/nope/queries").status_code == 404

    def test_brand_trend(self, client, store, finished_scan):
        store.update_scan(
            "scan-0", brand_domain="cal.com", status="low_visibility", score=31,
            score_breakdown={"mention_rate": 0.3, "cross_model_consistency": 0.8},
            created_at=datetime(2026, 4, 1),
        )
        store.update_scan("scan-failed", brand_domain="cal.com", status="failed", created_at=datetime(2026, 5, 2))

        body = client.get("/brands/www.cal.com/trend").json()

        assert body["brand_domain"] == "cal.com"
        assert body["total_scans"] == 2
        assert [p["overall_score"] for p in body["points"]] == [31, 72]
        assert body["points"][0]["mention_rate"] == 0.3
        assert body["points"][0]["date"].startswith("2026-04-01")

    def test_brand_trend_empty(self, client):
        body = client.get("/brands/unknown.io/trend").json()

        assert body["points"] == []
        assert body["total_scans"] == 0

    def test_competitors(self, client, store):
        store.insert_competitors([{"brand_domain": "cal.com", "competitor_name": "calendly", "rank": 1}])

        body = client.get("/competitors/www.cal.com").json()

        assert body["brand_domain"] == "cal.com"
        assert [c["competitor_name"] for c in body["competitors"]] == ["calendly"]

    def test_store_error(self, client):
        broken = MagicMock()
        broken.get_scan.side_effect = StoreError("down")
        scan_api.app.state.store = broken

        assert client.get("/scan/scan-1").status_code == 503


class TestScanJob:
    """Test the background job wrapper."""

    @pytest.fixture
    def scan_input(self):
        return ScanInput(brand_name="Cal.com", website_url="https://cal.com")

    @pytest.fixture
    def patched(self, monkeypatch):
        registry = MagicMock(names=["openai"])
        registry.close = AsyncMock()
        monkeypatch.setattr(scan_api, "ClaudeClient", MagicMock())
        monkeypatch.setattr(
            scan_api, "ProviderRegistry", MagicMock(from_settings=MagicMock(return_value=registry))
        )
        return registry

    def fake_orchestrator(self, monkeypatch, run_scan):
        created = {}

        def factory(**kwargs):
            created.update(kwargs)

            async def scan(*args):
                return await run_scan(kwargs)

            return MagicMock(run_scan=AsyncMock(side_effect=scan))

        monkeypatch.setattr(scan_api, "ScanOrchestrator", factory)
        return created

    @pytest.mark.asyncio
    async def test_phase_failure_recorded(self, store, scan_input, patched, monkeypatch):
        async def run_scan(kwargs):
            raise ScanPhaseError("profile", ValueError("unparseable"))

        self.fake_orchestrator(monkeypatch, run_scan)
        store.update_scan("scan-1", status="pending")

        await scan_api.run_scan_job("scan-1", scan_input, store)

        scan = store.get_scan("scan-1")
        assert scan["status"] == "failed"
        assert scan["current_phase"] == "profile"
        assert "unparseable" in scan["error_message"]
        patched.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_progress_updates_scan(self, store, scan_input, patched, monkeypatch):
        async def run_scan(kwargs):
            kwargs["progress"]("execute", 40, "Asking")

        created = self.fake_orchestrator(monkeypatch, run_scan)
        store.update_scan("scan-1", status="pending")

        await scan_api.run_scan_job("scan-1", scan_input, store)

        scan = store.get_scan("scan-1")
        assert scan["status"] == "running"
        assert scan["current_phase"] == "execute"
        assert scan["progress_percent"] == 40
        assert created["providers"] == ["openai"]
        assert created["plan"] == "free"

    @pytest.mark.asyncio
    async def test_unexpected_error_recorded(self, store, scan_input, patched, monkeypatch):
        async def run_scan(kwargs):
            raise RuntimeError("boom")

        self.fake_orchestrator(monkeypatch, run_scan)
        store.update_scan("scan-1", status="pending")

        await scan_api.run_scan_job("scan-1", scan_input, store)

        assert store.get_scan("scan-1")["error_message"] == "Unexpected error: boom"

    @pytest.mark.asyncio
    async def test_real_scan_keeps_final_status(self, store, scan_input, monkeypatch):
        """The completion progress event must not overwrite the persisted status."""
        registry = MagicMock(names=["openai", "claude"])
        registry.query = AsyncMock(side_effect=answer)
        registry.close = AsyncMock()
        fetcher = MagicMock()
        fetcher.fetch_text = AsyncMock(return_value="Cal.com scheduling infrastructure")
        fetcher.close = AsyncMock()

        monkeypatch.setattr(scan_api, "get_settings", lambda: Settings(MAX_QUERIES_PER_SCAN=None))
        monkeypatch.setattr(scan_api, "ClaudeClient", MagicMock(return_value=MagicMock(complete=ScriptedLLM())))
        monkeypatch.setattr(
            scan_api, "ProviderRegistry", MagicMock(from_settings=MagicMock(return_value=registry))
        )
        monkeypatch.setattr(scan_api, "PageFetcher", MagicMock(return_value=fetcher))
        store.update_scan("scan-1", status="pending")

        await scan_api.run_scan_job("scan-1", scan_input, store)

        scan = store.get_scan("scan-1")
        assert scan["status"] == "low_visibility"
        assert scan["score"] == 39
        assert scan["current_phase"] == "complete"
        assert scan["progress_percent"] == 100
        fetcher.close.assert_awaited_once()
        registry.close.assert_awaited_once()
