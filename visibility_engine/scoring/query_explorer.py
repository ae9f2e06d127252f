"""
Query Explorer

Per-response rows of a scan with the filter values a results table needs.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

EXPLORER_FIELDS = [
    "id",
    "query_text",
    "intent",
    "provider",
    "brand_mentioned",
    "brand_position",
    "detection_method",
    "confidence",
    "sentiment",
    "competitors_detected",
    "response_text",
    "created_at",
]


@dataclass
class QueryExplorer:
    results: List[Dict[str, Any]] = field(default_factory=list)
    providers: List[str] = field(default_factory=list)
    intents: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "results": self.results,
            "filters": {"providers": self.providers, "intents": self.intents},
        }


def compute_query_explorer(rows: List[Dict[str, Any]]) -> QueryExplorer:
    """Project stored scan_results rows and collect distinct providers and intents."""
    results = []
    providers: List[str] = []
    intents: List[str] = []

    for row in rows:
        item = {key: row.get(key) for key in EXPLORER_FIELDS}
        if hasattr(item["created_at"], "isoformat"):
            item["created_at"] = item["created_at"].isoformat()
        item["competitors_detected"] = item["competitors_detected"] or []
        results.append(item)

        if item["provider"] and item["provider"] not in providers:
            providers.append(item["provider"])
        if item["intent"] and item["intent"] not in intents:
            intents.append(item["intent"])

    return QueryExplorer(results=results, providers=providers, intents=intents)


def query_explorer_for_scan(store, scan_id: str) -> QueryExplorer:
    return compute_query_explorer(store.get_scan_results(scan_id))
