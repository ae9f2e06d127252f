"""
SQLAlchemy Models for the Visibility Engine

Four tables:
1. scans - one row per scan with status, score and JSON breakdowns
2. scan_query_sets - the immutable validated query set of a scan
3. competitor_tracking - current top-3 competitors per brand domain
4. scan_results - one row per provider response, used by analytics

Generic JSON columns keep the schema portable between PostgreSQL and SQLite.
"""

from datetime import datetime

from sqlalchemy import (
    Column, String, Integer, Float, Boolean, DateTime, Text,
    ForeignKey, Index, JSON,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Scan(Base):
    """A single visibility scan - the central entity"""
    __tablename__ = "scans"

    id = Column(String(64), primary_key=True)
    brand_name = Column(String(255))
    brand_domain = Column(String(255), index=True)
    url = Column(Text)
    plan = Column(String(20), default="free")

    # pending, running, failed, not_mentioned, low_visibility, recommended
    status = Column(String(20), default="pending")
    current_phase = Column(String(20))
    progress_percent = Column(Integer, default=0)
    error_message = Column(Text)

    score = Column(Integer)
    score_breakdown = Column(JSON)
    provider_scores = Column(JSON)
    profile = Column(JSON)
    summary = Column(JSON)
    """
    {
        "queries_executed": 30,
        "responses_analyzed": 58,
        "competitors": [{"competitor_name": "calendly", "rank": 1, ...}],
        "provider_comparison": {"providers": [...], "cross_provider": {...}}
    }
    """

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    completed_at = Column(DateTime)

    __table_args__ = (
        Index("idx_scans_brand_created", "brand_domain", "created_at"),
    )


class ScanQuerySet(Base):
    """Validated queries of a scan, stored once and reused on retry"""
    __tablename__ = "scan_query_sets"

    scan_id = Column(String(64), primary_key=True)
    queries = Column(JSON, nullable=False, default=list)
    total_generated = Column(Integer, default=0)
    total_validated = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)


class CompetitorTracking(Base):
    """Top competitors per brand domain, fully replaced after each scan"""
    __tablename__ = "competitor_tracking"

    id = Column(Integer, primary_key=True, autoincrement=True)
    brand_domain = Column(String(255), nullable=False, index=True)
    competitor_name = Column(String(255), nullable=False)
    rank = Column(Integer, nullable=False)
    last_mention_count = Column(Integer, default=0)
    last_avg_position = Column(Float, default=99.0)
    trend = Column(String(10), default="new")  # up, down, stable, new
    updated_at = Column(DateTime, default=datetime.utcnow)


class ScanResult(Base):
    """One provider response to one query"""
    __tablename__ = "scan_results"

    id = Column(Integer, primary_key=True, autoincrement=True)
    scan_id = Column(String(64), ForeignKey("scans.id", ondelete="CASCADE"), nullable=False, index=True)
    provider = Column(String(20), nullable=False)
    query_text = Column(Text, nullable=False)
    intent = Column(String(30))
    response_text = Column(Text)

    brand_mentioned = Column(Boolean, default=False)
    brand_position = Column(Integer)
    detection_method = Column(String(20))
    confidence = Column(Float)
    sentiment = Column(String(10))
    competitors_detected = Column(JSON, default=list)  # [{"name": ..., "position": ...}]

    created_at = Column(DateTime, default=datetime.utcnow)
