"""
Scan Module

The orchestrator that wires profiling, queries, detection, scoring and
competitor tracking into one scan.
"""

from .orchestrator import (
    DEFAULT_PROVIDERS,
    NoResultsError,
    ProgressCallback,
    ScanOrchestrator,
    ScanPhase,
    ScanResult,
)

__all__ = [
    "DEFAULT_PROVIDERS",
    "NoResultsError",
    "ProgressCallback",
    "ScanOrchestrator",
    "ScanPhase",
    "ScanResult",
]
