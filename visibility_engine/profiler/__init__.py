"""
Profiler Module

Builds the structured product profile every later scan phase works from.
"""

from .models import Profile, ProfileExtraction, ScanInput
from .profiler import ProductProfiler
from .input_validation import ValidationIssue, validate_scan_input, BLOCKED_DOMAINS

__all__ = [
    "Profile",
    "ProfileExtraction",
    "ScanInput",
    "ProductProfiler",
    "ValidationIssue",
    "validate_scan_input",
    "BLOCKED_DOMAINS",
]
