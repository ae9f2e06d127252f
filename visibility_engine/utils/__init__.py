"""Utility modules for the AI Visibility Scanner."""

from .config import Settings, get_settings
from .domain import extract_domain, strip_domain_suffix, first_domain_label
from .limits import PlanTier, ScanLimits, PLAN_LIMITS, resolve_limits
from .logging import setup_logging
from .retry import RetryConfig, RetryExhaustedError, with_retry

__all__ = [
    "Settings",
    "get_settings",
    # Domains
    "extract_domain",
    "strip_domain_suffix",
    "first_domain_label",
    # Plan limits
    "PlanTier",
    "ScanLimits",
    "PLAN_LIMITS",
    "resolve_limits",
    # Logging
    "setup_logging",
    # Retry
    "RetryConfig",
    "RetryExhaustedError",
    "with_retry",
]
