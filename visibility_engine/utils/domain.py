"""
Domain Utilities

Hostname extraction and suffix handling shared by the profiler,
alias builder and competitor tracker.
"""

import re
from typing import Optional
from urllib.parse import urlparse

# Suffixes stripped when deriving a bare brand token from a domain
KNOWN_SUFFIXES = (
    "com", "io", "so", "app", "dev", "ai", "co", "org", "net", "chat", "pro",
)

_SUFFIX_PATTERN = re.compile(r"^(.+)\.(" + "|".join(KNOWN_SUFFIXES) + r")$")


def extract_domain(url: str) -> str:
    """
    Extract the bare hostname from a URL.

    Accepts URLs without a scheme ("example.com/pricing").
    Drops a leading "www." and lowercases the result.
    """
    candidate = url.strip()
    if "://" not in candidate:
        candidate = f"https://{candidate}"

    hostname = urlparse(candidate).hostname or ""
    if hostname.startswith("www."):
        hostname = hostname[4:]
    return hostname.lower()


def strip_domain_suffix(name: str) -> Optional[str]:
    """Return the name without a known TLD suffix, or None if it has none."""
    match = _SUFFIX_PATTERN.match(name.lower())
    return match.group(1) if match else None


def first_domain_label(domain: str) -> str:
    """First label of a domain ("cal" for "cal.com")."""
    return domain.split(".")[0]
