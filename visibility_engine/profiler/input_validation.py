"""
Scan Input Validation

Checks form input before a scan is queued. Returns every problem found
so the form can show them all at once.
"""

from dataclasses import dataclass
from typing import List
from urllib.parse import urlparse

from .models import ScanInput

BLOCKED_DOMAINS = {
    "google.com", "facebook.com", "twitter.com", "youtube.com",
    "linkedin.com", "instagram.com", "tiktok.com", "amazon.com",
    "wikipedia.org", "reddit.com", "github.com",
}

MAX_COMPETITORS = 5
MAX_BUYER_QUESTIONS = 10


@dataclass
class ValidationIssue:
    """A single invalid form field."""
    field: str
    message: str


def validate_scan_input(scan_input: ScanInput) -> List[ValidationIssue]:
    """
    Validate a scan request.

    Returns:
        List of issues (empty when the input is valid)
    """
    issues: List[ValidationIssue] = []

    name = (scan_input.brand_name or "").strip()
    if not name:
        issues.append(ValidationIssue("brand_name", "Brand name is required."))
    elif len(name) > 80:
        issues.append(ValidationIssue("brand_name", "Brand name must be 80 characters or less."))

    url = (scan_input.website_url or "").strip()
    if not url:
        issues.append(ValidationIssue("website_url", "Website URL is required."))
    else:
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            issues.append(ValidationIssue("website_url", "Please enter a valid http(s) URL."))
        else:
            host = parsed.hostname.lower()
            if host.startswith("www."):
                host = host[4:]
            if host in BLOCKED_DOMAINS:
                issues.append(ValidationIssue(
                    "website_url",
                    "Please enter your product URL, not a social media or platform site.",
                ))

    problem = (scan_input.core_problem or "").strip()
    if len(problem) < 15:
        issues.append(ValidationIssue(
            "core_problem",
            "Please describe the problem in at least 15 characters.",
        ))
    elif len(problem) > 300:
        issues.append(ValidationIssue("core_problem", "Please keep this under 300 characters."))

    buyer = (scan_input.target_buyer or "").strip()
    if len(buyer) < 8:
        issues.append(ValidationIssue(
            "target_buyer",
            "Please describe your target customer in at least 8 characters.",
        ))
    elif len(buyer) > 150:
        issues.append(ValidationIssue("target_buyer", "Please keep this under 150 characters."))

    differentiators = (scan_input.differentiators or "").strip()
    if differentiators:
        if len(differentiators) < 10:
            issues.append(ValidationIssue("differentiators", "If provided, please give at least 10 characters."))
        elif len(differentiators) > 300:
            issues.append(ValidationIssue("differentiators", "Please keep this under 300 characters."))

    competitors = scan_input.competitors or []
    if len(competitors) > MAX_COMPETITORS:
        issues.append(ValidationIssue("competitors", f"Maximum {MAX_COMPETITORS} competitors."))
    for comp in competitors:
        if len(comp.strip()) > 60:
            issues.append(ValidationIssue("competitors", f'Competitor name "{comp[:20]}..." is too long.'))
            break

    questions = scan_input.buyer_questions or []
    if len(questions) > MAX_BUYER_QUESTIONS:
        issues.append(ValidationIssue("buyer_questions", f"Maximum {MAX_BUYER_QUESTIONS} questions."))
    brand_lower = name.lower()
    for question in questions:
        if len(question.strip()) < 10:
            issues.append(ValidationIssue(
                "buyer_questions",
                f'"{question[:30]}" is too short to be a real question.',
            ))
            break
        if brand_lower and brand_lower in question.lower():
            issues.append(ValidationIssue(
                "buyer_questions",
                f'Questions should not contain your brand name. Remove "{name}" from: "{question[:40]}"',
            ))
            break

    return issues
