"""
Output Module

Parses model responses into validated, tagged results.
"""

from .parser import (
    ParseResult,
    strip_code_fences,
    parse_json_response,
    parse_yes_no,
)

__all__ = [
    "ParseResult",
    "strip_code_fences",
    "parse_json_response",
    "parse_yes_no",
]
