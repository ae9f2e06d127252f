"""
Output Parser for Model Responses

Models are asked to answer with bare JSON, but often wrap it in code
fences or surround it with prose. The parser:
- Strips ```json fences
- Falls back to the outermost JSON object/array in the text
- Validates the payload against a pydantic schema

Returns a tagged ParseResult instead of raising, so each caller decides
whether a parse error is fatal or falls back to a default.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

from pydantic import TypeAdapter, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_FENCE_PATTERN = re.compile(r"```(?:json)?\s*\n?", re.IGNORECASE)


@dataclass
class ParseResult(Generic[T]):
    """Result of parsing a model response: a value or an error."""
    success: bool
    value: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, value: T) -> "ParseResult[T]":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: str) -> "ParseResult[T]":
        return cls(success=False, error=error)


def strip_code_fences(raw: str) -> str:
    """Remove markdown code fences around a JSON payload."""
    return _FENCE_PATTERN.sub("", raw).replace("```", "").strip()


def _load_json(text: str) -> Any:
    """Load JSON, falling back to the outermost object or array."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    # Whichever bracket opens first decides object vs array
    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if starts:
        start = min(starts)
        closer = "}" if text[start] == "{" else "]"
        end = text.rfind(closer)
        if end > start:
            try:
                return json.loads(text[start:end + 1])
            except json.JSONDecodeError:
                pass

    raise ValueError("No JSON payload found")


def parse_json_response(raw: str, schema: Any) -> ParseResult:
    """
    Parse a model response against a schema.

    Args:
        raw: Raw model output
        schema: Any type pydantic can validate (BaseModel, List[str], Dict[...])

    Returns:
        ParseResult with the validated value, or the parse error
    """
    if not raw or not raw.strip():
        return ParseResult.fail("Empty response")

    cleaned = strip_code_fences(raw)
    try:
        payload = _load_json(cleaned)
    except ValueError as e:
        return ParseResult.fail(f"{e}: {cleaned[:200]}")

    try:
        value = TypeAdapter(schema).validate_python(payload)
    except ValidationError as e:
        return ParseResult.fail(f"Schema validation failed: {e.error_count()} error(s)")

    return ParseResult.ok(value)


def parse_yes_no(raw: str) -> bool:
    """Strict yes/no answer: only an answer starting with "yes" counts."""
    return raw.strip().strip('"\'').lower().startswith("yes")
