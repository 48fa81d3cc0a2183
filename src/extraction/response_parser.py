"""Parsing of raw language-model output into JSON objects."""

import json
import re
from typing import Any

from src.errors import ParseError

_LEADING_FENCE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\s*```$")


def strip_code_fence(raw: str) -> str:
    """Remove a surrounding markdown code fence, if present."""
    text = raw.strip()
    if text.startswith("```"):
        text = _LEADING_FENCE.sub("", text)
        text = _TRAILING_FENCE.sub("", text)
    return text.strip()


def parse_json_response(raw: str | None) -> dict[str, Any]:
    """Parse a model response that should contain a single JSON object.

    Args:
        raw: Model output, optionally wrapped in a ```json fence.

    Returns:
        The decoded JSON object.

    Raises:
        ParseError: If the text is not valid JSON or not an object. The
            error keeps the original raw text verbatim.
    """
    raw = raw or ""
    try:
        parsed = json.loads(strip_code_fence(raw))
    except json.JSONDecodeError as exc:
        raise ParseError(f"Model output is not valid JSON: {exc}", raw) from exc

    if not isinstance(parsed, dict):
        raise ParseError(
            f"Model output is a JSON {type(parsed).__name__}, expected an object",
            raw,
        )
    return parsed
