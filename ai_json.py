"""Lenient JSON extraction from raw LLM responses.

Model output is supposed to be JSON but regularly arrives wrapped in
markdown fences, with typographic quotes, trailing commas or truncated
strings. parse_ai_json() strips the wrapping, tries a strict parse and
falls back to json_repair before giving up.
"""

from __future__ import annotations

import json
import re
from typing import Any, Optional

import json_repair

from normalization_config import AI_JSON_REPAIR_MAX_CHARS
from observability import setup_structured_logger

logger = setup_structured_logger("normalizer.ai_json")

FENCE = "```"

_DOUBLE_QUOTES = re.compile("[“”„″]")
_SINGLE_QUOTES = re.compile("[‘’‚′]")
_FENCE_LANGUAGE_TAG = re.compile(r"^```[\w-]*")


class AIResponseParseError(ValueError):
    """Raised when a model response cannot be turned into structured data."""


class EmptyResponseError(AIResponseParseError):
    """The model returned nothing usable (empty or whitespace-only text)."""

    def __init__(self) -> None:
        super().__init__("Empty AI response")


class UnrecoverableResponseError(AIResponseParseError):
    """Strict parsing and the repair pass both failed."""

    def __init__(self, original_text: str, reason: Optional[str] = None) -> None:
        self.original_text = original_text
        self.reason = reason
        message = "AI response is not valid JSON and could not be repaired"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


def strip_code_fences(text: str) -> str:
    """Return the interior of a ```-fenced block, or the text unchanged."""
    text = text.strip()
    if not text.startswith(FENCE):
        return text

    fence_end = text.rfind(FENCE)
    first_newline = text.find("\n")

    if first_newline == -1:
        # Single-line block: ```json {...}```
        body = _FENCE_LANGUAGE_TAG.sub("", text, count=1)
        if body.endswith(FENCE):
            body = body[: -len(FENCE)]
        return body.strip()

    if fence_end > first_newline:
        return text[first_newline + 1 : fence_end].strip()

    # Opening fence without a closing one (truncated response)
    return text[first_newline + 1 :].strip()


def normalize_smart_quotes(text: str) -> str:
    """Replace typographic quotes with their ASCII equivalents."""
    text = _DOUBLE_QUOTES.sub('"', text)
    return _SINGLE_QUOTES.sub("'", text)


def _repair(text: str) -> Any:
    if len(text) > AI_JSON_REPAIR_MAX_CHARS:
        raise UnrecoverableResponseError(
            text,
            f"input too large for repair ({len(text)} chars > {AI_JSON_REPAIR_MAX_CHARS})",
        )

    try:
        repaired = json_repair.repair_json(text, return_objects=True)
    except Exception as e:
        raise UnrecoverableResponseError(text, f"repair failed: {e}") from e

    # json_repair signals "nothing structured found" with an empty string
    if repaired is None or repaired == "":
        raise UnrecoverableResponseError(text, "repair produced no structured value")
    return repaired


def parse_ai_json(raw_text: Optional[str]) -> Any:
    """Parse a raw model response into a plain JSON value.

    Args:
        raw_text: Text returned by the completion call

    Returns:
        dict / list / scalar tree as produced by json.loads

    Raises:
        EmptyResponseError: raw_text is None, empty or whitespace-only
        UnrecoverableResponseError: neither strict parsing nor repair worked;
            the exception keeps the original text for diagnostics
    """
    if raw_text is None or not raw_text.strip():
        raise EmptyResponseError()

    text = normalize_smart_quotes(strip_code_fences(raw_text))
    if not text:
        raise EmptyResponseError()

    try:
        return json.loads(text)
    except (ValueError, RecursionError) as e:
        # also an integer literal past the int digit limit, or runaway nesting
        logger.info(
            "Strict JSON parse failed, attempting repair",
            extra={
                "extra_fields": {
                    "error": str(e),
                    "length": len(text),
                }
            },
        )

    try:
        value = _repair(text)
    except UnrecoverableResponseError as e:
        logger.error(
            "AI response could not be repaired",
            extra={
                "extra_fields": {
                    "reason": e.reason,
                    "preview": raw_text[:200],
                }
            },
        )
        raise UnrecoverableResponseError(raw_text, e.reason) from e

    logger.info(
        "json_repair recovered AI response",
        extra={"extra_fields": {"value_type": type(value).__name__}},
    )
    return value
