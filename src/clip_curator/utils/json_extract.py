"""Extract, parse and fall back: JSON out of language model responses.

Models wrap JSON in prose, code fences or single backticks. Every structured
generation call goes through these helpers so a malformed response turns
into a caller-chosen default instead of an exception.
"""

import json
import re
from typing import Any, TypeVar

from clip_curator.logging import get_logger, preview

logger = get_logger(__name__)

T = TypeVar("T")

_JSON_FENCE = re.compile(r"```json\s*(.*?)```", re.DOTALL | re.IGNORECASE)
_ANY_FENCE = re.compile(r"```[a-zA-Z0-9_-]*\s*(.*?)```", re.DOTALL)
_BACKTICK = re.compile(r"`\s*([\[{].*?[\]}])\s*`", re.DOTALL)

_decoder = json.JSONDecoder()


def _first_bare_block(text: str) -> str | None:
    """Return the first substring that decodes as a JSON object or array."""
    for match in re.finditer(r"[\[{]", text):
        start = match.start()
        try:
            _, end = _decoder.raw_decode(text, start)
        except ValueError:
            continue
        return text[start:end]
    return None


def extract_json_block(text: str | None) -> str | None:
    """Find the JSON payload in a model response.

    Tried in order: a ```json fence, any other fence, a single-backtick span,
    then the first bare object or array. Returns ``None`` when nothing looks
    like JSON.
    """
    if not text:
        return None

    for pattern in (_JSON_FENCE, _ANY_FENCE, _BACKTICK):
        match = pattern.search(text)
        if match and match.group(1).strip():
            return match.group(1).strip()

    stripped = text.strip()
    if stripped[:1] in ("{", "["):
        return stripped
    return _first_bare_block(text)


def parse_json(text: str | None, default: T, *, context: str = "llm_response") -> Any | T:
    """Extract and decode JSON, returning ``default`` on any failure."""
    block = extract_json_block(text)
    if block is None:
        logger.warning("json_block_not_found", context=context, preview=preview(text))
        return default
    try:
        return json.loads(block)
    except json.JSONDecodeError:
        # A fence may hold prose around the payload
        inner = _first_bare_block(block)
        if inner is not None:
            return json.loads(inner)
        logger.warning("json_parse_failed", context=context, preview=preview(block))
        return default


def parse_json_object(text: str | None, *, context: str = "llm_response") -> dict[str, Any]:
    """Decode a JSON object; anything else yields ``{}``."""
    data = parse_json(text, {}, context=context)
    if not isinstance(data, dict):
        logger.warning("json_unexpected_type", context=context, expected="object")
        return {}
    return data


def parse_json_list(
    text: str | None,
    key: str | None = None,
    *,
    context: str = "llm_response",
) -> list[Any]:
    """Decode a JSON array, or the array under ``key`` of an object.

    JSON-mode providers only emit objects, so prompts ask for
    ``{"<key>": [...]}`` while other providers often answer with a bare array.
    """
    data = parse_json(text, [], context=context)
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        if key and isinstance(data.get(key), list):
            return data[key]
        # Single list-valued field is unambiguous
        lists = [v for v in data.values() if isinstance(v, list)]
        if len(lists) == 1:
            return lists[0]
    logger.warning("json_unexpected_type", context=context, expected="array")
    return []


def as_int(value: Any, default: int, low: int | None = None, high: int | None = None) -> int:
    """Coerce a model-supplied number, clamping to ``[low, high]``."""
    try:
        result = int(round(float(value)))
    except (TypeError, ValueError, OverflowError):
        return default
    if low is not None:
        result = max(low, result)
    if high is not None:
        result = min(high, result)
    return result
