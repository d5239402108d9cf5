"""Recover a JSON value from model output wrapped in prose or code fences."""

import json
import logging
import re
from typing import Any, Optional

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json|JSON)?\s*([\s\S]*?)\s*```")

_OPENERS = "{["

_DECODER = json.JSONDecoder()

_FAILED = object()


def _try_load(candidate: str) -> Any:
    try:
        return json.loads(candidate)
    except (ValueError, TypeError):
        return _FAILED


def _scan_embedded(text: str) -> Any:
    """Longest object or array decodable from any ``{``/``[`` in ``text``.

    Prose brackets such as ``[1]`` decode too, so the widest span wins and
    the earliest one breaks ties.
    """
    best, best_length = _FAILED, 0
    index = 0
    while index < len(text):
        if text[index] not in _OPENERS:
            index += 1
            continue
        try:
            value, end = _DECODER.raw_decode(text, index)
        except ValueError:
            index += 1
            continue
        if end - index > best_length:
            best, best_length = value, end - index
        # anything starting inside this span is nested in it, hence shorter
        index = end
    return best


def parse_json(text: Optional[str]) -> Optional[Any]:
    """Best-effort JSON parse. Never raises.

    Tries, in order: the whole string, the first fenced code block, then every
    object or array embedded in the surrounding prose.

    Returns:
        The decoded value, or None if nothing parses.
    """
    if not text or not text.strip():
        return None

    value = _try_load(text.strip())
    if value is not _FAILED:
        return value

    match = _FENCE_RE.search(text)
    if match:
        value = _try_load(match.group(1))
        if value is not _FAILED:
            return value

    value = _scan_embedded(text)
    if value is not _FAILED:
        return value

    logger.debug("json_repair result=failure preview=%r", text[:80])
    return None
