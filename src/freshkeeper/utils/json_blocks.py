"""JSON extraction from free-form model output.

Models are told to answer with raw JSON but regularly wrap it in prose or markdown fences.
These helpers locate every top-level JSON object in a text without guessing which one was
meant; callers decide what to do when there is not exactly one.
"""

from __future__ import annotations

import json
from typing import Any

from freshkeeper.logging import get_logger

logger = get_logger(__name__)

_DECODER = json.JSONDecoder()


def _span_end(text: str, start: int) -> int | None:
    """Index just past the brace that closes the one at ``start``; None if it never closes.

    Braces inside JSON strings do not count.
    """

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i + 1
    return None


def find_json_objects(text: str) -> list[dict[str, Any]]:
    """Return every top-level JSON object embedded in ``text``, in order.

    A brace span that does not decode (prose such as ``{placeholder}``, or a broken object) is
    skipped as a whole: nothing nested inside it is reported. Objects nested inside a decoded
    object are not reported separately either.
    """

    if not text:
        return []

    found: list[dict[str, Any]] = []
    i = text.find("{")
    while i != -1:
        try:
            obj, end = _DECODER.raw_decode(text, i)
        except json.JSONDecodeError:
            span_end = _span_end(text, i)
            if span_end is None:
                break
            i = text.find("{", span_end)
            continue
        if isinstance(obj, dict):
            found.append(obj)
        i = text.find("{", end)

    logger.debug("find_json_objects: %d object(s) in %d chars", len(found), len(text))
    return found
