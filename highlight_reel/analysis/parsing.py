"""Recover JSON payloads from free-text LLM responses.

Models often wrap JSON in prose or markdown fences. Both parsers take the
greedy first-``{``-to-last-``}`` (or ``[``..``]``) substring and parse that.
"""

from __future__ import annotations

import json
import re
from typing import Any

from highlight_reel.analysis.models import ConversationContext, HighlightCandidate
from highlight_reel.errors import ContextParseError, HighlightParseError

_OBJECT_RE = re.compile(r"\{[\s\S]*\}")
_ARRAY_RE = re.compile(r"\[[\s\S]*\]")


def parse_conversation_context(raw: str) -> ConversationContext:
    """Parse the context-extraction response.

    Raises:
        ContextParseError: If no JSON object can be found or decoded.
    """
    match = _OBJECT_RE.search(raw.strip())
    if match is None:
        raise ContextParseError("Failed to parse conversation context JSON: no object found")
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise ContextParseError(f"Failed to parse conversation context JSON: {e}") from e
    if not isinstance(data, dict):
        raise ContextParseError("Failed to parse conversation context JSON: not an object")
    return ConversationContext.from_dict(data)


def parse_highlight_candidates(raw: str) -> list[HighlightCandidate]:
    """Parse a highlight-detection response into candidates.

    Items that are not objects or have no usable ``quote`` are skipped.

    Raises:
        HighlightParseError: If no JSON array can be found or decoded.
    """
    match = _ARRAY_RE.search(raw.strip())
    if match is None:
        raise HighlightParseError("No JSON array in highlight response")
    try:
        data: Any = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise HighlightParseError(f"Invalid highlight JSON: {e}") from e

    candidates: list[HighlightCandidate] = []
    for item in data:
        if not isinstance(item, dict):
            continue
        quote = item.get("quote")
        if not isinstance(quote, str) or not quote.strip():
            continue
        candidates.append(HighlightCandidate(quote=quote, reason=str(item.get("reason") or "")))
    return candidates
