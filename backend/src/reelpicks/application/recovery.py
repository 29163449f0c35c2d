"""Response recovery — turns raw backend text into recommendation records.

Strict JSON first.  When that fails (models sometimes truncate long
generations mid-object) the ``recommendations`` array is scanned element
by element and the longest prefix of complete objects is kept; everything
after the first broken element is discarded.  The scan decodes whole JSON
values, so it does not depend on the order of fields inside a record.
"""

from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass, field
from typing import Any

import structlog

from reelpicks.domain.entities import RecommendationRecord, RecommendationResult
from reelpicks.domain.enums import ContentKind
from reelpicks.domain.exceptions import InvalidResponseError
from reelpicks.shared.observability.metrics import RECORDS_DROPPED, RESPONSE_RECOVERY

logger = structlog.get_logger(__name__)

_FENCE_OPEN = re.compile(r"^```(?:json)?", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"```$")
_RECOMMENDATIONS_KEY = re.compile(r'"recommendations"\s*:\s*\[')
_SEARCH_TITLE = re.compile(r'"searchTitle"\s*:\s*("(?:[^"\\]|\\.)*")')

_decoder = json.JSONDecoder()


@dataclass
class RecoveredPayload:
    """Unvalidated items pulled out of a response."""

    items: list[Any] = field(default_factory=list)
    search_title: str | None = None
    salvaged: bool = False


# ═══════════════════════════════════════════════════════════════
#  Parsing
# ═══════════════════════════════════════════════════════════════
def strip_code_fence(text: str) -> str:
    """Remove a leading ```json / ``` marker and a trailing ``` marker."""
    text = text.strip()
    text = _FENCE_OPEN.sub("", text, count=1)
    text = _FENCE_CLOSE.sub("", text, count=1)
    return text.strip()


def parse_strict(text: str) -> RecoveredPayload | None:
    """Plain ``json.loads``; ``None`` when the text is not valid JSON."""
    try:
        data = json.loads(text)
    except ValueError:
        return None

    if isinstance(data, list):
        return RecoveredPayload(items=data)
    if not isinstance(data, dict):
        return RecoveredPayload()

    items = data.get("recommendations")
    title = data.get("searchTitle")
    return RecoveredPayload(
        items=items if isinstance(items, list) else [],
        search_title=title if isinstance(title, str) and title else None,
    )


def salvage_records(text: str) -> RecoveredPayload | None:
    """Keep the longest prefix of complete objects in the recommendations array.

    Returns ``None`` when not a single complete object can be found.
    """
    match = _RECOMMENDATIONS_KEY.search(text)
    if match is None:
        return None

    items: list[Any] = []
    pos = match.end()
    closed = False
    trailing_at_end = False

    while True:
        pos = _skip_whitespace(text, pos)
        if pos >= len(text):
            break
        if text[pos] == "]":
            closed = True
            break
        try:
            value, end = _decoder.raw_decode(text, pos)
        except ValueError:
            break  # truncation point
        if not isinstance(value, dict):
            break
        items.append(value)

        pos = _skip_whitespace(text, end)
        if pos < len(text) and text[pos] == ",":
            pos += 1
            continue
        if pos < len(text) and text[pos] == "]":
            closed = True
        else:
            trailing_at_end = pos >= len(text)
        break

    # An unclosed array whose last object runs to the end of the input may
    # have borrowed the enclosing object's closing brace.
    if not closed and trailing_at_end and items:
        items.pop()

    if not items:
        return None

    return RecoveredPayload(
        items=items,
        search_title=_salvage_search_title(text[: match.start()]),
        salvaged=True,
    )


def recover_payload(raw_text: str) -> RecoveredPayload:
    """Strict parse, then fence stripping, then structural salvage.

    Raises:
        InvalidResponseError: Nothing parseable or salvageable.
    """
    payload = parse_strict(raw_text)
    if payload is not None:
        RESPONSE_RECOVERY.labels(result="strict").inc()
        return payload

    logger.warning("response_parse_failed", raw_length=len(raw_text))

    cleaned = strip_code_fence(raw_text)
    payload = parse_strict(cleaned)
    if payload is not None:
        RESPONSE_RECOVERY.labels(result="strict").inc()
        return payload

    payload = salvage_records(cleaned)
    if payload is None:
        RESPONSE_RECOVERY.labels(result="failed").inc()
        logger.error("response_salvage_failed", preview=cleaned[:200])
        raise InvalidResponseError()

    RESPONSE_RECOVERY.labels(result="salvaged").inc()
    logger.info("response_salvaged", kept=len(payload.items))
    return payload


# ═══════════════════════════════════════════════════════════════
#  Validation
# ═══════════════════════════════════════════════════════════════
def _is_numeric(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def to_record(item: Any) -> RecommendationRecord | None:
    """Build a record from one raw item, or ``None`` if it fails validation."""
    if not isinstance(item, dict):
        return None
    if not (_non_empty_str(item.get("id")) and _non_empty_str(item.get("title"))):
        return None
    if not _is_numeric(item.get("year")):
        return None
    try:
        kind = ContentKind(item.get("type"))
    except ValueError:
        return None

    genres = item.get("genres")
    director = item.get("director")
    explanation = item.get("explanation")
    return RecommendationRecord(
        id=item["id"],
        title=item["title"],
        year=item["year"],
        type=kind,
        director=str(director) if director else "Unknown",
        genres=[str(g) for g in genres] if isinstance(genres, list) else [],
        explanation=str(explanation) if explanation else "",
    )


def validate_records(items: list[Any]) -> list[RecommendationRecord]:
    """Keep valid records, silently drop the rest."""
    records = [r for r in (to_record(item) for item in items) if r is not None]
    dropped = len(items) - len(records)
    if dropped:
        RECORDS_DROPPED.inc(dropped)
        logger.info("recommendation_records_dropped", dropped=dropped, kept=len(records))
    return records


def parse_recommendations(raw_text: str) -> RecommendationResult:
    """Recover and validate a backend response.

    Raises:
        InvalidResponseError: No valid record survived.
    """
    payload = recover_payload(raw_text)
    records = validate_records(payload.items)
    if not records:
        logger.error("response_no_valid_records", received=len(payload.items))
        raise InvalidResponseError()
    return RecommendationResult(
        recommendations=records,
        search_title=payload.search_title,
        salvaged=payload.salvaged,
    )


# ── Internals ────────────────────────────────────────────────
def _skip_whitespace(text: str, pos: int) -> int:
    while pos < len(text) and text[pos] in " \t\r\n":
        pos += 1
    return pos


def _salvage_search_title(prefix: str) -> str | None:
    match = _SEARCH_TITLE.search(prefix)
    if match is None:
        return None
    try:
        title = json.loads(match.group(1))
    except ValueError:
        return None
    return title or None
