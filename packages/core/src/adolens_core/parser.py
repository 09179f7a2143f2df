"""Lenient decoding of the review model's reply.

The model is asked for a bare JSON object but is not guaranteed to produce
one: replies arrive wrapped in code fences, prefixed with prose, truncated,
or in the older bare-array shape. Each decode step is a pure function that
returns a ReviewResult or None; the first step that succeeds wins and the
public entry point never raises.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable

from adolens_core.models import RISK_LEVELS, SEVERITIES, ChangeSummary, Issue, ReviewResult

logger = logging.getLogger(__name__)

_OPEN_FENCE_RE = re.compile(r"^```[\w-]*[ \t]*\n?")
_CLOSE_FENCE_RE = re.compile(r"\n?```$")
_OBJECT_SPAN_RE = re.compile(r"\{[\s\S]*\}")
_ARRAY_SPAN_RE = re.compile(r"\[[\s\S]*\]")


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v is not None]


def _to_summary(value: Any) -> ChangeSummary | None:
    if not isinstance(value, dict):
        return None
    risk = str(value.get("riskLevel") or "low").lower()
    return ChangeSummary(
        description=str(value.get("description") or ""),
        main_changes=_str_list(value.get("mainChanges")),
        new_exports=_str_list(value.get("newExports")),
        risk_level=risk if risk in RISK_LEVELS else "low",
    )


def _to_issue(item: dict) -> Issue:
    severity = str(item.get("severity") or "suggestion").lower()
    line = item.get("line")
    if not isinstance(line, (int, str)) or isinstance(line, bool):
        line = None
    suggestion = item.get("suggestion")
    return Issue(
        line=line,
        severity=severity if severity in SEVERITIES else "suggestion",
        category=str(item.get("category") or "general"),
        title=str(item.get("title") or ""),
        description=str(item.get("description") or ""),
        suggestion=str(suggestion) if suggestion else None,
    )


def _to_issues(value: Any) -> list[Issue]:
    if not isinstance(value, list):
        return []
    return [_to_issue(item) for item in value if isinstance(item, dict)]


def _from_decoded(value: Any) -> ReviewResult:
    if isinstance(value, list):
        return ReviewResult(summary=None, issues=_to_issues(value))
    if isinstance(value, dict):
        return ReviewResult(summary=_to_summary(value.get("summary")), issues=_to_issues(value.get("issues")))
    return ReviewResult()


def strip_fences(raw: str) -> str:
    """Remove one outer ```/```json fence; fences inside string values are left alone."""
    cleaned = _OPEN_FENCE_RE.sub("", raw.strip())
    return _CLOSE_FENCE_RE.sub("", cleaned).strip()


def decode_fenced(raw: str) -> ReviewResult | None:
    try:
        return _from_decoded(json.loads(strip_fences(raw)))
    except ValueError:
        return None


def decode_object_span(raw: str) -> ReviewResult | None:
    match = _OBJECT_SPAN_RE.search(raw)
    if not match:
        return None
    try:
        value = json.loads(match.group(0))
    except ValueError:
        return None
    # A lone issue object embedded in an array is not a review reply.
    if not isinstance(value, dict) or not ("summary" in value or "issues" in value):
        return None
    return _from_decoded(value)


def decode_array_span(raw: str) -> ReviewResult | None:
    match = _ARRAY_SPAN_RE.search(raw)
    if not match:
        return None
    try:
        value = json.loads(match.group(0))
    except ValueError:
        return None
    if not isinstance(value, list):
        return None
    return ReviewResult(summary=None, issues=_to_issues(value))


DECODE_STEPS: tuple[Callable[[str], ReviewResult | None], ...] = (
    decode_fenced,
    decode_object_span,
    decode_array_span,
)


def parse_review_response(raw: str | None) -> ReviewResult:
    """Decode the model's reply into a ReviewResult. Never raises."""
    text = raw or ""
    for step in DECODE_STEPS:
        try:
            result = step(text)
        except RecursionError:
            result = None
        if result is not None:
            return result

    logger.warning("Failed to parse review response as JSON: %s", text[:200])
    return ReviewResult()
