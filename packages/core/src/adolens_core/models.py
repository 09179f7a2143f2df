"""Data types shared across the extraction and review pipeline."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

SCOPES = ("current", "all", "selected")
DEPTHS = ("quick", "standard", "thorough")
SEVERITIES = ("critical", "warning", "suggestion")
RISK_LEVELS = ("low", "medium", "high")
FOCUS_AREAS = ("bugs", "security", "performance", "style", "naming", "docs", "tests")

_LEADING_LINE_RE = re.compile(r"\s*([0-9]{1,9})(?![0-9])")


@dataclass(frozen=True)
class RepositoryContext:
    """Identity of the pull request behind the current page address."""

    organization: str
    project: str
    repository: str
    change_request_id: int
    is_legacy_host: bool = False


@dataclass(frozen=True)
class LineChange:
    line: int
    content: str


@dataclass(frozen=True)
class ChangeRecord:
    """One file's worth of new/changed code, produced by a single extraction strategy.

    API-sourced records carry ``original_content``/``new_content``; page-scraped
    records carry ``content`` and, when lines could be classified, ``additions``.
    ``element`` is an opaque page node used for inline annotations.
    """

    filename: str
    content: str = ""
    original_content: str | None = None
    new_content: str | None = None
    additions: tuple[LineChange, ...] = ()
    deletions: tuple[LineChange, ...] = ()
    has_new_code: bool = False
    change_type: str = "edit"  # "add" | "edit" | "delete"
    source: str = ""
    element: Any = field(default=None, compare=False, repr=False)

    @property
    def is_full_file(self) -> bool:
        return self.new_content is not None

    @property
    def size(self) -> int:
        return len(self.new_content if self.is_full_file else self.content)


@dataclass(frozen=True)
class ReviewSettings:
    api_key: str
    model_id: str = ""
    depth: str = "standard"
    focus_areas: frozenset[str] = frozenset({"bugs", "security", "performance", "style"})
    provider: str = "gemini"

    @classmethod
    def from_message(cls, data: dict) -> ReviewSettings:
        """Build settings from the ``startReview`` message shape.

        ``{"apiKey": ..., "model": ..., "reviewDepth": ..., "focusAreas": {"bugs": true, ...}}``
        """
        focus = data.get("focusAreas") or {}
        return cls(
            api_key=data.get("apiKey") or "",
            model_id=data.get("model") or "",
            depth=data.get("reviewDepth") or "standard",
            focus_areas=frozenset(area for area in FOCUS_AREAS if focus.get(area)),
            provider=data.get("provider") or "gemini",
        )


@dataclass
class ChangeSummary:
    description: str = ""
    main_changes: list[str] = field(default_factory=list)
    new_exports: list[str] = field(default_factory=list)
    risk_level: str = "low"


@dataclass
class Issue:
    line: int | str | None
    severity: str
    category: str = ""
    title: str = ""
    description: str = ""
    suggestion: str | None = None

    @property
    def line_number(self) -> int | None:
        """Leading integer of ``line`` ("10-15" → 10), or None."""
        if isinstance(self.line, bool):
            return None
        if isinstance(self.line, int):
            return self.line
        if isinstance(self.line, str):
            match = _LEADING_LINE_RE.match(self.line)
            return int(match.group(1)) if match else None
        return None


@dataclass
class ReviewResult:
    summary: ChangeSummary | None = None
    issues: list[Issue] = field(default_factory=list)


@dataclass
class ReviewStats:
    files: int = 0
    critical: int = 0
    warnings: int = 0
    suggestions: int = 0

    @property
    def total(self) -> int:
        return self.critical + self.warnings + self.suggestions

    def add(self, issues: list[Issue]) -> None:
        for issue in issues:
            if issue.severity == "critical":
                self.critical += 1
            elif issue.severity == "warning":
                self.warnings += 1
            else:
                self.suggestions += 1
