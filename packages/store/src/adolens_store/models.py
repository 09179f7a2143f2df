"""Review history data models.

Decoupled from adolens_core so the store layer can be used independently
and adolens_core has no knowledge of persistence concerns.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone


@dataclass
class IssueRecord:
    """A single review issue persisted to the store."""

    file: str
    line: str
    severity: str
    category: str
    title: str


@dataclass
class ReviewRecord:
    """One completed review pass.

    Created by the CLI from the pass's ReviewStats and rendered issues.
    ``repo`` is ``org/project/repo`` when the page address resolved to a pull
    request, otherwise empty.
    """

    page_url: str
    repo: str
    pr_number: int | None
    reviewer_model: str
    scope: str
    files: int = 0
    critical: int = 0
    warnings: int = 0
    suggestions: int = 0
    reviewed_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    issues: list[IssueRecord] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.critical + self.warnings + self.suggestions

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> ReviewRecord:
        return cls(
            page_url=d.get("page_url", ""),
            repo=d.get("repo", ""),
            pr_number=d.get("pr_number"),
            reviewer_model=d.get("reviewer_model", ""),
            scope=d.get("scope", ""),
            files=d.get("files", 0),
            critical=d.get("critical", 0),
            warnings=d.get("warnings", 0),
            suggestions=d.get("suggestions", 0),
            reviewed_at=d.get("reviewed_at", ""),
            issues=[
                IssueRecord(
                    file=i.get("file", ""),
                    line=str(i.get("line", "")),
                    severity=i.get("severity", "suggestion"),
                    category=i.get("category", "general"),
                    title=i.get("title", ""),
                )
                for i in d.get("issues", [])
            ],
        )
