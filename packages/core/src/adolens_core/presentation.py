"""Terminal presentation of review results.

One ReviewPanel per Presenter collects per-file summaries and issues. Filter
counters are recomputed from the panel's current entries every time they are
read, so dismissing an entry is reflected without any bookkeeping. Inline
annotations are placed on the page by positional line index and are
best-effort only.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

if TYPE_CHECKING:
    from adolens_core.models import ChangeRecord, ChangeSummary, Issue, ReviewResult
    from adolens_core.page.model import PageModel

logger = logging.getLogger(__name__)

FILTERS = ("all", "summary", "critical", "warning", "suggestion")
NOTIFICATION_TIMEOUT = 4.0
INLINE_LINE_SELECTOR = '.code-line, .diff-line, [class*="line-"]'

SEVERITY_ICON = {"critical": "🔴", "warning": "🟡", "suggestion": "🔵"}
SEVERITY_STYLE = {"critical": "red", "warning": "yellow", "suggestion": "blue"}
RISK_ICON = {"low": "🟢", "medium": "🟡", "high": "🔴"}
CATEGORY_ICON = {
    "bug": "🐛",
    "security": "🔒",
    "performance": "⚡",
    "style": "🎨",
    "naming": "📝",
    "documentation": "📚",
    "testing": "🧪",
    "unused-export": "📦",
    "incomplete": "🚧",
    "unused": "⚠️",
    "orphan": "👻",
    "dead-code": "💀",
    "missing-import": "📥",
    "error-handling": "🛡️",
}
_NOTIFICATION_STYLE = {"info": "cyan", "success": "green", "error": "red", "warning": "yellow"}
_FILTER_LABELS = {
    "all": "All",
    "summary": "Summary",
    "critical": "Critical",
    "warning": "Warning",
    "suggestion": "Suggestions",
}


def format_issue_comment(filename: str, issue: Issue) -> str:
    """Markdown body for posting an issue as a pull request comment."""
    label = {"critical": "🔴 CRITICAL", "warning": "⚠️ WARNING", "suggestion": "💡 SUGGESTION"}.get(
        issue.severity, "AI REVIEW"
    )
    location = f"{filename}:{issue.line}" if issue.line else filename
    parts = [f"**{label}** - {issue.category}", f"`{location}`", issue.title, issue.description]
    if issue.suggestion:
        parts.append(f"**Suggestion:**\n```\n{issue.suggestion}\n```")
    parts.append("---\n_Generated by AI Code Reviewer_")
    return "\n\n".join(p for p in parts if p)


# ---------------------------------------------------------------------- #
# Notifications                                                            #
# ---------------------------------------------------------------------- #


@dataclass
class Notification:
    message: str
    kind: str
    shown_at: float


class Notifier:
    """Single-slot notification area: showing a message replaces the visible one."""

    def __init__(
        self,
        console: Console | None = None,
        timeout: float = NOTIFICATION_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.console = console or Console()
        self.timeout = timeout
        self._clock = clock
        self._current: Notification | None = None

    def show(self, message: str, kind: str = "info") -> Notification:
        self._current = Notification(message=message, kind=kind, shown_at=self._clock())
        style = _NOTIFICATION_STYLE.get(kind, "white")
        self.console.print(message, style=style, markup=False, highlight=False)
        return self._current

    @property
    def current(self) -> Notification | None:
        """The visible notification, or None once it has auto-dismissed."""
        if self._current is not None and self._clock() - self._current.shown_at >= self.timeout:
            self._current = None
        return self._current

    def dismiss(self) -> None:
        self._current = None


# ---------------------------------------------------------------------- #
# Panel                                                                    #
# ---------------------------------------------------------------------- #


@dataclass
class PanelEntry:
    kind: str  # "summary" | "issue"
    filename: str
    summary: ChangeSummary | None = None
    issue: Issue | None = None

    @property
    def severity(self) -> str | None:
        return self.issue.severity if self.issue is not None else None


class ReviewPanel:
    def __init__(self):
        self.entries: list[PanelEntry] = []
        self.active_filter = "all"
        self.visible = False

    def add_summary(self, filename: str, summary: ChangeSummary) -> PanelEntry:
        entry = PanelEntry(kind="summary", filename=filename, summary=summary)
        self.entries.append(entry)
        return entry

    def add_issue(self, filename: str, issue: Issue) -> PanelEntry:
        entry = PanelEntry(kind="issue", filename=filename, issue=issue)
        self.entries.append(entry)
        return entry

    def dismiss(self, entry: PanelEntry) -> None:
        self.entries = [e for e in self.entries if e is not entry]

    def set_filter(self, name: str) -> dict[str, int]:
        if name not in FILTERS:
            raise ValueError(f"Unknown filter: {name!r}. Choose one of: {', '.join(FILTERS)}.")
        self.active_filter = name
        return self.counts()

    def counts(self) -> dict[str, int]:
        summaries = sum(1 for e in self.entries if e.kind == "summary")
        issues = [e for e in self.entries if e.kind == "issue"]
        counts = {"all": summaries + len(issues), "summary": summaries}
        for severity in ("critical", "warning", "suggestion"):
            counts[severity] = sum(1 for e in issues if e.severity == severity)
        return counts

    def filter_labels(self) -> list[str]:
        counts = self.counts()
        return [f"{_FILTER_LABELS[name]} ({counts[name]})" for name in FILTERS]

    def is_shown(self, entry: PanelEntry) -> bool:
        if self.active_filter == "all":
            return True
        if self.active_filter == "summary":
            return entry.kind == "summary"
        return entry.kind == "issue" and entry.severity == self.active_filter

    def shown_entries(self) -> list[PanelEntry]:
        return [e for e in self.entries if self.is_shown(e)]

    def render(self) -> Panel:
        bar = Text()
        for name, label in zip(FILTERS, self.filter_labels()):
            bar.append(f" {label} ", style="bold reverse" if name == self.active_filter else "dim")
        body: list[Any] = [bar, Text("")]
        body.extend(self._render_entry(e) for e in self.shown_entries())
        if len(body) == 2:
            body.append(Text("Nothing to show.", style="dim"))
        return Panel(Group(*body), title="🤖 AI Code Review", border_style="cyan")

    @staticmethod
    def _render_entry(entry: PanelEntry) -> Text:
        text = Text()
        if entry.kind == "summary":
            summary = entry.summary
            risk = summary.risk_level or "low"
            text.append(f"📋 Summary: {entry.filename}  ", style="bold")
            text.append(f"{RISK_ICON.get(risk, '⚪')} {risk.upper()} RISK\n")
            text.append(f"{summary.description or 'No description available'}\n")
            text.append("📝 Main Changes:\n", style="bold")
            for change in summary.main_changes or ["No major changes detected"]:
                text.append(f"  • {change}\n")
            text.append("📦 New Exports: ", style="bold")
            text.append(", ".join(summary.new_exports) if summary.new_exports else "None")
            text.append("\n")
            return text

        issue = entry.issue
        style = SEVERITY_STYLE.get(issue.severity, "white")
        location = f"{entry.filename}:{issue.line}" if issue.line else entry.filename
        text.append(f"{SEVERITY_ICON.get(issue.severity, '⚪')} ")
        text.append(f"{issue.severity.upper()}", style=f"bold {style}")
        text.append(f"  {CATEGORY_ICON.get(issue.category, '📌')} {issue.category}  ")
        text.append(f"{location}\n", style="cyan")
        text.append(f"{issue.title}\n", style="bold")
        text.append(f"{issue.description}\n")
        if issue.suggestion:
            text.append("💡 Suggestion:\n", style="bold")
            text.append(f"{issue.suggestion}\n", style="dim")
        return text


# ---------------------------------------------------------------------- #
# Presenter                                                                #
# ---------------------------------------------------------------------- #


class Presenter:
    """Owns the singleton panel, inline annotations and notifications."""

    def __init__(self, console: Console | None = None, notifier: Notifier | None = None):
        self.console = console or Console()
        self.notifier = notifier or Notifier(self.console)
        self._panel: ReviewPanel | None = None

    @property
    def panel(self) -> ReviewPanel:
        if self._panel is None:
            self._panel = ReviewPanel()
        return self._panel

    @property
    def has_panel(self) -> bool:
        return self._panel is not None

    def notify(self, message: str, kind: str = "info") -> None:
        self.notifier.show(message, kind)

    def display(self, record: ChangeRecord, result: ReviewResult, page: PageModel | None = None) -> None:
        panel = self.panel
        if result.summary is not None:
            panel.add_summary(record.filename, result.summary)
        for issue in result.issues:
            panel.add_issue(record.filename, issue)
            if page is not None and record.element is not None and issue.line:
                self.annotate(page, record.element, issue)
        panel.visible = True

    def annotate(self, page: PageModel, element: Any, issue: Issue) -> bool:
        """Attach ``issue`` to the Nth line element under ``element``; False when it cannot be placed."""
        index = (issue.line_number or 1) - 1
        lines = page.query_all(INLINE_LINE_SELECTOR, element)
        if index < 0 or index >= len(lines):
            logger.debug("No line %s under record element; skipping inline annotation", issue.line)
            return False
        target = lines[index]
        if page.has_annotation(target):
            return False
        page.annotate(target, issue)
        return True

    def show_panel(self) -> None:
        if self._panel is not None and self._panel.visible:
            self.console.print(self._panel.render())

    def clear(self, page: PageModel | None = None) -> int:
        """Remove the panel, inline annotations and notifications; return the number of annotations removed."""
        self._panel = None
        removed = page.clear_annotations() if page is not None else 0
        self.notifier.dismiss()
        self.notify("🗑️ All AI comments cleared", "success")
        return removed
