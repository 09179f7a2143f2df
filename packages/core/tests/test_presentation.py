"""Tests for the review panel, inline annotations and notifications."""

from io import StringIO

import pytest
from rich.console import Console

from adolens_core.models import ChangeRecord, ChangeSummary, Issue, ReviewResult
from adolens_core.page.soup import SoupPage
from adolens_core.presentation import Notifier, Presenter, ReviewPanel, format_issue_comment

DIFF_HTML = """
<div class="repos-diff-contents">
  <div class="code-line">one()</div>
  <div class="code-line">two()</div>
  <div class="code-line">three()</div>
</div>
"""


def _console():
    return Console(file=StringIO(), width=120, force_terminal=False)


def _output(console):
    return console.file.getvalue()


def _issue(severity="warning", line=2, title="Check this"):
    return Issue(line=line, severity=severity, category="bug", title=title, description="desc", suggestion="fix()")


class TestNotifier:
    def test_new_notification_replaces_current(self):
        notifier = Notifier(_console(), clock=lambda: 0.0)
        notifier.show("first")
        notifier.show("second", "success")
        assert notifier.current.message == "second"
        assert notifier.current.kind == "success"

    def test_expires_after_timeout(self):
        now = [0.0]
        notifier = Notifier(_console(), clock=lambda: now[0])
        notifier.show("hello")
        now[0] = 3.9
        assert notifier.current is not None
        now[0] = 4.0
        assert notifier.current is None

    def test_printed_to_console(self):
        console = _console()
        Notifier(console).show("Review complete")
        assert "Review complete" in _output(console)


class TestReviewPanel:
    def _panel(self):
        panel = ReviewPanel()
        panel.add_summary("a.ts", ChangeSummary(description="Adds a"))
        panel.add_issue("a.ts", _issue("critical"))
        panel.add_issue("a.ts", _issue("warning"))
        panel.add_issue("b.ts", _issue("warning"))
        panel.add_issue("b.ts", _issue("suggestion"))
        return panel

    def test_counts(self):
        assert self._panel().counts() == {"all": 5, "summary": 1, "critical": 1, "warning": 2, "suggestion": 1}

    def test_filter_shows_matching_entries(self):
        panel = self._panel()
        panel.set_filter("warning")
        assert [e.severity for e in panel.shown_entries()] == ["warning", "warning"]
        panel.set_filter("summary")
        assert [e.kind for e in panel.shown_entries()] == ["summary"]
        panel.set_filter("all")
        assert len(panel.shown_entries()) == 5

    def test_counts_follow_dismissals(self):
        panel = self._panel()
        warning = next(e for e in panel.entries if e.severity == "warning")
        panel.dismiss(warning)
        counts = panel.set_filter("warning")
        assert counts["warning"] == 1
        assert counts["all"] == 4

    def test_unknown_filter(self):
        with pytest.raises(ValueError):
            ReviewPanel().set_filter("major")

    def test_filter_labels(self):
        assert self._panel().filter_labels()[0] == "All (5)"

    def test_render(self):
        console = _console()
        console.print(self._panel().render())
        out = _output(console)
        assert "AI Code Review" in out
        assert "Adds a" in out
        assert "CRITICAL" in out
        assert "b.ts:2" in out


class TestPresenter:
    def test_panel_is_lazy_singleton(self):
        presenter = Presenter(console=_console())
        assert not presenter.has_panel
        assert presenter.panel is presenter.panel

    def test_display_adds_entries_and_annotations(self):
        page = SoupPage(DIFF_HTML)
        container = page.query(".repos-diff-contents")
        record = ChangeRecord(filename="a.ts", content="x", element=container)
        result = ReviewResult(summary=ChangeSummary(description="d"), issues=[_issue(line="2-3")])

        presenter = Presenter(console=_console())
        presenter.display(record, result, page)

        assert presenter.panel.counts()["all"] == 2
        assert presenter.panel.visible
        lines = page.query_all(".code-line")
        assert page.has_annotation(lines[1])
        assert not page.has_annotation(lines[0])

    def test_out_of_range_line_skipped(self):
        page = SoupPage(DIFF_HTML)
        record = ChangeRecord(filename="a.ts", content="x", element=page.query(".repos-diff-contents"))
        Presenter(console=_console()).display(record, ReviewResult(issues=[_issue(line=99)]), page)
        assert "ai-review-comment" not in page.render()

    def test_line_annotated_once(self):
        page = SoupPage(DIFF_HTML)
        record = ChangeRecord(filename="a.ts", content="x", element=page.query(".repos-diff-contents"))
        result = ReviewResult(issues=[_issue(line=1, title="first"), _issue(line=1, title="second")])
        Presenter(console=_console()).display(record, result, page)
        assert page.render().count("ai-review-comment") == 1

    def test_record_without_element_not_annotated(self):
        page = SoupPage(DIFF_HTML)
        presenter = Presenter(console=_console())
        presenter.display(ChangeRecord(filename="/a.ts", new_content="x"), ReviewResult(issues=[_issue()]), page)
        assert "ai-review-comment" not in page.render()
        assert presenter.panel.counts()["warning"] == 1

    def test_non_numeric_line_falls_back_to_first(self):
        page = SoupPage(DIFF_HTML)
        record = ChangeRecord(filename="a.ts", content="x", element=page.query(".repos-diff-contents"))
        Presenter(console=_console()).display(record, ReviewResult(issues=[_issue(line="top")]), page)
        assert page.has_annotation(page.query_all(".code-line")[0])

    def test_unparseable_line_falls_back_to_first(self):
        page = SoupPage(DIFF_HTML)
        record = ChangeRecord(filename="a.ts", content="x", element=page.query(".repos-diff-contents"))
        presenter = Presenter(console=_console())
        presenter.display(record, ReviewResult(issues=[_issue(line="²")]), page)
        assert page.has_annotation(page.query_all(".code-line")[0])
        assert presenter.panel.counts()["warning"] == 1

    def test_clear(self):
        console = _console()
        page = SoupPage(DIFF_HTML)
        record = ChangeRecord(filename="a.ts", content="x", element=page.query(".repos-diff-contents"))
        presenter = Presenter(console=console)
        presenter.display(record, ReviewResult(issues=[_issue()]), page)

        assert presenter.clear(page) == 1
        assert not presenter.has_panel
        assert "ai-review-comment" not in page.render()
        assert "All AI comments cleared" in _output(console)
        assert presenter.notifier.current.message.endswith("All AI comments cleared")


def test_format_issue_comment():
    body = format_issue_comment("src/a.ts", _issue("critical", line=12))
    assert body.startswith("**🔴 CRITICAL** - bug")
    assert "`src/a.ts:12`" in body
    assert "```\nfix()\n```" in body
