"""Tests for the inbound command protocol."""

from unittest.mock import MagicMock

from adolens_core.commands import CommandHandler
from adolens_core.reviewer import ReviewOutcome


def _handler():
    orchestrator = MagicMock()
    orchestrator.start_review.return_value = ReviewOutcome(success=True, issue_count=3)
    page = MagicMock()
    return CommandHandler(orchestrator, page), orchestrator, page


def test_ping():
    handler, _, _ = _handler()
    assert handler.handle({"action": "ping"}) == {"success": True}


def test_start_review():
    handler, orchestrator, page = _handler()
    reply = handler.handle(
        {
            "action": "startReview",
            "type": "all",
            "settings": {"apiKey": "k", "reviewDepth": "quick", "focusAreas": {"bugs": True}},
        }
    )

    assert reply == {"success": True, "issueCount": 3}
    scope, settings, passed_page = orchestrator.start_review.call_args.args
    assert scope == "all"
    assert settings.api_key == "k"
    assert settings.depth == "quick"
    assert settings.focus_areas == frozenset({"bugs"})
    assert passed_page is page


def test_start_review_defaults_to_current_scope():
    handler, orchestrator, _ = _handler()
    handler.handle({"action": "startReview", "settings": {"apiKey": "k"}})
    assert orchestrator.start_review.call_args.args[0] == "current"


def test_failed_outcome_reply():
    handler, orchestrator, _ = _handler()
    orchestrator.start_review.return_value = ReviewOutcome(success=False, error="Review already in progress")
    reply = handler.handle({"action": "startReview", "settings": {}})
    assert reply == {"success": False, "error": "Review already in progress"}


def test_clear_comments():
    handler, orchestrator, page = _handler()
    assert handler.handle({"action": "clearComments"}) == {"success": True}
    orchestrator.presenter.clear.assert_called_once_with(page)


def test_unknown_action():
    handler, _, _ = _handler()
    reply = handler.handle({"action": "explode"})
    assert reply["success"] is False
    assert "explode" in reply["error"]


def test_unexpected_exception_becomes_reply():
    handler, orchestrator, _ = _handler()
    orchestrator.start_review.side_effect = ValueError("Unknown review scope: 'x'")
    reply = handler.handle({"action": "startReview", "type": "x", "settings": {}})
    assert reply == {"success": False, "error": "Unknown review scope: 'x'"}
