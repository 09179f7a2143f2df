"""Inbound command protocol.

Requests are dicts with an ``action`` key::

    {"action": "ping"}
    {"action": "startReview", "type": "current", "settings": {"apiKey": ..., ...}}
    {"action": "clearComments"}

Every request gets a reply dict; nothing escapes ``handle``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from adolens_core.models import ReviewSettings

if TYPE_CHECKING:
    from adolens_core.page.model import PageModel
    from adolens_core.reviewer import ReviewOrchestrator

logger = logging.getLogger(__name__)


class CommandHandler:
    def __init__(self, orchestrator: ReviewOrchestrator, page: PageModel):
        self.orchestrator = orchestrator
        self.page = page

    def handle(self, request: dict) -> dict:
        action = request.get("action")
        try:
            if action == "ping":
                return {"success": True}
            if action == "startReview":
                settings = ReviewSettings.from_message(request.get("settings") or {})
                scope = request.get("type") or "current"
                return self.orchestrator.start_review(scope, settings, self.page).to_reply()
            if action == "clearComments":
                self.orchestrator.presenter.clear(self.page)
                return {"success": True}
        except Exception as e:
            logger.exception("Command %s failed", action)
            return {"success": False, "error": str(e)}

        logger.warning("Unknown action: %s", action)
        return {"success": False, "error": f"Unknown action: {action}"}
