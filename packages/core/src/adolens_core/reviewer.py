"""Review pass orchestration: extract, review each record, render, report."""

from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional

from adolens_core.exceptions import ConcurrentReviewRejected, ModelCallFailed
from adolens_core.extraction.strategies import READY_SELECTOR
from adolens_core.models import ReviewStats
from adolens_core.providers.anthropic import AnthropicReviewer
from adolens_core.providers.gemini import GeminiReviewer
from adolens_core.providers.openai import OpenAIReviewer

if TYPE_CHECKING:
    from adolens_core.extraction.chain import ExtractionChain
    from adolens_core.models import ReviewSettings
    from adolens_core.page.model import PageModel
    from adolens_core.presentation import Presenter
    from adolens_core.providers.base import BaseReviewer

logger = logging.getLogger(__name__)

NO_CHANGES_MESSAGE = "No code changes found to review"


class ReviewState(enum.Enum):
    IDLE = "idle"
    REVIEWING = "reviewing"


@dataclass
class ReviewOutcome:
    """Result of one review pass, convertible to the command protocol reply."""

    success: bool
    issue_count: int = 0
    error: str | None = None

    @classmethod
    def failed(cls, error: str) -> ReviewOutcome:
        return cls(success=False, error=error)

    def to_reply(self) -> dict:
        if self.success:
            return {"success": True, "issueCount": self.issue_count}
        return {"success": False, "error": self.error}


PROVIDER_CLASSES = {
    "gemini": GeminiReviewer,
    "openai": OpenAIReviewer,
    "anthropic": AnthropicReviewer,
}


def default_model(provider: str) -> str:
    return PROVIDER_CLASSES[provider].MODEL


def get_reviewer(settings: ReviewSettings, config: Optional[dict] = None) -> BaseReviewer:
    """Instantiate the provider named by ``settings.provider``."""
    config = config or {}
    reviewer_cls = PROVIDER_CLASSES.get(settings.provider)
    if reviewer_cls is None:
        raise ValueError(
            f"Unknown model provider: {settings.provider!r}. Choose one of: {', '.join(PROVIDER_CLASSES)}."
        )
    return reviewer_cls(
        api_key=settings.api_key,
        max_retries=config.get("max_retries"),
        timeout=config.get("model_timeout", 120.0),
    )


class ReviewOrchestrator:
    """Runs at most one review pass at a time.

    ``stats_sink`` receives the final ReviewStats of a successful pass; it is
    how callers persist statistics without this package depending on a store.
    """

    def __init__(
        self,
        chain: ExtractionChain,
        presenter: Presenter,
        reviewer_factory: Callable[[ReviewSettings], BaseReviewer] = get_reviewer,
        stats_sink: Optional[Callable[[ReviewStats], None]] = None,
        wait_timeout: float = 10.0,
    ):
        self.chain = chain
        self.presenter = presenter
        self.reviewer_factory = reviewer_factory
        self.stats_sink = stats_sink
        self.wait_timeout = wait_timeout
        self._state = ReviewState.IDLE
        self._lock = threading.Lock()

    @property
    def state(self) -> ReviewState:
        return self._state

    def _begin(self) -> None:
        with self._lock:
            if self._state is ReviewState.REVIEWING:
                raise ConcurrentReviewRejected()
            self._state = ReviewState.REVIEWING

    def _finish(self) -> None:
        with self._lock:
            self._state = ReviewState.IDLE

    def start_review(self, scope: str, settings: ReviewSettings, page: PageModel) -> ReviewOutcome:
        try:
            self._begin()
        except ConcurrentReviewRejected as e:
            logger.info("Rejected review request: %s", e.message)
            return ReviewOutcome.failed(e.message)

        try:
            return self._run(scope, settings, page)
        except ModelCallFailed as e:
            self.presenter.show_panel()
            self.presenter.notify(f"❌ Review failed: {e.message}", "error")
            return ReviewOutcome.failed(e.message)
        except Exception as e:
            logger.exception("Review pass failed")
            message = str(e) or type(e).__name__
            self.presenter.notify(f"❌ Review failed: {message}", "error")
            return ReviewOutcome.failed(message)
        finally:
            self._finish()

    def _run(self, scope: str, settings: ReviewSettings, page: PageModel) -> ReviewOutcome:
        self.presenter.notify("🔍 Starting AI code review...", "info")
        page.wait_for(READY_SELECTOR, timeout=self.wait_timeout)

        records = self.chain.extract(scope, page)
        if not records:
            self.presenter.notify(NO_CHANGES_MESSAGE, "error")
            return ReviewOutcome.failed(NO_CHANGES_MESSAGE)

        self.presenter.notify(f"📝 Reviewing {len(records)} file(s)...", "info")
        reviewer = self.reviewer_factory(settings)
        stats = ReviewStats()

        for record in records:
            result = reviewer.review(record, settings)
            stats.files += 1
            stats.add(result.issues)
            logger.info("%s: %d issue(s)", record.filename, len(result.issues))
            if result.summary is not None or result.issues:
                self.presenter.display(record, result, page)

        self.presenter.show_panel()
        if self.stats_sink is not None:
            self.stats_sink(stats)

        self.presenter.notify(f"✅ Review complete! Found {stats.total} issue(s)", "success")
        return ReviewOutcome(success=True, issue_count=stats.total)
