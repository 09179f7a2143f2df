"""Base reviewer implementing the Template Method pattern.

All providers share the same review algorithm:
    review() → build_prompt()
             → _call_with_retry() → _call_api()   ← only this differs per provider
             → parse_review_response()

Subclasses implement two things only:
  - __init__: validate and store the SDK client / HTTP session
  - _call_api: make one raw API call and return the text response
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from adolens_core.exceptions import ModelCallFailed
from adolens_core.parser import parse_review_response
from adolens_core.prompt import build_prompt

if TYPE_CHECKING:
    from adolens_core.models import ChangeRecord, ReviewResult, ReviewSettings

logger = logging.getLogger(__name__)

# Shared defaults; subclasses may override as class attributes.
_MAX_RETRIES = 1
_MAX_TOKENS = 8192


class BaseReviewer(ABC):
    MODEL: str = ""
    TEMPERATURE: float = 0.3
    MAX_RETRIES: int = _MAX_RETRIES
    MAX_TOKENS: int = _MAX_TOKENS

    def __init__(self, max_retries: int | None = None, timeout: float = 120.0):
        if max_retries is not None:
            self.MAX_RETRIES = max(1, max_retries)
        self.timeout = timeout

    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    def review(self, record: ChangeRecord, settings: ReviewSettings) -> ReviewResult:
        """Review one change record.

        Raises ModelCallFailed when the model cannot be reached; a reply that
        cannot be decoded is never an error and yields an empty result.
        """
        prompt = build_prompt(record, settings)
        logger.info(
            "Reviewing %s (%s extraction, %d chars)",
            record.filename,
            "API" if record.is_full_file else "page",
            record.size,
        )
        raw = self._call_with_retry(prompt, self.model_for(settings))
        return parse_review_response(raw)

    def model_for(self, settings: ReviewSettings) -> str:
        return settings.model_id or self.MODEL

    # ------------------------------------------------------------------ #
    # Abstract, implemented by each provider                              #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def _call_api(self, prompt: str, model: str) -> str:
        """Make a single API call and return the raw text response.

        Should raise ModelCallFailed (or the SDK's own exception) on failure.
        """

    # ------------------------------------------------------------------ #
    # Shared implementations                                               #
    # ------------------------------------------------------------------ #

    def _call_with_retry(self, prompt: str, model: str) -> str:
        """Call _call_api up to MAX_RETRIES times with exponential backoff.

        The final failure is re-raised as ModelCallFailed so the orchestrator
        can abort the pass with a readable message.
        """
        for attempt in range(self.MAX_RETRIES):
            try:
                return self._call_api(prompt, model)
            except Exception as e:
                if attempt == self.MAX_RETRIES - 1:
                    logger.error(
                        "%s API failed after %d attempt(s): %s",
                        self.__class__.__name__,
                        self.MAX_RETRIES,
                        e,
                    )
                    if isinstance(e, ModelCallFailed):
                        raise
                    raise ModelCallFailed(str(e) or e.__class__.__name__) from e
                delay = 2**attempt
                logger.warning(
                    "%s API error (attempt %d/%d): %s. Retrying in %ds...",
                    self.__class__.__name__,
                    attempt + 1,
                    self.MAX_RETRIES,
                    e,
                    delay,
                )
                time.sleep(delay)
        raise ModelCallFailed("No review attempts were made")
