"""Error taxonomy for the review pipeline.

Extraction-layer failures are recovered by falling through the strategy
chain; model-call failures abort the active review pass only.
"""

from __future__ import annotations


class AdolensError(Exception):
    """Base class for all adolens errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class FetchFailed(AdolensError):
    """Azure DevOps returned a non-success status or the request could not be sent."""


class ModelCallFailed(AdolensError):
    """The review model call failed; fatal to the current review pass."""


class ConcurrentReviewRejected(AdolensError):
    """A review pass was requested while another one is in flight."""

    def __init__(self) -> None:
        super().__init__("Review already in progress")
