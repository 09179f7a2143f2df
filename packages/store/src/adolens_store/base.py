"""Abstract store interface.

The CLI depends on BaseStore, not on a concrete backend, so backends are
swappable without touching CLI code.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from adolens_store.models import ReviewRecord


class BaseStore(ABC):
    """Pluggable persistence layer for review statistics and history."""

    @abstractmethod
    def save(self, record: ReviewRecord) -> None:
        """Persist a completed review record."""

    @abstractmethod
    def list_reviews(self, repo: str | None = None, pr_number: int | None = None) -> list[ReviewRecord]:
        """Return reviews oldest first, optionally filtered by repo and PR number.

        Returns an empty list if no reviews exist, never raises.
        """

    @abstractmethod
    def clear(self) -> int:
        """Delete every stored review and return how many were removed."""

    def latest(self, repo: str | None = None) -> ReviewRecord | None:
        """Most recent review (optionally for one repo), or None."""
        reviews = self.list_reviews(repo)
        return reviews[-1] if reviews else None

    def close(self) -> None:
        """Release any resources held by the store.

        Default is a no-op so callers can always call close() safely.
        """
