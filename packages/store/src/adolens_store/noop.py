"""No-op store, the default when no store is configured."""

from __future__ import annotations

from typing import TYPE_CHECKING

from adolens_store.base import BaseStore

if TYPE_CHECKING:
    from adolens_store.models import ReviewRecord


class NoOpStore(BaseStore):
    """Silently discards all records. Switch to ``store: sqlite`` or ``store: json`` for history."""

    def save(self, record: ReviewRecord) -> None:
        pass

    def list_reviews(self, repo: str | None = None, pr_number: int | None = None) -> list[ReviewRecord]:
        return []

    def clear(self) -> int:
        return 0
