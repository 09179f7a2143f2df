"""Ordered "first non-empty wins" extraction chain."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from adolens_core.extraction.strategies import PAGE_STRATEGIES, from_selection, remote_content
from adolens_core.models import SCOPES

if TYPE_CHECKING:
    from adolens_core.ado.client import AdoClient
    from adolens_core.extraction.strategies import Strategy
    from adolens_core.models import ChangeRecord
    from adolens_core.page.model import PageModel

logger = logging.getLogger(__name__)


def first_non_empty(strategies: Sequence[Strategy], page: PageModel) -> list[ChangeRecord]:
    """Return the output of the first strategy that yields records; later strategies are not called."""
    for strategy in strategies:
        records = strategy(page)
        if records:
            logger.info("Extracted %d record(s) using %s", len(records), getattr(strategy, "__name__", strategy))
            return list(records)
    return []


class ExtractionChain:
    """Resolves a review scope against a page using a fixed priority of strategies.

    ``selected`` uses the live selection only. ``current`` keeps the first
    record of the winning strategy, ``all`` keeps every record.
    """

    def __init__(self, strategies: Sequence[Strategy]):
        self.strategies = tuple(strategies)

    @classmethod
    def default(cls, client: AdoClient | None = None) -> ExtractionChain:
        """Remote content first (when a client is available), then page scraping."""
        strategies: list[Strategy] = [remote_content(client)] if client is not None else []
        strategies.extend(PAGE_STRATEGIES)
        return cls(strategies)

    def extract(self, scope: str, page: PageModel) -> list[ChangeRecord]:
        if scope not in SCOPES:
            raise ValueError(f"Unknown review scope: {scope!r}. Choose one of: {', '.join(SCOPES)}.")

        if scope == "selected":
            return from_selection(page)

        records = first_non_empty(self.strategies, page)
        if not records:
            logger.info("No diffs found with any strategy")
            return []
        return records[:1] if scope == "current" else records
