"""JsonFileStore: review history as an append-only JSON array in one file.

The file is read in full and filtered in memory, which suits a single
developer's history. For larger histories use SQLiteStore.
"""

from __future__ import annotations

import json
import logging
import os

from adolens_store.base import BaseStore
from adolens_store.models import ReviewRecord

logger = logging.getLogger(__name__)


class JsonFileStore(BaseStore):
    def __init__(self, path: str = ".adolens_history.json"):
        self._path = path

    def save(self, record: ReviewRecord) -> None:
        """Append a review record to the history file."""
        records = self._read_records()
        records.append(record.to_dict())
        self._write_records(records)

    def list_reviews(self, repo: str | None = None, pr_number: int | None = None) -> list[ReviewRecord]:
        results = [ReviewRecord.from_dict(r) for r in self._read_records()]
        if repo is not None:
            results = [r for r in results if r.repo == repo]
        if pr_number is not None:
            results = [r for r in results if r.pr_number == pr_number]
        return results

    def clear(self) -> int:
        removed = len(self._read_records())
        self._write_records([])
        return removed

    def _read_records(self) -> list[dict]:
        """Read the current JSON array, or return [] when the file is missing or unreadable."""
        if not os.path.exists(self._path):
            return []
        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read review history from %s: %s", self._path, e)
            return []
        return data if isinstance(data, list) else []

    def _write_records(self, records: list[dict]) -> None:
        with open(self._path, "w", encoding="utf-8") as f:
            json.dump(records, f, indent=2)
