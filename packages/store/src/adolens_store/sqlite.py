"""SQLiteStore: local file-based review history.

Schema:
  reviews  one row per completed review pass; issues are kept as a JSON
           column to avoid JOINs in read paths.
"""

from __future__ import annotations

import json
import logging
import sqlite3

from adolens_store.base import BaseStore
from adolens_store.models import ReviewRecord

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS reviews (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    page_url        TEXT,
    repo            TEXT,
    pr_number       INTEGER,
    reviewer_model  TEXT,
    scope           TEXT,
    reviewed_at     TEXT,
    files           INTEGER DEFAULT 0,
    critical        INTEGER DEFAULT 0,
    warnings        INTEGER DEFAULT 0,
    suggestions     INTEGER DEFAULT 0,
    issues_json     TEXT DEFAULT '[]'
);
CREATE INDEX IF NOT EXISTS idx_reviews_repo ON reviews (repo);
CREATE INDEX IF NOT EXISTS idx_reviews_pr   ON reviews (repo, pr_number);
"""

_COLUMNS = (
    "page_url",
    "repo",
    "pr_number",
    "reviewer_model",
    "scope",
    "reviewed_at",
    "files",
    "critical",
    "warnings",
    "suggestions",
)


class SQLiteStore(BaseStore):
    """Stores review history in a local SQLite database file.

    Configure via .adolens.yml: ``store: sqlite`` and ``store_path: /path/to/adolens.db``.
    """

    def __init__(self, db_path: str = ".adolens.db"):
        self._conn = sqlite3.connect(db_path)
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(_SCHEMA)
        self._conn.commit()

    def save(self, record: ReviewRecord) -> None:
        data = record.to_dict()
        values = [data[c] for c in _COLUMNS] + [json.dumps(data["issues"])]
        self._conn.execute(
            f"INSERT INTO reviews ({', '.join(_COLUMNS)}, issues_json) VALUES ({', '.join('?' * (len(_COLUMNS) + 1))})",
            values,
        )
        self._conn.commit()
        logger.debug("Saved review of %s to SQLite", record.repo or record.page_url)

    def list_reviews(self, repo: str | None = None, pr_number: int | None = None) -> list[ReviewRecord]:
        clauses, params = [], []
        if repo is not None:
            clauses.append("repo=?")
            params.append(repo)
        if pr_number is not None:
            clauses.append("pr_number=?")
            params.append(pr_number)
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        rows = self._conn.execute(f"SELECT * FROM reviews{where} ORDER BY reviewed_at, id", params).fetchall()
        return [self._row_to_record(r) for r in rows]

    def clear(self) -> int:
        removed = self._conn.execute("SELECT COUNT(*) FROM reviews").fetchone()[0]
        self._conn.execute("DELETE FROM reviews")
        self._conn.commit()
        return removed

    def close(self) -> None:
        self._conn.close()

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> ReviewRecord:
        data = {c: row[c] for c in _COLUMNS}
        data["issues"] = json.loads(row["issues_json"] or "[]")
        return ReviewRecord.from_dict(data)
