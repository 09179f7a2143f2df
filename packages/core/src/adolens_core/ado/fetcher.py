"""Full before/after file content for the latest pull request iteration."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from adolens_core.exceptions import FetchFailed
from adolens_core.models import ChangeRecord
from adolens_core.utils.code import is_binary_path

if TYPE_CHECKING:
    from adolens_core.ado.client import AdoClient
    from adolens_core.models import RepositoryContext

logger = logging.getLogger(__name__)

MAX_FILES = 15
MAX_FILE_SIZE = 50000  # characters


def _commit_id(iteration: dict, key: str) -> str | None:
    ref = iteration.get(key)
    if isinstance(ref, dict) and isinstance(ref.get("commitId"), str):
        return ref["commitId"]
    return None


def _commit_ids(iteration: dict) -> tuple[str | None, str | None]:
    source = _commit_id(iteration, "sourceRefCommit")
    base = _commit_id(iteration, "commonRefCommit") or _commit_id(iteration, "targetRefCommit")
    return source, base


def fetch_change_records(client: AdoClient, context: RepositoryContext) -> list[ChangeRecord]:
    """Return one record per reviewable file in the latest iteration.

    Returns an empty list when the iteration or change list cannot be fetched,
    so the caller can fall through to page-scraping strategies.
    """
    try:
        iterations = client.list_iterations(context)
        if not iterations:
            return []
        latest = iterations[-1]
        if not isinstance(latest, dict):
            logger.info("Remote content unavailable: unexpected iteration %r", latest)
            return []
        source_commit, base_commit = _commit_ids(latest)
        logger.debug("Latest iteration %s: source=%s base=%s", latest.get("id"), source_commit, base_commit)
        changes = client.list_changes(context, latest.get("id"))
    except FetchFailed as e:
        logger.info("Remote content unavailable: %s", e)
        return []

    logger.debug("Found %d changed entries", len(changes))
    records: list[ChangeRecord] = []

    for change in changes:
        if len(records) >= MAX_FILES:
            logger.info("Reached file limit (%d), skipping remaining files", MAX_FILES)
            break

        if not isinstance(change, dict):
            continue
        item = change.get("item") or change
        if not isinstance(item, dict):
            continue
        if item.get("isFolder"):
            continue

        change_type = change.get("changeType") or "edit"
        if change_type == "delete":
            continue

        path = item.get("path")
        if not path or not isinstance(path, str):
            logger.debug("Skipping change without path: %s", change)
            continue
        if is_binary_path(path):
            continue

        new_content = ""
        if source_commit:
            new_content = client.get_item_content(context, path, source_commit)
            if len(new_content) > MAX_FILE_SIZE:
                logger.info("Skipping large file %s (%d chars > %d)", path, len(new_content), MAX_FILE_SIZE)
                continue

        original_content = ""
        if change_type != "add" and base_commit:
            original_content = client.get_item_content(context, path, base_commit)

        if new_content:
            records.append(
                ChangeRecord(
                    filename=path,
                    original_content=original_content,
                    new_content=new_content,
                    change_type=change_type,
                    has_new_code=True,
                    source="remote",
                )
            )

    logger.info("Remote content fetch returned %d file(s)", len(records))
    return records
