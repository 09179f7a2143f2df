"""Page-scanning extraction strategies.

Each strategy maps a PageModel to zero or more ChangeRecords. Azure DevOps
markup is unversioned and differs between the classic and "new PR
experience" views, so every strategy works from a fixed selector vocabulary
rather than a single known layout.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any, Callable
from urllib.parse import unquote

from adolens_core.ado.context import resolve_context
from adolens_core.ado.fetcher import fetch_change_records
from adolens_core.models import ChangeRecord, LineChange
from adolens_core.page.model import ADDITION, DELETION

if TYPE_CHECKING:
    from adolens_core.ado.client import AdoClient
    from adolens_core.page.model import PageModel

logger = logging.getLogger(__name__)

Strategy = Callable[["PageModel"], "list[ChangeRecord]"]

READY_SELECTOR = '[class*="repos-"], [class*="diff-"], [class*="file-"], .bolt-table, [role="treegrid"]'

ADDITION_MARKERS = (
    '[class*="addition"]',
    '[class*="added"]',
    '[class*="insert"]',
    ".diff-line-add",
    ".line-add",
    '[class*="diff-add"]',
    "tr.add",
    "tr.added",
    ".code-line.add",
    '[class*="diffLine"][class*="add"]',
    ".repos-line-content.add",
    '[class*="green"]',
    '[class*="plus-line"]',
)

RIGHT_PANEL_SELECTORS = (
    ".side-by-side-diff .right-side",
    ".side-by-side .modified",
    '[class*="right-file"]',
    '[class*="modified-content"]',
    ".compare-right",
    ".repos-diff-contents .right",
    '[class*="diff-side"][class*="right"]',
    ".vss-Diff--right",
    ".monaco-diff-editor .modified",
    ".diff-editor .editor.modified",
)

PANEL_LINE_SELECTOR = '.view-line, [class*="code-line"], [class*="diff-line"], .line'

DIFF_CONTAINERS = (
    '[class*="repos-diff"]',
    '[class*="diff-viewer"]',
    '[class*="file-content"]',
    ".compare-files-container",
    '[class*="side-by-side"]',
    '[class*="inline-diff"]',
    ".file-container",
    '[class*="file-diff"]',
    '[class*="repos-file"]',
    ".diff-file",
)

# Tried in order; the first selector that matches anything inside a container wins.
CONTAINER_LINE_SELECTORS = (
    '[class*="diff-line"]',
    '[class*="code-line"]',
    '[class*="line-content"]',
    ".view-line",
    ".view-lines .view-line",
    'tr[class*="diff"]',
    "tr.added, tr.deleted, tr.unchanged",
    ".line",
    '[role="row"]',
)

EDITOR_SELECTORS = (".monaco-editor", '[class*="monaco"]', ".editor-container")
EDITOR_LINE_SELECTOR = ".view-lines .view-line"

CODE_BLOCK_SELECTORS = ("pre", "code", '[class*="code-content"]', '[class*="source-code"]', ".hljs")

MAIN_CONTENT_SELECTORS = (
    '[class*="repos-changes"]',
    '[class*="diff-viewer"]',
    '[class*="pull-request-diff"]',
    '[class*="file-content"]',
    ".repos-files-container",
    '[role="main"]',
    ".bolt-page-content",
)

VISIBLE_CODE_SELECTOR = '.view-line, [class*="code-line"], [class*="diff-line"], pre, code, [class*="line-content"]'
VISIBLE_FALLBACK_SELECTOR = '[class*="diff"], [class*="code"], [class*="file-content"]'

FILENAME_SELECTORS = (
    '[class*="file-path"] span',
    '[class*="file-name"]',
    '[class*="repos-file-header"]',
    ".file-path",
    '[class*="breadcrumb"] span:last-child',
    '[aria-label*="file"]',
    ".bolt-header-title",
    'h2[class*="file"]',
)

MIN_CONTAINER_CONTENT = 20
MIN_CODE_BLOCK_CONTENT = 50
MIN_VISIBLE_CONTENT = 100

_LEADING_LINE_NUMBER_RE = re.compile(r"^\d+\s*")
_PATH_PARAM_RE = re.compile(r"[?&]path=([^&#]+)")


def current_filename(page: PageModel) -> str | None:
    """Best-effort name of the file currently shown, from the header or the ``path=`` query parameter."""
    for selector in FILENAME_SELECTORS:
        node = page.query(selector)
        if node is not None:
            text = page.text_of(node).strip()
            if text:
                return text

    match = _PATH_PARAM_RE.search(page.url or "")
    if match:
        return unquote(match.group(1))
    return None


# ---------------------------------------------------------------------- #
# Strategies, highest priority first                                       #
# ---------------------------------------------------------------------- #


def from_selection(page: PageModel) -> list[ChangeRecord]:
    text = page.selection()
    if not text or not text.strip():
        return []
    return [ChangeRecord(filename="Selected Code", content=text, source="selection")]


def remote_content(client: AdoClient) -> Strategy:
    """Build the strategy that fetches full file content from the Azure DevOps REST API."""

    def from_remote_content(page: PageModel) -> list[ChangeRecord]:
        context = resolve_context(page.url)
        if context is None:
            logger.debug("Page address is not a pull request URL; skipping remote content")
            return []
        logger.debug("Fetching remote content for %s", context)
        return fetch_change_records(client, context)

    return from_remote_content


def from_addition_markers(page: PageModel) -> list[ChangeRecord]:
    markers = page.find_candidate_containers(ADDITION_MARKERS)
    if not markers:
        return []

    logger.debug("Found %d addition markers", len(markers))
    additions = []
    for idx, marker in enumerate(markers, 1):
        text = _LEADING_LINE_NUMBER_RE.sub("", page.text_of(marker).strip()).strip()
        if text:
            additions.append(LineChange(line=idx, content=text))

    if not additions:
        return []

    return [
        ChangeRecord(
            filename=current_filename(page) or "Current File",
            content="\n".join(a.content for a in additions),
            additions=tuple(additions),
            has_new_code=True,
            source="addition-markers",
            element=page.root(),
        )
    ]


def from_right_panel(page: PageModel) -> list[ChangeRecord]:
    panel = None
    for selector in RIGHT_PANEL_SELECTORS:
        panel = page.query(selector)
        if panel is not None:
            break
    if panel is None:
        return []

    additions = []
    for idx, line in enumerate(page.query_all(PANEL_LINE_SELECTOR, panel), 1):
        text = page.text_of(line).strip()
        if text and page.classify_line(line) == ADDITION:
            additions.append(LineChange(line=idx, content=text))

    if not additions:
        return []

    return [
        ChangeRecord(
            filename=current_filename(page) or "Current File",
            content="\n".join(f"+ {a.content}" for a in additions),
            additions=tuple(additions),
            has_new_code=True,
            source="right-panel",
            element=panel,
        )
    ]


def _record_from_container(page: PageModel, container: Any) -> ChangeRecord:
    lines: list = []
    for selector in CONTAINER_LINE_SELECTORS:
        lines = page.query_all(selector, container)
        if lines:
            break

    additions: list[LineChange] = []
    deletions: list[LineChange] = []
    content_lines: list[str] = []
    for idx, line in enumerate(lines, 1):
        text = page.text_of(line).strip()
        if not text:
            continue
        kind = page.classify_line(line)
        if kind == ADDITION:
            additions.append(LineChange(line=idx, content=text))
            content_lines.append(f"+ {text}")
        elif kind == DELETION:
            # Recorded for completeness; removed code is never reviewed.
            deletions.append(LineChange(line=idx, content=text))
        else:
            content_lines.append(f"  {text}")

    content = "\n".join(content_lines).strip()
    if not content:
        content = page.visible_text_of(container).strip()

    return ChangeRecord(
        filename=current_filename(page) or "Unknown File",
        content=content,
        additions=tuple(additions),
        deletions=tuple(deletions),
        has_new_code=bool(additions),
        source="diff-container",
        element=container,
    )


def from_diff_containers(page: PageModel) -> list[ChangeRecord]:
    records = []
    for container in page.find_candidate_containers(DIFF_CONTAINERS, outermost=True):
        record = _record_from_container(page, container)
        if len(record.content) > MIN_CONTAINER_CONTENT:
            records.append(record)
    return records


def from_editor_lines(page: PageModel) -> list[ChangeRecord]:
    records = []
    for editor in page.find_candidate_containers(EDITOR_SELECTORS, outermost=True):
        view_lines = page.query_all(EDITOR_LINE_SELECTOR, editor)
        content = "\n".join(page.text_of(line) for line in view_lines).strip()
        if content:
            records.append(
                ChangeRecord(
                    filename=current_filename(page) or "Editor Content",
                    content=content,
                    source="editor-lines",
                    element=editor,
                )
            )
    return records


def from_code_blocks(page: PageModel) -> list[ChangeRecord]:
    records = []
    for block in page.find_candidate_containers(CODE_BLOCK_SELECTORS, outermost=True):
        content = page.text_of(block).strip()
        if len(content) > MIN_CODE_BLOCK_CONTENT:
            records.append(
                ChangeRecord(
                    filename=current_filename(page) or "Code Block",
                    content=content,
                    source="code-blocks",
                    element=block,
                )
            )
    return records


def visible_code(page: PageModel, container: Any) -> str:
    code_nodes = page.query_all(VISIBLE_CODE_SELECTOR, container)
    if code_nodes:
        return "\n".join(t for t in (page.text_of(n) for n in code_nodes) if t).strip()

    fallback = page.query(VISIBLE_FALLBACK_SELECTOR, container)
    if fallback is not None:
        return page.visible_text_of(fallback).strip()
    return ""


def from_visible_area(page: PageModel) -> list[ChangeRecord]:
    for selector in MAIN_CONTENT_SELECTORS:
        container = page.query(selector)
        if container is None:
            continue
        content = visible_code(page, container)
        if len(content) > MIN_VISIBLE_CONTENT:
            return [
                ChangeRecord(
                    filename=current_filename(page) or "All Changes",
                    content=content,
                    source="visible-area",
                    element=container,
                )
            ]
    return []


PAGE_STRATEGIES: tuple[Strategy, ...] = (
    from_addition_markers,
    from_right_panel,
    from_diff_containers,
    from_editor_lines,
    from_code_blocks,
    from_visible_area,
)
