"""Capability interface over a rendered pull request page.

Extraction strategies only talk to a PageModel, never to a concrete DOM, so
each strategy is a plain function of the page and can be exercised against
an HTML snapshot or a fake.

Nodes are opaque handles owned by the implementation. Identity is by object
identity, not equality (BeautifulSoup tags compare structurally).
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from adolens_core.models import Issue

logger = logging.getLogger(__name__)

ADDITION = "addition"
DELETION = "deletion"
NEUTRAL = "neutral"

_ADDITION_TOKENS = ("add", "insert", "new", "plus")
_DELETION_TOKENS = ("delete", "remove", "old", "minus")
_ADDITION_DESCENDANTS = '[class*="add"], [class*="insert"]'
_DELETION_DESCENDANTS = '[class*="delete"], [class*="remove"]'


class PageModel(ABC):
    url: str = ""
    # Snapshots never change; wait_for does not poll them.
    static: bool = False

    # ------------------------------------------------------------------ #
    # Primitives, implemented per rendering surface                       #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def root(self) -> Any:
        """The document body (or document) node."""

    @abstractmethod
    def query_all(self, selector: str, root: Any = None) -> list:
        """All nodes under ``root`` (default: whole document) matching a CSS selector, in document order."""

    @abstractmethod
    def text_of(self, node: Any) -> str:
        """Raw text content of a node, including descendants."""

    @abstractmethod
    def class_of(self, node: Any) -> str:
        """The node's class attribute as a single space-separated string."""

    @abstractmethod
    def parent_of(self, node: Any) -> Any:
        """Parent element, or None at the top of the document."""

    @abstractmethod
    def selection(self) -> str:
        """The user's current text selection ("" when nothing is selected)."""

    @abstractmethod
    def annotate(self, node: Any, issue: Issue) -> None:
        """Attach an inline annotation for ``issue`` to ``node``."""

    @abstractmethod
    def has_annotation(self, node: Any) -> bool: ...

    @abstractmethod
    def clear_annotations(self) -> int:
        """Remove every inline annotation; return how many were removed."""

    # ------------------------------------------------------------------ #
    # Shared helpers                                                       #
    # ------------------------------------------------------------------ #

    def query(self, selector: str, root: Any = None) -> Any:
        nodes = self.query_all(selector, root)
        return nodes[0] if nodes else None

    def visible_text_of(self, node: Any) -> str:
        """Text as the user sees it; implementations may insert line breaks between blocks."""
        return self.text_of(node)

    def find_candidate_containers(self, vocabulary: list[str] | tuple[str, ...], outermost: bool = False) -> list:
        """Nodes matching any selector in ``vocabulary``, in document order.

        With ``outermost`` set, nodes nested inside another match are dropped
        so the same content is never reported twice.
        """
        nodes = self.query_all(", ".join(vocabulary))
        if not outermost:
            return nodes
        matched = {id(n) for n in nodes}
        return [n for n in nodes if not any(id(a) in matched for a in self._ancestors(n))]

    def _ancestors(self, node: Any):
        parent = self.parent_of(node)
        while parent is not None:
            yield parent
            parent = self.parent_of(parent)

    def classify_line(self, node: Any) -> str:
        """Classify a rendered diff line as addition, deletion or neutral.

        Looks at the node's own class, its parent's class and, failing that,
        whether any descendant carries an addition/deletion marker.
        """
        parent = self.parent_of(node)
        combined = f"{self.class_of(node)} {self.class_of(parent) if parent is not None else ''}".lower()

        if any(token in combined for token in _ADDITION_TOKENS) or self.query(_ADDITION_DESCENDANTS, node) is not None:
            return ADDITION
        if any(token in combined for token in _DELETION_TOKENS) or self.query(_DELETION_DESCENDANTS, node) is not None:
            return DELETION
        return NEUTRAL

    def wait_for(
        self,
        selector: str,
        timeout: float = 10.0,
        poll_interval: float = 0.25,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> Any:
        """Return the first node matching ``selector`` once it appears, or None after ``timeout``.

        Never raises on timeout: an absent element is a normal outcome.
        """
        node = self.query(selector)
        if node is not None or self.static:
            return node

        deadline = clock() + timeout
        while clock() < deadline:
            sleep(poll_interval)
            node = self.query(selector)
            if node is not None:
                return node

        logger.debug("Timed out after %.1fs waiting for %s", timeout, selector)
        return None
