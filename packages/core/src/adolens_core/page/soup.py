"""PageModel over an HTML snapshot of the rendered pull request page."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from bs4 import BeautifulSoup, Tag

from adolens_core.page.model import PageModel

if TYPE_CHECKING:
    from adolens_core.models import Issue

_SEVERITY_ICON = {"critical": "🔴", "warning": "🟡", "suggestion": "🔵"}


class SoupPage(PageModel):
    static = True

    def __init__(self, html: str, url: str = "", selection: str = "", parser: str = "html.parser"):
        self.soup = BeautifulSoup(html, parser)
        self.url = url
        self._selection = selection

    @classmethod
    def from_file(cls, path: str | Path, url: str = "", selection: str = "") -> SoupPage:
        return cls(Path(path).read_text(encoding="utf-8"), url=url, selection=selection)

    def root(self) -> Any:
        return self.soup.body or self.soup

    def query_all(self, selector: str, root: Any = None) -> list:
        return (root if root is not None else self.soup).select(selector)

    def text_of(self, node: Any) -> str:
        return node.get_text()

    def visible_text_of(self, node: Any) -> str:
        return node.get_text("\n", strip=True)

    def class_of(self, node: Any) -> str:
        classes = node.get("class") or []
        return classes if isinstance(classes, str) else " ".join(classes)

    def parent_of(self, node: Any) -> Any:
        parent = node.parent
        if parent is None or isinstance(parent, BeautifulSoup) or not isinstance(parent, Tag):
            return None
        return parent

    def selection(self) -> str:
        return self._selection

    def annotate(self, node: Any, issue: Issue) -> None:
        comment = self.soup.new_tag("div", attrs={"class": f"ai-review-comment ai-severity-{issue.severity}"})
        label = self.soup.new_tag("span", attrs={"class": "ai-review-text"})
        label.string = f"{_SEVERITY_ICON.get(issue.severity, '⚪')} {issue.title}"
        comment.append(label)

        details = self.soup.new_tag("div", attrs={"class": "ai-review-details"})
        description = self.soup.new_tag("p")
        description.string = issue.description
        details.append(description)
        if issue.suggestion:
            suggestion = self.soup.new_tag("pre")
            suggestion.string = issue.suggestion
            details.append(suggestion)
        comment.append(details)

        node.append(comment)

    def has_annotation(self, node: Any) -> bool:
        return node.select_one(".ai-review-comment") is not None

    def clear_annotations(self) -> int:
        comments = self.soup.select(".ai-review-comment")
        for comment in comments:
            comment.decompose()
        return len(comments)

    def render(self) -> str:
        return str(self.soup)
