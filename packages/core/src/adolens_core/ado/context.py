from __future__ import annotations

import re

from adolens_core.models import RepositoryContext

_CURRENT_HOST_RE = re.compile(r"dev\.azure\.com/([^/]+)/([^/]+)/_git/([^/]+)/pullrequest/(\d+)")
_LEGACY_HOST_RE = re.compile(r"([^./]+)\.visualstudio\.com/([^/]+)/_git/([^/]+)/pullrequest/(\d+)")


def resolve_context(url: str) -> RepositoryContext | None:
    """Parse a pull request page address into a RepositoryContext, or None if it matches neither host shape."""
    if not url:
        return None

    match = _CURRENT_HOST_RE.search(url)
    if match:
        return RepositoryContext(
            organization=match.group(1),
            project=match.group(2),
            repository=match.group(3),
            change_request_id=int(match.group(4)),
            is_legacy_host=False,
        )

    match = _LEGACY_HOST_RE.search(url)
    if match:
        return RepositoryContext(
            organization=match.group(1),
            project=match.group(2),
            repository=match.group(3),
            change_request_id=int(match.group(4)),
            is_legacy_host=True,
        )

    return None


def repo_slug(context: RepositoryContext | None) -> str:
    """``org/project/repo`` label used for history records; empty when unresolved."""
    if context is None:
        return ""
    return f"{context.organization}/{context.project}/{context.repository}"
