"""Thin Azure DevOps Git REST client.

Only the three endpoints the review pipeline needs: pull request iterations,
the changes of one iteration, and item content at a commit. Both the current
(dev.azure.com) and legacy ({org}.visualstudio.com) hosts share the same
endpoint templates once the base URL is substituted.
"""

from __future__ import annotations

import logging

import requests

from adolens_core.exceptions import FetchFailed
from adolens_core.models import RepositoryContext

logger = logging.getLogger(__name__)

API_VERSION = "7.0"


class AdoClient:
    def __init__(
        self,
        token: str | None = None,
        token_kind: str = "pat",
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ):
        self.timeout = timeout
        self.session = session or requests.Session()
        if token:
            if token_kind == "bearer":
                self.session.headers["Authorization"] = f"Bearer {token}"
            else:
                # PATs are sent as basic auth with an empty user name.
                self.session.auth = ("", token)

    @staticmethod
    def base_url(context: RepositoryContext) -> str:
        if context.is_legacy_host:
            host = f"https://{context.organization}.visualstudio.com/{context.project}"
        else:
            host = f"https://dev.azure.com/{context.organization}/{context.project}"
        return f"{host}/_apis/git/repositories/{context.repository}"

    def _get(self, url: str, params: dict | None = None) -> requests.Response:
        query = {**(params or {}), "api-version": API_VERSION}
        try:
            response = self.session.get(url, params=query, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise FetchFailed(f"Request to {url} failed: {e}") from e
        if not response.ok:
            raise FetchFailed(
                f"Azure DevOps returned {response.status_code} for {url}: {response.text[:200]}",
                status_code=response.status_code,
            )
        if response.status_code == 203:
            # Anonymous requests get a sign-in page with 203 Non-Authoritative.
            raise FetchFailed(f"Azure DevOps asked for sign-in at {url}", status_code=203)
        return response

    def _get_json(self, url: str) -> dict:
        response = self._get(url)
        try:
            data = response.json()
        except ValueError as e:
            raise FetchFailed(
                f"Azure DevOps returned a non-JSON body for {url}: {response.text[:200]}",
                status_code=response.status_code,
            ) from e
        if not isinstance(data, dict):
            raise FetchFailed(f"Unexpected response shape from {url}: {type(data).__name__}")
        return data

    @staticmethod
    def _entries(data: dict, *keys: str) -> list[dict]:
        for key in keys:
            value = data.get(key)
            if value:
                if not isinstance(value, list):
                    raise FetchFailed(f"Expected a list under '{key}', got {type(value).__name__}")
                return [entry for entry in value if isinstance(entry, dict)]
        return []

    def list_iterations(self, context: RepositoryContext) -> list[dict]:
        url = f"{self.base_url(context)}/pullRequests/{context.change_request_id}/iterations"
        return self._entries(self._get_json(url), "value")

    def list_changes(self, context: RepositoryContext, iteration_id: int) -> list[dict]:
        url = f"{self.base_url(context)}/pullRequests/{context.change_request_id}/iterations/{iteration_id}/changes"
        return self._entries(self._get_json(url), "changeEntries", "value")

    def get_item_content(self, context: RepositoryContext, path: str, commit_id: str) -> str:
        """Return the file content at ``commit_id``, or "" when it cannot be fetched."""
        url = f"{self.base_url(context)}/items"
        params = {"path": path, "versionType": "commit", "version": commit_id}
        try:
            return self._get(url, params).text
        except FetchFailed as e:
            logger.warning("Could not fetch %s at %s: %s", path, commit_id[:8], e)
            return ""
