"""Jira API client wrapper (REST v3 reads/writes over the authenticated session)."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any

from jira import JIRA, JIRAError

from .config import JIRA_TRIAGE_FIELDS
from .errors import TrackerFetchError, TrackerWriteError

logger = logging.getLogger(__name__)


def adf_doc_from_lines(lines: Sequence[str] | str | None) -> dict[str, Any]:
    """Render plain lines into a minimal Atlassian Document Format body."""
    if isinstance(lines, str) or lines is None:
        lines = [lines or ""]
    return {
        "type": "doc",
        "version": 1,
        "content": [
            {"type": "paragraph", "content": [{"type": "text", "text": str(line)}]}
            if str(line)
            else {"type": "paragraph", "content": []}
            for line in lines
        ],
    }


class JiraAPI:
    def __init__(self, server: str, email: str, token: str):
        self.server = server.rstrip("/")
        self.client = JIRA(
            basic_auth=(email, token), options={"server": self.server, "rest_api_version": "3"}
        )

    def _session(self):
        session = getattr(self.client, "_session", None)
        if session is None:
            raise RuntimeError("JIRA session unavailable")
        return session

    def _decode(self, resp) -> Any:
        # Successful writes frequently answer 204 or an empty body
        if resp.status_code == 204:
            return None
        text = resp.text or ""
        if not text.strip():
            return None
        content_type = (resp.headers or {}).get("content-type", "")
        if "application/json" in content_type:
            return json.loads(text)
        return text

    def _read(self, path: str, params: dict[str, Any] | None = None) -> Any:
        url = f"{self.server}{path}"
        try:
            resp = self._session().get(url, params=params)
        except JIRAError as exc:
            raise TrackerFetchError(f"Jira API failed: {exc.status_code} {exc.text}") from exc
        if resp.status_code >= 400:
            raise TrackerFetchError(f"Jira API failed: {resp.status_code} {resp.text[:200]}")
        try:
            return self._decode(resp)
        except ValueError as exc:
            raise TrackerFetchError(f"Malformed response from {path}: {exc}") from exc

    def _write(self, method: str, path: str, payload: dict[str, Any]) -> Any:
        url = f"{self.server}{path}"
        headers = {"Accept": "application/json", "Content-Type": "application/json"}
        try:
            resp = self._session().request(method, url, data=json.dumps(payload), headers=headers)
        except JIRAError as exc:
            raise TrackerWriteError(f"Jira API failed: {exc.status_code} {exc.text}") from exc
        if resp.status_code >= 400:
            raise TrackerWriteError(f"Jira API failed: {resp.status_code} {resp.text[:200]}")
        try:
            return self._decode(resp)
        except ValueError:
            # The write itself succeeded; an unparseable ack is not an error
            logger.debug("Ignoring non-JSON acknowledgement from %s %s", method, path)
            return None

    # ------------------ Reads ------------------
    def search_issues(
        self,
        jql: str,
        limit: int = 10,
        fields: Sequence[str] | None = None,
    ) -> list[dict[str, Any]]:
        params = {
            "jql": jql,
            "maxResults": limit,
            "fields": ",".join(fields or JIRA_TRIAGE_FIELDS),
        }
        data = self._read("/rest/api/3/search/jql", params=params) or {}
        if not isinstance(data, dict):
            raise TrackerFetchError("Unexpected search payload")
        return list(data.get("issues") or [])

    def get_issue(self, issue_key: str, fields: Sequence[str] | None = None) -> dict[str, Any]:
        data = self._read(
            f"/rest/api/3/issue/{issue_key}",
            params={"fields": ",".join(fields or JIRA_TRIAGE_FIELDS)},
        )
        if not isinstance(data, dict):
            raise TrackerFetchError(f"Unexpected issue payload type for {issue_key}: {type(data)!r}")
        return data

    def get_comments(self, issue_key: str, max_results: int = 50) -> list[dict[str, Any]]:
        """Most recent ``max_results`` comments, returned oldest first."""
        data = self._read(
            f"/rest/api/3/issue/{issue_key}/comment",
            params={"maxResults": max_results, "orderBy": "-created"},
        )
        if not data:
            return []
        if not isinstance(data, dict):
            raise TrackerFetchError(f"Unexpected comment payload type for {issue_key}: {type(data)!r}")
        # fetched newest first so the page holds the latest audit markers
        return list(reversed(data.get("comments") or []))

    def current_account_id(self) -> str | None:
        try:
            me = self.client.myself()
        except JIRAError as exc:  # pragma: no cover - network error path
            raise TrackerFetchError(f"Failed to resolve current user: {exc}") from exc
        return (me or {}).get("accountId")

    # ------------------ Writes ------------------
    def add_comment(self, issue_key: str, lines: Sequence[str] | str) -> Any:
        return self._write(
            "POST",
            f"/rest/api/3/issue/{issue_key}/comment",
            {"body": adf_doc_from_lines(lines)},
        )

    def set_assignee(self, issue_key: str, account_id: str) -> Any:
        return self._write(
            "PUT",
            f"/rest/api/3/issue/{issue_key}/assignee",
            {"accountId": account_id},
        )

    def add_label(self, issue_key: str, label: str) -> Any:
        return self._write(
            "PUT",
            f"/rest/api/3/issue/{issue_key}",
            {"update": {"labels": [{"add": label}]}},
        )
