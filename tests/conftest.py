"""Test configuration: local package import plus an in-memory Jira stand-in.

If users invoke `pytest` outside the project's virtualenv, we still add the project
root to sys.path so `import pitwall` works.
"""

from __future__ import annotations

import copy
import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest
import pytz

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from pitwall.core.errors import TrackerFetchError, TrackerWriteError  # noqa: E402
from pitwall.core.jira_client import JiraAPI, adf_doc_from_lines  # noqa: E402

NOW = datetime(2024, 9, 10, 12, 0, tzinfo=pytz.UTC)
BLOCKED = "Waiting for support"
ACTOR = "acct-me"


def ts(hours_ago: float) -> str:
    return (NOW - timedelta(hours=hours_ago)).isoformat()


def make_raw_issue(
    key="SUP-1",
    status=BLOCKED,
    updated_hours_ago=30,
    assignee=None,
    summary="Printer on floor 3 is down",
    labels=None,
    sla=None,
):
    return {
        "key": key,
        "fields": {
            "summary": summary,
            "status": {"name": status},
            "updated": ts(updated_hours_ago) if updated_hours_ago is not None else None,
            "assignee": {"accountId": "acct-" + assignee.lower(), "displayName": assignee} if assignee else None,
            "labels": list(labels or []),
            "sla": sla,
        },
    }


def make_raw_comment(text: str, hours_ago: float) -> dict:
    return {
        "author": {"displayName": "Agent"},
        "created": ts(hours_ago),
        "body": adf_doc_from_lines(text.split("\n")),
    }


def first_response_sla(millis: float) -> list[dict]:
    return [
        {
            "name": "Time to first response",
            "ongoingCycle": {"breached": False, "remainingTime": {"millis": millis}},
        }
    ]


class DummyAPI(JiraAPI):
    """In-memory tracker; writes mutate the stored issue so later reads see them."""

    def __init__(self):
        self.server = "https://example.atlassian.net"
        self.issues: dict[str, dict] = {}
        self.comments: dict[str, list[dict]] = {}
        self.reads: list[tuple[str, str]] = []
        self.writes: list[tuple[str, str, str]] = []
        self.fail_writes: set[str] = set()
        self.fail_keys: set[str] = set()
        self.fail_search = False

    def put(self, raw: dict, comments: list[dict] | None = None) -> None:
        self.issues[raw["key"]] = raw
        self.comments[raw["key"]] = list(comments or [])

    # reads
    def search_issues(self, jql, limit=10, fields=None):
        self.reads.append(("search", jql))
        if self.fail_search:
            raise TrackerFetchError("Jira API failed: 503 unavailable")
        return [copy.deepcopy(raw) for raw in list(self.issues.values())[:limit]]

    def get_issue(self, issue_key, fields=None):
        self.reads.append(("issue", issue_key))
        if issue_key in self.fail_keys or issue_key not in self.issues:
            raise TrackerFetchError(f"Jira API failed: 404 {issue_key}")
        return copy.deepcopy(self.issues[issue_key])

    def get_comments(self, issue_key, max_results=50):
        self.reads.append(("comments", issue_key))
        # newest page, creation order (same contract as JiraAPI.get_comments)
        return copy.deepcopy(self.comments.get(issue_key, []))[-max_results:]

    def current_account_id(self):
        return ACTOR

    # writes
    def _check(self, op: str, issue_key: str) -> None:
        if op in self.fail_writes:
            raise TrackerWriteError(f"Jira API failed: 500 {op} {issue_key}")

    def add_comment(self, issue_key, lines):
        self._check("add_comment", issue_key)
        self.writes.append(("comment", issue_key, lines[0]))
        self.comments.setdefault(issue_key, []).append(
            {"author": {"displayName": "Pit Wall"}, "created": NOW.isoformat(), "body": adf_doc_from_lines(lines)}
        )

    def set_assignee(self, issue_key, account_id):
        self._check("set_assignee", issue_key)
        self.writes.append(("assign", issue_key, account_id))
        self.issues[issue_key]["fields"]["assignee"] = {"accountId": account_id, "displayName": "Me"}

    def add_label(self, issue_key, label):
        self._check("add_label", issue_key)
        self.writes.append(("label", issue_key, label))
        self.issues[issue_key]["fields"]["labels"].append(label)


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def api():
    return DummyAPI()
