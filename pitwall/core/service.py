"""TriageService: the operations exposed to the UI and automation triggers.

Each public method returns a JSON-ready dict and never lets an exception
escape. Missing context is rejected before any Jira call, and tracker failures
come back as ``{"ok": False, "error": ...}``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any

from pitwall.analytics.scoreboard import (
    ScoredIssue,
    scoreboard_frame,
    scoreboard_records,
    scoreboard_stats,
    sort_scoreboard,
)
from pitwall.triage.bulk import BulkOrchestrator, ProgressCallback, open_issues_jql
from pitwall.triage.cooldown import issue_cooldowns
from pitwall.triage.drafts import (
    build_customer_draft,
    escalation_lines,
    playbook_note_lines,
    request_update_lines,
)
from pitwall.triage.executor import ActionExecutor
from pitwall.triage.planner import plan_actions
from pitwall.triage.risk import assess_risk
from pitwall.triage.signals import extract_signals, utc_now

from .config import DEFAULT_TRIAGE_CONFIG, TriageConfig
from .errors import MissingContextError
from .jira_client import JiraAPI
from .mappers import map_comments, map_issue

logger = logging.getLogger(__name__)


def _error(exc: Exception) -> dict[str, Any]:
    if not isinstance(exc, MissingContextError):
        logger.warning("Triage operation failed: %s", exc)
    return {"ok": False, "error": str(exc)}


class TriageService:
    def __init__(
        self,
        api: JiraAPI,
        config: TriageConfig = DEFAULT_TRIAGE_CONFIG,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.api = api
        self.config = config
        self.clock = clock
        self.executor = ActionExecutor(api, config, clock)
        self.bulk = BulkOrchestrator(api, self.executor, config, clock)

    # ------------------ Scoreboard ------------------
    def score_issues(self, raw_issues: Sequence[dict[str, Any]]) -> list[ScoredIssue]:
        now = self.clock()
        scored: list[ScoredIssue] = []
        for raw in raw_issues:
            issue = map_issue(raw)
            signals = extract_signals(issue, self.config, now)
            scored.append(
                ScoredIssue(
                    issue=issue,
                    signals=signals,
                    assessment=assess_risk(signals, self.config),
                    plan=plan_actions(signals, self.config),
                )
            )
        return scored

    def get_at_risk_issues(self, project_key: str | None) -> dict[str, Any]:
        if not project_key:
            return {"issues": [], "error": "No project key found in context."}
        try:
            raw = self.api.search_issues(open_issues_jql(project_key), limit=self.config.search_limit)
        except Exception as exc:  # surfaced to the caller, no retry
            logger.warning("Listing at-risk issues for %s failed: %s", project_key, exc)
            return {"issues": [], "error": str(exc)}
        df = sort_scoreboard(scoreboard_frame(self.score_issues(raw)))
        return {
            "issues": scoreboard_records(df),
            "projectKey": project_key,
            "stats": scoreboard_stats(df, self.config),
        }

    def get_issue_cooldowns(self, issue_key: str | None) -> dict[str, Any]:
        if not issue_key:
            return _error(MissingContextError("Missing issueKey"))
        try:
            comments = map_comments(
                self.api.get_comments(issue_key, max_results=self.config.comment_page_size)
            )
        except Exception as exc:  # surfaced as {"ok": False}
            return _error(exc)
        states = issue_cooldowns(comments, self.config, self.clock())
        return {
            "ok": True,
            "issueKey": issue_key,
            "cooldowns": {name: state.to_dict() for name, state in states.items()},
        }

    # ------------------ Runs ------------------
    def run_recommended(self, issue_key: str | None, actor_id: str | None) -> dict[str, Any]:
        try:
            return self.executor.run(issue_key, actor_id).to_dict()
        except Exception as exc:  # run boundary
            return _error(exc)

    def run_playbook(self, issue_key: str | None, actor_id: str | None) -> dict[str, Any]:
        try:
            return self.executor.run_playbook(issue_key, actor_id).to_dict()
        except Exception as exc:  # run boundary
            return _error(exc)

    def run_bulk_recommended(
        self,
        project_key: str | None,
        scope: str,
        actor_id: str | None,
        *,
        progress: ProgressCallback | None = None,
    ) -> dict[str, Any]:
        try:
            return self.bulk.run(project_key, scope, actor_id, progress=progress).to_dict()
        except Exception as exc:  # run boundary
            return _error(exc)

    # ------------------ Atomic commands ------------------
    def assign_to_me(self, issue_key: str | None, actor_id: str | None) -> dict[str, Any]:
        if not issue_key:
            return _error(MissingContextError("Missing issueKey"))
        if not actor_id:
            return _error(MissingContextError("No accountId in context"))
        try:
            self.api.set_assignee(issue_key, actor_id)
        except Exception as exc:  # surfaced as {"ok": False}
            return _error(exc)
        return {"ok": True}

    def request_update(self, issue_key: str | None) -> dict[str, Any]:
        if not issue_key:
            return _error(MissingContextError("Missing issueKey"))
        try:
            self.api.add_comment(issue_key, request_update_lines(self.config))
        except Exception as exc:  # surfaced as {"ok": False}
            return _error(exc)
        return {"ok": True}

    def post_playbook_note(
        self,
        issue_key: str | None,
        reasons: Sequence[str] | None = None,
    ) -> dict[str, Any]:
        if not issue_key:
            return _error(MissingContextError("Missing issueKey"))
        try:
            if reasons is None:
                reasons = self._current_reasons(issue_key)
            self.api.add_comment(issue_key, playbook_note_lines(self.config, reasons))
        except Exception as exc:  # surfaced as {"ok": False}
            return _error(exc)
        return {"ok": True}

    def escalate(self, issue_key: str | None) -> dict[str, Any]:
        if not issue_key:
            return _error(MissingContextError("Missing issueKey"))
        label = self.config.escalation_label
        try:
            issue = map_issue(self.api.get_issue(issue_key))
            if label in issue.labels:
                return {"ok": True, "skipped": True}
            self.api.add_label(issue_key, label)
            self.api.add_comment(issue_key, escalation_lines(self.config))
        except Exception as exc:  # surfaced as {"ok": False}
            return _error(exc)
        return {"ok": True, "skipped": False}

    def generate_customer_update(self, issue_key: str | None) -> dict[str, Any]:
        if not issue_key:
            return _error(MissingContextError("Missing issueKey"))
        try:
            issue = map_issue(self.api.get_issue(issue_key))
        except Exception as exc:  # surfaced as {"ok": False}
            return _error(exc)
        reasons = assess_risk(extract_signals(issue, self.config, self.clock()), self.config).reasons
        draft = build_customer_draft(issue.key or issue_key, issue.summary, issue.status, reasons, self.config)
        return {"ok": True, "issueKey": issue_key, "draft": draft}

    def _current_reasons(self, issue_key: str) -> list[str]:
        issue = map_issue(self.api.get_issue(issue_key))
        return assess_risk(extract_signals(issue, self.config, self.clock()), self.config).reasons
