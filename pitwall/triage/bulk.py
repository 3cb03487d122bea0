"""BulkOrchestrator: scope selection and sequential per-issue runs with isolation."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from pitwall.core.config import (
    BULK_SCOPES,
    DEFAULT_TRIAGE_CONFIG,
    RISK_HIGH,
    SCOPE_HIGH,
    STEP_FAILED,
    STEP_SKIPPED,
    TriageConfig,
)
from pitwall.core.errors import MissingContextError
from pitwall.core.jira_client import JiraAPI
from pitwall.core.mappers import map_issue
from pitwall.core.models import BulkIssueResult, BulkResult, IssueSnapshot, RiskAssessment

from .executor import ActionExecutor, Clock
from .risk import assess_risk
from .signals import extract_signals, utc_now

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int | None, int | None], None]


def open_issues_jql(project_key: str) -> str:
    return f"project = {project_key} AND statusCategory != Done ORDER BY updated ASC"


@dataclass(slots=True)
class BulkTarget:
    issue: IssueSnapshot
    assessment: RiskAssessment


class BulkOrchestrator:
    def __init__(
        self,
        api: JiraAPI,
        executor: ActionExecutor | None = None,
        config: TriageConfig = DEFAULT_TRIAGE_CONFIG,
        clock: Clock = utc_now,
    ):
        self.api = api
        self.config = config
        self.clock = clock
        self.executor = executor or ActionExecutor(api, config, clock)

    def select_targets(self, project_key: str, scope: str) -> list[BulkTarget]:
        """Fetch the visible open issues and keep those matching ``scope``."""
        raw = self.api.search_issues(open_issues_jql(project_key), limit=self.config.search_limit)
        now = self.clock()
        targets: list[BulkTarget] = []
        for item in raw:
            issue = map_issue(item)
            if not issue.key:
                continue
            assessment = assess_risk(extract_signals(issue, self.config, now), self.config)
            if scope == SCOPE_HIGH and assessment.tier != RISK_HIGH:
                continue
            targets.append(BulkTarget(issue=issue, assessment=assessment))
        return targets

    def run(
        self,
        project_key: str,
        scope: str,
        actor_id: str | None,
        *,
        progress: ProgressCallback | None = None,
    ) -> BulkResult:
        if not project_key:
            raise MissingContextError("No project key found in context.")
        if not actor_id:
            raise MissingContextError("No accountId in context")
        if scope not in BULK_SCOPES:
            raise ValueError(f"Unknown bulk scope {scope!r}; expected one of {sorted(BULK_SCOPES)}")

        if progress:
            progress(f"Selecting {scope} issues in {project_key}", None, None)
        targets = self.select_targets(project_key, scope)
        result = BulkResult(scope=scope)
        total = len(targets)

        for idx, target in enumerate(targets, start=1):
            key = target.issue.key
            risk = target.assessment.tier
            if progress:
                progress(f"Running recommended actions for {key}", idx - 1, total)
            try:
                run = self.executor.run(key, actor_id)
            except Exception as exc:  # issue boundary: the batch continues
                logger.warning("Bulk run failed for %s: %s", key, exc)
                result.results.append(BulkIssueResult(issue_key=key, ok=False, risk=risk, error=str(exc)))
                result.failed_count += 1
                continue
            result.results.append(
                BulkIssueResult(issue_key=key, ok=True, risk=risk, steps=run.steps, draft=run.draft)
            )
            result.ok_count += 1
            result.failed_steps += run.count(STEP_FAILED)
            result.skipped_steps += run.count(STEP_SKIPPED)

        if progress:
            progress(f"Processed {total} issue(s)", total, total)
        logger.info(
            "Bulk %s run on %s: %s ok, %s failed, %s failed step(s), %s skipped step(s)",
            scope,
            project_key,
            result.ok_count,
            result.failed_count,
            result.failed_steps,
            result.skipped_steps,
        )
        return result
