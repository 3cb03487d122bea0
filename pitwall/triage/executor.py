"""ActionExecutor: runs one issue's remediation plan with per-step failure isolation."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime

from pitwall.core.config import (
    ACTION_ASSIGN_OWNER,
    ACTION_ESCALATE,
    ACTION_GENERATE_CUSTOMER_DRAFT,
    ACTION_LABELS,
    ACTION_POST_INTERNAL_NOTE,
    ACTION_REQUEST_UPDATE,
    DEFAULT_TRIAGE_CONFIG,
    NEXT_UPDATE_HINT,
    PLAYBOOK_SEQUENCE,
    RISK_HIGH,
    STEP_DONE,
    STEP_FAILED,
    STEP_KEYS,
    STEP_SKIPPED,
    TriageConfig,
)
from pitwall.core.errors import MissingContextError
from pitwall.core.jira_client import JiraAPI
from pitwall.core.mappers import map_comments, map_issue
from pitwall.core.models import (
    CommentModel,
    CooldownState,
    ExecutionResult,
    IssueSnapshot,
    Outcome,
    RiskAssessment,
    Signals,
    StepResult,
)

from .cooldown import compute_cooldown
from .drafts import build_customer_draft, escalation_lines, playbook_note_lines, request_update_lines
from .planner import plan_actions
from .risk import assess_risk, is_sla_high, is_stale_high
from .signals import extract_signals, utc_now

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


@dataclass(slots=True)
class RunContext:
    """Single snapshot of the inputs for one run; never re-fetched between steps."""

    issue: IssueSnapshot
    comments: list[CommentModel]
    signals: Signals
    assessment: RiskAssessment
    plan: list[str]
    actor_id: str
    now: datetime
    draft: str = ""
    policy_gated: bool = False


def escalation_required(signals: Signals, assessment: RiskAssessment, config: TriageConfig) -> bool:
    """Escalation policy used by the full playbook run.

    HIGH risk and either a hot first-response SLA, or (SLA unknown) high
    staleness or missing owner.
    """
    if assessment.tier != RISK_HIGH:
        return False
    if signals.first_response_remaining_hours is not None:
        return is_sla_high(signals, config)
    return is_stale_high(signals, config) or signals.is_unassigned


def _fmt_hours(value: float) -> str:
    return f"{value:.1f}h"


class ActionExecutor:
    def __init__(
        self,
        api: JiraAPI,
        config: TriageConfig = DEFAULT_TRIAGE_CONFIG,
        clock: Clock = utc_now,
    ):
        self.api = api
        self.config = config
        self.clock = clock

    # ------------------ Context ------------------
    def load(self, issue_key: str, actor_id: str | None) -> RunContext:
        if not issue_key:
            raise MissingContextError("Missing issueKey")
        if not actor_id:
            raise MissingContextError("No accountId in context")
        issue = map_issue(self.api.get_issue(issue_key))
        if not issue.key:
            issue.key = issue_key
        comments = map_comments(self.api.get_comments(issue_key, max_results=self.config.comment_page_size))
        now = self.clock()
        signals = extract_signals(issue, self.config, now)
        assessment = assess_risk(signals, self.config)
        ctx = RunContext(
            issue=issue,
            comments=comments,
            signals=signals,
            assessment=assessment,
            plan=plan_actions(signals, self.config),
            actor_id=actor_id,
            now=now,
        )
        ctx.draft = build_customer_draft(
            issue.key, issue.summary, issue.status, assessment.reasons, self.config
        )
        return ctx

    # ------------------ Runs ------------------
    def run(self, issue_key: str, actor_id: str | None) -> ExecutionResult:
        """Execute the recommendation plan for ``issue_key``."""
        ctx = self.load(issue_key, actor_id)
        return self.execute(ctx, ctx.plan)

    def run_playbook(self, issue_key: str, actor_id: str | None) -> ExecutionResult:
        """Execute the fixed playbook; escalation additionally gated by policy."""
        ctx = self.load(issue_key, actor_id)
        ctx.policy_gated = True
        return self.execute(ctx, PLAYBOOK_SEQUENCE)

    def execute(self, ctx: RunContext, actions: Sequence[str]) -> ExecutionResult:
        steps: list[StepResult] = []
        for action in actions:
            steps.append(self._run_step(ctx, action))
        failed = sum(1 for s in steps if s.status == STEP_FAILED)
        logger.info(
            "Run for %s finished: %s step(s), %s failed, tier=%s",
            ctx.issue.key,
            len(steps),
            failed,
            ctx.assessment.tier,
        )
        return ExecutionResult(
            issue_key=ctx.issue.key,
            steps=steps,
            draft=ctx.draft,
            outcome=self._outcome(ctx),
        )

    def _outcome(self, ctx: RunContext) -> Outcome:
        owner = ctx.issue.assignee.display_name if ctx.issue.assignee else None
        return Outcome(
            owner=owner or "Unassigned",
            risk=ctx.assessment.tier,
            reasons=list(ctx.assessment.reasons),
            recommended=list(ctx.plan),
            next_update=NEXT_UPDATE_HINT,
            escalation_label=self.config.escalation_label,
        )

    def _run_step(self, ctx: RunContext, action: str) -> StepResult:
        handler = self._handlers().get(action)
        if handler is None:
            return self._step(action, STEP_SKIPPED, f"Skipped: unknown action {action}")
        try:
            return handler(ctx)
        except Exception as exc:  # step boundary: never abort sibling steps
            logger.warning("Step %s failed for %s: %s", action, ctx.issue.key, exc)
            return self._step(action, STEP_FAILED, str(exc))

    def _handlers(self) -> dict[str, Callable[[RunContext], StepResult]]:
        return {
            ACTION_ASSIGN_OWNER: self._assign_owner,
            ACTION_REQUEST_UPDATE: self._request_update,
            ACTION_POST_INTERNAL_NOTE: self._post_internal_note,
            ACTION_GENERATE_CUSTOMER_DRAFT: self._customer_draft,
            ACTION_ESCALATE: self._escalate,
        }

    @staticmethod
    def _step(action: str, status: str, message: str) -> StepResult:
        return StepResult(
            key=STEP_KEYS.get(action, action),
            label=ACTION_LABELS.get(action, action),
            status=status,
            message=message,
        )

    # ------------------ Step handlers ------------------
    def _assign_owner(self, ctx: RunContext) -> StepResult:
        key = ctx.issue.key
        if ctx.issue.assignee is not None:
            return self._step(ACTION_ASSIGN_OWNER, STEP_SKIPPED, "Skipped: already assigned")
        self.api.set_assignee(key, ctx.actor_id)
        return self._step(ACTION_ASSIGN_OWNER, STEP_DONE, f"Assigned {key}")

    def _cooldown_skip(self, action: str, state: CooldownState, verb: str) -> StepResult:
        logger.debug("Cooldown active for %s (%.2fh left)", action, state.remaining_hours)
        return self._step(
            action,
            STEP_SKIPPED,
            f"Skipped: {verb} within {state.window_hours:g}h ({_fmt_hours(state.remaining_hours)} remaining)",
        )

    def _request_update(self, ctx: RunContext) -> StepResult:
        state = compute_cooldown(
            ctx.comments,
            self.config.mark_request_update,
            self.config.request_update_cooldown_hours,
            ctx.now,
        )
        if state.active:
            return self._cooldown_skip(ACTION_REQUEST_UPDATE, state, "requested")
        self.api.add_comment(ctx.issue.key, request_update_lines(self.config))
        return self._step(ACTION_REQUEST_UPDATE, STEP_DONE, f"Request update posted for {ctx.issue.key}")

    def _post_internal_note(self, ctx: RunContext) -> StepResult:
        state = compute_cooldown(
            ctx.comments,
            self.config.mark_playbook_note,
            self.config.playbook_note_cooldown_hours,
            ctx.now,
        )
        if state.active:
            return self._cooldown_skip(ACTION_POST_INTERNAL_NOTE, state, "posted")
        self.api.add_comment(ctx.issue.key, playbook_note_lines(self.config, ctx.assessment.reasons))
        return self._step(ACTION_POST_INTERNAL_NOTE, STEP_DONE, f"Playbook note posted for {ctx.issue.key}")

    def _customer_draft(self, ctx: RunContext) -> StepResult:
        return self._step(ACTION_GENERATE_CUSTOMER_DRAFT, STEP_DONE, f"Draft ready for {ctx.issue.key}")

    def _escalate(self, ctx: RunContext) -> StepResult:
        key = ctx.issue.key
        label = self.config.escalation_label
        if ctx.policy_gated and not escalation_required(ctx.signals, ctx.assessment, self.config):
            return self._step(ACTION_ESCALATE, STEP_SKIPPED, "Skipped: escalation not required by policy")
        if label in ctx.issue.labels:
            return self._step(ACTION_ESCALATE, STEP_SKIPPED, "Skipped: already escalated")
        self.api.add_label(key, label)
        try:
            self.api.add_comment(key, escalation_lines(self.config))
        except Exception as exc:
            logger.warning("Escalation comment failed for %s after labelling: %s", key, exc)
            return self._step(
                ACTION_ESCALATE,
                STEP_FAILED,
                f'Label "{label}" applied but escalation comment failed: {exc}',
            )
        return self._step(ACTION_ESCALATE, STEP_DONE, f"Escalated {key}")
