"""Recommendation planner: ordered remediation actions derived from signals.

The plan is built from signals rather than from the tier, so it stays stable
and explainable independently of the classifier.
"""

from __future__ import annotations

from collections.abc import Sequence

from pitwall.core.config import (
    ACTION_ASSIGN_OWNER,
    ACTION_ESCALATE,
    ACTION_GENERATE_CUSTOMER_DRAFT,
    ACTION_LABELS,
    ACTION_POST_INTERNAL_NOTE,
    ACTION_REQUEST_UPDATE,
    TriageConfig,
)
from pitwall.core.models import Signals

from .risk import is_sla_high

NO_ACTION = "—"


def plan_actions(signals: Signals, config: TriageConfig) -> list[str]:
    plan: list[str] = []
    if signals.is_unassigned:
        plan.append(ACTION_ASSIGN_OWNER)
    if signals.is_blocked:
        plan.extend((ACTION_REQUEST_UPDATE, ACTION_POST_INTERNAL_NOTE, ACTION_GENERATE_CUSTOMER_DRAFT))
    if is_sla_high(signals, config):
        plan.append(ACTION_ESCALATE)
    if not signals.is_blocked and signals.manual_override and not plan:
        plan.append(ACTION_GENERATE_CUSTOMER_DRAFT)
    return plan


def next_action(plan: Sequence[str]) -> str | None:
    return plan[0] if plan else None


def action_labels(plan: Sequence[str]) -> list[str]:
    return [ACTION_LABELS.get(a, a) for a in plan]


def next_action_label(plan: Sequence[str]) -> str:
    first = next_action(plan)
    return ACTION_LABELS.get(first, first) if first else NO_ACTION


def recommended_path(plan: Sequence[str]) -> str:
    return " → ".join(action_labels(plan)) if plan else NO_ACTION


def pit_wall_call(signals: Signals) -> str:
    """Headline instruction for the issue card."""
    if signals.is_blocked:
        return "Post playbook note — Blocked — document the plan and next steps."
    return NO_ACTION
