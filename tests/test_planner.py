from pitwall.core.config import (
    ACTION_ASSIGN_OWNER,
    ACTION_ESCALATE,
    ACTION_GENERATE_CUSTOMER_DRAFT,
    ACTION_POST_INTERNAL_NOTE,
    ACTION_REQUEST_UPDATE,
    DEFAULT_TRIAGE_CONFIG,
)
from pitwall.core.models import Signals
from pitwall.triage.planner import next_action, next_action_label, pit_wall_call, plan_actions, recommended_path

CFG = DEFAULT_TRIAGE_CONFIG


def sig(blocked=False, unassigned=False, override=False, sla=None):
    return Signals(
        stale_hours=5.0,
        is_blocked=blocked,
        is_unassigned=unassigned,
        manual_override=override,
        first_response_remaining_hours=sla,
    )


def test_quiet_issue_has_empty_plan():
    plan = plan_actions(sig(), CFG)
    assert plan == []
    assert next_action(plan) is None
    assert next_action_label(plan) == "—"
    assert recommended_path(plan) == "—"


def test_blocked_assigned_with_hot_sla_escalates_last():
    plan = plan_actions(sig(blocked=True, sla=1.0), CFG)
    assert plan == [
        ACTION_REQUEST_UPDATE,
        ACTION_POST_INTERNAL_NOTE,
        ACTION_GENERATE_CUSTOMER_DRAFT,
        ACTION_ESCALATE,
    ]
    assert next_action_label(plan) == "Request update"


def test_sla_above_high_threshold_does_not_escalate():
    assert ACTION_ESCALATE not in plan_actions(sig(blocked=True, sla=2.5), CFG)


def test_unassigned_comes_first():
    plan = plan_actions(sig(unassigned=True), CFG)
    assert plan == [ACTION_ASSIGN_OWNER]
    assert recommended_path(plan) == "Assign to me"


def test_override_only_adds_draft_when_plan_is_otherwise_empty():
    assert plan_actions(sig(override=True), CFG) == [ACTION_GENERATE_CUSTOMER_DRAFT]
    assert plan_actions(sig(override=True, unassigned=True), CFG) == [ACTION_ASSIGN_OWNER]


def test_recommended_path_joins_labels():
    plan = plan_actions(sig(blocked=True, unassigned=True), CFG)
    assert recommended_path(plan) == (
        "Assign to me → Request update → Post playbook note → Generate customer update"
    )


def test_pit_wall_call_only_for_blocked():
    assert pit_wall_call(sig(blocked=True)) == "Post playbook note — Blocked — document the plan and next steps."
    assert pit_wall_call(sig(override=True, unassigned=True)) == "—"
