import pytest
from conftest import ACTOR, first_response_sla, make_raw_comment, make_raw_issue

from pitwall.core.config import DEFAULT_TRIAGE_CONFIG, RISK_HIGH, RISK_MEDIUM, STEP_DONE, STEP_FAILED, STEP_SKIPPED
from pitwall.core.errors import MissingContextError, TrackerFetchError
from pitwall.core.models import RiskAssessment, Signals
from pitwall.triage.executor import ActionExecutor, escalation_required

LABEL = DEFAULT_TRIAGE_CONFIG.escalation_label


def statuses(result):
    return {s.key: s.status for s in result.steps}


def test_recommended_run_on_blocked_stale_unassigned(api, clock):
    api.put(make_raw_issue("SUP-1", updated_hours_ago=80))
    result = ActionExecutor(api, clock=clock).run("SUP-1", ACTOR)

    assert [s.key for s in result.steps] == ["assign", "req", "note", "draft"]
    assert all(s.status == STEP_DONE for s in result.steps)
    assert api.writes == [
        ("assign", "SUP-1", ACTOR),
        ("comment", "SUP-1", "[PITWALL] Request update"),
        ("comment", "SUP-1", "[PITWALL] Playbook note"),
    ]
    assert "assigning an owner" in result.draft
    assert result.outcome.risk == RISK_HIGH
    assert result.outcome.owner == "Unassigned"
    assert result.outcome.escalation_label == LABEL


def test_second_run_inside_window_writes_nothing(api, clock):
    api.put(make_raw_issue("SUP-1", updated_hours_ago=80))
    executor = ActionExecutor(api, clock=clock)
    executor.run("SUP-1", ACTOR)
    writes_after_first = list(api.writes)

    second = executor.run("SUP-1", ACTOR)
    assert api.writes == writes_after_first
    assert statuses(second) == {"req": STEP_SKIPPED, "note": STEP_SKIPPED, "draft": STEP_DONE}
    req = next(s for s in second.steps if s.key == "req")
    assert req.message == "Skipped: requested within 6h (6.0h remaining)"


def test_step_failure_does_not_stop_siblings(api, clock):
    api.put(make_raw_issue("SUP-1", updated_hours_ago=80))
    api.fail_writes.add("set_assignee")
    result = ActionExecutor(api, clock=clock).run("SUP-1", ACTOR)

    assert statuses(result) == {
        "assign": STEP_FAILED,
        "req": STEP_DONE,
        "note": STEP_DONE,
        "draft": STEP_DONE,
    }
    assign = result.steps[0]
    assert "set_assignee" in assign.message


def test_escalate_then_skip_when_label_present(api, clock):
    api.put(make_raw_issue("SUP-2", updated_hours_ago=3, assignee="Alice", sla=first_response_sla(1_800_000)))
    executor = ActionExecutor(api, clock=clock)

    first = executor.run("SUP-2", ACTOR)
    assert first.steps[-1].key == "esc"
    assert first.steps[-1].status == STEP_DONE
    assert ("label", "SUP-2", LABEL) in api.writes
    assert ("comment", "SUP-2", "[PITWALL] Escalation") in api.writes

    second = executor.run("SUP-2", ACTOR)
    esc = second.steps[-1]
    assert esc.status == STEP_SKIPPED
    assert esc.message == "Skipped: already escalated"
    assert [w for w in api.writes if w[0] == "label"] == [("label", "SUP-2", LABEL)]


def test_escalation_comment_failure_after_label(api, clock):
    api.put(make_raw_issue("SUP-2", updated_hours_ago=3, assignee="Alice", sla=first_response_sla(0)))
    api.fail_writes.add("add_comment")
    result = ActionExecutor(api, clock=clock).run("SUP-2", ACTOR)

    esc = result.steps[-1]
    assert esc.status == STEP_FAILED
    assert "applied but escalation comment failed" in esc.message
    assert LABEL in api.issues["SUP-2"]["fields"]["labels"]
    assert statuses(result)["req"] == STEP_FAILED


def test_missing_context_rejected_before_any_call(api, clock):
    executor = ActionExecutor(api, clock=clock)
    with pytest.raises(MissingContextError, match="Missing issueKey"):
        executor.run("", ACTOR)
    with pytest.raises(MissingContextError, match="No accountId in context"):
        executor.run("SUP-1", None)
    assert api.reads == []


def test_fetch_failure_propagates(api, clock):
    with pytest.raises(TrackerFetchError):
        ActionExecutor(api, clock=clock).run("SUP-404", ACTOR)


def test_draft_returned_without_draft_step(api, clock):
    api.put(make_raw_issue("SUP-3", status="Open", updated_hours_ago=2))
    result = ActionExecutor(api, clock=clock).run("SUP-3", ACTOR)
    assert [s.key for s in result.steps] == ["assign"]
    assert result.draft.startswith('Update on "Printer on floor 3 is down" (SUP-3)')


def test_playbook_runs_fixed_sequence_and_gates_escalation(api, clock):
    # blocked, assigned, 30h stale: MEDIUM so the policy declines escalation
    api.put(make_raw_issue("SUP-4", updated_hours_ago=30, assignee="Alice"))
    result = ActionExecutor(api, clock=clock).run_playbook("SUP-4", ACTOR)

    assert result.outcome.risk == RISK_MEDIUM
    assert [s.key for s in result.steps] == ["assign", "note", "req", "draft", "esc"]
    assert statuses(result) == {
        "assign": STEP_SKIPPED,
        "note": STEP_DONE,
        "req": STEP_DONE,
        "draft": STEP_DONE,
        "esc": STEP_SKIPPED,
    }
    assert result.steps[-1].message == "Skipped: escalation not required by policy"


def test_playbook_escalates_high_unassigned_without_sla(api, clock):
    api.put(make_raw_issue("SUP-5", updated_hours_ago=5))
    result = ActionExecutor(api, clock=clock).run_playbook("SUP-5", ACTOR)
    assert result.steps[-1].status == STEP_DONE
    assert LABEL in api.issues["SUP-5"]["fields"]["labels"]


def _sig(stale=5.0, unassigned=False, sla=None):
    return Signals(
        stale_hours=stale,
        is_blocked=True,
        is_unassigned=unassigned,
        manual_override=False,
        first_response_remaining_hours=sla,
    )


def test_escalation_policy():
    high = RiskAssessment(tier=RISK_HIGH)
    cfg = DEFAULT_TRIAGE_CONFIG
    assert escalation_required(_sig(sla=1.0), high, cfg)
    assert not escalation_required(_sig(sla=5.0, unassigned=True), high, cfg)
    assert escalation_required(_sig(stale=100), high, cfg)
    assert escalation_required(_sig(unassigned=True), high, cfg)
    assert not escalation_required(_sig(stale=100), RiskAssessment(tier=RISK_MEDIUM), cfg)


@pytest.mark.parametrize(
    "raw, phrase",
    [
        (make_raw_issue("SUP-6", assignee="Alice", updated_hours_ago=3, sla=first_response_sla(3_600_000)), "prioritised"),
        (make_raw_issue("SUP-6", assignee="Alice", updated_hours_ago=30), "following up with the team"),
        (make_raw_issue("SUP-6", assignee="Alice", updated_hours_ago=3), "actively working on your request"),
    ],
)
def test_draft_framing_follows_reasons(api, clock, raw, phrase):
    api.put(raw)
    result = ActionExecutor(api, clock=clock).run("SUP-6", ACTOR)
    assert phrase in result.draft
    assert statuses(result)["draft"] == STEP_DONE


def test_label_failure_fails_escalation_without_comment(api, clock):
    api.put(make_raw_issue("SUP-2", updated_hours_ago=3, assignee="Alice", sla=first_response_sla(0)))
    api.fail_writes.add("add_label")
    result = ActionExecutor(api, clock=clock).run("SUP-2", ACTOR)

    assert statuses(result) == {"req": STEP_DONE, "note": STEP_DONE, "draft": STEP_DONE, "esc": STEP_FAILED}
    assert "add_label" in result.steps[-1].message
    assert ("comment", "SUP-2", "[PITWALL] Escalation") not in api.writes
    assert api.issues["SUP-2"]["fields"]["labels"] == []


def test_cooldown_sees_marker_in_long_history(api, clock):
    chatter = [make_raw_comment(f"chat {i}", 200 - i) for i in range(60)]
    marker = make_raw_comment("[PITWALL] Request update", 1)
    api.put(make_raw_issue("SUP-8", assignee="Alice"), comments=chatter + [marker])
    result = ActionExecutor(api, clock=clock).run("SUP-8", ACTOR)
    assert statuses(result)["req"] == STEP_SKIPPED
    assert ("comment", "SUP-8", "[PITWALL] Request update") not in api.writes
