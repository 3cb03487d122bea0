"""Audit-marked comment templates and the customer update draft.

Every write-producing action posts a comment whose first line is the action's
marker tag, so the cooldown tracker and human auditors can rebuild history.
"""

from __future__ import annotations

from collections.abc import Sequence

from pitwall.core.config import TriageConfig

from .risk import REASON_UNASSIGNED


def request_update_lines(config: TriageConfig) -> list[str]:
    return [
        config.mark_request_update,
        "Pit stop check: please post a quick update.",
        "",
        "• What's blocking?",
        "• ETA for next step?",
        "• Do you need help?",
    ]


def playbook_note_lines(config: TriageConfig, reasons: Sequence[str] | None) -> list[str]:
    reason_line = f"Reasons: {' • '.join(reasons)}" if reasons else "Reasons: n/a"
    return [
        config.mark_playbook_note,
        reason_line,
        "",
        "Plan:",
        "1) Assign owner (if missing)",
        "2) Request update on blockers",
        "3) Generate customer update draft",
        "4) Escalate if SLA hot / risk HIGH persists",
    ]


def escalation_lines(config: TriageConfig) -> list[str]:
    return [
        config.mark_escalation,
        f'Escalation applied: label "{config.escalation_label}"',
    ]


def doing_now(reasons: Sequence[str]) -> str:
    """Customer-facing framing of the current remediation, chosen from active reasons."""
    if REASON_UNASSIGNED in reasons:
        return "We are assigning an owner and beginning investigation immediately."
    if any(r.startswith("SLA") for r in reasons):
        return "We have prioritised your request and a specialist is picking it up now."
    if any(r.startswith("Stale") for r in reasons):
        return "We are following up with the team on the latest progress and next steps."
    return "We are actively working on your request."


def build_customer_draft(
    issue_key: str,
    summary: str,
    status: str,
    reasons: Sequence[str],
    config: TriageConfig,
    next_update: str = "within the next business day (or sooner if we make progress)",
) -> str:
    clean = (summary or issue_key).replace(config.override_marker, "").strip() or issue_key
    return (
        f'Update on "{clean}" ({issue_key})\n'
        f"Current status: {status}\n"
        f"What we're doing now: {doing_now(reasons)}\n"
        f"Next update: {next_update}\n"
        "Thanks for your patience, we'll keep you posted."
    )
