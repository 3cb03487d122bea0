"""Risk classification: tier plus ordered, human-readable reasons.

Pure function of ``Signals`` and ``TriageConfig``; nothing is cached between
calls. Precedence, highest first:

    manual override > SLA high > unassigned (blocked) > stale > SLA medium floor

Only blocked issues are escalated by staleness, ownership or SLA. A manual
override forces HIGH regardless of everything else.

Reasons are collected independently of the tier, always in the order
override, blocked, unassigned, stale, SLA. The high stale/SLA reason replaces
the medium one when both thresholds are crossed.
"""

from __future__ import annotations

from pitwall.core.config import RISK_HIGH, RISK_MEDIUM, RISK_NORMAL, RISK_RANK, TriageConfig
from pitwall.core.models import RiskAssessment, Signals

REASON_OVERRIDE = "Manual override"
REASON_UNASSIGNED = "Unassigned"


def _fmt_hours(value: float) -> str:
    return f"{value:g}h"


def stale_reason(hours: float) -> str:
    return f"Stale {_fmt_hours(hours)}+"


def sla_reason(hours: float) -> str:
    return f"SLA <= {_fmt_hours(hours)}"


def raise_tier(current: str, floor: str) -> str:
    """Return the more severe of two tiers."""
    return floor if RISK_RANK[floor] < RISK_RANK[current] else current


def is_stale_high(signals: Signals, config: TriageConfig) -> bool:
    return signals.stale_hours is not None and signals.stale_hours >= config.stale_high_hours


def is_stale_medium(signals: Signals, config: TriageConfig) -> bool:
    return signals.stale_hours is not None and signals.stale_hours >= config.stale_medium_hours


def is_sla_high(signals: Signals, config: TriageConfig) -> bool:
    remaining = signals.first_response_remaining_hours
    return remaining is not None and remaining <= config.sla_high_hours


def is_sla_medium(signals: Signals, config: TriageConfig) -> bool:
    remaining = signals.first_response_remaining_hours
    return remaining is not None and remaining <= config.sla_medium_hours


def compute_reasons(signals: Signals, config: TriageConfig) -> list[str]:
    reasons: list[str] = []

    def add(reason: str) -> None:
        if reason not in reasons:
            reasons.append(reason)

    if signals.manual_override:
        add(REASON_OVERRIDE)
    if signals.is_blocked:
        add(config.blocked_status_name)
    if signals.is_unassigned:
        add(REASON_UNASSIGNED)

    if is_stale_high(signals, config):
        add(stale_reason(config.stale_high_hours))
    elif is_stale_medium(signals, config):
        add(stale_reason(config.stale_medium_hours))

    if is_sla_high(signals, config):
        add(sla_reason(config.sla_high_hours))
    elif is_sla_medium(signals, config):
        add(sla_reason(config.sla_medium_hours))
    return reasons


def compute_tier(signals: Signals, config: TriageConfig) -> str:
    tier = RISK_NORMAL

    if signals.is_blocked:
        tier = RISK_MEDIUM

        if is_stale_high(signals, config):
            tier = RISK_HIGH
        elif is_stale_medium(signals, config):
            tier = raise_tier(tier, RISK_MEDIUM)

        if signals.is_unassigned:
            tier = RISK_HIGH

        if is_sla_high(signals, config):
            tier = RISK_HIGH
        elif is_sla_medium(signals, config):
            tier = raise_tier(tier, RISK_MEDIUM)

    # evaluated last: always wins
    if signals.manual_override:
        tier = RISK_HIGH
    return tier


def assess_risk(signals: Signals, config: TriageConfig) -> RiskAssessment:
    return RiskAssessment(tier=compute_tier(signals, config), reasons=compute_reasons(signals, config))
