"""Signal extraction: staleness, ownership, override and SLA-remaining signals."""

from __future__ import annotations

from datetime import datetime

import pytz

from pitwall.core.config import TriageConfig
from pitwall.core.models import IssueSnapshot, Signals
from pitwall.core.status import is_blocked_status

from .sla import extract_first_response_remaining_hours


def utc_now() -> datetime:
    return datetime.now(pytz.UTC)


def hours_since(ts: datetime | None, now: datetime) -> float | None:
    """Elapsed hours from ``ts`` to ``now``, floored at zero; None without a timestamp."""
    if ts is None:
        return None
    if ts.tzinfo is None:
        ts = pytz.UTC.localize(ts)
    if now.tzinfo is None:
        now = pytz.UTC.localize(now)
    return max(0.0, (now - ts).total_seconds() / 3600.0)


def extract_signals(
    issue: IssueSnapshot,
    config: TriageConfig,
    now: datetime | None = None,
) -> Signals:
    now = now or utc_now()
    return Signals(
        stale_hours=hours_since(issue.updated, now),
        is_blocked=is_blocked_status(issue.status, config.blocked_status_name),
        is_unassigned=issue.assignee is None,
        manual_override=bool(config.override_marker) and config.override_marker in (issue.summary or ""),
        first_response_remaining_hours=extract_first_response_remaining_hours(issue.sla),
    )
