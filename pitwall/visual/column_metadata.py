"""Scoreboard column labels, hover help and widths for table rendering."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import streamlit as st

# column key -> (label, help text, kind)
# kind: "hours" numeric with one decimal, "tier" narrow text, None plain text
COLUMN_METADATA: dict[str, tuple[str, str, str | None]] = {
    "risk": ("Risk", "Risk tier computed from blocked status, staleness, ownership and SLA.", "tier"),
    "summary": ("Summary", "Issue summary from Jira (override marker removed).", None),
    "status": ("Status", "Current Jira workflow status.", None),
    "assigneeName": ("Owner", "Current assignee; empty when unassigned.", None),
    "updated": ("Updated", "Timestamp of the most recent update in Jira (UTC).", None),
    "staleHours": ("Stale (h)", "Hours since the last update.", "hours"),
    "firstResponseRemainingHours": (
        "SLA 1st response (h)",
        "Hours left on the first-response SLA goal; empty when unknown, 0 when breached.",
        "hours",
    ),
    "reasons": ("Reasons", "Signals that explain the risk tier.", None),
    "next": ("Next action", "First step of the recommended remediation plan.", None),
    "pitWallCall": ("Pit Wall call", "Headline instruction for blocked issues.", None),
    "recommendedPath": ("Recommended path", "Full recommended remediation plan, in order.", None),
}


def _column(label: str, help_text: str, kind: str | None):
    if kind == "hours":
        return st.column_config.NumberColumn(label, help=help_text, format="%.1f", min_value=0)
    if kind == "tier":
        return st.column_config.TextColumn(label, help=help_text, width="small")
    return st.column_config.TextColumn(label, help=help_text)


def apply_column_metadata(
    columns: Iterable[str],
    existing: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Merge scoreboard column configs into ``existing`` (entries there win)."""
    config: dict[str, Any] = dict(existing or {})
    for col in columns:
        meta = COLUMN_METADATA.get(col)
        if meta and col not in config:
            config[col] = _column(*meta)
    return config
