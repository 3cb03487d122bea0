"""Table and text helpers for rendering the at-risk scoreboard in Streamlit."""

from __future__ import annotations

import pandas as pd
import streamlit as st

from pitwall.core.config import SCOREBOARD_COLUMNS


def format_stale(stale_hours: float | None) -> str:
    """Compact staleness: hours below a day, otherwise days with one decimal."""
    if stale_hours is None or pd.isna(stale_hours):
        return "Unknown"
    if stale_hours < 24:
        return f"{round(stale_hours)}h"
    return f"{stale_hours / 24:.1f}d"


def clean_summary(summary: str | None, override_marker: str) -> str:
    if not summary:
        return ""
    if not override_marker:
        return summary.strip()
    return summary.replace(override_marker, "").strip()


def add_ticket_link(df: pd.DataFrame, server: str, key_col: str = "key", label: str = "Ticket"):
    if df.empty or key_col not in df.columns:
        return df, {}
    out = df.copy()
    base = server.rstrip("/")
    out[label] = out[key_col].astype(str).apply(lambda k: f"{base}/browse/{k}" if k and k != "nan" else "")
    cfg = {
        label: st.column_config.LinkColumn(
            label,
            display_text=r"browse/(.*)$",
            help="Open in Jira",
            width="medium",
        )
    }
    return out, cfg


def prepare_scoreboard_table(
    df: pd.DataFrame,
    server: str,
    override_marker: str,
) -> tuple[pd.DataFrame, list[str], dict[str, object]]:
    if df.empty:
        return df, [], {}

    table, cfg = add_ticket_link(df, server)
    table["summary"] = table["summary"].apply(lambda s: clean_summary(s, override_marker))
    table["reasons"] = table["reasons"].apply(lambda r: " • ".join(r) if r else "—")
    display_cols = [col for col in SCOREBOARD_COLUMNS if col in table.columns]
    return table, display_cols, cfg
