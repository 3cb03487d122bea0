"""Pit Wall page: at-risk scoreboard, per-issue actions and bulk runs.

All decisions come from ``TriageService``; this page only renders results.
"""

from __future__ import annotations

import logging
from typing import Any

import pandas as pd
import pytz
import streamlit as st

from pitwall.app import register_page
from pitwall.core.config import SCOPE_ALL, SCOPE_HIGH, SETTINGS, TIMEZONE
from pitwall.core.service import TriageService
from pitwall.visual.column_metadata import apply_column_metadata
from pitwall.visual.progress import BulkProgress
from pitwall.visual.tables import clean_summary, format_stale, prepare_scoreboard_table

logger = logging.getLogger(__name__)

TZ = pytz.timezone(TIMEZONE)

STEP_ICONS = {"done": "✅", "skipped": "⏭️", "failed": "❌"}
RISK_BADGES = {"HIGH": ":red[HIGH RISK]", "MEDIUM": ":orange[MEDIUM RISK]", "NORMAL": ":green[NORMAL]"}


def step_lines(steps: list[dict[str, Any]]) -> list[str]:
    return [f"{STEP_ICONS.get(s['status'], '•')} {s['label']}: {s['message']}" for s in steps]


def bulk_summary(result: dict[str, Any]) -> str:
    """One-line summary distinguishing crashed issues from skipped/failed steps."""
    if not result.get("ok"):
        return f"Bulk run failed: {result.get('error') or 'unknown error'}"
    return (
        f"{result['okCount']}/{result['total']} issue(s) ran, {result['failedCount']} crashed; "
        f"{result['failedSteps']} step(s) failed, {result['skippedSteps']} skipped."
    )


def action_toast(label: str, issue_key: str, res: dict[str, Any]) -> str:
    if res.get("ok"):
        if res.get("skipped"):
            return f"⏭️ {label} skipped for {issue_key} (already done)"
        return f"✅ {label} complete for {issue_key}"
    return f"❌ {label} for {issue_key} failed: {res.get('error') or 'unknown error'}"


def _format_updated(value: str | None) -> str:
    if not value:
        return "Unknown"
    ts = pd.to_datetime(value, utc=True, errors="coerce")
    if ts is None or pd.isna(ts):
        return "Unknown"
    return ts.tz_convert(TZ).strftime("%Y-%m-%d %H:%M")


def _load(service: TriageService, project: str) -> None:
    st.session_state["pitwall_listing"] = service.get_at_risk_issues(project)


def _render_stats(stats: dict[str, int]) -> None:
    cols = st.columns(5)
    cols[0].metric("High", stats.get("high", 0))
    cols[1].metric("Medium", stats.get("medium", 0))
    cols[2].metric("Normal", stats.get("normal", 0))
    cols[3].metric("Unassigned HIGH", stats.get("unassignedHigh", 0))
    cols[4].metric("SLA hot", stats.get("slaHot", 0))


def _render_run(res: dict[str, Any]) -> None:
    if not res.get("ok"):
        st.error(res.get("error") or "Run failed")
        return
    for line in step_lines(res["steps"]):
        st.write(line)
    if res.get("draft"):
        st.text_area("Customer update draft", res["draft"], height=140, key=f"draft_{res['issueKey']}")


def _render_issue(service: TriageService, issue: dict[str, Any], project: str, actor: str | None) -> None:
    key = issue["key"]
    marker = service.config.override_marker
    header = f"{key} · {clean_summary(issue['summary'], marker)}"
    with st.expander(header, expanded=issue["risk"] == "HIGH"):
        sla = issue.get("firstResponseRemainingHours")
        sla_text = f" | SLA (1st response): {sla:.1f}h" if sla is not None else ""
        st.markdown(
            f"{RISK_BADGES.get(issue['risk'], issue['risk'])} `{issue['status']}` "
            f"Updated: {_format_updated(issue.get('updated'))} | "
            f"Stale: {format_stale(issue.get('staleHours'))} | "
            f"Owner: {issue.get('assigneeName') or 'Unassigned'}{sla_text}"
        )
        st.markdown(f"**Reason:** {' • '.join(issue['reasons']) or '—'}")
        if issue.get("pitWallCall") and issue["pitWallCall"] != "—":
            st.markdown(f"**Pit Wall call:** {issue['pitWallCall']}")
        st.caption(f"Recommended: {issue['recommendedPath']}")

        cols = st.columns(5)
        atomic = (
            ("Assign to me", lambda: service.assign_to_me(key, actor)),
            ("Request update", lambda: service.request_update(key)),
            ("Post playbook note", lambda: service.post_playbook_note(key, issue["reasons"])),
            ("Escalate", lambda: service.escalate(key)),
            ("Customer update", lambda: service.generate_customer_update(key)),
        )
        for col, (label, call) in zip(cols, atomic):
            if col.button(label, key=f"{label}_{key}"):
                res = call()
                st.session_state["pitwall_toast"] = action_toast(label, key, res)
                if res.get("draft"):
                    st.session_state.setdefault("pitwall_drafts", {})[key] = res["draft"]
                _load(service, project)
                st.rerun()

        run_cols = st.columns(3)
        if run_cols[0].button("Run recommended", key=f"run_rec_{key}", type="primary"):
            st.session_state.setdefault("pitwall_runs", {})[key] = service.run_recommended(key, actor)
        if run_cols[1].button("Run full playbook", key=f"run_pb_{key}"):
            st.session_state.setdefault("pitwall_runs", {})[key] = service.run_playbook(key, actor)
        if run_cols[2].button("Show cooldowns", key=f"cool_{key}"):
            res = service.get_issue_cooldowns(key)
            if res.get("ok"):
                st.json(res["cooldowns"])
            else:
                st.error(res.get("error"))

        run = st.session_state.get("pitwall_runs", {}).get(key)
        if run:
            _render_run(run)
        draft = st.session_state.get("pitwall_drafts", {}).get(key)
        if draft and not run:
            st.text_area("Customer update draft", draft, height=140, key=f"atomic_draft_{key}")


def _render_bulk(service: TriageService, project: str, actor: str | None) -> None:
    st.subheader("Bulk run")
    scope = st.radio(
        "Scope",
        [SCOPE_HIGH, SCOPE_ALL],
        format_func=lambda s: "High-risk only" if s == SCOPE_HIGH else "All visible",
        horizontal=True,
    )
    if not st.button("Run recommended for scope", key="bulk_run"):
        return
    reporter = BulkProgress(f"Bulk run ({scope}) on {project}")
    result = service.run_bulk_recommended(project, scope, actor, progress=reporter.callback)
    if reporter.finish(result, bulk_summary(result)) == "error":
        return
    rows = [
        {
            "issue": r["issueKey"],
            "risk": r.get("risk"),
            "ok": r["ok"],
            "detail": r.get("error") or "; ".join(step_lines(r.get("steps", []))),
        }
        for r in result["results"]
    ]
    st.dataframe(pd.DataFrame(rows), hide_index=True)
    _load(service, project)


@register_page("Pit Wall")
def pitwall_page():
    st.title("Pit Wall")
    st.caption("At-risk service work: explain the risk, run the playbook, avoid duplicate pings.")
    service: TriageService | None = st.session_state.get("triage_service")
    if service is None:
        st.warning("Initialize connection on Setup page first.")
        return
    project = st.session_state.get("project_key")
    actor = st.session_state.get("actor_account_id")

    if st.button("Refresh", type="primary") or "pitwall_listing" not in st.session_state:
        _load(service, project)

    toast = st.session_state.pop("pitwall_toast", None)
    if toast:
        st.info(toast)

    listing = st.session_state.get("pitwall_listing") or {}
    if listing.get("error"):
        logger.error("Listing failed: %s", listing["error"])
        st.error(f"Error: {listing['error']}")
        return
    issues = listing.get("issues") or []
    st.markdown(f"**Project:** {listing.get('projectKey') or project}")
    _render_stats(listing.get("stats") or {})
    if not issues:
        st.info("No open issues found.")
        return

    server = st.session_state.get("jira_server", "")
    table, display_cols, cfg = prepare_scoreboard_table(
        pd.DataFrame(issues), server, service.config.override_marker
    )
    column_config = apply_column_metadata(display_cols, cfg)
    st.dataframe(
        table[display_cols].head(SETTINGS.max_table_rows),
        hide_index=True,
        column_config=column_config,
    )

    st.markdown("---")
    for issue in issues:
        _render_issue(service, issue, project, actor)

    st.markdown("---")
    _render_bulk(service, project, actor)
