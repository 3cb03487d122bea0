"""At-risk scoreboard: tabulate assessed issues, order them and summarise tiers."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import pandas as pd

from pitwall.core.config import RISK_HIGH, RISK_MEDIUM, RISK_NORMAL, RISK_RANK, TriageConfig
from pitwall.core.models import IssueSnapshot, RiskAssessment, Signals
from pitwall.triage.planner import next_action_label, pit_wall_call, recommended_path

SCOREBOARD_FIELDS = (
    "key",
    "summary",
    "status",
    "updated",
    "stale_hours",
    "assignee",
    "sla_first_response_hours",
    "risk",
    "reasons",
    "recommended",
    "next_action",
    "pit_wall_call",
    "recommended_path",
)


@dataclass(slots=True)
class ScoredIssue:
    issue: IssueSnapshot
    signals: Signals
    assessment: RiskAssessment
    plan: list[str]


def scoreboard_frame(scored: Iterable[ScoredIssue]) -> pd.DataFrame:
    rows = []
    for s in scored:
        rows.append(
            {
                "key": s.issue.key,
                "summary": s.issue.summary,
                "status": s.issue.status,
                "updated": s.issue.updated,
                "stale_hours": s.signals.stale_hours,
                "assignee": s.issue.assignee.display_name if s.issue.assignee else None,
                "sla_first_response_hours": s.signals.first_response_remaining_hours,
                "risk": s.assessment.tier,
                "reasons": list(s.assessment.reasons),
                "recommended": list(s.plan),
                "next_action": next_action_label(s.plan),
                "pit_wall_call": pit_wall_call(s.signals),
                "recommended_path": recommended_path(s.plan),
            }
        )
    if not rows:
        return pd.DataFrame(columns=list(SCOREBOARD_FIELDS))
    return pd.DataFrame(rows, columns=list(SCOREBOARD_FIELDS))


def sort_scoreboard(df: pd.DataFrame) -> pd.DataFrame:
    """Order by risk rank (HIGH first), then oldest update first; unknown updates last."""
    if df.empty:
        return df
    out = df.copy()
    out["_rank"] = out["risk"].map(RISK_RANK).fillna(len(RISK_RANK))
    out["_updated"] = pd.to_datetime(out["updated"], utc=True, errors="coerce")
    out = out.sort_values(by=["_rank", "_updated"], ascending=[True, True], na_position="last")
    return out.drop(columns=["_rank", "_updated"]).reset_index(drop=True)


def scoreboard_stats(df: pd.DataFrame, config: TriageConfig) -> dict[str, int]:
    if df.empty:
        return {"high": 0, "medium": 0, "normal": 0, "unassignedHigh": 0, "slaHot": 0}
    counts = df["risk"].value_counts()
    high = df["risk"] == RISK_HIGH
    sla = pd.to_numeric(df["sla_first_response_hours"], errors="coerce")
    return {
        "high": int(counts.get(RISK_HIGH, 0)),
        "medium": int(counts.get(RISK_MEDIUM, 0)),
        "normal": int(counts.get(RISK_NORMAL, 0)),
        "unassignedHigh": int((high & df["assignee"].isna()).sum()),
        "slaHot": int((sla.notna() & (sla <= config.sla_high_hours)).sum()),
    }


def _clean(value):
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    if hasattr(value, "isoformat"):
        return value.isoformat()
    # numpy scalars -> builtin
    if hasattr(value, "item"):
        return value.item()
    return value


def scoreboard_records(df: pd.DataFrame) -> list[dict]:
    """JSON-ready issue dicts (camelCase keys) in the frame's order."""
    records = []
    for row in df.to_dict(orient="records"):
        records.append(
            {
                "key": row["key"],
                "summary": row["summary"],
                "status": row["status"],
                "updated": _clean(row["updated"]),
                "staleHours": _clean(row["stale_hours"]),
                "assigneeName": _clean(row["assignee"]),
                "firstResponseRemainingHours": _clean(row["sla_first_response_hours"]),
                "risk": row["risk"],
                "reasons": list(row["reasons"]),
                "recommended": list(row["recommended"]),
                "next": row["next_action"],
                "pitWallCall": row["pit_wall_call"],
                "recommendedPath": row["recommended_path"],
            }
        )
    return records
