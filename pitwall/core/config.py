"""Central configuration, constants, triage thresholds, and shared column definitions."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# =============================================================================
# Jira Connection Settings
# =============================================================================
TIMEZONE = "UTC"
DEFAULT_PROJECT_KEY = "SUP"

# Minimal projection requested for triage (search + single issue fetch)
JIRA_TRIAGE_FIELDS: Sequence[str] = (
    "summary",
    "status",
    "updated",
    "assignee",
    "labels",
    "sla",
)

# =============================================================================
# Risk Tiers
# =============================================================================
RISK_HIGH = "HIGH"
RISK_MEDIUM = "MEDIUM"
RISK_NORMAL = "NORMAL"

# Lower rank sorts first on the scoreboard
RISK_RANK: dict[str, int] = {
    RISK_HIGH: 0,
    RISK_MEDIUM: 1,
    RISK_NORMAL: 2,
}

# =============================================================================
# Action Vocabulary
# =============================================================================
ACTION_ASSIGN_OWNER = "AssignOwner"
ACTION_REQUEST_UPDATE = "RequestUpdate"
ACTION_POST_INTERNAL_NOTE = "PostInternalNote"
ACTION_GENERATE_CUSTOMER_DRAFT = "GenerateCustomerDraft"
ACTION_ESCALATE = "Escalate"

# Operator-facing labels (also used for the "next action" hint)
ACTION_LABELS: dict[str, str] = {
    ACTION_ASSIGN_OWNER: "Assign to me",
    ACTION_REQUEST_UPDATE: "Request update",
    ACTION_POST_INTERNAL_NOTE: "Post playbook note",
    ACTION_GENERATE_CUSTOMER_DRAFT: "Generate customer update",
    ACTION_ESCALATE: "Escalate",
}

# Short step keys reported in run results
STEP_KEYS: dict[str, str] = {
    ACTION_ASSIGN_OWNER: "assign",
    ACTION_REQUEST_UPDATE: "req",
    ACTION_POST_INTERNAL_NOTE: "note",
    ACTION_GENERATE_CUSTOMER_DRAFT: "draft",
    ACTION_ESCALATE: "esc",
}

# Fixed order of the full playbook macro (independent of the recommendation plan)
PLAYBOOK_SEQUENCE: Sequence[str] = (
    ACTION_ASSIGN_OWNER,
    ACTION_POST_INTERNAL_NOTE,
    ACTION_REQUEST_UPDATE,
    ACTION_GENERATE_CUSTOMER_DRAFT,
    ACTION_ESCALATE,
)

STEP_DONE = "done"
STEP_SKIPPED = "skipped"
STEP_FAILED = "failed"

SCOPE_HIGH = "high"
SCOPE_ALL = "all"
BULK_SCOPES: frozenset[str] = frozenset({SCOPE_HIGH, SCOPE_ALL})

NEXT_UPDATE_HINT = "Next business day (or sooner if progress)"

# =============================================================================
# Scoreboard Columns
# =============================================================================
SCOREBOARD_COLUMNS: Sequence[str] = (
    "Ticket",
    "risk",
    "summary",
    "status",
    "staleHours",
    "assigneeName",
    "firstResponseRemainingHours",
    "reasons",
    "next",
    "pitWallCall",
    "updated",
)


@dataclass(frozen=True, slots=True)
class TriageConfig:
    """Tunable thresholds, cooldown windows and audit markers.

    Passed explicitly to the classifier, planner, cooldown tracker, executor
    and bulk orchestrator so tests can exercise arbitrary combinations.
    """

    blocked_status_name: str = "Waiting for support"
    stale_medium_hours: float = 24.0
    stale_high_hours: float = 72.0
    sla_medium_hours: float = 8.0
    sla_high_hours: float = 2.0
    request_update_cooldown_hours: float = 6.0
    playbook_note_cooldown_hours: float = 12.0
    audit_mark: str = "[PITWALL]"
    override_marker: str = "[DEMO-HIGH]"
    escalation_label: str = "pitwall-escalated"
    search_limit: int = 10
    comment_page_size: int = 50

    @property
    def mark_request_update(self) -> str:
        return f"{self.audit_mark} Request update"

    @property
    def mark_playbook_note(self) -> str:
        return f"{self.audit_mark} Playbook note"

    @property
    def mark_escalation(self) -> str:
        return f"{self.audit_mark} Escalation"

    def with_overrides(self, overrides: Mapping[str, Any]) -> TriageConfig:
        """Return a copy with known keys replaced; unknown keys are ignored."""
        # Field types are strings here (postponed annotations)
        known = {f.name: str(f.type) for f in fields(self)}
        values: dict[str, Any] = {name: getattr(self, name) for name in known}
        for name, value in overrides.items():
            if name not in known or value is None:
                continue
            kind = known[name]
            if kind == "int":
                values[name] = int(value)
            elif kind == "float":
                values[name] = float(value)
            else:
                values[name] = str(value)
        return TriageConfig(**values)


DEFAULT_TRIAGE_CONFIG = TriageConfig()


def load_triage_config(base_path: str | Path | None = None) -> TriageConfig:
    """Load ``pitwall.yaml`` (``triage:`` section) with fallback to defaults.

    The file is looked up in ``base_path`` or, by default, the directory that
    contains the ``pitwall`` package. Missing or malformed files yield the
    default configuration.
    """
    base = Path(base_path or Path(__file__).resolve().parent.parent.parent)
    yaml_path = base / "pitwall.yaml"
    if not yaml_path.exists():
        return DEFAULT_TRIAGE_CONFIG
    try:
        data = yaml.safe_load(yaml_path.read_text()) or {}
        section = data.get("triage") or {}
        if not isinstance(section, dict):
            return DEFAULT_TRIAGE_CONFIG
        return DEFAULT_TRIAGE_CONFIG.with_overrides(section)
    except (yaml.YAMLError, OSError, TypeError, ValueError, AttributeError) as exc:
        logger.warning("Ignoring invalid triage config %s: %s", yaml_path, exc)
        return DEFAULT_TRIAGE_CONFIG


@dataclass(slots=True)
class AppSettings:
    max_table_rows: int = 1000


SETTINGS = AppSettings()
