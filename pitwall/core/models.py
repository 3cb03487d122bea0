"""Domain data models for issue snapshots, comments, triage signals and run results."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any


@dataclass(slots=True)
class AssigneeModel:
    account_id: str | None
    display_name: str | None


@dataclass(slots=True)
class CommentModel:
    author: str | None
    created: datetime | None
    body: Any
    text: str = ""


@dataclass(slots=True)
class IssueSnapshot:
    key: str
    summary: str
    status: str
    updated: datetime | None
    assignee: AssigneeModel | None = None
    labels: list[str] = field(default_factory=list)
    sla: Any = None


@dataclass(slots=True)
class Signals:
    stale_hours: float | None
    is_blocked: bool
    is_unassigned: bool
    manual_override: bool
    first_response_remaining_hours: float | None


@dataclass(slots=True)
class RiskAssessment:
    tier: str
    reasons: list[str] = field(default_factory=list)


@dataclass(slots=True)
class CooldownState:
    posted: bool
    age_hours: float | None
    window_hours: float
    remaining_hours: float

    @property
    def active(self) -> bool:
        return self.remaining_hours > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "posted": self.posted,
            "ageHours": self.age_hours,
            "windowHours": self.window_hours,
            "remainingHours": self.remaining_hours,
        }


@dataclass(slots=True)
class StepResult:
    key: str
    label: str
    status: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


@dataclass(slots=True)
class Outcome:
    owner: str
    risk: str
    reasons: list[str]
    recommended: list[str]
    next_update: str
    escalation_label: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "owner": self.owner,
            "risk": self.risk,
            "reasons": list(self.reasons),
            "recommended": list(self.recommended),
            "nextUpdate": self.next_update,
            "escalationLabel": self.escalation_label,
        }


@dataclass(slots=True)
class ExecutionResult:
    issue_key: str
    steps: list[StepResult]
    draft: str
    outcome: Outcome

    def count(self, status: str) -> int:
        return sum(1 for step in self.steps if step.status == status)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": True,
            "issueKey": self.issue_key,
            "steps": [s.to_dict() for s in self.steps],
            "draft": self.draft,
            "outcome": self.outcome.to_dict(),
        }


@dataclass(slots=True)
class BulkIssueResult:
    issue_key: str
    ok: bool
    risk: str | None = None
    steps: list[StepResult] = field(default_factory=list)
    draft: str = ""
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        if not self.ok:
            return {"issueKey": self.issue_key, "ok": False, "risk": self.risk, "error": self.error}
        return {
            "issueKey": self.issue_key,
            "ok": True,
            "risk": self.risk,
            "steps": [s.to_dict() for s in self.steps],
            "draft": self.draft,
        }


@dataclass(slots=True)
class BulkResult:
    scope: str
    results: list[BulkIssueResult] = field(default_factory=list)
    ok_count: int = 0
    failed_count: int = 0
    failed_steps: int = 0
    skipped_steps: int = 0

    @property
    def total(self) -> int:
        return len(self.results)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": True,
            "scope": self.scope,
            "total": self.total,
            "okCount": self.ok_count,
            "failedCount": self.failed_count,
            "failedSteps": self.failed_steps,
            "skippedSteps": self.skipped_steps,
            "results": [r.to_dict() for r in self.results],
        }
