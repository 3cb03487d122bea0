"""Cooldown tracking rebuilt from audit-marked comment history.

There is no state store: "have we already done this recently" is answered by
scanning the issue's comments for the action's marker tag. The most recent
matching comment (minimum age) decides the remaining window.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from pitwall.core.config import TriageConfig
from pitwall.core.models import CommentModel, CooldownState

from .signals import hours_since, utc_now


def newest_marked_age(
    comments: Iterable[CommentModel],
    marker: str,
    now: datetime,
) -> float | None:
    """Age in hours of the most recent comment containing ``marker``."""
    if not marker:
        return None
    newest: float | None = None
    for c in comments:
        if marker not in (c.text or ""):
            continue
        age = hours_since(c.created, now)
        if age is None:
            continue
        if newest is None or age < newest:
            newest = age
    return newest


def compute_cooldown(
    comments: Iterable[CommentModel],
    marker: str,
    window_hours: float,
    now: datetime | None = None,
) -> CooldownState:
    now = now or utc_now()
    age = newest_marked_age(comments, marker, now)
    if age is None:
        return CooldownState(posted=False, age_hours=None, window_hours=window_hours, remaining_hours=0.0)
    return CooldownState(
        posted=True,
        age_hours=age,
        window_hours=window_hours,
        remaining_hours=max(0.0, window_hours - age),
    )


def issue_cooldowns(
    comments: Iterable[CommentModel],
    config: TriageConfig,
    now: datetime | None = None,
) -> dict[str, CooldownState]:
    now = now or utc_now()
    history = list(comments)
    return {
        "requestUpdate": compute_cooldown(
            history, config.mark_request_update, config.request_update_cooldown_hours, now
        ),
        "playbookNote": compute_cooldown(
            history, config.mark_playbook_note, config.playbook_note_cooldown_hours, now
        ),
    }
