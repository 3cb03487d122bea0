"""Best-effort parsing of Jira Service Management SLA payloads.

The ``sla`` field has no guaranteed shape. It may be a list of goal entries, a
map of goal entries keyed by id, or a single goal object. Each shape is modelled
as its own variant; anything else is ``UnrecognizedSla`` and yields ``None``.

Value resolution for a matching "first response" goal, in order:

1. a breached flag            -> 0 hours
2. a millisecond remainder    -> ms / 3_600_000
3. a duration string (1d 2h 30m, any subset, case-insensitive)
4. "breach"/"breached"/"overdue" anywhere in the string -> 0 hours
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

FIRST_RESPONSE = "first response"
MS_PER_HOUR = 3_600_000.0

_DAYS_RE = re.compile(r"(\d+)\s*d", re.IGNORECASE)
_HOURS_RE = re.compile(r"(\d+)\s*h", re.IGNORECASE)
_MINUTES_RE = re.compile(r"(\d+)\s*m", re.IGNORECASE)
_BREACH_WORDS = ("breach", "breached", "overdue")

_NAME_KEYS = ("name", "goalName", "metricName")
_TEXT_KEYS = ("friendly", "display")


@dataclass(slots=True)
class SlaGoalList:
    entries: list[Any]

    def goals(self) -> Iterator[Any]:
        yield from self.entries


@dataclass(slots=True)
class SlaGoalMap:
    entries: dict[str, Any]

    def goals(self) -> Iterator[Any]:
        yield from self.entries.values()


@dataclass(slots=True)
class SingleSlaGoal:
    entry: dict[str, Any]

    def goals(self) -> Iterator[Any]:
        yield self.entry


@dataclass(slots=True)
class UnrecognizedSla:
    raw: Any

    def goals(self) -> Iterator[Any]:
        return iter(())


SlaPayload = SlaGoalList | SlaGoalMap | SingleSlaGoal | UnrecognizedSla


def classify_sla_payload(raw: Any) -> SlaPayload:
    if isinstance(raw, (list, tuple)):
        return SlaGoalList(list(raw))
    if isinstance(raw, dict):
        if any(k in raw for k in _NAME_KEYS):
            return SingleSlaGoal(raw)
        return SlaGoalMap(raw)
    return UnrecognizedSla(raw)


def parse_duration_hours(text: Any) -> float | None:
    """Parse a human-readable remaining duration into hours.

    Examples
    --------
    >>> parse_duration_hours("1h 30m")
    1.5
    >>> parse_duration_hours("2d 4H")
    52.0
    >>> parse_duration_hours("soon") is None
    True
    """
    if text is None:
        return None
    t = str(text).strip()
    if not t:
        return None
    day_match = _DAYS_RE.search(t)
    hour_match = _HOURS_RE.search(t)
    min_match = _MINUTES_RE.search(t)
    if not (day_match or hour_match or min_match):
        return None
    days = int(day_match.group(1)) if day_match else 0
    hours = int(hour_match.group(1)) if hour_match else 0
    minutes = int(min_match.group(1)) if min_match else 0
    return days * 24 + hours + minutes / 60


def mentions_breach(text: Any) -> bool:
    if text is None:
        return False
    lowered = str(text).lower()
    return any(word in lowered for word in _BREACH_WORDS)


def _goal_name(entry: dict[str, Any]) -> str:
    for key in _NAME_KEYS:
        value = entry.get(key)
        if value:
            return str(value)
    return ""


def _remaining_nodes(entry: dict[str, Any]) -> list[Any]:
    cycle = entry.get("ongoingCycle")
    nodes = []
    if isinstance(cycle, dict):
        nodes.append(cycle.get("remainingTime"))
    nodes.append(entry.get("remainingTime"))
    return [n for n in nodes if n is not None]


def _is_breached(entry: dict[str, Any]) -> bool:
    cycle = entry.get("ongoingCycle")
    if isinstance(cycle, dict) and cycle.get("breached") is True:
        return True
    return entry.get("breached") is True


def _remaining_millis(entry: dict[str, Any]) -> float | None:
    candidates: list[Any] = []
    for node in _remaining_nodes(entry):
        if isinstance(node, dict):
            candidates.append(node.get("millis"))
    candidates.append(entry.get("remainingMillis"))
    for value in candidates:
        if isinstance(value, bool) or value is None:
            continue
        try:
            return float(value)
        except (TypeError, ValueError):
            continue
    return None


def _remaining_texts(entry: dict[str, Any]) -> list[str]:
    texts: list[str] = []
    for node in _remaining_nodes(entry):
        if isinstance(node, dict):
            texts.extend(str(node[k]) for k in _TEXT_KEYS if node.get(k))
        elif isinstance(node, str):
            texts.append(node)
    return texts


def goal_remaining_hours(entry: Any) -> float | None:
    """Resolve the remaining hours of a single SLA goal entry (or None)."""
    if not isinstance(entry, dict):
        return None
    if _is_breached(entry):
        return 0.0
    millis = _remaining_millis(entry)
    if millis is not None:
        return max(0.0, millis / MS_PER_HOUR)
    texts = _remaining_texts(entry)
    for text in texts:
        hours = parse_duration_hours(text)
        if hours is not None:
            return max(0.0, float(hours))
    if any(mentions_breach(text) for text in texts):
        return 0.0
    return None


def extract_first_response_remaining_hours(raw: Any) -> float | None:
    """Hours left on the "first response" SLA goal, or None when unknown.

    Never raises: unparseable payloads degrade to None.
    """
    try:
        payload = classify_sla_payload(raw)
        for entry in payload.goals():
            if not isinstance(entry, dict):
                continue
            if FIRST_RESPONSE not in _goal_name(entry).lower():
                continue
            hours = goal_remaining_hours(entry)
            if hours is not None:
                return hours
    except Exception:  # pragma: no cover - best-effort parsing never raises
        return None
    return None
