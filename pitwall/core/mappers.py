"""Mapping raw Jira issue/comment JSON into snapshot models."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any

import pandas as pd

from .models import AssigneeModel, CommentModel, IssueSnapshot
from .status import clean_status_name


def parse_dt(val: Any) -> datetime | None:
    if not val:
        return None
    try:
        ts = pd.to_datetime(val, utc=True, errors="coerce")
    except (TypeError, ValueError):
        return None
    if ts is None or pd.isna(ts):
        return None
    return ts.to_pydatetime()


def adf_to_text(body: Any) -> str:
    """Best-effort plain text of an ADF comment body (or a plain string body).

    Text nodes are collected depth-first; each top-level block ends a line.
    Malformed bodies yield an empty string.
    """
    if body is None:
        return ""
    if isinstance(body, str):
        return body.strip()
    if not isinstance(body, dict):
        return ""

    def walk(node: Any, out: list[str]) -> None:
        if isinstance(node, dict):
            text = node.get("text")
            if isinstance(text, str):
                out.append(text)
            for child in node.get("content") or []:
                walk(child, out)
        elif isinstance(node, list):
            for item in node:
                walk(item, out)

    lines: list[str] = []
    blocks = body.get("content")
    if not isinstance(blocks, list):
        return ""
    for block in blocks:
        bits: list[str] = []
        walk(block, bits)
        lines.append("".join(bits))
    return "\n".join(lines).strip()


def map_assignee(value: Any) -> AssigneeModel | None:
    if not value or not isinstance(value, dict):
        return None
    return AssigneeModel(
        account_id=value.get("accountId"),
        display_name=value.get("displayName"),
    )


def map_issue(raw: dict[str, Any]) -> IssueSnapshot:
    fields = raw.get("fields") or {}
    status = fields.get("status") or {}
    labels = fields.get("labels") or []
    return IssueSnapshot(
        key=raw.get("key") or "",
        summary=fields.get("summary") or "",
        status=clean_status_name(status.get("name") if isinstance(status, dict) else status),
        updated=parse_dt(fields.get("updated")),
        assignee=map_assignee(fields.get("assignee")),
        labels=[str(label) for label in labels if label],
        sla=fields.get("sla"),
    )


def map_comment(raw: dict[str, Any]) -> CommentModel:
    body = raw.get("body")
    return CommentModel(
        author=(raw.get("author") or {}).get("displayName"),
        created=parse_dt(raw.get("created")),
        body=body,
        text=adf_to_text(body),
    )


def map_comments(raw_comments: Iterable[dict[str, Any]] | None) -> list[CommentModel]:
    return [map_comment(c) for c in raw_comments or [] if isinstance(c, dict)]
