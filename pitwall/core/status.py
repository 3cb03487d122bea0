"""Status sanitizing and blocked-status matching.

Status names arrive from Jira as free text. The blocked check compares the
sanitized name with the configured blocking status (``TriageConfig``), ignoring
case and surrounding whitespace.
"""

from __future__ import annotations


def clean_status_name(value: str | None) -> str:
    """Sanitize status string, converting null-like values to "Unknown".

    Parameters
    ----------
    value : str | None
        Raw status string.

    Returns
    -------
    str
        Cleaned status string or "Unknown" for empty/null values.
    """
    if not value:
        return "Unknown"
    text = str(value).strip()
    if not text:
        return "Unknown"
    if text.lower() in {"nan", "none", "null"}:
        return "Unknown"
    return text


def is_blocked_status(value: str | None, blocked_status_name: str) -> bool:
    """Check whether ``value`` names the configured blocking status.

    Examples
    --------
    >>> is_blocked_status("Waiting for support", "Waiting for support")
    True
    >>> is_blocked_status("  waiting for SUPPORT ", "Waiting for support")
    True
    >>> is_blocked_status(None, "Waiting for support")
    False
    """
    cleaned = clean_status_name(value)
    if cleaned == "Unknown":
        return False
    return cleaned.casefold() == blocked_status_name.strip().casefold()
