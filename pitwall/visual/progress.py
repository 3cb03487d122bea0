"""Live banner for bulk triage runs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import streamlit as st


@dataclass
class ProgressEvent:
    message: str
    current: int | None = None
    total: int | None = None


class BulkProgress:
    """Status box + bar driven by the bulk orchestrator's progress hook.

    ``callback`` is passed as ``progress=``. ``finish`` closes the box with a
    state derived from the bulk result: error when the run was rejected,
    warning when any issue crashed or any step failed, success otherwise.
    """

    def __init__(self, title: str):
        self._status = st.status(title, expanded=True)
        self._bar = self._status.progress(0.0)
        self._line = self._status.empty()
        self._closed = False
        self.events: list[ProgressEvent] = []

    def callback(self, message: str, current: int | None = None, total: int | None = None) -> None:
        if self._closed:
            return
        self.events.append(ProgressEvent(message, current, total))
        self._line.write(message)
        # unknown total while the scope is still being selected
        if current is None or not total:
            return
        self._bar.progress(min(max(current / total, 0.0), 1.0))

    def finish(self, result: dict[str, Any], summary: str) -> str:
        """Close the banner; returns the final state ("error", "warning" or "complete")."""
        if not result.get("ok"):
            state = "error"
        elif result.get("failedCount") or result.get("failedSteps"):
            state = "warning"
        else:
            state = "complete"
        if not self._closed:
            if state != "error":
                self._bar.progress(1.0)
            self._line.write(summary)
            self._status.update(label=summary, state="error" if state == "error" else "complete", expanded=False)
            if state == "warning":
                st.warning(summary)
            self._closed = True
        return state
