"""Error kinds raised at the tracker boundary and on missing invocation context."""

from __future__ import annotations


class MissingContextError(ValueError):
    """Required context (project key, issue key, actor) is absent; raised before any network call."""


class TrackerError(RuntimeError):
    """Base class for non-success responses from the issue tracker."""


class TrackerFetchError(TrackerError):
    """A read (search, issue, comments) failed."""


class TrackerWriteError(TrackerError):
    """A write (comment, assignee, label) failed."""
