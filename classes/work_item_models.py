"""
Work item records used by the issue counter.
WorkItem and Revision mirror what Azure DevOps returns; Transition, IssueState
and ReportRow are derived by the counter itself.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

import pytz


class Revision:
    """One recorded revision of a work item: field values before and after."""

    def __init__(self, number: int, changed_at: datetime, fields: Dict[str, Any],
                 original_fields: Optional[Dict[str, Any]] = None):
        self.number = number
        self.changed_at = changed_at
        self.fields = dict(fields)
        # The creation revision has nothing before it
        self.original_fields = dict(fields if original_fields is None else original_fields)

    def value(self, field: str) -> Any:
        return self.fields.get(field)

    def original_value(self, field: str) -> Any:
        return self.original_fields.get(field)

    def __repr__(self):
        return f"Revision(number={self.number}, changed_at={self.changed_at})"


class WorkItem:
    """A work item with its current state and full revision log."""

    def __init__(self, id: int, created_at: datetime, state: str,
                 revisions: Optional[List[Revision]] = None):
        self.id = id
        self.created_at = created_at
        self.state = state
        self.revisions = list(revisions or [])

    def __repr__(self):
        return f"WorkItem(id={self.id}, state='{self.state}', revisions={len(self.revisions)})"


class Transition:
    """A revision in which the tracked field actually changed value."""

    __slots__ = ("_old_state", "_new_state", "_changed_at", "_revision")

    def __init__(self, old_state: Optional[str], new_state: Optional[str],
                 changed_at: datetime, revision: int = 0):
        self._old_state = old_state
        self._new_state = new_state
        self._changed_at = changed_at
        self._revision = revision

    @property
    def old_state(self) -> Optional[str]:
        return self._old_state

    @property
    def new_state(self) -> Optional[str]:
        return self._new_state

    @property
    def changed_at(self) -> datetime:
        return self._changed_at

    @property
    def revision(self) -> int:
        return self._revision

    def __eq__(self, other):
        if not isinstance(other, Transition):
            return NotImplemented
        return (self.old_state, self.new_state, self.changed_at, self.revision) == \
            (other.old_state, other.new_state, other.changed_at, other.revision)

    def __repr__(self):
        return (f"Transition(old_state='{self.old_state}', new_state='{self.new_state}', "
                f"changed_at={self.changed_at})")


class IssueState:
    """Per-item outcome: when it was opened, where it ended up, when it closed."""

    def __init__(self, id: int, created_date: date, final_state: str,
                 closed_date: Optional[date] = None):
        self.id = id
        self.created_date = created_date
        self.final_state = final_state
        self.closed_date = closed_date

    @property
    def is_closed(self) -> bool:
        return self.closed_date is not None

    def __eq__(self, other):
        if not isinstance(other, IssueState):
            return NotImplemented
        return (self.id, self.created_date, self.final_state, self.closed_date) == \
            (other.id, other.created_date, other.final_state, other.closed_date)

    def __repr__(self):
        return (f"IssueState(id={self.id}, created_date={self.created_date}, "
                f"final_state='{self.final_state}', closed_date={self.closed_date})")


class ReportRow:
    """One line of the daily open/closed series."""

    def __init__(self, date: date, opened_count: int, closed_count: int, running_open_total: int):
        self.date = date
        self.opened_count = opened_count
        self.closed_count = closed_count
        self.running_open_total = running_open_total

    def as_tuple(self):
        return (self.date, self.opened_count, self.closed_count, self.running_open_total)

    def __eq__(self, other):
        if not isinstance(other, ReportRow):
            return NotImplemented
        return self.as_tuple() == other.as_tuple()

    def __repr__(self):
        return (f"ReportRow(date={self.date}, opened={self.opened_count}, "
                f"closed={self.closed_count}, total={self.running_open_total})")


def parse_timestamp(timestamp_str: str) -> datetime:
    """Parse timestamp string from Azure DevOps API."""
    # Remove 'Z' suffix and handle timezone
    if timestamp_str.endswith('Z'):
        timestamp_str = timestamp_str[:-1] + '+00:00'
    return datetime.fromisoformat(timestamp_str)


def to_day(timestamp: datetime, timezone=pytz.UTC) -> date:
    """
    Truncate a timestamp to its calendar day in the given timezone.

    Naive timestamps are taken to already be in that timezone.
    """
    if isinstance(timezone, str):
        timezone = pytz.timezone(timezone)
    if timestamp.tzinfo is None:
        return timestamp.date()
    return timestamp.astimezone(timezone).date()
