"""
State transition detection for Azure DevOps work items.
Finds the revisions where a tracked field changed and resolves the date an
item last entered its current closed state.
"""

from datetime import date
from typing import Iterable, Iterator, Optional

import pytz

from classes.work_item_models import Revision, Transition, to_day


class RevisionScanner:
    """Filters a revision log down to the revisions that changed one field."""

    def __init__(self, tracked_field: str = "System.State"):
        self.tracked_field = tracked_field

    def scan(self, revisions: Iterable[Revision], tracked_field: Optional[str] = None) -> Iterator[Transition]:
        """
        Yield a Transition for every revision whose tracked field changed.

        Revisions are expected in the order the server recorded them; they are
        filtered, never reordered. Calling scan again over the same revision
        list starts a fresh pass.

        Args:
            revisions: Revision log of one work item
            tracked_field: Field to watch (defaults to the scanner's field)

        Yields:
            Transition for each actual change of the field
        """
        field = tracked_field or self.tracked_field
        for revision in revisions:
            old_value = revision.original_value(field)
            new_value = revision.value(field)
            if old_value != new_value:
                yield Transition(old_value, new_value, revision.changed_at, revision.number)


class ClosureResolver:
    """Determines when an item was closed, if it is closed at all."""

    def __init__(self, timezone: str = "UTC"):
        self.timezone = pytz.timezone(timezone)

    def find_closing_transition(self, final_state: str, closed_states: Iterable[str],
                                transitions: Iterable[Transition]) -> Optional[Transition]:
        """
        Pick the latest transition into the item's final state.

        Only transitions whose target equals final_state count, even when the
        item passed through other closed states later. Equal timestamps go to
        the transition seen last.

        Args:
            final_state: The item's current state
            closed_states: States that mean "done"
            transitions: Transitions of the item's state field

        Returns:
            The closing Transition, or None when the item is open or never
            transitioned into its final state
        """
        if final_state not in set(closed_states):
            return None

        closing = None
        for transition in transitions:
            if transition.new_state != final_state:
                continue
            if closing is None or transition.changed_at >= closing.changed_at:
                closing = transition
        return closing

    def resolve_closure(self, final_state: str, closed_states: Iterable[str],
                        transitions: Iterable[Transition]) -> Optional[date]:
        """Return the day of the closing transition, or None."""
        closing = self.find_closing_transition(final_state, closed_states, transitions)
        if closing is None:
            return None
        return to_day(closing.changed_at, self.timezone)
