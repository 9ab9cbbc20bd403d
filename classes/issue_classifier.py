"""
Reduces Azure DevOps work items to the open/closed facts the counter needs.
"""

import logging
from typing import Iterable, List

import pytz

from classes.state_transition_scanner import ClosureResolver, RevisionScanner
from classes.work_item_models import IssueState, WorkItem, to_day


logger = logging.getLogger(__name__)


class ItemClassifier:
    """Classifies work items as open or closed, with their closing day."""

    def __init__(self, closed_states: Iterable[str], tracked_field: str = "System.State",
                 timezone: str = "UTC", date_format: str = "%m/%d/%Y"):
        """
        Args:
            closed_states: States that mean "done"
            tracked_field: Revision field holding the item state
            timezone: Timezone whose calendar days are counted
            date_format: Format used when logging transition dates
        """
        self.closed_states = set(closed_states)
        self.tracked_field = tracked_field
        self.timezone = pytz.timezone(timezone)
        self.date_format = date_format
        self.scanner = RevisionScanner(tracked_field)
        self.resolver = ClosureResolver(timezone)

    def classify(self, item: WorkItem) -> IssueState:
        """Reduce one work item to an IssueState."""
        final_state = item.state
        closed_date = self.resolver.resolve_closure(
            final_state, self.closed_states, self.scanner.scan(item.revisions)
        )

        if final_state in self.closed_states:
            if closed_date is None:
                logger.warning("%s is %s but has no recorded transition into it; counting it as open",
                               item.id, final_state)
            elif logger.isEnabledFor(logging.INFO):
                self._log_closing_transitions(item, final_state)

        return IssueState(
            id=item.id,
            created_date=to_day(item.created_at, self.timezone),
            final_state=final_state,
            closed_date=closed_date
        )

    def classify_all(self, items: Iterable[WorkItem]) -> List[IssueState]:
        return [self.classify(item) for item in items]

    def _log_closing_transitions(self, item: WorkItem, final_state: str) -> None:
        for transition in self.scanner.scan(item.revisions):
            if transition.new_state == final_state:
                changed_on = to_day(transition.changed_at, self.timezone)
                logger.info("%s, State Change: %s => %s on %s", item.id, transition.old_state,
                            transition.new_state, changed_on.strftime(self.date_format))
