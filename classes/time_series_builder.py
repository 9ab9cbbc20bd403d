"""
Daily open/closed time series for a set of classified work items.
"""

from collections import Counter
from datetime import date
from typing import Iterable, List

from classes.work_item_models import IssueState, ReportRow


class TimeSeriesBuilder:
    """Merges per-item open and close events into one running ledger."""

    def build(self, issue_states: Iterable[IssueState], series_start: date,
              baseline_open_count: int) -> List[ReportRow]:
        """
        Build one row per day on which an item was opened or closed.

        Days before series_start are left out; the baseline already accounts
        for what was open when the series starts. The running total is carried
        from row to row in date order, so an item opened and closed on the
        same day nets to zero.

        Args:
            issue_states: Classified work items
            series_start: First day that may appear in the series
            baseline_open_count: Items open at series_start

        Returns:
            ReportRows in ascending date order, one per distinct date
        """
        issue_states = list(issue_states)

        opened_per_day = Counter(state.created_date for state in issue_states)
        closed_per_day = Counter(state.closed_date for state in issue_states
                                 if state.closed_date is not None)

        all_dates = set(opened_per_day) | set(closed_per_day)
        series_dates = sorted(day for day in all_dates if day >= series_start)

        rows = []
        running_total = baseline_open_count
        for day in series_dates:
            opened_count = opened_per_day[day]
            closed_count = closed_per_day[day]

            running_total += opened_count
            running_total -= closed_count

            rows.append(ReportRow(day, opened_count, closed_count, running_total))
        return rows
