"""
Console and file output for the issue counter reports.
"""

import csv
import logging
import sys
from typing import Iterable, List, Optional

import pytz

from classes.work_item_models import ReportRow, Transition, to_day


logger = logging.getLogger(__name__)


class ReportWriter:
    """Writes the daily series and state transition reports."""

    def __init__(self, date_format: str = "%m/%d/%Y", timezone: str = "UTC", stream=None):
        self.date_format = date_format
        self.timezone = pytz.timezone(timezone)
        self.stream = stream

    def _console(self):
        return self.stream if self.stream is not None else sys.stdout

    def format_row(self, row: ReportRow) -> List[str]:
        return [
            row.date.strftime(self.date_format),
            str(row.opened_count),
            str(row.closed_count),
            str(row.running_open_total)
        ]

    def format_transition(self, item_id: int, transition: Transition) -> str:
        changed_on = to_day(transition.changed_at, self.timezone)
        return (f"{item_id}, State Change: {transition.old_state} => {transition.new_state} "
                f"on {changed_on.strftime(self.date_format)}")

    def write_rows(self, rows: Iterable[ReportRow], output_file: Optional[str] = None) -> None:
        """
        Write the series as date,opened,closed,total lines without a header.

        Args:
            rows: Report rows in date order
            output_file: File to (over)write; the console is used when empty
        """
        if output_file:
            with open(output_file, 'w', newline='', encoding='utf-8') as csvfile:
                self._write_csv(csvfile, rows)
            logger.info("Wrote report to %s", output_file)
        else:
            self._write_csv(self._console(), rows)

    def _write_csv(self, handle, rows: Iterable[ReportRow]) -> None:
        writer = csv.writer(handle, lineterminator="\n")
        for row in rows:
            writer.writerow(self.format_row(row))

    def write_transitions(self, item_id: int, transitions: Iterable[Transition]) -> None:
        console = self._console()
        for transition in transitions:
            console.write(self.format_transition(item_id, transition) + "\n")
