from datetime import date
from typing import List

from classes.issue_classifier import ItemClassifier
from classes.report_writer import ReportWriter
from classes.state_transition_scanner import RevisionScanner
from classes.time_series_builder import TimeSeriesBuilder
from classes.work_item_models import ReportRow, Transition
from config.config_loader import ConfigLoader


class IssueCounterCommands:
    """
    A class that implements the issue counter reports on top of a work item source.
    """
    def __init__(self, source, config_loader: ConfigLoader, writer: ReportWriter = None):
        """
        Args:
            source: Object providing query_open_count_at, query_items_created_after and get_item
            config_loader: Loaded configuration
            writer: Report sink (defaults to the console writer for the configured format)
        """
        self.source = source
        self.config_loader = config_loader
        self.writer = writer or ReportWriter(
            date_format=config_loader.get_date_format(),
            timezone=config_loader.get_timezone()
        )

    def generate_statistics(self, start_date: date, output_file: str = None) -> List[ReportRow]:
        """
        Produce the daily opened/closed/open-total series from start_date on.

        Args:
            start_date: First day of the series
            output_file: File for the series (console when empty)

        Returns:
            The rows written
        """
        closed_states = self.config_loader.get_closed_states()
        work_item_kinds = self.config_loader.get_work_item_kinds()
        if output_file is None:
            output_file = self.config_loader.get_output_file()

        print(f"Closed Work Item States : {self.source.format_clause(closed_states)}")
        print(f"Work Item Kinds : {self.source.format_clause(work_item_kinds)}")
        print(f"Start Date : {start_date.strftime(self.writer.date_format)}")

        self.source.query_open_count_at(date.today(), closed_states, work_item_kinds)

        work_items = self.source.query_items_created_after(
            start_date, self.config_loader.get_excluded_states(), work_item_kinds
        )
        classifier = ItemClassifier(
            closed_states,
            tracked_field=self.config_loader.get_tracked_field(),
            timezone=self.config_loader.get_timezone(),
            date_format=self.writer.date_format
        )
        issue_states = classifier.classify_all(work_items)

        baseline = self.source.query_open_count_at(start_date, closed_states, work_item_kinds)
        rows = TimeSeriesBuilder().build(issue_states, start_date, baseline)

        self.writer.write_rows(rows, output_file)
        return rows

    def display_state_transitions(self, work_item_id: int) -> List[Transition]:
        """
        Show every state change recorded for one work item.

        Args:
            work_item_id: The ID of the work item

        Returns:
            The transitions shown
        """
        print(f"State Transitions for Issue {work_item_id}")
        work_item = self.source.get_item(work_item_id)
        scanner = RevisionScanner(self.config_loader.get_tracked_field())
        transitions = list(scanner.scan(work_item.revisions))
        self.writer.write_transitions(work_item.id, transitions)
        return transitions
