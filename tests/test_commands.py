import io
from datetime import date, datetime, timezone

from classes.WorkItemSource import AzureDevOpsWorkItemSource
from classes.commands import IssueCounterCommands
from classes.report_writer import ReportWriter
from config.config_loader import ConfigLoader


def _utc(month, day, hour=12):
    return datetime(2024, month, day, hour, 0, tzinfo=timezone.utc)


class FakeSource:
    """In-memory stand-in for the Azure DevOps work item source."""

    format_clause = staticmethod(AzureDevOpsWorkItemSource.format_clause)

    def __init__(self, items, open_counts):
        self.items = items
        self.open_counts = open_counts
        self.calls = []

    def query_open_count_at(self, count_date, closed_states, work_item_kinds):
        self.calls.append(("open_count", count_date, list(closed_states), list(work_item_kinds)))
        return self.open_counts.get(count_date, 0)

    def query_items_created_after(self, start_date, excluded_states, work_item_kinds):
        self.calls.append(("created_after", start_date, list(excluded_states), list(work_item_kinds)))
        return self.items

    def get_item(self, work_item_id):
        return next(item for item in self.items if item.id == work_item_id)


def _loader(tmp_path):
    loader = ConfigLoader(str(tmp_path / "missing.json"))
    loader.config["state_categories"]["closed_states"] = ["Closed"]
    loader.config["work_item_query"]["work_item_kinds"] = ["Bug", "Product Backlog Item"]
    return loader


def test_generate_statistics_end_to_end(make_item, tmp_path, capsys):
    items = [
        make_item(1, _utc(1, 1), [("New", _utc(1, 1)), ("Closed", _utc(1, 5))]),
        make_item(2, _utc(1, 3), [("New", _utc(1, 3))]),
    ]
    source = FakeSource(items, {date(2024, 1, 1): 2})
    stream = io.StringIO()
    commands = IssueCounterCommands(source, _loader(tmp_path), ReportWriter(stream=stream))

    rows = commands.generate_statistics(date(2024, 1, 1))

    assert [row.as_tuple() for row in rows] == [
        (date(2024, 1, 1), 1, 0, 3),
        (date(2024, 1, 3), 1, 0, 4),
        (date(2024, 1, 5), 0, 1, 3),
    ]
    assert stream.getvalue() == "01/01/2024,1,0,3\n01/03/2024,1,0,4\n01/05/2024,0,1,3\n"

    out = capsys.readouterr().out
    assert "Closed Work Item States : ('Closed')" in out
    assert "Work Item Kinds : ('Bug', 'Product Backlog Item')" in out
    assert "Start Date : 01/01/2024" in out

    kinds = ["Bug", "Product Backlog Item"]
    assert ("created_after", date(2024, 1, 1), ["Removed"], kinds) in source.calls
    assert source.calls[-1] == ("open_count", date(2024, 1, 1), ["Closed"], kinds)
    assert source.calls[0][0] == "open_count"


def test_generate_statistics_writes_configured_file(make_item, tmp_path):
    loader = _loader(tmp_path)
    output = tmp_path / "stats.csv"
    loader.config["report"]["output_file"] = str(output)
    items = [make_item(1, _utc(2, 1), [("New", _utc(2, 1)), ("Closed", _utc(2, 1, hour=18))])]
    commands = IssueCounterCommands(FakeSource(items, {}), loader)

    commands.generate_statistics(date(2024, 1, 31))

    assert output.read_text(encoding="utf-8") == "02/01/2024,1,1,0\n"


def test_display_state_transitions(make_item, tmp_path, capsys):
    item = make_item(42, _utc(1, 1), [
        ("New", _utc(1, 1)),
        ("Active", _utc(1, 3)),
        ("Closed", _utc(1, 5)),
    ])
    stream = io.StringIO()
    commands = IssueCounterCommands(FakeSource([item], {}), _loader(tmp_path), ReportWriter(stream=stream))

    transitions = commands.display_state_transitions(42)

    assert len(transitions) == 2
    assert "State Transitions for Issue 42" in capsys.readouterr().out
    assert stream.getvalue().splitlines() == [
        "42, State Change: New => Active on 01/03/2024",
        "42, State Change: Active => Closed on 01/05/2024",
    ]
