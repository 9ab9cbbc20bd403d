from datetime import date, datetime, timezone

from classes.state_transition_scanner import ClosureResolver, RevisionScanner
from classes.work_item_models import Revision, Transition


def _utc(month, day, hour=12):
    return datetime(2024, month, day, hour, 0, tzinfo=timezone.utc)


def _revision(number, changed_at, old_fields, new_fields):
    return Revision(number, changed_at, new_fields, old_fields)


def test_scan_emits_only_changed_revisions():
    revisions = [
        Revision(1, _utc(1, 1), {"System.State": "New"}),
        _revision(2, _utc(1, 2), {"System.State": "New"}, {"System.State": "New", "System.Title": "Renamed"}),
        _revision(3, _utc(1, 3), {"System.State": "New"}, {"System.State": "Active"}),
    ]
    transitions = list(RevisionScanner().scan(revisions))
    assert transitions == [Transition("New", "Active", _utc(1, 3), 3)]


def test_creation_revision_is_not_a_transition():
    revisions = [Revision(1, _utc(1, 1), {"System.State": "Closed"})]
    assert list(RevisionScanner().scan(revisions)) == []


def test_scan_tracks_any_field():
    revisions = [
        Revision(1, _utc(1, 1), {"System.State": "New", "System.AssignedTo": "Ana"}),
        _revision(2, _utc(1, 2), {"System.State": "New", "System.AssignedTo": "Ana"},
                  {"System.State": "New", "System.AssignedTo": "Luis"}),
    ]
    transitions = list(RevisionScanner().scan(revisions, "System.AssignedTo"))
    assert len(transitions) == 1
    assert transitions[0].old_state == "Ana"
    assert transitions[0].new_state == "Luis"


def test_scan_can_be_repeated(make_item):
    item = make_item(1, _utc(1, 1), [("New", _utc(1, 1)), ("Active", _utc(1, 2)), ("Done", _utc(1, 3))])
    scanner = RevisionScanner()
    first = list(scanner.scan(item.revisions))
    second = list(scanner.scan(item.revisions))
    assert first == second
    assert [t.new_state for t in first] == ["Active", "Done"]


def test_open_final_state_has_no_closure():
    transitions = [Transition("New", "Closed", _utc(1, 2)), Transition("Closed", "Active", _utc(1, 4))]
    assert ClosureResolver().resolve_closure("Active", {"Closed"}, transitions) is None


def test_latest_transition_into_final_state_wins():
    transitions = [Transition("Active", "Closed", _utc(1, 2)), Transition("Active", "Closed", _utc(1, 9))]
    assert ClosureResolver().resolve_closure("Closed", {"Closed"}, transitions) == date(2024, 1, 9)


def test_reopened_item_uses_last_closing(make_item):
    item = make_item(7, _utc(1, 1), [
        ("Open", _utc(1, 1)),
        ("Closed", _utc(1, 2)),
        ("Open", _utc(1, 4)),
        ("Closed", _utc(1, 6)),
    ])
    transitions = RevisionScanner().scan(item.revisions)
    assert ClosureResolver().resolve_closure(item.state, {"Closed"}, transitions) == date(2024, 1, 6)


def test_created_in_closed_state_has_no_closure(make_item):
    item = make_item(8, _utc(1, 1), [("Closed", _utc(1, 1))])
    transitions = RevisionScanner().scan(item.revisions)
    assert ClosureResolver().resolve_closure("Closed", {"Closed"}, transitions) is None


def test_closure_keyed_on_current_closed_state_name(make_item):
    # Closed on 01-02, then moved between closed states on 01-05: the date of
    # the move into the current state is used, not the first closing.
    item = make_item(9, _utc(1, 1), [
        ("Active", _utc(1, 1)),
        ("Closed", _utc(1, 2)),
        ("Done", _utc(1, 5)),
    ])
    transitions = RevisionScanner().scan(item.revisions)
    assert ClosureResolver().resolve_closure("Done", {"Closed", "Done"}, transitions) == date(2024, 1, 5)


def test_equal_timestamps_prefer_later_entry():
    same_time = _utc(1, 3)
    transitions = [
        Transition("Active", "Closed", same_time, revision=2),
        Transition("Active", "Closed", same_time, revision=3),
    ]
    closing = ClosureResolver().find_closing_transition("Closed", ["Closed"], transitions)
    assert closing.revision == 3


def test_closure_day_uses_configured_timezone():
    # 03:00 UTC on 01-06 is still 01-05 in Mexico City
    transitions = [Transition("Active", "Done", datetime(2024, 1, 6, 3, 0, tzinfo=timezone.utc))]
    resolver = ClosureResolver("America/Mexico_City")
    assert resolver.resolve_closure("Done", {"Done"}, transitions) == date(2024, 1, 5)
