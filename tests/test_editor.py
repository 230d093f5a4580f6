"""
Tests for manual editing of matching sessions
"""

import pytest

from app.matching import BlockRelation, EventRoster, GuestRef, MatchingSession, UserRef
from app.matching.errors import (
    AutoAssignError,
    MemberNotFoundError,
    SessionClosedError,
    TableNotFoundError,
)

from factories import make_guest, make_participant

@pytest.fixture
def roster():
    """a+b signed up together, c/d/e alone, guests x+y together, z alone"""
    participants = [
        make_participant("a", group_id="g1"),
        make_participant("b", group_id="g1", gender="female"),
        make_participant("c"),
        make_participant("d", gender="female"),
        make_participant("e", gender="female"),
    ]
    guests = [
        make_guest("x", group_id="gx"),
        make_guest("y", group_id="gx", gender="male"),
        make_guest("z"),
    ]
    return EventRoster(participants, guests)

@pytest.fixture
def session(roster):
    return MatchingSession("event-1", roster, [BlockRelation("c", "d")])

def wire_table(table_id, members, restaurant="Bistro"):
    return {"table_id": table_id, "restaurant_name": restaurant, "members": members}

def test_new_session_is_invalid(session):
    assert session.tables == []
    assert session.status == "invalid"
    assert session.validation_problems() == ["Add at least one table"]
    assert len(session.unassigned_members()) == 8

def test_add_and_remove_table(session):
    table = session.add_table()
    
    assert table.id.startswith("new-")
    assert table.members == []
    assert [t.id for t in session.tables] == [table.id]
    
    session.remove_table(table.id)
    assert session.tables == []

def test_remove_unknown_table(session):
    with pytest.raises(TableNotFoundError):
        session.remove_table("missing")

def test_update_table_fields(session):
    table = session.add_table()
    
    session.update_table(table.id, "restaurant_name", "Sushi Ginza")
    session.update_table(table.id, "restaurant_url", "https://example.com/sushi")
    session.update_table(table.id, "reservation_name", "Tanaka")
    
    updated = session.get_table(table.id)
    assert updated.restaurant_name == "Sushi Ginza"
    assert updated.restaurant_url == "https://example.com/sushi"
    assert updated.reservation_name == "Tanaka"

def test_update_unknown_field(session):
    table = session.add_table()
    
    with pytest.raises(ValueError):
        session.update_table(table.id, "members", "a")

def test_tables_are_copies(session):
    """Mutating a returned table does not reach the session"""
    table = session.add_table()
    session.tables[0].members.append(UserRef("a"))
    session.get_table(table.id).restaurant_name = "Nope"
    
    assert session.get_table(table.id).members == []
    assert session.get_table(table.id).restaurant_name == ""

def test_add_member_seats_whole_group(session):
    table = session.add_table()
    
    session.add_member(table.id, UserRef("b"))
    
    assert session.get_table(table.id).members == [UserRef("a"), UserRef("b")]

def test_add_member_moves_group_between_tables(session):
    first = session.add_table()
    second = session.add_table()
    session.add_member(first.id, UserRef("a"))
    session.add_member(first.id, UserRef("c"))
    
    session.add_member(second.id, UserRef("a"))
    
    assert session.get_table(first.id).members == [UserRef("c")]
    assert session.get_table(second.id).members == [UserRef("a"), UserRef("b")]

def test_add_guest_group(session):
    table = session.add_table()
    
    session.add_member(table.id, GuestRef("y"))
    
    assert session.get_table(table.id).members == [GuestRef("x"), GuestRef("y")]

def test_remove_member_unseats_whole_group(session):
    table = session.add_table()
    session.add_member(table.id, UserRef("a"))
    session.add_member(table.id, UserRef("c"))
    
    session.remove_member(table.id, UserRef("b"))
    
    assert session.get_table(table.id).members == [UserRef("c")]
    assert UserRef("a") in session.unassigned_members()
    assert UserRef("b") in session.unassigned_members()

def test_failed_edit_leaves_state_unchanged(session):
    table = session.add_table()
    session.add_member(table.id, UserRef("c"))
    before = session.to_wire()
    
    with pytest.raises(MemberNotFoundError):
        session.add_member(table.id, UserRef("nobody"))
    with pytest.raises(TableNotFoundError):
        session.add_member("missing", UserRef("a"))
    with pytest.raises(MemberNotFoundError):
        session.remove_member(table.id, GuestRef("nobody"))
    
    assert session.to_wire() == before

def test_split_group_from_saved_tables(roster):
    """A split loaded from storage is reported, not silently repaired"""
    session = MatchingSession.from_wire("event-1", roster, [], [
        wire_table("t1", ["a", "c", "d"]),
        wire_table("t2", ["b", "e", "guest:z"]),
    ])
    
    assert session.split_pair_violations() == ["A and B signed up together and must share a table"]
    assert not session.is_valid()

def test_unassigned_member_is_not_a_split(roster):
    session = MatchingSession.from_wire("event-1", roster, [], [
        wire_table("t1", ["a", "c", "d"]),
    ])
    
    assert session.split_pair_violations() == []
    assert UserRef("b") in session.unassigned_members()

def test_table_issues(session):
    table = session.add_table()
    assert session.table_issue(session.get_table(table.id)).message == "Enter a restaurant"
    
    session.update_table(table.id, "restaurant_name", "Bistro")
    session.add_member(table.id, UserRef("e"))
    assert session.table_issue(session.get_table(table.id)).message == "Add at least 2 more"
    
    session.add_member(table.id, UserRef("a"))
    assert session.table_issue(session.get_table(table.id)) is None

def test_block_issue_comes_first(session):
    table = session.add_table()
    session.add_member(table.id, UserRef("c"))
    session.add_member(table.id, UserRef("d"))
    
    issue = session.table_issue(session.get_table(table.id))
    
    assert issue.is_block_error
    assert issue.message == "Users who blocked each other are seated together"
    assert session.score(table.id).total == 0

def test_table_over_capacity():
    participants = [make_participant(f"u{i}") for i in range(9)]
    session = MatchingSession.from_wire(
        "event-1", EventRoster(participants, []), [],
        [wire_table("t1", [f"u{i}" for i in range(9)])],
    )
    
    issue = session.table_issue(session.get_table("t1"))
    
    assert issue.message == "At most 8 members (currently 9)"

def test_valid_session(roster):
    session = MatchingSession.from_wire("event-1", roster, [BlockRelation("c", "d")], [
        wire_table("t1", ["a", "b", "c", "guest:z"]),
        wire_table("t2", ["d", "e", "guest:x", "guest:y"]),
    ])
    
    assert session.validation_problems() == []
    assert session.is_valid()
    assert session.status == "valid"

def test_problems_name_the_table(roster):
    session = MatchingSession.from_wire("event-1", roster, [], [
        wire_table("t1", ["a", "b", "c"], restaurant=""),
    ])
    
    assert session.validation_problems() == ["t1: Enter a restaurant"]

def test_auto_assign_replaces_tables(session):
    session.add_table()
    
    tables = session.auto_assign()
    
    assert tables
    assert all(t.id.startswith("auto-") for t in tables)
    assert session.unassigned_members() == []
    assert session.split_pair_violations() == []

def test_failed_auto_assign_keeps_tables():
    session = MatchingSession("event-1", EventRoster([], []))
    table = session.add_table()
    session.update_table(table.id, "restaurant_name", "Bistro")
    
    with pytest.raises(AutoAssignError):
        session.auto_assign()
    
    assert [t.id for t in session.tables] == [table.id]
    assert session.get_table(table.id).restaurant_name == "Bistro"

def test_persisted_session_is_read_only(session):
    table = session.add_table()
    session.mark_persisted()
    
    assert session.status == "persisted"
    with pytest.raises(SessionClosedError):
        session.add_table()
    with pytest.raises(SessionClosedError):
        session.update_table(table.id, "restaurant_name", "Bistro")
    with pytest.raises(SessionClosedError):
        session.add_member(table.id, UserRef("a"))
    with pytest.raises(SessionClosedError):
        session.auto_assign()

def test_add_guest_extends_roster(session):
    table = session.add_table()
    
    session.add_guest(make_guest("w", group_id="gx"))
    session.add_member(table.id, GuestRef("x"))
    
    assert session.get_table(table.id).members == [GuestRef("x"), GuestRef("y"), GuestRef("w")]

def test_remove_guest_unseats_them(roster):
    session = MatchingSession.from_wire("event-1", roster, [], [
        wire_table("t1", ["a", "b", "guest:z"]),
    ])
    
    session.remove_guest("z")
    
    assert session.get_table("t1").members == [UserRef("a"), UserRef("b")]
    assert GuestRef("z") not in session.unassigned_members()
    with pytest.raises(MemberNotFoundError):
        session.remove_guest("z")

def test_wire_round_trip(roster):
    tables = [
        {
            "table_id": "t1",
            "restaurant_name": "Bistro",
            "restaurant_url": "https://example.com",
            "reservation_name": "Sato",
            "members": ["a", "b", "guest:z"],
        },
    ]
    
    session = MatchingSession.from_wire("event-1", roster, [], tables)
    
    assert session.get_table("t1").members == [UserRef("a"), UserRef("b"), GuestRef("z")]
    assert session.to_wire() == tables

def test_saved_seats_of_departed_attendees_are_dropped():
    """A saved table cannot pass the size minimum on people who left the event"""
    roster = EventRoster([make_participant("a", group_id="g1"), make_participant("b", group_id="g1")], [])
    
    session = MatchingSession.from_wire("event-1", roster, [], [
        wire_table("t1", ["a", "b", "guest:z", "c"]),
    ])
    
    assert session.get_table("t1").members == [UserRef("a"), UserRef("b")]
    assert not session.is_valid()
    assert session.validation_problems() == ["t1: Add at least 1 more"]
    
    session.remove_member("t1", UserRef("a"))
    assert session.get_table("t1").members == []
