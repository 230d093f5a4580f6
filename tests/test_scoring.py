"""
Tests for table scoring
"""

import pytest

from app.matching import BlockIndex, BlockRelation, EventRoster, GuestRef, UserRef, score_table
from app.matching.scoring import (
    budget_match_score,
    gender_balance_score,
    mood_match_score,
    personality_score,
    round_half_up,
    verification_match_score,
)

from factories import make_guest, make_participant

@pytest.fixture
def balanced_roster():
    """Four participants who score 100 on every sub-score together"""
    participants = [
        make_participant("a", gender="male", personality_type="Leader", verified=True),
        make_participant("b", gender="female", personality_type="Supporter", verified=True),
        make_participant("c", gender="male", personality_type="Analyst", verified=True),
        make_participant("d", gender="female", personality_type="Entertainer", verified=True),
    ]
    guests = [make_guest("x", gender="male"), make_guest("y", gender="female")]
    return EventRoster(participants, guests)

def test_round_half_up():
    assert round_half_up(12.5) == 13
    assert round_half_up(66.66) == 67
    assert round_half_up(0.4) == 0

@pytest.mark.parametrize("male,female,expected", [
    (2, 2, 100),
    (3, 1, 33),
    (0, 3, 0),
    (0, 0, 100),
    (1, 8, 13),
])
def test_gender_balance_score(male, female, expected):
    assert gender_balance_score(male, female) == expected

def test_mood_match_score():
    assert mood_match_score([]) == 100
    assert mood_match_score(["lively", "lively", "relaxed"]) == 67
    assert mood_match_score(["lively", "relaxed", "inspire", "other"]) == 25

@pytest.mark.parametrize("budgets,expected", [
    ([1, 1, 3, 2], 20),
    ([1, 1, 2, 2], 70),
    ([2, 2, 2, 2], 100),
    ([], 100),
])
def test_budget_match_score(budgets, expected):
    assert budget_match_score(budgets) == expected

def test_personality_score():
    assert personality_score([]) == 100
    assert personality_score(["Leader"]) == 100
    # one type of four: 12.5 rounds up
    assert personality_score(["Leader", "Leader"]) == 13
    assert personality_score(["Leader", "Supporter"]) == 50
    assert personality_score(["Analyst", "Entertainer", "Analyst"]) == 50
    assert personality_score(["Leader", "Analyst"]) == 25
    assert personality_score(["Leader", "Supporter", "Analyst", "Entertainer"]) == 100

def test_verification_match_score():
    assert verification_match_score(0, 0) == 100
    assert verification_match_score(4, 4) == 100
    assert verification_match_score(0, 4) == 100
    assert verification_match_score(3, 4) == 75
    assert verification_match_score(1, 4) == 25

def test_balanced_table_scores_full(balanced_roster):
    members = [UserRef("a"), UserRef("b"), UserRef("c"), UserRef("d")]
    
    score = score_table(members, balanced_roster, BlockIndex())
    
    assert score.total == 100
    assert not score.has_block_conflict

def test_block_conflict_zeroes_total(balanced_roster):
    """One blocked pair vetoes an otherwise perfect table"""
    members = [UserRef("a"), UserRef("b"), UserRef("c"), UserRef("d")]
    index = BlockIndex([BlockRelation("b", "d")])
    
    score = score_table(members, balanced_roster, index)
    
    assert score.total == 0
    assert score.has_block_conflict
    assert score.gender_balance == 100
    assert score.mood_match == 100
    assert score.budget_match == 100
    assert score.personality == 100
    assert score.verification_match == 100

def test_guests_only_affect_gender_balance(balanced_roster):
    """Adding guests leaves the participant-only sub-scores unchanged"""
    users = [UserRef("a"), UserRef("b"), UserRef("c")]
    index = BlockIndex([BlockRelation("a", "z")])
    
    without_guests = score_table(users, balanced_roster, index)
    with_guests = score_table(users + [GuestRef("x"), GuestRef("y")], balanced_roster, index)
    
    assert with_guests.mood_match == without_guests.mood_match
    assert with_guests.budget_match == without_guests.budget_match
    assert with_guests.personality == without_guests.personality
    assert with_guests.verification_match == without_guests.verification_match
    assert not with_guests.has_block_conflict
    # 2 male, 1 female -> 3 male, 2 female
    assert without_guests.gender_balance == 50
    assert with_guests.gender_balance == 67

def test_mixed_verification_in_table():
    roster = EventRoster([
        make_participant("a", verified=True),
        make_participant("b", verified=True),
        make_participant("c", verified=True),
        make_participant("d", verified=False),
    ], [])
    
    score = score_table([UserRef(u) for u in "abcd"], roster, BlockIndex())
    
    assert score.verification_match == 75

def test_empty_table_scores_full():
    score = score_table([], EventRoster([], []), BlockIndex())
    assert score.total == 100
