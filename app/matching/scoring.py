"""
Table quality scoring.

Five independent sub-scores, each 0-100. Guests count toward gender balance
only; mood, budget, personality and identity verification look at
participants alone.
"""

import math
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List

from app.matching.constraints import BlockIndex
from app.matching.models import EventRoster, GuestRef, MemberRef, UserRef

COMPATIBLE_PAIRS = (("Leader", "Supporter"), ("Analyst", "Entertainer"))
PERSONALITY_TYPE_COUNT = 4


def round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; 12.5 must become 13
    return int(math.floor(value + 0.5))


def gender_balance_score(male: int, female: int) -> int:
    if male + female == 0:
        return 100
    return round_half_up(min(male, female) / max(male, female) * 100)


def mood_match_score(moods: List[str]) -> int:
    if not moods:
        return 100
    most_common = Counter(moods).most_common(1)[0][1]
    return round_half_up(most_common / len(moods) * 100)


def budget_match_score(budgets: List[int]) -> int:
    if not budgets:
        return 100
    budget_range = max(budgets) - min(budgets)
    if budget_range == 2:
        return 20
    if budget_range == 1:
        return 70
    return 100


def personality_score(personality_types: List[str]) -> int:
    if len(personality_types) <= 1:
        return 100

    present = set(personality_types)
    diversity = len(present) / PERSONALITY_TYPE_COUNT * 50
    bonus = sum(25 for a, b in COMPATIBLE_PAIRS if a in present and b in present)
    return min(100, round_half_up(diversity + bonus))


def verification_match_score(verified: int, total: int) -> int:
    """Full marks when everyone shares a status; otherwise the verified share.

    A lone unverified member among verified ones costs far less than the
    reverse. This asymmetry is a product decision and is kept as is.
    """
    if total == 0 or verified == 0 or verified == total:
        return 100
    return round_half_up(verified / total * 100)


@dataclass
class TableScore:
    total: int
    gender_balance: int
    mood_match: int
    budget_match: int
    personality: int
    verification_match: int
    has_block_conflict: bool

    def as_dict(self) -> dict:
        return {
            "total": self.total,
            "gender_balance": self.gender_balance,
            "mood_match": self.mood_match,
            "budget_match": self.budget_match,
            "personality": self.personality,
            "verification_match": self.verification_match,
            "has_block_conflict": self.has_block_conflict,
        }


def score_table(
    members: Iterable[MemberRef],
    roster: EventRoster,
    block_index: BlockIndex,
) -> TableScore:
    """Display score of a table: block conflict vetoes everything to 0."""
    members = list(members)
    participants = [
        p for p in (roster.participant(m.id) for m in members if isinstance(m, UserRef))
        if p is not None
    ]
    guests = [
        g for g in (roster.guest(m.id) for m in members if isinstance(m, GuestRef))
        if g is not None
    ]

    genders = [p.user.gender for p in participants] + [g.gender for g in guests]
    gender_balance = gender_balance_score(genders.count("male"), genders.count("female"))
    mood_match = mood_match_score([p.mood for p in participants if p.mood is not None])
    budget_match = budget_match_score(
        [p.budget_level for p in participants if p.budget_level is not None]
    )
    personality = personality_score(
        [p.user.personality_type for p in participants if p.user.personality_type is not None]
    )
    verification_match = verification_match_score(
        sum(1 for p in participants if p.user.is_identity_verified), len(participants)
    )
    has_block_conflict = block_index.has_block_conflict_in_table(members)

    if has_block_conflict:
        total = 0
    else:
        total = round_half_up(
            (gender_balance + mood_match + budget_match + personality + verification_match) / 5
        )

    return TableScore(
        total=total,
        gender_balance=gender_balance,
        mood_match=mood_match,
        budget_match=budget_match,
        personality=personality,
        verification_match=verification_match,
        has_block_conflict=has_block_conflict,
    )
