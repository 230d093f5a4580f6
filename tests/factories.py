"""
Builders for matching engine test data
"""

from typing import Optional

from app.matching import Guest, Participant, UserProfile


def make_participant(
    user_id: str,
    group_id: Optional[str] = None,
    gender: str = "male",
    mood: Optional[str] = "lively",
    budget_level: Optional[int] = 2,
    personality_type: Optional[str] = None,
    verified: bool = False,
    line_user_id: Optional[str] = None,
) -> Participant:
    """Build a participant; solo sign-up unless group_id is given"""
    return Participant(
        id=f"p-{user_id}",
        group_id=group_id or f"g-{user_id}",
        mood=mood,
        budget_level=budget_level,
        user=UserProfile(
            id=user_id,
            display_name=user_id.title(),
            gender=gender,
            personality_type=personality_type,
            is_identity_verified=verified,
            line_user_id=line_user_id,
        ),
    )


def make_guest(guest_id: str, group_id: Optional[str] = None, gender: str = "female") -> Guest:
    return Guest(
        id=guest_id,
        group_id=group_id or f"gg-{guest_id}",
        display_name=f"Guest {guest_id}",
        gender=gender,
    )
