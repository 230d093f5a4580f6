"""
Group extraction: collapse participants and guests into atomic seating groups
"""

from typing import Dict, List

from app.matching.models import Group, Guest, GuestRef, Participant, UserRef


def extract_groups(participants: List[Participant], guests: List[Guest]) -> List[Group]:
    """Group attendees by ``group_id``.

    Participant groups come first, then guest groups, each in the order their
    first member appears. Guests contribute only to gender counts and size;
    their moods, budgets, personality and verification are never collected and
    they never appear in ``user_ids``.
    """
    participant_groups: Dict[str, Group] = {}
    for p in participants:
        group = participant_groups.setdefault(
            p.group_id, Group(group_id=p.group_id, kind="participant")
        )
        group.members.append(UserRef(p.user_id))
        group.user_ids.append(p.user_id)
        group.display_names.append(p.user.display_name)
        if p.user.gender == "male":
            group.male_count += 1
        elif p.user.gender == "female":
            group.female_count += 1
        if p.mood is not None:
            group.moods.append(p.mood)
        if p.budget_level is not None:
            group.budget_levels.append(p.budget_level)
        if p.user.personality_type is not None:
            group.personality_types.append(p.user.personality_type)
        if p.user.is_identity_verified:
            group.verified_count += 1

    guest_groups: Dict[str, Group] = {}
    for g in guests:
        group = guest_groups.setdefault(g.group_id, Group(group_id=g.group_id, kind="guest"))
        group.members.append(GuestRef(g.id))
        group.display_names.append(g.display_name)
        if g.gender == "male":
            group.male_count += 1
        elif g.gender == "female":
            group.female_count += 1

    return list(participant_groups.values()) + list(guest_groups.values())
