"""
Data models for the table-assignment engine
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Literal, Optional, Union

Gender = Literal["male", "female"]
Mood = Literal["lively", "relaxed", "inspire", "other"]
PersonalityType = Literal["Leader", "Supporter", "Analyst", "Entertainer"]
GroupKind = Literal["participant", "guest"]

TABLE_FIELDS = ("restaurant_name", "restaurant_url", "reservation_name")


@dataclass(frozen=True)
class UserRef:
    """A seated member account (participant user id)."""

    id: str


@dataclass(frozen=True)
class GuestRef:
    """A seated non-member guest (guest id)."""

    id: str


MemberRef = Union[UserRef, GuestRef]


@dataclass
class UserProfile:
    """Demographic attributes of a member account."""

    id: str
    display_name: str
    gender: Gender
    birth_date: Optional[date] = None
    job: str = ""
    personality_type: Optional[PersonalityType] = None
    subscription_status: str = "none"
    is_identity_verified: bool = False
    avatar_url: Optional[str] = None
    line_user_id: Optional[str] = None


@dataclass
class Participant:
    """A confirmed event sign-up."""

    id: str
    group_id: str
    user: UserProfile
    mood: Optional[Mood] = None
    mood_text: Optional[str] = None  # free text when mood == "other"
    budget_level: Optional[int] = None  # 1-3

    @property
    def user_id(self) -> str:
        return self.user.id


@dataclass
class Guest:
    """An operator-added attendee without a member account."""

    id: str
    group_id: str
    display_name: str
    gender: Gender


@dataclass(frozen=True)
class BlockRelation:
    """reviewer_id blocked target_user_id in a past review."""

    reviewer_id: str
    target_user_id: str


@dataclass
class Group:
    """People who signed up together and must share a table."""

    group_id: str
    kind: GroupKind
    members: List[MemberRef] = field(default_factory=list)
    display_names: List[str] = field(default_factory=list)
    male_count: int = 0
    female_count: int = 0
    moods: List[str] = field(default_factory=list)
    budget_levels: List[int] = field(default_factory=list)
    personality_types: List[str] = field(default_factory=list)
    verified_count: int = 0
    user_ids: List[str] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.members)

    @property
    def key(self) -> str:
        # participant and guest group ids come from different sign-up flows
        return f"{self.kind}:{self.group_id}"


@dataclass
class Table:
    """A working or persisted seating assignment."""

    id: str
    restaurant_name: str = ""
    restaurant_url: str = ""
    reservation_name: str = ""
    members: List[MemberRef] = field(default_factory=list)

    def copy(self) -> "Table":
        return Table(
            id=self.id,
            restaurant_name=self.restaurant_name,
            restaurant_url=self.restaurant_url,
            reservation_name=self.reservation_name,
            members=list(self.members),
        )


class EventRoster:
    """Participants and guests of one event, indexed for member lookups.

    The roster is immutable from the engine's point of view: adding or
    removing a guest returns a new roster, so groups are always derived
    fresh from the current attendee lists.
    """

    def __init__(self, participants: List[Participant], guests: List[Guest]):
        self.participants = list(participants)
        self.guests = list(guests)
        self._participants_by_user: Dict[str, Participant] = {
            p.user_id: p for p in self.participants
        }
        self._guests_by_id: Dict[str, Guest] = {g.id: g for g in self.guests}

    def participant(self, user_id: str) -> Optional[Participant]:
        return self._participants_by_user.get(user_id)

    def guest(self, guest_id: str) -> Optional[Guest]:
        return self._guests_by_id.get(guest_id)

    def contains(self, ref: MemberRef) -> bool:
        if isinstance(ref, GuestRef):
            return ref.id in self._guests_by_id
        return ref.id in self._participants_by_user

    def all_members(self) -> List[MemberRef]:
        return [UserRef(p.user_id) for p in self.participants] + [
            GuestRef(g.id) for g in self.guests
        ]

    def display_name(self, ref: MemberRef) -> str:
        if isinstance(ref, GuestRef):
            guest = self.guest(ref.id)
            return guest.display_name if guest else ref.id
        participant = self.participant(ref.id)
        return participant.user.display_name if participant else ref.id

    def gender(self, ref: MemberRef) -> Optional[str]:
        if isinstance(ref, GuestRef):
            guest = self.guest(ref.id)
            return guest.gender if guest else None
        participant = self.participant(ref.id)
        return participant.user.gender if participant else None

    def co_members(self, ref: MemberRef) -> Optional[List[MemberRef]]:
        """All members sharing ref's group_id (ref included), or None if unknown."""
        if isinstance(ref, GuestRef):
            guest = self.guest(ref.id)
            if guest is None:
                return None
            return [GuestRef(g.id) for g in self.guests if g.group_id == guest.group_id]

        participant = self.participant(ref.id)
        if participant is None:
            return None
        return [
            UserRef(p.user_id)
            for p in self.participants
            if p.group_id == participant.group_id
        ]

    def with_guest(self, guest: Guest) -> "EventRoster":
        return EventRoster(self.participants, self.guests + [guest])

    def without_guest(self, guest_id: str) -> "EventRoster":
        return EventRoster(self.participants, [g for g in self.guests if g.id != guest_id])
