"""
Wire format for table members.

Member references cross the persistence and HTTP boundary as plain strings:
user ids as-is, guest ids with a ``guest:`` prefix. Inside the engine they are
always ``UserRef`` / ``GuestRef``.
"""

from typing import Any, Dict, List

from app.matching.models import GuestRef, MemberRef, Table, UserRef

GUEST_PREFIX = "guest:"


def member_to_wire(ref: MemberRef) -> str:
    if isinstance(ref, GuestRef):
        return f"{GUEST_PREFIX}{ref.id}"
    return ref.id


def member_from_wire(value: str) -> MemberRef:
    if value.startswith(GUEST_PREFIX):
        return GuestRef(value[len(GUEST_PREFIX):])
    return UserRef(value)


def members_to_wire(refs: List[MemberRef]) -> List[str]:
    return [member_to_wire(ref) for ref in refs]


def table_to_wire(table: Table) -> Dict[str, Any]:
    return {
        "table_id": table.id,
        "restaurant_name": table.restaurant_name,
        "restaurant_url": table.restaurant_url,
        "reservation_name": table.reservation_name,
        "members": members_to_wire(table.members),
    }


def table_from_wire(data: Dict[str, Any]) -> Table:
    return Table(
        id=str(data["table_id"]),
        restaurant_name=data.get("restaurant_name") or "",
        restaurant_url=data.get("restaurant_url") or "",
        reservation_name=data.get("reservation_name") or "",
        members=[member_from_wire(m) for m in data.get("members") or []],
    )
