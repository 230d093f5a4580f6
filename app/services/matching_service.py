"""
Loading and saving matching sessions
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.matching import (
    BlockRelation,
    EventRoster,
    Guest,
    MatchingSession,
    Participant,
    UserProfile,
    UserRef,
)
from app.matching.errors import (
    EventNotFoundError,
    EventStatusError,
    InvalidMatchingError,
    SessionClosedError,
)
from app.matching.serialization import member_from_wire
from app.models import Guest as GuestRow, Participation
from app.services.notification_service import MatchNotification
from app.services.repositories import (
    EventRepo,
    GuestRepo,
    MatchRepo,
    ParticipationRepo,
    ReviewRepo,
    use_firestore,
)

logger = logging.getLogger(__name__)


@dataclass
class SavedMatching:
    """Result of persisting a session"""
    event_id: str
    matches: List[Dict[str, Any]]
    notifications: List[MatchNotification]


def _parse_date(value) -> Optional[date]:
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def parse_datetime(value) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def participant_from_row(row: Participation) -> Participant:
    user = row.user
    return Participant(
        id=row.id,
        group_id=row.group_id,
        mood=row.mood,
        mood_text=row.mood_text,
        budget_level=row.budget_level,
        user=UserProfile(
            id=user.id,
            display_name=user.display_name,
            gender=user.gender,
            birth_date=user.birth_date,
            job=user.job or "",
            personality_type=user.personality_type,
            subscription_status=user.subscription_status or "none",
            is_identity_verified=bool(user.is_identity_verified),
            avatar_url=user.avatar_url,
            line_user_id=user.line_user_id,
        ),
    )


def participant_from_doc(doc: Dict[str, Any]) -> Participant:
    user = doc["user"]
    return Participant(
        id=doc["id"],
        group_id=doc["group_id"],
        mood=doc.get("mood"),
        mood_text=doc.get("mood_text"),
        budget_level=doc.get("budget_level"),
        user=UserProfile(
            id=user["id"],
            display_name=user.get("display_name", ""),
            gender=user.get("gender"),
            birth_date=_parse_date(user.get("birth_date")),
            job=user.get("job") or "",
            personality_type=user.get("personality_type"),
            subscription_status=user.get("subscription_status") or "none",
            is_identity_verified=bool(user.get("is_identity_verified")),
            avatar_url=user.get("avatar_url"),
            line_user_id=user.get("line_user_id"),
        ),
    )


def guest_from_row(row: GuestRow) -> Guest:
    return Guest(id=row.id, group_id=row.group_id, display_name=row.display_name, gender=row.gender)


def guest_from_doc(doc: Dict[str, Any]) -> Guest:
    return Guest(id=doc["id"], group_id=doc["group_id"], display_name=doc["display_name"], gender=doc["gender"])


def match_to_wire(match) -> Dict[str, Any]:
    """Wire table from a stored match (ORM row or Firestore dict)."""
    get = match.get if isinstance(match, dict) else lambda key: getattr(match, key)
    return {
        "table_id": get("id"),
        "restaurant_name": get("restaurant_name") or "",
        "restaurant_url": get("restaurant_url") or "",
        "reservation_name": get("reservation_name") or "",
        "members": list(get("table_members") or []),
    }


class MatchingService:
    """Bridges the persistence layer and the matching engine"""

    @staticmethod
    def load_session(event_id: str, db: Session) -> Optional[MatchingSession]:
        """Snapshot the event's attendees, blocks and saved matches into a session."""
        if not use_firestore():
            event = EventRepo.get_by_id_sql(db, event_id)
            if not event:
                return None
            participants = [participant_from_row(p) for p in ParticipationRepo.list_active_sql(db, event_id)]
            guests = [guest_from_row(g) for g in GuestRepo.list_sql(db, event_id)]
            user_ids = [p.user_id for p in participants]
            blocks = ReviewRepo.list_block_relations_sql(db, user_ids)
            tables = [match_to_wire(m) for m in MatchRepo.list_sql(db, event_id)]
        else:
            event_doc = EventRepo.get_by_id_fs(event_id)
            if not event_doc:
                return None
            participants = [participant_from_doc(p) for p in ParticipationRepo.list_active_fs(event_id)]
            guests = [guest_from_doc(g) for g in GuestRepo.list_fs(event_id)]
            user_ids = [p.user_id for p in participants]
            blocks = ReviewRepo.list_block_relations_fs(user_ids)
            tables = [match_to_wire(m) for m in MatchRepo.list_fs(event_id)]

        session = MatchingSession.from_wire(
            event_id,
            EventRoster(participants, guests),
            [BlockRelation(reviewer_id=r, target_user_id=t) for r, t in blocks],
            tables,
        )
        logger.info(
            f"Loaded matching session for event {event_id}: {len(participants)} participants, "
            f"{len(guests)} guests, {len(blocks)} block relations, {len(tables)} saved tables"
        )
        return session

    @staticmethod
    def save_session(session: MatchingSession, db: Session) -> SavedMatching:
        """Persist a valid session as the event's finalized matches.

        The session is only marked persisted once storage succeeded, so a
        failed save can be retried with every edit intact.
        """
        if session.persisted:
            raise SessionClosedError(f"Matching for event {session.event_id} is already saved")
        problems = session.validation_problems()
        if problems:
            raise InvalidMatchingError(problems)

        tables = session.to_wire()
        user_ids = [
            ref.id
            for table in tables
            for ref in map(member_from_wire, table["members"])
            if isinstance(ref, UserRef)
        ]

        if not use_firestore():
            event = EventRepo.get_by_id_sql(db, session.event_id)
            if not event:
                raise EventNotFoundError(session.event_id)
            event_date, area, event_status = event.event_date, event.area, event.status
        else:
            event_doc = EventRepo.get_by_id_fs(session.event_id)
            if not event_doc:
                raise EventNotFoundError(session.event_id)
            event_date, area = parse_datetime(event_doc["event_date"]), event_doc.get("area", "")
            event_status = event_doc.get("status", "open")

        if event_status == "closed":
            raise EventStatusError(f"Event {session.event_id} is closed")

        if not use_firestore():
            matches = [match_to_wire(m) for m in MatchRepo.replace_sql(db, session.event_id, tables, user_ids)]
        else:
            matches = [match_to_wire(m) for m in MatchRepo.replace_fs(session.event_id, tables, user_ids)]

        session.mark_persisted()
        logger.info(f"Saved {len(matches)} tables for event {session.event_id}")

        return SavedMatching(
            event_id=session.event_id,
            matches=matches,
            notifications=MatchingService.build_notifications(session, event_date, area),
        )

    @staticmethod
    def build_notifications(session: MatchingSession, event_date: datetime, area: str) -> List[MatchNotification]:
        """One notification per table; guests are named but never messaged."""
        notifications = []
        for table in session.tables:
            recipients = []
            for ref in table.members:
                if isinstance(ref, UserRef):
                    participant = session.roster.participant(ref.id)
                    recipients.append(participant.user.line_user_id if participant else None)
            notifications.append(MatchNotification(
                event_date=event_date,
                area=area,
                restaurant_name=table.restaurant_name,
                restaurant_url=table.restaurant_url or None,
                reservation_name=table.reservation_name or None,
                member_names=[session.roster.display_name(ref) for ref in table.members],
                recipients=recipients,
            ))
        return notifications
