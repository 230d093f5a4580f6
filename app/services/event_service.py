"""
Event lifecycle: canceling an open event and completing a matched one
"""

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from app.matching.errors import EventNotFoundError, EventStatusError
from app.services.matching_service import parse_datetime
from app.services.notification_service import CancellationNotice
from app.services.repositories import EventRepo, use_firestore

logger = logging.getLogger(__name__)


@dataclass
class CanceledEvent:
    event_id: str
    canceled_participations: int
    notice: CancellationNotice


class EventService:
    """Status transitions that close an event"""

    @staticmethod
    def _load(event_id: str, db: Session) -> dict:
        if not use_firestore():
            event = EventRepo.get_by_id_sql(db, event_id)
            if not event:
                raise EventNotFoundError(event_id)
            return {"status": event.status, "event_date": event.event_date, "area": event.area}

        event_doc = EventRepo.get_by_id_fs(event_id)
        if not event_doc:
            raise EventNotFoundError(event_id)
        return {
            "status": event_doc.get("status", "open"),
            "event_date": parse_datetime(event_doc["event_date"]),
            "area": event_doc.get("area", ""),
        }

    @staticmethod
    def cancel_event(event_id: str, db: Session) -> CanceledEvent:
        """Close an open event and cancel its sign-ups.

        Returns the notice for the canceled users; sending it is up to the caller.
        """
        event = EventService._load(event_id, db)
        if event["status"] != "open":
            raise EventStatusError(f"Event {event_id} is not open")

        if not use_firestore():
            line_ids = EventRepo.cancel_sql(db, event_id)
        else:
            line_ids = EventRepo.cancel_fs(event_id)

        logger.info(f"Canceled event {event_id} with {len(line_ids)} participations")
        return CanceledEvent(
            event_id=event_id,
            canceled_participations=len(line_ids),
            notice=CancellationNotice(event_date=event["event_date"], area=event["area"], recipients=line_ids),
        )

    @staticmethod
    def complete_event(event_id: str, db: Session) -> int:
        """Close a matched event after the dinner; returns the seated head count."""
        event = EventService._load(event_id, db)
        if event["status"] != "matched":
            raise EventStatusError(f"Event {event_id} must be matched to complete")

        if not use_firestore():
            seated = EventRepo.complete_sql(db, event_id)
        else:
            seated = EventRepo.complete_fs(event_id)

        logger.info(f"Completed event {event_id}: {seated} participants")
        return seated
