"""
Repository layer abstracting storage (SQLAlchemy vs Firebase Firestore).
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.core.config import settings
from app.models import Event, Guest, Match, Participation, Review
from app.services.firebase_client import get_firestore_client


def use_firestore() -> bool:
    return settings.USE_FIREBASE is True


def _docs_with_ids(docs) -> List[Dict[str, Any]]:
    results: List[Dict[str, Any]] = []
    for d in docs:
        item = d.to_dict()
        item["id"] = d.id
        results.append(item)
    return results


# -------- Event repository --------

class EventRepo:
    @staticmethod
    def get_by_id_sql(db: Session, event_id: str) -> Optional[Event]:
        return db.query(Event).filter(Event.id == event_id).first()

    # Firestore shape: document "events/{event_id}" with participations, guests
    # and matches subcollections
    @staticmethod
    def get_by_id_fs(event_id: str) -> Optional[Dict[str, Any]]:
        fs = get_firestore_client()
        if not fs:
            return None
        doc = fs.collection("events").document(event_id).get()
        if not doc.exists:
            return None
        data = doc.to_dict()
        data["id"] = doc.id
        return data

    @staticmethod
    def cancel_sql(db: Session, event_id: str) -> List[Optional[str]]:
        """Close the event and cancel every active sign-up.

        Returns the LINE ids (None when unlinked) of the canceled users.
        """
        try:
            participations = ParticipationRepo.list_active_sql(db, event_id)
            line_ids = [p.user.line_user_id for p in participations]
            for participation in participations:
                participation.status = "canceled"
            db.query(Event).filter(Event.id == event_id).update({"status": "closed"})
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        return line_ids

    @staticmethod
    def complete_sql(db: Session, event_id: str) -> int:
        """Close a matched event; returns how many sign-ups were seated."""
        try:
            seated = db.query(Participation).filter(
                Participation.event_id == event_id,
                Participation.status == "matched"
            ).count()
            db.query(Event).filter(Event.id == event_id).update({"status": "closed"})
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        return seated

    @staticmethod
    def cancel_fs(event_id: str) -> List[Optional[str]]:
        fs = get_firestore_client()
        event_ref = fs.collection("events").document(event_id)
        participations = ParticipationRepo.list_active_fs(event_id)

        batch = fs.batch()
        for p in participations:
            batch.set(event_ref.collection("participations").document(p["id"]), {"status": "canceled"}, merge=True)
        batch.set(event_ref, {"status": "closed"}, merge=True)
        batch.commit()

        return [p["user"].get("line_user_id") for p in participations]

    @staticmethod
    def complete_fs(event_id: str) -> int:
        fs = get_firestore_client()
        event_ref = fs.collection("events").document(event_id)
        seated = [
            doc for doc in event_ref.collection("participations").get()
            if doc.to_dict().get("status") == "matched"
        ]
        event_ref.set({"status": "closed"}, merge=True)
        return len(seated)


# -------- Participation repository --------

class ParticipationRepo:
    @staticmethod
    def list_active_sql(db: Session, event_id: str) -> List[Participation]:
        return db.query(Participation).options(joinedload(Participation.user)).filter(
            Participation.event_id == event_id,
            Participation.status != "canceled"
        ).order_by(Participation.created_at).all()

    @staticmethod
    def list_active_fs(event_id: str) -> List[Dict[str, Any]]:
        """Participations with the user document embedded under "user"."""
        fs = get_firestore_client()
        docs = fs.collection("events").document(event_id).collection("participations").order_by("created_at").get()
        participations = [p for p in _docs_with_ids(docs) if p.get("status") != "canceled"]
        if not participations:
            return []

        user_refs = [fs.collection("users").document(p["user_id"]) for p in participations]
        users: Dict[str, Dict[str, Any]] = {}
        for snapshot in fs.get_all(user_refs):
            if snapshot.exists:
                user = snapshot.to_dict()
                user["id"] = snapshot.id
                users[snapshot.id] = user

        return [
            {**p, "user": users[p["user_id"]]}
            for p in participations
            if p["user_id"] in users
        ]


# -------- Guest repository --------

class GuestRepo:
    @staticmethod
    def list_sql(db: Session, event_id: str) -> List[Guest]:
        return db.query(Guest).filter(Guest.event_id == event_id).order_by(Guest.created_at).all()

    @staticmethod
    def create_sql(
        db: Session,
        event_id: str,
        display_name: str,
        gender: str,
        pair_with_guest_id: Optional[str] = None
    ) -> Optional[Guest]:
        """Create a guest; returns None if the guest to pair with does not exist."""
        group_id = str(uuid.uuid4())
        if pair_with_guest_id:
            partner = db.query(Guest).filter(
                Guest.id == pair_with_guest_id,
                Guest.event_id == event_id
            ).first()
            if not partner:
                return None
            group_id = partner.group_id

        guest = Guest(event_id=event_id, display_name=display_name, gender=gender, group_id=group_id)
        db.add(guest)
        db.commit()
        db.refresh(guest)
        return guest

    @staticmethod
    def delete_sql(db: Session, event_id: str, guest_id: str) -> bool:
        deleted = db.query(Guest).filter(
            Guest.id == guest_id,
            Guest.event_id == event_id
        ).delete()
        db.commit()
        return deleted > 0

    @staticmethod
    def list_fs(event_id: str) -> List[Dict[str, Any]]:
        fs = get_firestore_client()
        docs = fs.collection("events").document(event_id).collection("guests").order_by("created_at").get()
        return _docs_with_ids(docs)

    @staticmethod
    def create_fs(
        event_id: str,
        display_name: str,
        gender: str,
        pair_with_guest_id: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        fs = get_firestore_client()
        guests = fs.collection("events").document(event_id).collection("guests")
        group_id = str(uuid.uuid4())
        if pair_with_guest_id:
            partner = guests.document(pair_with_guest_id).get()
            if not partner.exists:
                return None
            group_id = partner.to_dict()["group_id"]

        data = {
            "event_id": event_id,
            "display_name": display_name,
            "gender": gender,
            "group_id": group_id,
            "created_at": datetime.utcnow().isoformat(),
        }
        guest_id = str(uuid.uuid4())
        guests.document(guest_id).set(data)
        return {**data, "id": guest_id}

    @staticmethod
    def delete_fs(event_id: str, guest_id: str) -> bool:
        fs = get_firestore_client()
        ref = fs.collection("events").document(event_id).collection("guests").document(guest_id)
        if not ref.get().exists:
            return False
        ref.delete()
        return True


# -------- Review repository --------

class ReviewRepo:
    @staticmethod
    def list_block_relations_sql(db: Session, user_ids: List[str]) -> List[Tuple[str, str]]:
        """(reviewer_id, target_user_id) of blocking reviews touching these users."""
        if not user_ids:
            return []
        rows = db.query(Review.reviewer_id, Review.target_user_id).filter(
            Review.block_flag == True,
            Review.reviewer_id.in_(user_ids) | Review.target_user_id.in_(user_ids)
        ).distinct().all()
        return [(row.reviewer_id, row.target_user_id) for row in rows]

    @staticmethod
    def list_block_relations_fs(user_ids: List[str]) -> List[Tuple[str, str]]:
        if not user_ids:
            return []
        fs = get_firestore_client()
        wanted = set(user_ids)
        docs = fs.collection("reviews").where("block_flag", "==", True).get()
        pairs = set()
        for d in docs:
            review = d.to_dict()
            if review.get("reviewer_id") in wanted or review.get("target_user_id") in wanted:
                pairs.add((review["reviewer_id"], review["target_user_id"]))
        return sorted(pairs)


# -------- Match repository --------

class MatchRepo:
    @staticmethod
    def list_sql(db: Session, event_id: str) -> List[Match]:
        return db.query(Match).filter(Match.event_id == event_id).order_by(Match.created_at).all()

    @staticmethod
    def replace_sql(
        db: Session,
        event_id: str,
        tables: List[Dict[str, Any]],
        user_ids: List[str]
    ) -> List[Match]:
        """Swap the event's matches for ``tables`` and mark everything matched.

        Runs as one transaction; on failure nothing is written.
        """
        try:
            db.query(Match).filter(Match.event_id == event_id).delete()

            matches = [
                Match(
                    event_id=event_id,
                    restaurant_name=t["restaurant_name"],
                    restaurant_url=t.get("restaurant_url") or None,
                    reservation_name=t.get("reservation_name") or None,
                    table_members=list(t["members"]),
                )
                for t in tables
            ]
            db.add_all(matches)

            db.query(Event).filter(Event.id == event_id).update({"status": "matched"})
            if user_ids:
                db.query(Participation).filter(
                    Participation.event_id == event_id,
                    Participation.user_id.in_(user_ids)
                ).update({"status": "matched"}, synchronize_session=False)

            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise

        for match in matches:
            db.refresh(match)
        return matches

    @staticmethod
    def list_fs(event_id: str) -> List[Dict[str, Any]]:
        fs = get_firestore_client()
        docs = fs.collection("events").document(event_id).collection("matches").order_by("created_at").get()
        return _docs_with_ids(docs)

    @staticmethod
    def replace_fs(event_id: str, tables: List[Dict[str, Any]], user_ids: List[str]) -> List[Dict[str, Any]]:
        fs = get_firestore_client()
        event_ref = fs.collection("events").document(event_id)
        batch = fs.batch()

        for doc in event_ref.collection("matches").get():
            batch.delete(doc.reference)

        created: List[Dict[str, Any]] = []
        now = datetime.utcnow().isoformat()
        for t in tables:
            match_id = str(uuid.uuid4())
            data = {
                "event_id": event_id,
                "restaurant_name": t["restaurant_name"],
                "restaurant_url": t.get("restaurant_url") or None,
                "reservation_name": t.get("reservation_name") or None,
                "table_members": list(t["members"]),
                "created_at": now,
            }
            batch.set(event_ref.collection("matches").document(match_id), data)
            created.append({**data, "id": match_id})

        batch.set(event_ref, {"status": "matched"}, merge=True)

        wanted = set(user_ids)
        for doc in event_ref.collection("participations").get():
            if doc.to_dict().get("user_id") in wanted:
                batch.set(doc.reference, {"status": "matched"}, merge=True)

        batch.commit()
        return created
