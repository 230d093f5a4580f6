"""
Admin API routes for table matching - requires authentication
"""

import logging
from typing import Callable

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.matching import MatchingSession
from app.matching.errors import (
    AutoAssignError,
    EventNotFoundError,
    EventStatusError,
    InvalidMatchingError,
    MemberNotFoundError,
    SessionClosedError,
    TableNotFoundError,
)
from app.matching.serialization import member_from_wire, member_to_wire, table_to_wire
from app.schemas.guest import GuestCreate, GuestResponse
from app.schemas.matching import (
    AutoAssignRequest,
    MatchingState,
    MemberAssign,
    TableIssueOut,
    TableScoreOut,
    TableState,
    TableUpdate,
)
from app.services.event_service import EventService
from app.services.matching_service import MatchingService, guest_from_doc, guest_from_row
from app.services.notification_service import line_notifier
from app.services.repositories import EventRepo, GuestRepo, use_firestore
from app.services.session_store import session_store
from app.utils.responses import conflict_error, error_response, not_found_error, success_response
from app.utils.security import verify_admin_token

logger = logging.getLogger(__name__)

router = APIRouter()


def matching_state(session: MatchingSession) -> dict:
    """Serializable view of a session: tables with scores and issues"""
    tables = []
    for table in session.tables:
        issue = session.table_issue(table)
        tables.append(TableState(
            **table_to_wire(table),
            score=TableScoreOut(**session.score(table.id).as_dict()),
            issue=TableIssueOut(message=issue.message, is_block_error=issue.is_block_error) if issue else None,
        ))

    return MatchingState(
        event_id=session.event_id,
        status=session.status,
        is_valid=session.is_valid(),
        tables=tables,
        split_pairs=session.split_pair_violations(),
        unassigned=[member_to_wire(m) for m in session.unassigned_members()],
    ).dict()


def open_session(event_id: str, db: Session, reload: bool = False) -> MatchingSession:
    session = session_store.open(event_id, lambda: MatchingService.load_session(event_id, db), reload=reload)
    if session is None:
        raise not_found_error("Event")
    return session


def apply_edit(session: MatchingSession, message: str, edit: Callable[[], object]):
    """Run one editor operation and answer with the resulting state"""
    try:
        edit()
    except TableNotFoundError:
        not_found_error("Table")
    except MemberNotFoundError:
        not_found_error("Member")
    except SessionClosedError as exc:
        conflict_error(str(exc))
    return success_response(message=message, data=matching_state(session))


@router.get("/events/{event_id}/matching")
async def get_matching(
    event_id: str,
    reload: bool = Query(False),
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Open the working session (loading saved matches on first use)"""
    session = open_session(event_id, db, reload=reload)
    return success_response(message="Matching session loaded", data=matching_state(session))


@router.delete("/events/{event_id}/matching")
async def discard_matching(
    event_id: str,
    token: str = Depends(verify_admin_token)
):
    """Throw away unsaved edits"""
    discarded = session_store.discard(event_id)
    return success_response(
        message="Working state discarded" if discarded else "No working state to discard",
        data={"discarded": discarded}
    )


@router.post("/events/{event_id}/matching/auto-assign")
async def auto_assign(
    event_id: str,
    request: AutoAssignRequest,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Replace all working tables with a greedy assignment"""
    session = open_session(event_id, db)

    existing = len(session.tables)
    if existing and not request.confirm:
        return error_response(
            message=f"Auto-assign replaces {existing} existing tables. Resend with confirm=true.",
            error_code="confirmation_required",
            status_code=409
        )

    try:
        session.auto_assign()
    except AutoAssignError as exc:
        logger.warning(f"Auto-assign failed for event {event_id}: {exc}")
        return error_response(message=str(exc), error_code="auto_assign_failed", status_code=422)
    except SessionClosedError as exc:
        conflict_error(str(exc))

    return success_response(message="Tables auto-assigned", data=matching_state(session))


@router.post("/events/{event_id}/matching/tables")
async def add_table(
    event_id: str,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    session = open_session(event_id, db)
    return apply_edit(session, "Table added", session.add_table)


@router.delete("/events/{event_id}/matching/tables/{table_id}")
async def remove_table(
    event_id: str,
    table_id: str,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    session = open_session(event_id, db)
    return apply_edit(session, "Table removed", lambda: session.remove_table(table_id))


@router.patch("/events/{event_id}/matching/tables/{table_id}")
async def update_table(
    event_id: str,
    table_id: str,
    update: TableUpdate,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Set restaurant fields; checked only when saving"""
    session = open_session(event_id, db)

    def edit():
        session.get_table(table_id)
        for field, value in update.dict(exclude_none=True).items():
            session.update_table(table_id, field, value)

    return apply_edit(session, "Table updated", edit)


@router.post("/events/{event_id}/matching/tables/{table_id}/members")
async def add_member(
    event_id: str,
    table_id: str,
    assignment: MemberAssign,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Seat a member and the rest of their group at the table"""
    session = open_session(event_id, db)
    member = member_from_wire(assignment.member_id)
    return apply_edit(session, "Member seated", lambda: session.add_member(table_id, member))


@router.delete("/events/{event_id}/matching/tables/{table_id}/members/{member_id}")
async def remove_member(
    event_id: str,
    table_id: str,
    member_id: str,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Unseat a member and the rest of their group"""
    session = open_session(event_id, db)
    member = member_from_wire(member_id)
    return apply_edit(session, "Member removed", lambda: session.remove_member(table_id, member))


@router.post("/events/{event_id}/matching/save")
async def save_matching(
    event_id: str,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Persist a valid matching and notify participants in the background"""
    session = open_session(event_id, db)

    try:
        saved = MatchingService.save_session(session, db)
    except InvalidMatchingError as exc:
        return error_response(
            message="Matching is not valid yet",
            error_code="invalid_matching",
            details=exc.problems,
            status_code=422
        )
    except SessionClosedError as exc:
        conflict_error(str(exc))
    except EventNotFoundError:
        session_store.discard(event_id)
        not_found_error("Event")
    except EventStatusError as exc:
        return error_response(message=str(exc), error_code="event_closed", status_code=400)
    except SQLAlchemyError as exc:
        logger.error(f"Failed to save matches for event {event_id}: {exc}")
        return error_response(
            message="Failed to save matches. Your edits are kept; please retry.",
            error_code="persistence_failed",
            status_code=500
        )

    background_tasks.add_task(line_notifier.send_match_notifications, saved.notifications)
    session_store.discard(event_id)

    return success_response(
        message="Matching saved. Participants will be notified on LINE.",
        data={"event_id": event_id, "matches": saved.matches}
    )


@router.post("/events/{event_id}/guests")
async def create_guest(
    event_id: str,
    guest_data: GuestCreate,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Add a guest, optionally in the same group as an existing guest"""
    if not use_firestore():
        if not EventRepo.get_by_id_sql(db, event_id):
            raise not_found_error("Event")
        row = GuestRepo.create_sql(
            db, event_id, guest_data.display_name, guest_data.gender, guest_data.pair_with_guest_id
        )
        if row is None:
            raise not_found_error("Guest to pair with")
        guest = guest_from_row(row)
        payload = GuestResponse.from_orm(row).dict()
    else:
        if not EventRepo.get_by_id_fs(event_id):
            raise not_found_error("Event")
        doc = GuestRepo.create_fs(event_id, guest_data.display_name, guest_data.gender, guest_data.pair_with_guest_id)
        if doc is None:
            raise not_found_error("Guest to pair with")
        guest = guest_from_doc(doc)
        payload = GuestResponse(**doc).dict()

    session = session_store.get(event_id)
    if session is not None and not session.persisted:
        session.add_guest(guest)

    return success_response(message="Guest added", data=payload, status_code=201)


@router.delete("/events/{event_id}/guests/{guest_id}")
async def delete_guest(
    event_id: str,
    guest_id: str,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Delete a guest and unseat them from the working tables"""
    if not use_firestore():
        deleted = GuestRepo.delete_sql(db, event_id, guest_id)
    else:
        deleted = GuestRepo.delete_fs(event_id, guest_id)
    if not deleted:
        raise not_found_error("Guest")

    session = session_store.get(event_id)
    if session is not None and not session.persisted:
        try:
            session.remove_guest(guest_id)
        except MemberNotFoundError:
            pass  # not in this session's roster

    return success_response(message="Guest deleted", data={"guest_id": guest_id})


@router.post("/events/{event_id}/cancel")
async def cancel_event(
    event_id: str,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Close an open event, cancel its sign-ups and tell them on LINE"""
    try:
        canceled = EventService.cancel_event(event_id, db)
    except EventNotFoundError:
        not_found_error("Event")
    except EventStatusError as exc:
        return error_response(message=str(exc), error_code="event_not_open", status_code=400)

    background_tasks.add_task(line_notifier.send_cancellation_notifications, canceled.notice)
    session_store.discard(event_id)

    return success_response(
        message="Event canceled. Participants will be notified on LINE.",
        data={"event_id": event_id, "canceled_participations": canceled.canceled_participations}
    )


@router.post("/events/{event_id}/complete")
async def complete_event(
    event_id: str,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Close a matched event once the dinner has taken place"""
    try:
        participants = EventService.complete_event(event_id, db)
    except EventNotFoundError:
        not_found_error("Event")
    except EventStatusError as exc:
        return error_response(message=str(exc), error_code="event_not_matched", status_code=400)

    session_store.discard(event_id)
    return success_response(
        message="Event completed",
        data={"event_id": event_id, "participants": participants}
    )
