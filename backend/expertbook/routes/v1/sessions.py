# backend/expertbook/routes/v1/sessions.py
"""
Sessions routes - API v1

Endpoints:
    POST /batch-book/{user_id}      → Book selected slots against a purchase
    POST /{session_id}/cancel       → Cancel a session (client or expert)
    GET /                           → List sessions with derived status
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ...api.dependencies import get_booking_service, get_cancellation_service
from ...api.errors import handle_domain_exception
from ...core.constants import MINUTES_PER_HOUR
from ...core.enums import SessionStatus
from ...core.exceptions import DomainException
from ...schemas.booking import BatchBookRequest, BatchBookResponse, CancelRequest, SessionResponse
from ...services.booking_service import BookingService
from ...services.cancellation_service import CancellationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["sessions-v1"])


@router.post("/batch-book/{user_id}", response_model=BatchBookResponse)
def batch_book(
    user_id: str,
    payload: BatchBookRequest,
    service: BookingService = Depends(get_booking_service),
) -> BatchBookResponse:
    """
    Book the selected slots.

    Slots taken since selection or already started are skipped; the
    response lists the sessions actually created.
    """
    try:
        sessions = service.book_slots(
            payload.purchase_id,
            payload.date,
            [(s.start_min, s.end_min) for s in payload.slots],
            user_id=user_id,
        )
        purchase = service.purchase_repository.get_by_id(payload.purchase_id)
    except DomainException as e:
        handle_domain_exception(e)

    booked_minutes = sum(s.duration_minutes for s in sessions)
    return BatchBookResponse(
        sessions=[SessionResponse.from_session(s, service.status_of(s)) for s in sessions],
        booked_hours=round(booked_minutes / MINUTES_PER_HOUR, 2),
        hours_remaining=purchase.hours_remaining,
    )


@router.post("/{session_id}/cancel", response_model=SessionResponse)
def cancel_session(
    session_id: str,
    payload: CancelRequest,
    service: CancellationService = Depends(get_cancellation_service),
) -> SessionResponse:
    try:
        session = service.cancel(session_id, payload.reason, payload.actor_id)
    except DomainException as e:
        handle_domain_exception(e)
    return SessionResponse.from_session(session, SessionStatus.CANCELLED)


@router.get("", response_model=List[SessionResponse])
def list_sessions(
    user_id: Optional[str] = Query(None),
    expert_id: Optional[str] = Query(None),
    status: Optional[SessionStatus] = Query(None),
    service: BookingService = Depends(get_booking_service),
) -> List[SessionResponse]:
    sessions = service.list_sessions(user_id=user_id, expert_id=expert_id, status=status)
    return [SessionResponse.from_session(s, service.status_of(s)) for s in sessions]
