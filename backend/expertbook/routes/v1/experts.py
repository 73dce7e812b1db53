# backend/expertbook/routes/v1/experts.py
"""
Experts routes - API v1

Versioned expert endpoints under /api/v1/experts.
All business logic delegated to AvailabilityService and FeedbackService.

Endpoints:
    GET /                                   → Expert directory with ratings
    GET /{expert_id}/slots/{date}           → Free 30-minute slots
    GET /{expert_id}/windows/{date}         → Explicit windows for a date
    POST /{expert_id}/windows/{date}        → Declare an explicit window
    DELETE /{expert_id}/windows/{date}/{start} → Remove one window
    DELETE /{expert_id}/windows/{date}      → Clear all windows for a date
    GET /{expert_id}/overrides              → List date overrides
    PUT /{expert_id}/overrides/{date}       → Set or replace a date override
    DELETE /{expert_id}/overrides/{date}    → Remove a date override
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from ...api.dependencies import get_availability_service, get_feedback_service
from ...api.errors import handle_domain_exception
from ...core.exceptions import DomainException, NotFoundException
from ...core.time_utils import parse_date_key, to_clock_string
from ...schemas.availability import (
    FreeSlotsResponse,
    OverrideResponse,
    OverrideUpsert,
    SlotResponse,
    WindowCreate,
    WindowListResponse,
    WindowsClearedResponse,
)
from ...schemas.expert import ExpertResponse
from ...services.availability import AvailabilityService
from ...services.feedback_service import FeedbackService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["experts-v1"])


def _window_list(expert_id: str, date_str: str, windows) -> WindowListResponse:
    return WindowListResponse(
        expert_id=expert_id,
        date=parse_date_key(date_str),
        windows=[SlotResponse.from_interval(w.start, w.end) for w in windows],
    )


@router.get("", response_model=List[ExpertResponse])
def list_experts(
    domain: Optional[str] = Query(None),
    availability_service: AvailabilityService = Depends(get_availability_service),
    feedback_service: FeedbackService = Depends(get_feedback_service),
) -> List[ExpertResponse]:
    experts = availability_service.expert_repository.list_experts(domain=domain)
    results = []
    for expert in experts:
        rating = feedback_service.expert_rating(expert.id)
        results.append(
            ExpertResponse(
                id=expert.id,
                name=expert.name,
                domain=expert.domain,
                description=expert.description,
                experience=expert.experience,
                hourly_rate=expert.hourly_rate,
                rating=rating.rating,
                rating_count=rating.count,
                workdays=sorted(expert.workday_set),
                day_start=to_clock_string(expert.day_start_min),
                day_end=to_clock_string(expert.day_end_min),
            )
        )
    return results


@router.get("/{expert_id}/slots/{date}", response_model=FreeSlotsResponse)
def get_free_slots(
    expert_id: str,
    date: str,
    service: AvailabilityService = Depends(get_availability_service),
) -> FreeSlotsResponse:
    try:
        specific_date = parse_date_key(date)
        slots = service.get_free_slots(expert_id, specific_date)
    except DomainException as e:
        handle_domain_exception(e)
    return FreeSlotsResponse(
        expert_id=expert_id,
        date=specific_date,
        slots=[SlotResponse.from_interval(s.start, s.end) for s in slots],
    )


@router.get("/{expert_id}/windows/{date}", response_model=WindowListResponse)
def get_windows(
    expert_id: str,
    date: str,
    service: AvailabilityService = Depends(get_availability_service),
) -> WindowListResponse:
    try:
        windows = service.get_windows(expert_id, parse_date_key(date))
    except DomainException as e:
        handle_domain_exception(e)
    return _window_list(expert_id, date, windows)


@router.post(
    "/{expert_id}/windows/{date}",
    response_model=WindowListResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_window(
    expert_id: str,
    date: str,
    payload: WindowCreate,
    service: AvailabilityService = Depends(get_availability_service),
) -> WindowListResponse:
    try:
        windows = service.add_window(expert_id, parse_date_key(date), payload.start, payload.end)
    except DomainException as e:
        handle_domain_exception(e)
    return _window_list(expert_id, date, windows)


@router.delete("/{expert_id}/windows/{date}/{start}", response_model=WindowListResponse)
def remove_window(
    expert_id: str,
    date: str,
    start: str,
    service: AvailabilityService = Depends(get_availability_service),
) -> WindowListResponse:
    try:
        windows = service.remove_window(expert_id, parse_date_key(date), start)
    except DomainException as e:
        handle_domain_exception(e)
    return _window_list(expert_id, date, windows)


@router.delete("/{expert_id}/windows/{date}", response_model=WindowsClearedResponse)
def clear_windows(
    expert_id: str,
    date: str,
    service: AvailabilityService = Depends(get_availability_service),
) -> WindowsClearedResponse:
    try:
        removed = service.clear_windows(expert_id, parse_date_key(date))
    except DomainException as e:
        handle_domain_exception(e)
    return WindowsClearedResponse(removed=removed)


@router.get("/{expert_id}/overrides", response_model=List[OverrideResponse])
def list_overrides(
    expert_id: str,
    service: AvailabilityService = Depends(get_availability_service),
) -> List[OverrideResponse]:
    return [OverrideResponse.model_validate(o) for o in service.list_overrides(expert_id)]


@router.put("/{expert_id}/overrides/{date}", response_model=OverrideResponse)
def set_override(
    expert_id: str,
    date: str,
    payload: OverrideUpsert,
    service: AvailabilityService = Depends(get_availability_service),
) -> OverrideResponse:
    try:
        override = service.set_override(
            expert_id,
            parse_date_key(date),
            workday=payload.workday,
            day_start=payload.day_start,
            day_end=payload.day_end,
        )
    except DomainException as e:
        handle_domain_exception(e)
    return OverrideResponse.model_validate(override)


@router.delete("/{expert_id}/overrides/{date}", status_code=status.HTTP_204_NO_CONTENT)
def clear_override(
    expert_id: str,
    date: str,
    service: AvailabilityService = Depends(get_availability_service),
) -> Response:
    try:
        removed = service.clear_override(expert_id, parse_date_key(date))
    except DomainException as e:
        handle_domain_exception(e)
    if not removed:
        handle_domain_exception(
            NotFoundException("No override for that date", code="OVERRIDE_NOT_FOUND")
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
