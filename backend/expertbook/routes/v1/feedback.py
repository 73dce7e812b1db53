# backend/expertbook/routes/v1/feedback.py
"""
Feedback routes - API v1

Endpoints:
    POST /                      → Rate a fully used purchase (once)
    GET /pending/{user_id}      → Purchases waiting for a rating
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, status

from ...api.dependencies import get_feedback_service
from ...api.errors import handle_domain_exception
from ...core.exceptions import DomainException
from ...schemas.feedback import FeedbackCreate, FeedbackResponse, PendingFeedbackItem
from ...services.feedback_service import FeedbackService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["feedback-v1"])


@router.post("", response_model=FeedbackResponse, status_code=status.HTTP_201_CREATED)
def submit_feedback(
    payload: FeedbackCreate,
    service: FeedbackService = Depends(get_feedback_service),
) -> FeedbackResponse:
    try:
        feedback = service.submit_feedback(
            payload.user_id, payload.purchase_id, payload.rating, payload.text
        )
    except DomainException as e:
        handle_domain_exception(e)
    return FeedbackResponse.model_validate(feedback)


@router.get("/pending/{user_id}", response_model=List[PendingFeedbackItem])
def pending_feedback(
    user_id: str,
    service: FeedbackService = Depends(get_feedback_service),
) -> List[PendingFeedbackItem]:
    return service.pending_feedback(user_id)
