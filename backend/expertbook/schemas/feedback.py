"""Feedback schemas."""

import datetime
from typing import Optional

from pydantic import Field

from ..core.constants import MAX_FEEDBACK_LENGTH
from ..core.enums import FeedbackState
from .base import StandardizedModel, StrictRequestModel


class FeedbackCreate(StrictRequestModel):
    user_id: str = Field(..., min_length=1)
    purchase_id: str = Field(..., min_length=1)
    # Range is checked by the service so a zero rating maps to MISSING_RATING
    rating: int = 0
    text: Optional[str] = Field(default=None, max_length=MAX_FEEDBACK_LENGTH)


class FeedbackResponse(StandardizedModel):
    id: str
    user_id: str
    expert_id: str
    purchase_id: str
    rating: int
    text: Optional[str] = None
    created_at: datetime.datetime


class PendingFeedbackItem(StandardizedModel):
    purchase_id: str
    expert_id: str
    state: FeedbackState
