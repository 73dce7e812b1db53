"""Payout, client payment and reconciliation schemas."""

import datetime
from typing import Optional

from pydantic import Field

from .base import Money, StandardizedModel, StrictRequestModel


class PayoutCreate(StrictRequestModel):
    expert_id: str = Field(..., min_length=1)
    amount: Money
    note: Optional[str] = Field(default=None, max_length=500)


class ClientPaymentCreate(StrictRequestModel):
    user_id: str = Field(..., min_length=1)
    amount: Money
    note: Optional[str] = Field(default=None, max_length=500)


class PayoutResponse(StandardizedModel):
    id: str
    expert_id: str
    amount: Money
    note: Optional[str] = None
    created_at: datetime.datetime


class ClientPaymentResponse(StandardizedModel):
    id: str
    user_id: str
    amount: Money
    note: Optional[str] = None
    created_at: datetime.datetime


class ExpertEarnings(StandardizedModel):
    """Earned from completed sessions, paid out, and still due."""

    expert_id: str
    name: str
    earned: Money
    paid: Money
    due: Money


class ClientBillingSummary(StandardizedModel):
    user_id: str
    total: Money
    paid: Money
    due: Money
    purchase_count: int
