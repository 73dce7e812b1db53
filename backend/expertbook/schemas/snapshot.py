# backend/expertbook/schemas/snapshot.py
"""
Persisted-state snapshot.

The record store sees the engine's state as named collections, each a
mapping from record id to record. These models are that exchange format;
they validate what comes back in before it is merged.
"""

import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..core.constants import MINUTES_PER_HOUR
from .base import Money


class SnapshotRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="forbid")

    id: str = Field(..., min_length=1)


class PurchaseRecord(SnapshotRecord):
    user_id: str
    expert_id: str
    package_hours: int = Field(..., gt=0)
    minutes_remaining: int = Field(..., ge=0)
    amount: Money
    created_at: datetime.datetime

    @model_validator(mode="after")
    def _check_balance(self) -> "PurchaseRecord":
        if self.minutes_remaining > self.package_hours * MINUTES_PER_HOUR:
            raise ValueError("minutes_remaining exceeds the package size")
        return self


class SessionRecord(SnapshotRecord):
    user_id: str
    expert_id: str
    purchase_id: str
    booking_date: datetime.date
    start_min: int = Field(..., ge=0, le=1440)
    end_min: int = Field(..., ge=0, le=1440)
    meeting_link: Optional[str] = None
    created_at: datetime.datetime
    cancel_reason: Optional[str] = None
    cancelled_by: Optional[str] = None
    cancelled_at: Optional[datetime.datetime] = None


class OverrideRecord(SnapshotRecord):
    expert_id: str
    date: datetime.date
    workday: bool
    day_start_min: Optional[int] = None
    day_end_min: Optional[int] = None


class WindowRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="forbid")

    start_min: int = Field(..., ge=0, le=1440)
    end_min: int = Field(..., ge=0, le=1440)


class WindowSetRecord(SnapshotRecord):
    expert_id: str
    date: datetime.date
    windows: List[WindowRecord] = Field(default_factory=list)


class PayoutRecord(SnapshotRecord):
    expert_id: str
    amount: Money
    note: Optional[str] = None
    created_at: datetime.datetime


class ClientPaymentRecord(SnapshotRecord):
    user_id: str
    amount: Money
    note: Optional[str] = None
    created_at: datetime.datetime


class FeedbackRecord(SnapshotRecord):
    user_id: str
    expert_id: str
    purchase_id: str
    rating: int = Field(..., ge=1, le=5)
    text: Optional[str] = None
    created_at: datetime.datetime


class StateSnapshot(BaseModel):
    """All mutable collections, keyed by logical collection name."""

    model_config = ConfigDict(extra="forbid")

    exported_at: Optional[datetime.datetime] = None
    purchases: Dict[str, PurchaseRecord] = Field(default_factory=dict)
    sessions: Dict[str, SessionRecord] = Field(default_factory=dict)
    availability_overrides: Dict[str, OverrideRecord] = Field(default_factory=dict)
    explicit_window_sets: Dict[str, WindowSetRecord] = Field(default_factory=dict)
    payouts: Dict[str, PayoutRecord] = Field(default_factory=dict)
    client_payments: Dict[str, ClientPaymentRecord] = Field(default_factory=dict)
    feedback: Dict[str, FeedbackRecord] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_keys(self) -> "StateSnapshot":
        for name in COLLECTIONS:
            for key, record in getattr(self, name).items():
                if key != record.id:
                    raise ValueError(f"{name}: key {key!r} does not match record id {record.id!r}")
        return self


COLLECTIONS = (
    "purchases",
    "sessions",
    "availability_overrides",
    "explicit_window_sets",
    "payouts",
    "client_payments",
    "feedback",
)
