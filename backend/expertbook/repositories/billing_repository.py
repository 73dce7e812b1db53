# backend/expertbook/repositories/billing_repository.py
"""
Billing Repository

Append-only ledgers of expert payouts and client payments, plus the
aggregate sums the billing service reconciles against.
"""

from decimal import Decimal
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models.billing import ClientPayment, Payout
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


def _as_decimal(value: object) -> Decimal:
    if value is None:
        return Decimal("0")
    return Decimal(str(value))


class PayoutRepository(BaseRepository[Payout]):
    """Repository for payouts made to experts."""

    def __init__(self, db: Session):
        super().__init__(db, Payout)

    def total_for_expert(self, expert_id: str) -> Decimal:
        query = self.db.query(func.coalesce(func.sum(Payout.amount), 0)).filter(
            Payout.expert_id == expert_id
        )
        return _as_decimal(self._execute_scalar(query))


class ClientPaymentRepository(BaseRepository[ClientPayment]):
    """Repository for payments received from clients."""

    def __init__(self, db: Session):
        super().__init__(db, ClientPayment)

    def total_for_user(self, user_id: str) -> Decimal:
        query = self.db.query(func.coalesce(func.sum(ClientPayment.amount), 0)).filter(
            ClientPayment.user_id == user_id
        )
        return _as_decimal(self._execute_scalar(query))
