# backend/expertbook/models/billing.py
"""
Money movements recorded by admins.

Both tables are append-only ledgers: amounts are recorded, never charged
or reversed by the engine.
"""

from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Numeric, String, Text

from ..core.ulid_helper import generate_ulid
from ..database import Base


class Payout(Base):
    """Payment made to an expert."""

    __tablename__ = "payouts"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    expert_id = Column(String(26), ForeignKey("experts.id"), nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    __table_args__ = (CheckConstraint("amount > 0", name="ck_payouts_amount_positive"),)


class ClientPayment(Base):
    """Payment received from a client."""

    __tablename__ = "client_payments"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    user_id = Column(String(26), nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    __table_args__ = (CheckConstraint("amount > 0", name="ck_client_payments_amount_positive"),)
