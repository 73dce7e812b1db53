# backend/expertbook/models/feedback.py
"""
Client feedback, one per fully used purchase.

Design notes:
- The (user_id, purchase_id) pair is unique at the database level
- Rating is constrained to 1..5
"""

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from ..core.ulid_helper import generate_ulid
from ..database import Base


class Feedback(Base):
    """Star rating and optional comment left after a package is used up."""

    __tablename__ = "feedback"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    user_id = Column(String(26), nullable=False)
    expert_id = Column(String(26), ForeignKey("experts.id"), nullable=False)
    purchase_id = Column(String(26), ForeignKey("purchases.id", ondelete="CASCADE"), nullable=False)
    rating = Column(Integer, nullable=False)
    text = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    __table_args__ = (
        UniqueConstraint("user_id", "purchase_id", name="uq_feedback_user_purchase"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_feedback_rating_range"),
        Index("idx_feedback_expert", "expert_id"),
    )
