# backend/expertbook/models/purchase.py
"""
Hour packages bought by clients.

The balance is kept in whole minutes so that booking, refund and
reconciliation arithmetic is exact. ``hours_remaining`` is only a
presentation value.
"""

from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import relationship

from ..core.constants import MINUTES_PER_HOUR
from ..core.ulid_helper import generate_ulid
from ..database import Base


class Purchase(Base):
    """A block of consulting hours a client bought from one expert."""

    __tablename__ = "purchases"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    user_id = Column(String(26), nullable=False, index=True)
    expert_id = Column(String(26), ForeignKey("experts.id"), nullable=False, index=True)
    package_hours = Column(Integer, nullable=False)
    minutes_remaining = Column(Integer, nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    expert = relationship("Expert")
    sessions = relationship("BookedSession", back_populates="purchase")

    __table_args__ = (
        CheckConstraint("package_hours > 0", name="ck_purchases_package_positive"),
        CheckConstraint(
            "minutes_remaining >= 0 AND minutes_remaining <= package_hours * 60",
            name="ck_purchases_balance_range",
        ),
        Index("idx_purchases_user_expert", "user_id", "expert_id"),
    )

    @property
    def package_minutes(self) -> int:
        return int(self.package_hours) * MINUTES_PER_HOUR

    @property
    def hours_remaining(self) -> float:
        """Balance in hours, rounded to 2 decimals for display."""
        return round((self.minutes_remaining or 0) / MINUTES_PER_HOUR, 2)

    @property
    def minutes_used(self) -> int:
        return self.package_minutes - int(self.minutes_remaining or 0)

    def __repr__(self) -> str:
        return (
            f"<Purchase {self.id} user={self.user_id} expert={self.expert_id} "
            f"{self.minutes_remaining}/{self.package_minutes}min>"
        )
