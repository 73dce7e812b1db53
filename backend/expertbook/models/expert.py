# backend/expertbook/models/expert.py
"""
Expert reference data.

Experts are seeded, not created by the booking engine. Each expert has an
hourly rate and default working hours used when no explicit window or
date override exists.
"""

from sqlalchemy import CheckConstraint, Column, Float, Integer, Numeric, String, Text

from ..core.constants import DEFAULT_BASE_RATING
from ..core.enums import ExpertDomain
from ..core.ulid_helper import generate_ulid
from ..database import Base


class Expert(Base):
    """Consultant whose time is sold in hour packages."""

    __tablename__ = "experts"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    name = Column(String(200), nullable=False)
    domain = Column(String(20), nullable=False, default=ExpertDomain.CYBER.value, index=True)
    description = Column(Text, nullable=True)
    experience = Column(String(255), nullable=True)
    base_rating = Column(Float, nullable=False, default=DEFAULT_BASE_RATING)
    hourly_rate = Column(Numeric(10, 2), nullable=False)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)

    # Default weekly availability
    day_start_min = Column(Integer, nullable=False, default=9 * 60)
    day_end_min = Column(Integer, nullable=False, default=17 * 60)
    workdays = Column(String(20), nullable=False, default="1,2,3,4,5")  # 0 = Sunday

    __table_args__ = (
        CheckConstraint("hourly_rate >= 0", name="ck_experts_rate_non_negative"),
        CheckConstraint(
            "day_start_min >= 0 AND day_end_min <= 1440", name="ck_experts_day_bounds"
        ),
    )

    @property
    def workday_set(self) -> frozenset[int]:
        """Weekday indices (0 = Sunday) the expert works by default."""
        raw = self.workdays or ""
        return frozenset(int(token) for token in raw.split(",") if token.strip())

    def __repr__(self) -> str:
        return f"<Expert {self.id} {self.name} ({self.domain})>"
