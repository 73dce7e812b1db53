# backend/expertbook/models/availability.py
"""
Layered availability records.

- AvailabilityOverride: replaces the expert's default hours (or marks a day
  off) for one date. One per (expert, date); saving again replaces it.
- AvailabilityWindowSet: explicit bookable windows for one date. When the
  set has windows they define the bookable span instead of the default
  hours or override.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from ..core.ulid_helper import generate_ulid
from ..database import Base


class AvailabilityOverride(Base):
    """Per-date replacement of an expert's working hours."""

    __tablename__ = "availability_overrides"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    expert_id = Column(String(26), ForeignKey("experts.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    workday = Column(Boolean, nullable=False, default=True)
    # Null bounds fall back to the expert's defaults
    day_start_min = Column(Integer, nullable=True)
    day_end_min = Column(Integer, nullable=True)

    __table_args__ = (
        UniqueConstraint("expert_id", "date", name="uq_availability_override_expert_date"),
        Index("idx_availability_override_expert", "expert_id"),
    )

    def __repr__(self) -> str:
        return f"<AvailabilityOverride {self.expert_id} {self.date} workday={self.workday}>"


class AvailabilityWindowSet(Base):
    """Explicit windows declared by an expert for a single date."""

    __tablename__ = "availability_window_sets"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    expert_id = Column(String(26), ForeignKey("experts.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)

    windows = relationship(
        "AvailabilityWindow",
        back_populates="window_set",
        cascade="all, delete-orphan",
        order_by="AvailabilityWindow.start_min",
    )

    __table_args__ = (
        UniqueConstraint("expert_id", "date", name="uq_availability_window_set_expert_date"),
    )

    def __repr__(self) -> str:
        return f"<AvailabilityWindowSet {self.expert_id} {self.date} windows={len(self.windows)}>"


class AvailabilityWindow(Base):
    """One [start_min, end_min) span inside a window set."""

    __tablename__ = "availability_windows"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    window_set_id = Column(
        String(26),
        ForeignKey("availability_window_sets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    start_min = Column(Integer, nullable=False)
    end_min = Column(Integer, nullable=False)

    window_set = relationship("AvailabilityWindowSet", back_populates="windows")

    __table_args__ = (
        CheckConstraint("start_min >= 0 AND end_min <= 1440", name="ck_availability_window_bounds"),
        CheckConstraint("end_min > start_min", name="ck_availability_window_order"),
    )

    def __repr__(self) -> str:
        return f"<AvailabilityWindow {self.start_min}-{self.end_min}>"
