# backend/expertbook/repositories/availability_repository.py
"""
Availability Repository

Data access for the two per-date availability layers:
- Date overrides (one per expert and date)
- Explicit window sets and their windows
"""

from datetime import date
import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ..core.exceptions import RepositoryException
from ..models.availability import AvailabilityOverride, AvailabilityWindow, AvailabilityWindowSet
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AvailabilityOverrideRepository(BaseRepository[AvailabilityOverride]):
    """Repository for per-date working-hour overrides."""

    def __init__(self, db: Session):
        super().__init__(db, AvailabilityOverride)

    def get_for_expert_date(
        self, expert_id: str, specific_date: date
    ) -> Optional[AvailabilityOverride]:
        return self.find_one_by(expert_id=expert_id, date=specific_date)

    def list_for_expert(
        self,
        expert_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[AvailabilityOverride]:
        """Overrides for an expert, ordered by date, optionally bounded."""
        try:
            query = self.db.query(AvailabilityOverride).filter(
                AvailabilityOverride.expert_id == expert_id
            )
            if start_date is not None:
                query = query.filter(AvailabilityOverride.date >= start_date)
            if end_date is not None:
                query = query.filter(AvailabilityOverride.date <= end_date)
            return query.order_by(AvailabilityOverride.date).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing overrides for expert {expert_id}: {str(e)}")
            raise RepositoryException(f"Failed to list overrides: {str(e)}")


class AvailabilityWindowRepository(BaseRepository[AvailabilityWindowSet]):
    """Repository for explicit availability windows grouped per date."""

    def __init__(self, db: Session):
        super().__init__(db, AvailabilityWindowSet)

    def get_for_expert_date(
        self, expert_id: str, specific_date: date
    ) -> Optional[AvailabilityWindowSet]:
        try:
            return (
                self.db.query(AvailabilityWindowSet)
                .options(selectinload(AvailabilityWindowSet.windows))
                .filter(
                    AvailabilityWindowSet.expert_id == expert_id,
                    AvailabilityWindowSet.date == specific_date,
                )
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting window set: {str(e)}")
            raise RepositoryException(f"Failed to get window set: {str(e)}")

    def get_or_create_set(self, expert_id: str, specific_date: date) -> AvailabilityWindowSet:
        window_set = self.get_for_expert_date(expert_id, specific_date)
        if window_set is None:
            window_set = self.create(expert_id=expert_id, date=specific_date)
        return window_set

    def add_window(
        self, window_set: AvailabilityWindowSet, start_min: int, end_min: int
    ) -> AvailabilityWindow:
        try:
            window = AvailabilityWindow(start_min=start_min, end_min=end_min)
            window_set.windows.append(window)
            self.db.flush()
            return window
        except SQLAlchemyError as e:
            self.logger.error(f"Error adding window: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to add window: {str(e)}")

    def remove_window(self, window_set: AvailabilityWindowSet, window: AvailabilityWindow) -> None:
        """Remove one window; the set itself goes away with its last window."""
        try:
            window_set.windows.remove(window)
            if not window_set.windows:
                self.db.delete(window_set)
            self.db.flush()
        except SQLAlchemyError as e:
            self.logger.error(f"Error removing window: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to remove window: {str(e)}")

    def list_all(self) -> List[AvailabilityWindowSet]:
        try:
            return (
                self.db.query(AvailabilityWindowSet)
                .options(selectinload(AvailabilityWindowSet.windows))
                .order_by(AvailabilityWindowSet.expert_id, AvailabilityWindowSet.date)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing window sets: {str(e)}")
            raise RepositoryException(f"Failed to list window sets: {str(e)}")
