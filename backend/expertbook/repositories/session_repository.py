# backend/expertbook/repositories/session_repository.py
"""
Session Repository

Data access for booked sessions. Status beyond "cancelled" is derived
by the service layer, so queries here only distinguish active
(not cancelled) sessions from cancelled ones.
"""

from datetime import date
import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.session import BookedSession
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class SessionRepository(BaseRepository[BookedSession]):
    """Repository for booked sessions."""

    def __init__(self, db: Session):
        super().__init__(db, BookedSession)

    def _ordered(self, query):
        return query.order_by(
            BookedSession.booking_date, BookedSession.start_min, BookedSession.id
        )

    def get_active_for_expert_date(self, expert_id: str, booking_date: date) -> List[BookedSession]:
        """Non-cancelled sessions of an expert on one date."""
        try:
            query = self.db.query(BookedSession).filter(
                BookedSession.expert_id == expert_id,
                BookedSession.booking_date == booking_date,
                BookedSession.cancelled_at.is_(None),
            )
            return self._ordered(query).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting sessions for {expert_id} on {booking_date}: {str(e)}")
            raise RepositoryException(f"Failed to get sessions: {str(e)}")

    def list_by_purchase(self, purchase_id: str) -> List[BookedSession]:
        return self._execute_query(
            self._ordered(self._build_query().filter(BookedSession.purchase_id == purchase_id))
        )

    def list_sessions(
        self,
        user_id: Optional[str] = None,
        expert_id: Optional[str] = None,
        include_cancelled: bool = True,
    ) -> List[BookedSession]:
        query = self._build_query()
        if user_id is not None:
            query = query.filter(BookedSession.user_id == user_id)
        if expert_id is not None:
            query = query.filter(BookedSession.expert_id == expert_id)
        if not include_cancelled:
            query = query.filter(BookedSession.cancelled_at.is_(None))
        return self._execute_query(self._ordered(query))
