# backend/expertbook/repositories/feedback_repository.py
"""
Feedback Repository

Data access for client ratings of fully used purchases.
"""

import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models.feedback import Feedback
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class FeedbackRepository(BaseRepository[Feedback]):
    """Repository for feedback entries."""

    def __init__(self, db: Session):
        super().__init__(db, Feedback)

    def get_for_user_purchase(self, user_id: str, purchase_id: str) -> Optional[Feedback]:
        return self.find_one_by(user_id=user_id, purchase_id=purchase_id)

    def average_rating(self, expert_id: str) -> Optional[float]:
        """Mean rating for an expert, or None when nobody has rated them."""
        query = self.db.query(func.avg(Feedback.rating)).filter(Feedback.expert_id == expert_id)
        value = self._execute_scalar(query)
        return float(value) if value is not None else None
