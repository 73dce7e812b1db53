# backend/expertbook/services/feedback_service.py
"""
Feedback Service

Gates client ratings so that each purchase is rated exactly once, and
only after it has been fully used:

    HAS_UPCOMING_SESSIONS -> AWAITING_COMPLETION -> ELIGIBLE -> SUBMITTED

A purchase is eligible when its balance is zero, it has at least one
session, none of its sessions is still upcoming, and the client has not
rated it yet.
"""

import logging
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy.orm import Session

from ..core.booking_lock import purchase_lock
from ..core.constants import MAX_RATING, MIN_RATING
from ..core.enums import FeedbackState, SessionStatus
from ..core.exceptions import (
    DuplicateFeedbackException,
    FeedbackNotAllowedException,
    ForbiddenException,
    MissingRatingException,
    NotFoundException,
    ValidationException,
)
from ..models.feedback import Feedback
from ..models.purchase import Purchase
from ..repositories.factory import RepositoryFactory
from ..schemas.expert import ExpertRating
from ..schemas.feedback import PendingFeedbackItem
from .base import BaseService, Clock
from .session_status import derive_session_status

if TYPE_CHECKING:
    from ..repositories.expert_repository import ExpertRepository
    from ..repositories.feedback_repository import FeedbackRepository
    from ..repositories.purchase_repository import PurchaseRepository
    from ..repositories.session_repository import SessionRepository

logger = logging.getLogger(__name__)


class FeedbackService(BaseService):
    """Service layer for the feedback gate and expert ratings."""

    def __init__(
        self,
        db: Session,
        clock: Optional[Clock] = None,
        feedback_repository: Optional["FeedbackRepository"] = None,
        purchase_repository: Optional["PurchaseRepository"] = None,
        session_repository: Optional["SessionRepository"] = None,
        expert_repository: Optional["ExpertRepository"] = None,
    ):
        super().__init__(db, clock=clock)
        self.feedback_repository = (
            feedback_repository or RepositoryFactory.create_feedback_repository(db)
        )
        self.purchase_repository = (
            purchase_repository or RepositoryFactory.create_purchase_repository(db)
        )
        self.session_repository = (
            session_repository or RepositoryFactory.create_session_repository(db)
        )
        self.expert_repository = (
            expert_repository or RepositoryFactory.create_expert_repository(db)
        )

    def _get_purchase(self, purchase_id: str) -> Purchase:
        purchase = self.purchase_repository.get_by_id(purchase_id)
        if purchase is None:
            raise NotFoundException(
                f"Purchase {purchase_id} not found",
                code="PURCHASE_NOT_FOUND",
                details={"purchase_id": purchase_id},
            )
        return purchase

    def state_of(self, purchase: Purchase) -> FeedbackState:
        if self.feedback_repository.get_for_user_purchase(purchase.user_id, purchase.id):
            return FeedbackState.SUBMITTED

        sessions = self.session_repository.list_by_purchase(purchase.id)
        if purchase.minutes_remaining > 0 or not sessions:
            return FeedbackState.HAS_UPCOMING_SESSIONS

        now = self.now()
        if any(derive_session_status(s, now) == SessionStatus.UPCOMING for s in sessions):
            return FeedbackState.AWAITING_COMPLETION
        return FeedbackState.ELIGIBLE

    def feedback_state(self, purchase_id: str) -> FeedbackState:
        return self.state_of(self._get_purchase(purchase_id))

    def is_eligible(self, purchase_id: str) -> bool:
        return self.feedback_state(purchase_id) == FeedbackState.ELIGIBLE

    def pending_feedback(self, user_id: str) -> List[PendingFeedbackItem]:
        """Purchases the client should be prompted to rate, newest first."""
        pending = []
        for purchase in self.purchase_repository.list_by_user(user_id):
            state = self.state_of(purchase)
            if state == FeedbackState.ELIGIBLE:
                pending.append(
                    PendingFeedbackItem(
                        purchase_id=purchase.id, expert_id=purchase.expert_id, state=state
                    )
                )
        return pending

    @BaseService.measure_operation("submit_feedback")
    def submit_feedback(
        self,
        user_id: str,
        purchase_id: str,
        rating: Optional[int],
        text: Optional[str] = None,
    ) -> Feedback:
        """
        Record the client's rating for a fully used purchase.

        Raises:
            MissingRatingException: no star rating selected
            ValidationException: rating above the maximum
            DuplicateFeedbackException: purchase already rated
            FeedbackNotAllowedException: purchase not yet eligible
        """
        purchase = self._get_purchase(purchase_id)
        if purchase.user_id != user_id:
            raise ForbiddenException(
                "Purchase does not belong to user",
                code="PURCHASE_NOT_OWNED",
                details={"purchase_id": purchase_id},
            )
        if rating is None or rating < MIN_RATING:
            raise MissingRatingException()
        if rating > MAX_RATING:
            raise ValidationException(
                f"Rating must be between {MIN_RATING} and {MAX_RATING}",
                code="INVALID_RATING",
                details={"rating": rating},
            )

        with purchase_lock(purchase_id):
            with self.transaction():
                if self.feedback_repository.get_for_user_purchase(user_id, purchase_id):
                    raise DuplicateFeedbackException(purchase_id)
                state = self.state_of(purchase)
                if state != FeedbackState.ELIGIBLE:
                    raise FeedbackNotAllowedException(purchase_id, state.value)

                cleaned = (text or "").strip() or None
                feedback = self.feedback_repository.create(
                    user_id=user_id,
                    expert_id=purchase.expert_id,
                    purchase_id=purchase_id,
                    rating=int(rating),
                    text=cleaned,
                    created_at=self.now(),
                )

        logger.info(
            "Feedback submitted",
            extra={
                "feedback_id": feedback.id,
                "purchase_id": purchase_id,
                "expert_id": purchase.expert_id,
                "rating": feedback.rating,
            },
        )
        return feedback

    def expert_rating(self, expert_id: str) -> ExpertRating:
        """Mean feedback rating, or the seeded base rating before any feedback."""
        expert = self.expert_repository.get_by_id(expert_id)
        if expert is None:
            raise NotFoundException(
                f"Expert {expert_id} not found",
                code="EXPERT_NOT_FOUND",
                details={"expert_id": expert_id},
            )
        count = self.feedback_repository.count(expert_id=expert_id)
        average = self.feedback_repository.average_rating(expert_id)
        rating = average if average is not None else float(expert.base_rating)
        return ExpertRating(expert_id=expert_id, rating=round(rating, 2), count=count)
