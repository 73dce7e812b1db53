# backend/expertbook/services/cancellation_service.py
"""
Cancellation Service

Cancels a session and refunds its duration to the owning purchase.

Cancellation is terminal. The refund is applied under the purchase lock
and capped at the package size, so two concurrent cancellations on one
purchase both land and the balance can never drift above the package.
"""

import logging
from typing import TYPE_CHECKING, Optional

from sqlalchemy.orm import Session

from ..core.booking_lock import purchase_lock
from ..core.constants import MAX_REASON_LENGTH
from ..core.exceptions import (
    CancellationWindowClosedException,
    MissingReasonException,
    NotFoundException,
    ValidationException,
)
from ..models.session import BookedSession
from ..repositories.factory import RepositoryFactory
from .base import BaseService, Clock
from .cancellation_policy import CancellationPolicy

if TYPE_CHECKING:
    from ..repositories.purchase_repository import PurchaseRepository
    from ..repositories.session_repository import SessionRepository

logger = logging.getLogger(__name__)


class CancellationService(BaseService):
    """Service layer for session cancellation and hour refunds."""

    def __init__(
        self,
        db: Session,
        clock: Optional[Clock] = None,
        policy: Optional[CancellationPolicy] = None,
        session_repository: Optional["SessionRepository"] = None,
        purchase_repository: Optional["PurchaseRepository"] = None,
    ):
        super().__init__(db, clock=clock)
        self.policy = policy or CancellationPolicy()
        self.session_repository = (
            session_repository or RepositoryFactory.create_session_repository(db)
        )
        self.purchase_repository = (
            purchase_repository or RepositoryFactory.create_purchase_repository(db)
        )

    def _get_session(self, session_id: str) -> BookedSession:
        session = self.session_repository.get_by_id(session_id)
        if session is None:
            raise NotFoundException(
                f"Session {session_id} not found",
                code="SESSION_NOT_FOUND",
                details={"session_id": session_id},
            )
        return session

    def can_cancel(self, session: BookedSession) -> bool:
        return self.policy.can_cancel(session, self.now())

    @BaseService.measure_operation("cancel_session")
    def cancel(self, session_id: str, reason: Optional[str], actor_id: str) -> BookedSession:
        """
        Cancel a session on behalf of the client or the expert.

        The actor is recorded; it does not change the refund.

        Raises:
            CancellationWindowClosedException: already cancelled or too close to start
            MissingReasonException: blank reason
        """
        session = self._get_session(session_id)

        with purchase_lock(session.purchase_id):
            with self.transaction():
                session = self.session_repository.get_by_id(session_id, for_update=True)
                now = self.now()
                decision = self.policy.evaluate(session, now)
                if not decision.allowed:
                    raise CancellationWindowClosedException(
                        decision.required_hours, decision.hours_until_start
                    )

                cleaned = (reason or "").strip()
                if not cleaned:
                    raise MissingReasonException()
                if len(cleaned) > MAX_REASON_LENGTH:
                    raise ValidationException(
                        f"Reason must be at most {MAX_REASON_LENGTH} characters",
                        code="REASON_TOO_LONG",
                    )

                session.cancel_reason = cleaned
                session.cancelled_by = actor_id
                session.cancelled_at = now

                purchase = self.purchase_repository.get_for_update(session.purchase_id)
                before = purchase.minutes_remaining
                purchase.minutes_remaining = min(
                    purchase.package_minutes, before + session.duration_minutes
                )
                self.session_repository.flush()

        logger.info(
            "Session cancelled",
            extra={
                "session_id": session_id,
                "purchase_id": session.purchase_id,
                "cancelled_by": actor_id,
                "refunded_minutes": purchase.minutes_remaining - before,
            },
        )
        return session
