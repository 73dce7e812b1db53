# backend/expertbook/services/billing_service.py
"""
Billing Service

Earnings and dues are never stored; they are recomputed from sessions,
purchases and the payout/payment ledgers on every request.

- earned(expert)  = completed, non-cancelled session hours x hourly rate
- due(expert)     = max(0, earned - payouts)
- client_due(user) = max(0, purchase amounts - client payments)
"""

from decimal import ROUND_HALF_UP, Decimal
import logging
from typing import TYPE_CHECKING, Any, List, Optional

from sqlalchemy.orm import Session

from ..core.constants import MINUTES_PER_HOUR
from ..core.enums import SessionStatus
from ..core.exceptions import NotFoundException, ValidationException
from ..models.billing import ClientPayment, Payout
from ..models.expert import Expert
from ..repositories.factory import RepositoryFactory
from ..schemas.billing import ClientBillingSummary, ExpertEarnings
from .base import BaseService, Clock
from .session_status import derive_session_status

if TYPE_CHECKING:
    from ..repositories.billing_repository import ClientPaymentRepository, PayoutRepository
    from ..repositories.expert_repository import ExpertRepository
    from ..repositories.purchase_repository import PurchaseRepository
    from ..repositories.session_repository import SessionRepository

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")
CENTS = Decimal("0.01")


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENTS, ROUND_HALF_UP)


def _positive_amount(amount: Any) -> Decimal:
    try:
        value = Decimal(str(amount))
    except (ArithmeticError, ValueError):
        value = None
    if value is None or not value.is_finite() or value <= 0:
        raise ValidationException(
            "Amount must be greater than zero",
            code="INVALID_AMOUNT",
            details={"amount": str(amount)},
        )
    return _money(value)


class BillingService(BaseService):
    """Service layer for expert earnings and client billing reconciliation."""

    def __init__(
        self,
        db: Session,
        clock: Optional[Clock] = None,
        expert_repository: Optional["ExpertRepository"] = None,
        session_repository: Optional["SessionRepository"] = None,
        purchase_repository: Optional["PurchaseRepository"] = None,
        payout_repository: Optional["PayoutRepository"] = None,
        client_payment_repository: Optional["ClientPaymentRepository"] = None,
    ):
        super().__init__(db, clock=clock)
        self.expert_repository = (
            expert_repository or RepositoryFactory.create_expert_repository(db)
        )
        self.session_repository = (
            session_repository or RepositoryFactory.create_session_repository(db)
        )
        self.purchase_repository = (
            purchase_repository or RepositoryFactory.create_purchase_repository(db)
        )
        self.payout_repository = payout_repository or RepositoryFactory.create_payout_repository(
            db
        )
        self.client_payment_repository = (
            client_payment_repository or RepositoryFactory.create_client_payment_repository(db)
        )

    # Expert side

    def _earned_for(self, expert: Expert) -> Decimal:
        now = self.now()
        minutes = sum(
            session.duration_minutes
            for session in self.session_repository.list_sessions(
                expert_id=expert.id, include_cancelled=False
            )
            if derive_session_status(session, now) == SessionStatus.COMPLETED
        )
        rate = Decimal(str(expert.hourly_rate))
        return _money(rate * Decimal(minutes) / MINUTES_PER_HOUR)

    def earned(self, expert_id: str) -> Decimal:
        expert = self.expert_repository.get_by_id(expert_id)
        if expert is None:
            return ZERO
        return self._earned_for(expert)

    def paid_to_expert(self, expert_id: str) -> Decimal:
        return _money(self.payout_repository.total_for_expert(expert_id))

    def due(self, expert_id: str) -> Decimal:
        return max(ZERO, self.earned(expert_id) - self.paid_to_expert(expert_id))

    @BaseService.measure_operation("expert_earnings_report")
    def expert_earnings_report(self) -> List[ExpertEarnings]:
        report = []
        for expert in self.expert_repository.list_experts():
            earned = self._earned_for(expert)
            paid = self.paid_to_expert(expert.id)
            report.append(
                ExpertEarnings(
                    expert_id=expert.id,
                    name=expert.name,
                    earned=earned,
                    paid=paid,
                    due=max(ZERO, earned - paid),
                )
            )
        return report

    @BaseService.measure_operation("record_payout")
    def record_payout(self, expert_id: str, amount: Any, note: Optional[str] = None) -> Payout:
        value = _positive_amount(amount)
        if not self.expert_repository.exists(id=expert_id):
            raise NotFoundException(
                f"Expert {expert_id} not found",
                code="EXPERT_NOT_FOUND",
                details={"expert_id": expert_id},
            )
        with self.transaction():
            payout = self.payout_repository.create(
                expert_id=expert_id, amount=value, note=note, created_at=self.now()
            )
        logger.info(
            "Payout recorded",
            extra={"payout_id": payout.id, "expert_id": expert_id, "amount": str(value)},
        )
        return payout

    # Client side

    def client_total(self, user_id: str) -> Decimal:
        purchases = self.purchase_repository.list_by_user(user_id)
        return _money(sum((Decimal(str(p.amount)) for p in purchases), ZERO))

    def client_paid(self, user_id: str) -> Decimal:
        return _money(self.client_payment_repository.total_for_user(user_id))

    def client_due(self, user_id: str) -> Decimal:
        return max(ZERO, self.client_total(user_id) - self.client_paid(user_id))

    def client_billing_summary(self, user_id: str) -> ClientBillingSummary:
        total = self.client_total(user_id)
        paid = self.client_paid(user_id)
        return ClientBillingSummary(
            user_id=user_id,
            total=total,
            paid=paid,
            due=max(ZERO, total - paid),
            purchase_count=self.purchase_repository.count(user_id=user_id),
        )

    @BaseService.measure_operation("record_client_payment")
    def record_client_payment(
        self, user_id: str, amount: Any, note: Optional[str] = None
    ) -> ClientPayment:
        value = _positive_amount(amount)
        with self.transaction():
            payment = self.client_payment_repository.create(
                user_id=user_id, amount=value, note=note, created_at=self.now()
            )
        logger.info(
            "Client payment recorded",
            extra={"payment_id": payment.id, "user_id": user_id, "amount": str(value)},
        )
        return payment
