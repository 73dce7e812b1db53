# backend/expertbook/services/purchase_service.py
"""
Purchase Service

Sells hour packages. A purchase starts with its full balance and is never
recreated; bookings draw it down and cancellations refund it.
"""

from decimal import ROUND_HALF_UP, Decimal
import logging
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import MINUTES_PER_HOUR
from ..core.exceptions import NotFoundException, ValidationException
from ..models.purchase import Purchase
from ..repositories.factory import RepositoryFactory
from .base import BaseService, Clock

if TYPE_CHECKING:
    from ..repositories.expert_repository import ExpertRepository
    from ..repositories.purchase_repository import PurchaseRepository

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


class PurchaseService(BaseService):
    """Service layer for hour packages."""

    def __init__(
        self,
        db: Session,
        clock: Optional[Clock] = None,
        purchase_repository: Optional["PurchaseRepository"] = None,
        expert_repository: Optional["ExpertRepository"] = None,
        package_hours: Optional[List[int]] = None,
    ):
        super().__init__(db, clock=clock)
        self.purchase_repository = (
            purchase_repository or RepositoryFactory.create_purchase_repository(db)
        )
        self.expert_repository = (
            expert_repository or RepositoryFactory.create_expert_repository(db)
        )
        self.package_hours = list(package_hours or settings.package_hours)

    @BaseService.measure_operation("purchase")
    def purchase(self, user_id: str, expert_id: str, hours: int) -> Purchase:
        """
        Buy a package of ``hours`` from an expert.

        The amount is recorded, not charged: rate x hours.

        Raises:
            ValidationException: hours is not an offered package size
            NotFoundException: unknown expert
        """
        if isinstance(hours, bool) or hours not in self.package_hours:
            raise ValidationException(
                f"Package must be one of {self.package_hours} hours",
                code="INVALID_PACKAGE",
                details={"hours": hours, "allowed": self.package_hours},
            )

        expert = self.expert_repository.get_by_id(expert_id)
        if expert is None:
            raise NotFoundException(
                f"Expert {expert_id} not found",
                code="EXPERT_NOT_FOUND",
                details={"expert_id": expert_id},
            )

        amount = (Decimal(str(expert.hourly_rate)) * hours).quantize(CENTS, ROUND_HALF_UP)
        with self.transaction():
            purchase = self.purchase_repository.create(
                user_id=user_id,
                expert_id=expert.id,
                package_hours=hours,
                minutes_remaining=hours * MINUTES_PER_HOUR,
                amount=amount,
                created_at=self.now(),
            )

        logger.info(
            "Package purchased",
            extra={
                "purchase_id": purchase.id,
                "user_id": user_id,
                "expert_id": expert.id,
                "hours": hours,
                "amount": str(amount),
            },
        )
        return purchase

    def get_purchase(self, purchase_id: str) -> Purchase:
        purchase = self.purchase_repository.get_by_id(purchase_id)
        if purchase is None:
            raise NotFoundException(
                f"Purchase {purchase_id} not found",
                code="PURCHASE_NOT_FOUND",
                details={"purchase_id": purchase_id},
            )
        return purchase

    def list_purchases(self, user_id: str) -> List[Purchase]:
        return self.purchase_repository.list_by_user(user_id)
