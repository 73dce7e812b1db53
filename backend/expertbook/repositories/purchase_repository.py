# backend/expertbook/repositories/purchase_repository.py
"""
Purchase Repository

Data access for hour packages and their minute balances.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.purchase import Purchase
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class PurchaseRepository(BaseRepository[Purchase]):
    """Repository for client hour packages."""

    def __init__(self, db: Session):
        super().__init__(db, Purchase)

    def get_for_update(self, purchase_id: str) -> Optional[Purchase]:
        """Fresh read of a purchase, row-locked where supported."""
        return self.get_by_id(purchase_id, for_update=True)

    def list_by_user(self, user_id: str) -> List[Purchase]:
        """Purchases of a client, newest first."""
        try:
            return (
                self.db.query(Purchase)
                .filter(Purchase.user_id == user_id)
                .order_by(Purchase.created_at.desc(), Purchase.id.desc())
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing purchases for user {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to list purchases: {str(e)}")
