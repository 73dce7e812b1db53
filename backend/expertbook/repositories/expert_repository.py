# backend/expertbook/repositories/expert_repository.py
"""
Expert Repository

Read access to the seeded expert catalogue.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.expert import Expert
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ExpertRepository(BaseRepository[Expert]):
    """Repository for expert reference data."""

    def __init__(self, db: Session):
        super().__init__(db, Expert)

    def list_experts(self, domain: Optional[str] = None) -> List[Expert]:
        """List experts ordered by name, optionally filtered by domain."""
        try:
            query = self.db.query(Expert)
            if domain:
                query = query.filter(Expert.domain == domain)
            return query.order_by(Expert.name, Expert.id).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing experts: {str(e)}")
            raise RepositoryException(f"Failed to list experts: {str(e)}")
