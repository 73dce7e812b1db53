# backend/expertbook/services/snapshot_service.py
"""
Snapshot Service

Hands the engine's mutable state to an external record store and takes
it back. Export produces one mapping per collection (id -> record).
Import merges a snapshot into the database; a record whose id already
exists is replaced, so the last writer wins.

Per-date layers are unique by (expert, date): importing an override or a
window set for a date that already has one under a different id replaces
the existing record.
"""

import logging
from typing import TYPE_CHECKING, Dict, Optional

from sqlalchemy.orm import Session

from ..models.availability import AvailabilityOverride, AvailabilityWindow, AvailabilityWindowSet
from ..models.billing import ClientPayment, Payout
from ..models.feedback import Feedback
from ..models.purchase import Purchase
from ..models.session import BookedSession
from ..repositories.factory import RepositoryFactory
from ..schemas.snapshot import (
    ClientPaymentRecord,
    FeedbackRecord,
    OverrideRecord,
    PayoutRecord,
    PurchaseRecord,
    SessionRecord,
    StateSnapshot,
    WindowSetRecord,
)
from .base import BaseService, Clock

if TYPE_CHECKING:
    from ..repositories.availability_repository import (
        AvailabilityOverrideRepository,
        AvailabilityWindowRepository,
    )

logger = logging.getLogger(__name__)


class SnapshotService(BaseService):
    """Export and import of the persisted collections."""

    def __init__(
        self,
        db: Session,
        clock: Optional[Clock] = None,
        override_repository: Optional["AvailabilityOverrideRepository"] = None,
        window_repository: Optional["AvailabilityWindowRepository"] = None,
    ):
        super().__init__(db, clock=clock)
        self.purchase_repository = RepositoryFactory.create_purchase_repository(db)
        self.session_repository = RepositoryFactory.create_session_repository(db)
        self.override_repository = (
            override_repository or RepositoryFactory.create_override_repository(db)
        )
        self.window_repository = window_repository or RepositoryFactory.create_window_repository(
            db
        )
        self.payout_repository = RepositoryFactory.create_payout_repository(db)
        self.client_payment_repository = RepositoryFactory.create_client_payment_repository(db)
        self.feedback_repository = RepositoryFactory.create_feedback_repository(db)

    @BaseService.measure_operation("export_state")
    def export_state(self) -> StateSnapshot:
        return StateSnapshot(
            exported_at=self.now(),
            purchases={
                p.id: PurchaseRecord.model_validate(p) for p in self.purchase_repository.get_all()
            },
            sessions={
                s.id: SessionRecord.model_validate(s) for s in self.session_repository.get_all()
            },
            availability_overrides={
                o.id: OverrideRecord.model_validate(o) for o in self.override_repository.get_all()
            },
            explicit_window_sets={
                w.id: WindowSetRecord.model_validate(w) for w in self.window_repository.list_all()
            },
            payouts={p.id: PayoutRecord.model_validate(p) for p in self.payout_repository.get_all()},
            client_payments={
                c.id: ClientPaymentRecord.model_validate(c)
                for c in self.client_payment_repository.get_all()
            },
            feedback={
                f.id: FeedbackRecord.model_validate(f) for f in self.feedback_repository.get_all()
            },
        )

    def _merge_override(self, record: OverrideRecord) -> None:
        existing = self.override_repository.get_for_expert_date(record.expert_id, record.date)
        if existing is not None and existing.id != record.id:
            self.override_repository.delete_entity(existing)
        self.override_repository.merge(AvailabilityOverride(**record.model_dump()))

    def _merge_window_set(self, record: WindowSetRecord) -> None:
        existing = self.window_repository.get_for_expert_date(record.expert_id, record.date)
        if existing is not None and existing.id != record.id:
            self.window_repository.delete_entity(existing)

        window_set = self.window_repository.get_by_id(record.id)
        if window_set is None:
            window_set = self.window_repository.create(
                id=record.id, expert_id=record.expert_id, date=record.date
            )
        else:
            window_set.expert_id = record.expert_id
            window_set.date = record.date
        window_set.windows = [
            AvailabilityWindow(start_min=w.start_min, end_min=w.end_min)
            for w in sorted(record.windows, key=lambda w: w.start_min)
        ]
        if not window_set.windows:
            self.window_repository.delete_entity(window_set)
        else:
            self.window_repository.flush()

    @BaseService.measure_operation("import_state")
    def import_state(self, snapshot: StateSnapshot) -> Dict[str, int]:
        """
        Merge a snapshot into the store. Returns records written per collection.

        Parents are written before children so foreign keys hold.
        """
        with self.transaction():
            for record in snapshot.purchases.values():
                self.purchase_repository.merge(Purchase(**record.model_dump()))
            for record in snapshot.sessions.values():
                self.session_repository.merge(BookedSession(**record.model_dump()))
            for record in snapshot.availability_overrides.values():
                self._merge_override(record)
            for record in snapshot.explicit_window_sets.values():
                self._merge_window_set(record)
            for record in snapshot.payouts.values():
                self.payout_repository.merge(Payout(**record.model_dump()))
            for record in snapshot.client_payments.values():
                self.client_payment_repository.merge(ClientPayment(**record.model_dump()))
            for record in snapshot.feedback.values():
                self.feedback_repository.merge(Feedback(**record.model_dump()))

        counts = {
            "purchases": len(snapshot.purchases),
            "sessions": len(snapshot.sessions),
            "availability_overrides": len(snapshot.availability_overrides),
            "explicit_window_sets": len(snapshot.explicit_window_sets),
            "payouts": len(snapshot.payouts),
            "client_payments": len(snapshot.client_payments),
            "feedback": len(snapshot.feedback),
        }
        self.log_operation("import_state", **counts)
        return counts
