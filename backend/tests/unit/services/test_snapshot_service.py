from datetime import datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from expertbook.database import init_db
from expertbook.models.availability import AvailabilityOverride, AvailabilityWindowSet
from expertbook.models.expert import Expert
from expertbook.models.purchase import Purchase
from expertbook.schemas.snapshot import StateSnapshot
from expertbook.services.availability import AvailabilityService
from expertbook.services.billing_service import BillingService
from expertbook.services.booking_service import BookingService
from expertbook.services.cancellation_service import CancellationService
from expertbook.services.feedback_service import FeedbackService
from expertbook.services.snapshot_service import SnapshotService

from tests._utils.builders import MONDAY, SATURDAY, make_expert, make_purchase


@pytest.fixture
def service(db, clock) -> SnapshotService:
    return SnapshotService(db, clock=clock)


@pytest.fixture
def populated(db, clock, expert):
    availability = AvailabilityService(db, clock=clock)
    availability.set_override(expert.id, SATURDAY, workday=True, day_start="10:00")
    availability.add_window(expert.id, MONDAY, "14:00", "15:00")
    availability.add_window(expert.id, MONDAY, "09:00", "10:00")

    purchase = make_purchase(db, expert, hours=1)
    sessions = BookingService(db, clock=clock).book_slots(
        purchase.id, MONDAY, [(540, 570), (570, 600)]
    )
    CancellationService(db, clock=clock).cancel(sessions[1].id, "conflict", actor_id="user-1")

    billing = BillingService(db, clock=clock)
    billing.record_payout(expert.id, "250.00", note="advance")
    billing.record_client_payment("user-1", 400)
    return purchase


def _other_store(expert):
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    init_db(bind=engine)
    db = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    db.add(
        Expert(
            id=expert.id,
            name=expert.name,
            domain=expert.domain,
            hourly_rate=expert.hourly_rate,
        )
    )
    db.commit()
    return engine, db


class TestExport:
    def test_collections_keyed_by_id(self, service, populated):
        snapshot = service.export_state()

        assert list(snapshot.purchases) == [populated.id]
        assert snapshot.purchases[populated.id].minutes_remaining == 30
        assert len(snapshot.sessions) == 2
        assert len(snapshot.availability_overrides) == 1
        (window_set,) = snapshot.explicit_window_sets.values()
        assert [(w.start_min, w.end_min) for w in window_set.windows] == [(540, 600), (840, 900)]
        assert len(snapshot.payouts) == 1
        assert len(snapshot.client_payments) == 1
        assert snapshot.feedback == {}

    def test_json_serialization(self, service, populated):
        payload = service.export_state().model_dump(mode="json")
        assert payload["purchases"][populated.id]["amount"] == 1000.0
        assert StateSnapshot.model_validate(payload).purchases[populated.id].amount == Decimal(
            "1000.0"
        )


class TestImport:
    def test_round_trip_into_empty_store(self, clock, expert, service, populated):
        exported = service.export_state()
        engine, other_db = _other_store(expert)
        try:
            counts = SnapshotService(other_db, clock=clock).import_state(exported)
            reimported = SnapshotService(other_db, clock=clock).export_state()
        finally:
            other_db.close()
            engine.dispose()

        assert counts["sessions"] == 2
        assert reimported.model_dump(exclude={"exported_at"}) == exported.model_dump(
            exclude={"exported_at"}
        )

    def test_imported_state_drives_availability(self, clock, expert, service, populated):
        exported = service.export_state()
        engine, other_db = _other_store(expert)
        try:
            SnapshotService(other_db, clock=clock).import_state(exported)
            slots = AvailabilityService(other_db, clock=clock).get_free_slots(expert.id, MONDAY)
        finally:
            other_db.close()
            engine.dispose()

        # 09:00-10:00 and 14:00-15:00 minus the active 09:00 session
        assert [(s.start, s.end) for s in slots] == [(570, 600), (840, 870), (870, 900)]

    def test_last_writer_wins(self, db, service, populated):
        snapshot = service.export_state()
        purchase = db.get(Purchase, populated.id)
        purchase.minutes_remaining = 0
        db.commit()

        service.import_state(snapshot)

        db.refresh(purchase)
        assert purchase.minutes_remaining == 30

    def test_override_for_same_date_is_replaced(self, db, expert, service, populated):
        snapshot = service.export_state()
        (override_id,) = snapshot.availability_overrides
        record = snapshot.availability_overrides.pop(override_id)
        replacement = record.model_copy(update={"id": "01OVERRIDEREPLACEMENT00000", "workday": False})
        snapshot.availability_overrides[replacement.id] = replacement

        service.import_state(snapshot)

        overrides = db.query(AvailabilityOverride).all()
        assert [(o.id, o.workday) for o in overrides] == [(replacement.id, False)]

    def test_empty_window_set_is_removed(self, db, service, populated):
        snapshot = service.export_state()
        (set_id,) = snapshot.explicit_window_sets
        snapshot.explicit_window_sets[set_id] = snapshot.explicit_window_sets[set_id].model_copy(
            update={"windows": []}
        )

        service.import_state(snapshot)

        assert db.query(AvailabilityWindowSet).count() == 0

    def test_feedback_round_trip(self, db, clock, expert, service):
        purchase = make_purchase(db, expert, hours=1)
        BookingService(db, clock=clock).book_slots(purchase.id, MONDAY, [(540, 570), (570, 600)])
        clock.set(datetime(2025, 9, 9))
        FeedbackService(db, clock=clock).submit_feedback("user-1", purchase.id, 5, "great")

        snapshot = service.export_state()
        (record,) = snapshot.feedback.values()
        assert record.rating == 5
        assert service.import_state(snapshot)["feedback"] == 1


class TestSnapshotValidation:
    def _purchase(self, **overrides):
        data = {
            "id": "P1",
            "user_id": "u",
            "expert_id": "E1",
            "package_hours": 1,
            "minutes_remaining": 60,
            "amount": "1000",
            "created_at": "2025-09-01T08:00:00",
        }
        data.update(overrides)
        return data

    def test_balance_above_package_rejected(self):
        with pytest.raises(ValidationError):
            StateSnapshot.model_validate({"purchases": {"P1": self._purchase(minutes_remaining=61)}})

    def test_negative_balance_rejected(self):
        with pytest.raises(ValidationError):
            StateSnapshot.model_validate({"purchases": {"P1": self._purchase(minutes_remaining=-1)}})

    def test_key_must_match_record_id(self):
        with pytest.raises(ValidationError):
            StateSnapshot.model_validate({"purchases": {"P2": self._purchase()}})

    def test_unknown_collection_rejected(self):
        with pytest.raises(ValidationError):
            StateSnapshot.model_validate({"bookings": {}})
