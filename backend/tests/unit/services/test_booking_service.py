from datetime import datetime
import re
import threading

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from expertbook.core.enums import SessionStatus
from expertbook.core.exceptions import (
    DomainException,
    ForbiddenException,
    InsufficientHoursException,
    NoAvailableSlotsException,
    NotFoundException,
    ValidationException,
)
from expertbook.database import init_db
from expertbook.models.purchase import Purchase
from expertbook.models.session import BookedSession
from expertbook.services.availability import TimeSlot
from expertbook.services.booking_service import BookingService, as_time_slot

from tests._utils.builders import MONDAY, FrozenClock, make_expert, make_purchase


@pytest.fixture
def service(db, clock) -> BookingService:
    return BookingService(db, clock=clock)


class TestBookSlots:
    def test_two_half_hours_use_up_one_hour_package(self, db, service, expert):
        purchase = make_purchase(db, expert, hours=1)

        sessions = service.book_slots(purchase.id, MONDAY, [(540, 570), (570, 600)])

        assert [(s.start_min, s.end_min) for s in sessions] == [(540, 570), (570, 600)]
        db.refresh(purchase)
        assert purchase.minutes_remaining == 0
        assert purchase.hours_remaining == 0

        with pytest.raises(InsufficientHoursException) as exc_info:
            service.book_slots(purchase.id, MONDAY, [(600, 630)])
        assert exc_info.value.details == {"needed_hours": 0.5, "remaining_hours": 0.0}

    def test_overdraw_books_nothing(self, db, service, expert):
        purchase = make_purchase(db, expert, hours=1)

        with pytest.raises(InsufficientHoursException):
            service.book_slots(purchase.id, MONDAY, [(540, 570), (570, 600), (600, 630)])

        db.refresh(purchase)
        assert purchase.minutes_remaining == 60
        assert db.query(BookedSession).count() == 0

    def test_slots_taken_since_display_are_dropped(self, db, service, expert):
        first = make_purchase(db, expert, user_id="user-1", hours=1)
        second = make_purchase(db, expert, user_id="user-2", hours=1)
        service.book_slots(first.id, MONDAY, [(600, 630)])

        sessions = service.book_slots(second.id, MONDAY, [(600, 630), (630, 660)])

        assert [(s.start_min, s.end_min) for s in sessions] == [(630, 660)]
        db.refresh(second)
        assert second.minutes_remaining == 30

    def test_all_requested_slots_gone(self, db, service, expert):
        first = make_purchase(db, expert, user_id="user-1")
        second = make_purchase(db, expert, user_id="user-2")
        service.book_slots(first.id, MONDAY, [(600, 630)])

        with pytest.raises(NoAvailableSlotsException) as exc_info:
            service.book_slots(second.id, MONDAY, [(600, 630)])
        assert exc_info.value.details == {"date": "2025-09-08", "requested": 1}

    def test_slot_outside_availability_is_dropped(self, db, service, expert):
        purchase = make_purchase(db, expert)
        with pytest.raises(NoAvailableSlotsException):
            service.book_slots(purchase.id, MONDAY, [(1080, 1110)])

    def test_misaligned_slot_is_not_bookable(self, db, service, expert):
        purchase = make_purchase(db, expert)
        with pytest.raises(NoAvailableSlotsException):
            service.book_slots(purchase.id, MONDAY, [(555, 585)])

    def test_slots_already_started_are_dropped(self, db, clock, service, expert):
        purchase = make_purchase(db, expert, hours=4)
        clock.set(datetime(2025, 9, 8, 10, 0))

        sessions = service.book_slots(purchase.id, MONDAY, [(570, 600), (600, 630), (630, 660)])

        assert [s.start_min for s in sessions] == [630]

    def test_duplicate_selection_is_booked_once(self, db, service, expert):
        purchase = make_purchase(db, expert)
        sessions = service.book_slots(purchase.id, MONDAY, [(600, 630), (600, 630)])
        assert len(sessions) == 1
        db.refresh(purchase)
        assert purchase.minutes_remaining == 30

    def test_unknown_purchase(self, service):
        with pytest.raises(NotFoundException) as exc_info:
            service.book_slots("nope", MONDAY, [(600, 630)])
        assert exc_info.value.code == "PURCHASE_NOT_FOUND"

    def test_other_users_purchase_is_forbidden(self, db, service, expert):
        purchase = make_purchase(db, expert, user_id="user-1")
        with pytest.raises(ForbiddenException):
            service.book_slots(purchase.id, MONDAY, [(600, 630)], user_id="user-2")

    def test_session_fields(self, db, service, expert):
        purchase = make_purchase(db, expert)
        (session,) = service.book_slots(purchase.id, MONDAY, [(600, 630)], user_id="user-1")

        assert session.user_id == "user-1"
        assert session.expert_id == expert.id
        assert session.purchase_id == purchase.id
        assert session.booking_date == MONDAY
        assert session.cancelled_at is None
        assert re.fullmatch(r"https://meet\.example\.com/[0-9a-f]{8}", session.meeting_link)

    def test_meeting_links_are_unique(self, db, service, expert):
        purchase = make_purchase(db, expert, hours=4)
        sessions = service.book_slots(purchase.id, MONDAY, [(540, 570), (570, 600), (600, 630)])
        assert len({s.meeting_link for s in sessions}) == 3

    def test_no_two_active_sessions_overlap(self, db, service, expert):
        for user in ("a", "b", "c"):
            purchase = make_purchase(db, expert, user_id=user, hours=4)
            try:
                service.book_slots(purchase.id, MONDAY, [(540, 570), (570, 600), (600, 630)])
            except NoAvailableSlotsException:
                pass

        active = db.query(BookedSession).filter(BookedSession.cancelled_at.is_(None)).all()
        intervals = sorted((s.start_min, s.end_min) for s in active)
        assert intervals == [(540, 570), (570, 600), (600, 630)]


class TestSessionQueries:
    def test_status_is_derived_from_clock(self, db, clock, service, expert):
        purchase = make_purchase(db, expert)
        (session,) = service.book_slots(purchase.id, MONDAY, [(600, 630)])

        assert service.status_of(session) == SessionStatus.UPCOMING
        clock.set(datetime(2025, 9, 8, 10, 0))
        assert service.status_of(session) == SessionStatus.COMPLETED

    def test_list_sessions_filters_by_status(self, db, clock, service, expert):
        purchase = make_purchase(db, expert)
        service.book_slots(purchase.id, MONDAY, [(540, 570), (900, 930)])
        clock.set(datetime(2025, 9, 8, 12, 0))

        completed = service.list_sessions(user_id="user-1", status=SessionStatus.COMPLETED)
        upcoming = service.list_sessions(expert_id=expert.id, status=SessionStatus.UPCOMING)

        assert [s.start_min for s in completed] == [540]
        assert [s.start_min for s in upcoming] == [900]
        assert service.list_sessions(user_id="someone-else") == []

    def test_get_session_not_found(self, service):
        with pytest.raises(NotFoundException):
            service.get_session("missing")


@pytest.mark.parametrize(
    "value",
    [TimeSlot(600, 630), (600, 630), [600, 630], {"start": 600, "end": 630}],
)
def test_as_time_slot_accepts_common_shapes(value):
    assert as_time_slot(value) == TimeSlot(600, 630)


@pytest.mark.parametrize(
    "value",
    ["600-630", {"start": 600}, (600,), ("ten", "eleven"), None],
)
def test_as_time_slot_rejects_malformed_entries(value):
    with pytest.raises(ValidationException) as exc_info:
        as_time_slot(value)
    assert exc_info.value.code == "INVALID_SLOT"


def test_book_slots_rejects_malformed_entry_without_charging(service, db, expert):
    purchase = make_purchase(db, expert, hours=1)
    with pytest.raises(ValidationException):
        service.book_slots(purchase.id, MONDAY, [(600, 630), {"start": 630}])
    db.refresh(purchase)
    assert purchase.minutes_remaining == 60
    assert db.query(BookedSession).count() == 0


class TestConcurrentBooking:
    """Two confirmations racing on the same expert and date."""

    @pytest.fixture
    def session_factory(self, tmp_path):
        engine = create_engine(
            f"sqlite:///{tmp_path / 'race.db'}",
            future=True,
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        init_db(bind=engine)
        yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)
        engine.dispose()

    def _race(self, session_factory, jobs):
        barrier = threading.Barrier(len(jobs))
        outcomes = [None] * len(jobs)

        def run(index, purchase_id, slots):
            db = session_factory()
            try:
                service = BookingService(db, clock=FrozenClock())
                barrier.wait(5)
                outcomes[index] = service.book_slots(purchase_id, MONDAY, slots)
            except DomainException as exc:
                outcomes[index] = exc
            finally:
                db.close()

        threads = [
            threading.Thread(target=run, args=(i, purchase_id, slots))
            for i, (purchase_id, slots) in enumerate(jobs)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(30)
        return outcomes

    def test_same_slot_is_booked_once(self, session_factory):
        with session_factory() as db:
            expert = make_expert(db)
            first = make_purchase(db, expert, user_id="user-1").id
            second = make_purchase(db, expert, user_id="user-2").id

        outcomes = self._race(session_factory, [(first, [(600, 630)]), (second, [(600, 630)])])

        booked = [o for o in outcomes if isinstance(o, list)]
        rejected = [o for o in outcomes if isinstance(o, NoAvailableSlotsException)]
        assert len(booked) == 1 and len(rejected) == 1
        with session_factory() as db:
            assert db.query(BookedSession).count() == 1

    def test_balance_is_not_overdrawn(self, session_factory):
        with session_factory() as db:
            expert = make_expert(db)
            purchase_id = make_purchase(db, expert, hours=1).id

        outcomes = self._race(
            session_factory,
            [
                (purchase_id, [(540, 570), (570, 600)]),
                (purchase_id, [(660, 690), (690, 720)]),
            ],
        )

        assert sum(isinstance(o, list) for o in outcomes) == 1
        assert sum(isinstance(o, InsufficientHoursException) for o in outcomes) == 1
        with session_factory() as db:
            assert db.get(Purchase, purchase_id).minutes_remaining == 0
            assert db.query(BookedSession).count() == 2
