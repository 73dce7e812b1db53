from datetime import datetime

import pytest

from expertbook.core.enums import FeedbackState
from expertbook.core.exceptions import (
    DuplicateFeedbackException,
    FeedbackNotAllowedException,
    ForbiddenException,
    MissingRatingException,
    NotFoundException,
    ValidationException,
)
from expertbook.services.booking_service import BookingService
from expertbook.services.cancellation_service import CancellationService
from expertbook.services.feedback_service import FeedbackService

from tests._utils.builders import MONDAY, make_purchase

AFTER_SESSIONS = datetime(2025, 9, 8, 12, 0)


@pytest.fixture
def service(db, clock) -> FeedbackService:
    return FeedbackService(db, clock=clock)


@pytest.fixture
def used_purchase(db, clock, expert):
    """A one-hour package booked in full on Monday morning."""
    purchase = make_purchase(db, expert, hours=1)
    BookingService(db, clock=clock).book_slots(purchase.id, MONDAY, [(540, 570), (570, 600)])
    return purchase


class TestFeedbackState:
    def test_fresh_purchase(self, db, service, expert):
        purchase = make_purchase(db, expert)
        assert service.feedback_state(purchase.id) == FeedbackState.HAS_UPCOMING_SESSIONS

    def test_partially_used_purchase(self, db, clock, service, expert):
        purchase = make_purchase(db, expert, hours=1)
        BookingService(db, clock=clock).book_slots(purchase.id, MONDAY, [(540, 570)])
        clock.set(AFTER_SESSIONS)
        assert service.feedback_state(purchase.id) == FeedbackState.HAS_UPCOMING_SESSIONS

    def test_fully_booked_but_not_yet_held(self, service, used_purchase):
        assert service.feedback_state(used_purchase.id) == FeedbackState.AWAITING_COMPLETION
        assert service.is_eligible(used_purchase.id) is False

    def test_eligible_once_last_session_started(self, clock, service, used_purchase):
        clock.set(datetime(2025, 9, 8, 9, 30))
        assert service.feedback_state(used_purchase.id) == FeedbackState.ELIGIBLE

    def test_cancellation_returns_purchase_to_upcoming(self, db, clock, service, used_purchase):
        session = used_purchase.sessions[0]
        CancellationService(db, clock=clock).cancel(session.id, "conflict", actor_id="user-1")
        clock.set(AFTER_SESSIONS)
        assert service.feedback_state(used_purchase.id) == FeedbackState.HAS_UPCOMING_SESSIONS

    def test_submitted(self, clock, service, used_purchase):
        clock.set(AFTER_SESSIONS)
        service.submit_feedback("user-1", used_purchase.id, 5)
        assert service.feedback_state(used_purchase.id) == FeedbackState.SUBMITTED

    def test_unknown_purchase(self, service):
        with pytest.raises(NotFoundException):
            service.feedback_state("missing")


class TestSubmitFeedback:
    def test_records_rating_and_trimmed_text(self, clock, service, expert, used_purchase):
        clock.set(AFTER_SESSIONS)

        feedback = service.submit_feedback("user-1", used_purchase.id, 4, "  very helpful  ")

        assert feedback.rating == 4
        assert feedback.text == "very helpful"
        assert feedback.expert_id == expert.id
        assert feedback.created_at == AFTER_SESSIONS

    def test_blank_text_is_stored_as_none(self, clock, service, used_purchase):
        clock.set(AFTER_SESSIONS)
        assert service.submit_feedback("user-1", used_purchase.id, 3, "   ").text is None

    def test_second_submission_is_rejected(self, clock, service, used_purchase):
        clock.set(AFTER_SESSIONS)
        service.submit_feedback("user-1", used_purchase.id, 5)
        with pytest.raises(DuplicateFeedbackException):
            service.submit_feedback("user-1", used_purchase.id, 1)

    @pytest.mark.parametrize("rating", [None, 0])
    def test_rating_is_required(self, clock, service, used_purchase, rating):
        clock.set(AFTER_SESSIONS)
        with pytest.raises(MissingRatingException):
            service.submit_feedback("user-1", used_purchase.id, rating)

    def test_rating_above_five_rejected(self, clock, service, used_purchase):
        clock.set(AFTER_SESSIONS)
        with pytest.raises(ValidationException) as exc_info:
            service.submit_feedback("user-1", used_purchase.id, 6)
        assert exc_info.value.code == "INVALID_RATING"

    def test_not_allowed_while_hours_remain(self, db, clock, service, expert):
        purchase = make_purchase(db, expert, hours=1)
        BookingService(db, clock=clock).book_slots(purchase.id, MONDAY, [(540, 570)])
        clock.set(AFTER_SESSIONS)

        with pytest.raises(FeedbackNotAllowedException) as exc_info:
            service.submit_feedback("user-1", purchase.id, 5)
        assert exc_info.value.details["state"] == "has_upcoming_sessions"

    def test_not_allowed_before_sessions_are_over(self, service, used_purchase):
        with pytest.raises(FeedbackNotAllowedException):
            service.submit_feedback("user-1", used_purchase.id, 5)

    def test_only_the_owner_may_rate(self, clock, service, used_purchase):
        clock.set(AFTER_SESSIONS)
        with pytest.raises(ForbiddenException):
            service.submit_feedback("user-2", used_purchase.id, 5)


class TestPendingAndRatings:
    def test_pending_lists_only_eligible_purchases(self, db, clock, service, expert, used_purchase):
        make_purchase(db, expert, hours=4)
        clock.set(AFTER_SESSIONS)

        pending = service.pending_feedback("user-1")

        assert [item.purchase_id for item in pending] == [used_purchase.id]
        assert pending[0].state == FeedbackState.ELIGIBLE.value

        service.submit_feedback("user-1", used_purchase.id, 5)
        assert service.pending_feedback("user-1") == []

    def test_rating_falls_back_to_base_rating(self, service, expert):
        rating = service.expert_rating(expert.id)
        assert rating.rating == 4.5
        assert rating.count == 0

    def test_rating_is_mean_of_feedback(self, db, clock, service, expert):
        booking = BookingService(db, clock=clock)
        purchases = []
        for index, user in enumerate(("u1", "u2", "u3")):
            purchase = make_purchase(db, expert, user_id=user, hours=1)
            start = 540 + index * 60
            booking.book_slots(purchase.id, MONDAY, [(start, start + 30), (start + 30, start + 60)])
            purchases.append(purchase)
        clock.set(AFTER_SESSIONS)

        for purchase, stars in zip(purchases, (5, 4, 4)):
            service.submit_feedback(purchase.user_id, purchase.id, stars)

        rating = service.expert_rating(expert.id)
        assert rating.rating == 4.33
        assert rating.count == 3

    def test_unknown_expert_rating(self, service):
        with pytest.raises(NotFoundException):
            service.expert_rating("missing")
