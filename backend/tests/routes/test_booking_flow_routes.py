"""End-to-end client journey: buy, book, cancel, rate, settle."""

from datetime import datetime

from fastapi.testclient import TestClient
import pytest

API = "/api/v1"


@pytest.fixture
def purchase(client: TestClient, expert) -> dict:
    res = client.post(
        f"{API}/purchases", json={"user_id": "user-1", "expert_id": expert.id, "hours": 1}
    )
    assert res.status_code == 201
    return res.json()


def _book(client, purchase, slots, user_id="user-1", date="2025-09-08"):
    return client.post(
        f"{API}/sessions/batch-book/{user_id}",
        json={
            "purchase_id": purchase["id"],
            "date": date,
            "slots": [{"start_min": s, "end_min": e} for s, e in slots],
        },
    )


class TestPurchases:
    def test_purchase_payload(self, purchase, expert) -> None:
        assert purchase["package_hours"] == 1
        assert purchase["minutes_remaining"] == 60
        assert purchase["hours_remaining"] == 1.0
        assert purchase["amount"] == 1000.0

    def test_invalid_package(self, client: TestClient, expert) -> None:
        res = client.post(
            f"{API}/purchases", json={"user_id": "user-1", "expert_id": expert.id, "hours": 3}
        )
        assert res.status_code == 400
        assert res.json()["detail"]["code"] == "INVALID_PACKAGE"

    def test_list_by_user(self, client: TestClient, purchase) -> None:
        listed = client.get(f"{API}/purchases", params={"user_id": "user-1"}).json()
        assert [p["id"] for p in listed] == [purchase["id"]]
        assert client.get(f"{API}/purchases", params={"user_id": "user-2"}).json() == []


class TestBatchBook:
    def test_books_and_reports_balance(self, client: TestClient, purchase) -> None:
        res = _book(client, purchase, [(540, 570), (570, 600)])

        assert res.status_code == 200
        payload = res.json()
        assert payload["booked_hours"] == 1.0
        assert payload["hours_remaining"] == 0.0
        assert [s["status"] for s in payload["sessions"]] == ["upcoming", "upcoming"]
        assert payload["sessions"][0]["meeting_link"].startswith("https://meet.example.com/")

    def test_insufficient_hours(self, client: TestClient, purchase) -> None:
        _book(client, purchase, [(540, 570), (570, 600)])
        res = _book(client, purchase, [(600, 630)])
        assert res.status_code == 422
        assert res.json()["detail"]["code"] == "INSUFFICIENT_HOURS"

    def test_no_available_slots(self, client: TestClient, purchase) -> None:
        res = _book(client, purchase, [(1080, 1110)])
        assert res.status_code == 409
        assert res.json()["detail"]["code"] == "NO_AVAILABLE_SLOTS"

    def test_other_users_purchase(self, client: TestClient, purchase) -> None:
        assert _book(client, purchase, [(540, 570)], user_id="user-2").status_code == 403

    def test_empty_selection_rejected(self, client: TestClient, purchase) -> None:
        assert _book(client, purchase, []).status_code == 422

    def test_inverted_slot_rejected(self, client: TestClient, purchase) -> None:
        assert _book(client, purchase, [(600, 570)]).status_code == 422


class TestCancelAndList:
    def test_cancel_refunds_and_lists_status(self, client: TestClient, purchase, expert) -> None:
        booked = _book(client, purchase, [(600, 630)]).json()["sessions"][0]

        res = client.post(
            f"{API}/sessions/{booked['id']}/cancel",
            json={"actor_id": "user-1", "reason": "conflict"},
        )
        assert res.status_code == 200
        assert res.json()["status"] == "cancelled"
        assert res.json()["cancel_reason"] == "conflict"

        listed = client.get(f"{API}/purchases", params={"user_id": "user-1"}).json()
        assert listed[0]["minutes_remaining"] == 60

        cancelled = client.get(
            f"{API}/sessions", params={"expert_id": expert.id, "status": "cancelled"}
        ).json()
        assert [s["id"] for s in cancelled] == [booked["id"]]

    def test_missing_reason(self, client: TestClient, purchase) -> None:
        booked = _book(client, purchase, [(600, 630)]).json()["sessions"][0]
        res = client.post(f"{API}/sessions/{booked['id']}/cancel", json={"actor_id": "user-1"})
        assert res.status_code == 400
        assert res.json()["detail"]["code"] == "MISSING_REASON"

    def test_window_closed(self, client: TestClient, clock, purchase) -> None:
        booked = _book(client, purchase, [(600, 630)]).json()["sessions"][0]
        clock.set(datetime(2025, 9, 8, 9, 0))
        res = client.post(
            f"{API}/sessions/{booked['id']}/cancel",
            json={"actor_id": "user-1", "reason": "late"},
        )
        assert res.status_code == 422
        assert res.json()["detail"]["code"] == "CANCELLATION_WINDOW_CLOSED"


class TestFeedbackAndBilling:
    def test_full_cycle(self, client: TestClient, clock, purchase, expert) -> None:
        _book(client, purchase, [(540, 570), (570, 600)])

        early = client.post(
            f"{API}/feedback",
            json={"user_id": "user-1", "purchase_id": purchase["id"], "rating": 5},
        )
        assert early.status_code == 422
        assert early.json()["detail"]["code"] == "FEEDBACK_NOT_ELIGIBLE"

        clock.set(datetime(2025, 9, 8, 12, 0))
        pending = client.get(f"{API}/feedback/pending/user-1").json()
        assert pending == [
            {
                "purchase_id": purchase["id"],
                "expert_id": expert.id,
                "state": "eligible_for_feedback",
            }
        ]

        missing = client.post(
            f"{API}/feedback", json={"user_id": "user-1", "purchase_id": purchase["id"]}
        )
        assert missing.json()["detail"]["code"] == "MISSING_RATING"

        res = client.post(
            f"{API}/feedback",
            json={"user_id": "user-1", "purchase_id": purchase["id"], "rating": 4, "text": "ok"},
        )
        assert res.status_code == 201
        duplicate = client.post(
            f"{API}/feedback",
            json={"user_id": "user-1", "purchase_id": purchase["id"], "rating": 4},
        )
        assert duplicate.status_code == 409

        (card,) = client.get(f"{API}/experts").json()
        assert (card["rating"], card["rating_count"]) == (4.0, 1)

        earnings = client.get(f"{API}/admin/expert-earnings").json()
        assert earnings[0]["earned"] == 1000.0
        assert earnings[0]["due"] == 1000.0

        payout = client.post(
            f"{API}/admin/payouts", json={"expert_id": expert.id, "amount": 400, "note": "part"}
        )
        assert payout.status_code == 201
        assert client.get(f"{API}/admin/expert-earnings").json()[0]["due"] == 600.0

        client.post(f"{API}/admin/client-payments", json={"user_id": "user-1", "amount": "250.50"})
        billing = client.get(f"{API}/admin/clients/user-1/billing").json()
        assert billing == {
            "user_id": "user-1",
            "total": 1000.0,
            "paid": 250.5,
            "due": 749.5,
            "purchase_count": 1,
        }

    def test_invalid_payout_amount(self, client: TestClient, expert) -> None:
        res = client.post(f"{API}/admin/payouts", json={"expert_id": expert.id, "amount": 0})
        assert res.status_code == 400
        assert res.json()["detail"]["code"] == "INVALID_AMOUNT"
