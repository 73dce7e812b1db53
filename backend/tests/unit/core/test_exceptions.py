from expertbook.core.exceptions import (
    CancellationWindowClosedException,
    InsufficientHoursException,
    NoAvailableSlotsException,
    OverlappingWindowException,
    ServiceException,
    WindowTooShortException,
)


def test_error_kinds_map_to_http_statuses():
    assert NoAvailableSlotsException("2025-09-08", 2).to_http_exception().status_code == 409
    assert InsufficientHoursException(90, 60).to_http_exception().status_code == 422
    assert WindowTooShortException(30, 15).to_http_exception().status_code == 400
    assert ServiceException("x").to_http_exception().status_code == 500


def test_details_carry_display_values():
    exc = InsufficientHoursException(needed_minutes=90, remaining_minutes=60)
    assert exc.code == "INSUFFICIENT_HOURS"
    assert exc.details == {"needed_hours": 1.5, "remaining_hours": 1.0}

    closed = CancellationWindowClosedException(24, 23.98333)
    assert closed.details["hours_until_start"] == 23.98

    overlap = OverlappingWindowException("2025-09-08", "10:00-11:00", "10:30-11:30", "window")
    http = overlap.to_http_exception()
    assert http.detail["code"] == "OVERLAPPING_WINDOW"
    assert http.detail["details"]["conflicting"] == "10:30-11:30"
