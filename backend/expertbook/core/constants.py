"""Application-wide constants for the expert booking engine."""

from __future__ import annotations

# Slot geometry
SLOT_MINUTES = 30  # every bookable unit is a 30-minute slot
MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 24 * 60

# Packages a client can buy (hours)
DEFAULT_PACKAGE_HOURS = (1, 4, 10, 20)

# Expert defaults
DEFAULT_DAY_START = "09:00"
DEFAULT_DAY_END = "17:00"
DEFAULT_WORKDAYS = (1, 2, 3, 4, 5)  # Monday..Friday, 0 = Sunday
DEFAULT_BASE_RATING = 4.5

# Feedback
MIN_RATING = 1
MAX_RATING = 5
MAX_FEEDBACK_LENGTH = 2000
MAX_REASON_LENGTH = 500

# Day of week mapping (index 0 = Sunday)
DAYS_OF_WEEK = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
