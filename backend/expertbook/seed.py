# backend/expertbook/seed.py
"""
Reference experts loaded into an empty record store.

Experts are reference data: the booking engine reads them but never
creates or edits them, so they arrive through this seed.
"""

from decimal import Decimal
import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from .core.constants import DEFAULT_WORKDAYS
from .core.time_utils import to_minutes
from .models.expert import Expert

logger = logging.getLogger(__name__)

_WEEKDAYS = ",".join(str(d) for d in DEFAULT_WORKDAYS)

SEED_EXPERTS: List[Dict[str, Any]] = [
    {
        "name": "Nikhil Sharma",
        "domain": "cyber",
        "description": "Helps small businesses secure phones, laptops, and Wi-Fi.",
        "experience": "8 years • Ex-BCG Platinion",
        "base_rating": 4.7,
        "hourly_rate": Decimal("1500"),
        "phone": "+91 90000 11111",
        "email": "nikhil@secure.co",
        "day_start": "09:00",
        "day_end": "17:00",
    },
    {
        "name": "Priya Iyer",
        "domain": "cyber",
        "description": "Simple steps to prevent fraud and data leaks.",
        "experience": "6 years • ISO 27001 Lead Auditor",
        "base_rating": 4.5,
        "hourly_rate": Decimal("1200"),
        "phone": "+91 90000 22222",
        "email": "priya@defend.in",
        "day_start": "10:00",
        "day_end": "18:00",
    },
    {
        "name": "Amit Das",
        "domain": "tax",
        "description": "Tax filing and small business GST guidance.",
        "experience": "10 years • Chartered Accountant",
        "base_rating": 4.8,
        "hourly_rate": Decimal("1000"),
        "phone": "+91 90000 33333",
        "email": "amit@gstpro.in",
        "day_start": "09:00",
        "day_end": "17:00",
    },
    {
        "name": "Sneha Joshi",
        "domain": "core",
        "description": "Core banking setup and CBS vendor selection.",
        "experience": "9 years • Ex-Oracle Flexcube",
        "base_rating": 4.6,
        "hourly_rate": Decimal("2000"),
        "phone": "+91 90000 44444",
        "email": "sneha@cbshelp.in",
        "day_start": "11:00",
        "day_end": "19:00",
    },
    {
        "name": "Rahul Menon",
        "domain": "procure",
        "description": "Vendor comparison and basic contract review.",
        "experience": "7 years • CIPS Level 4",
        "base_rating": 4.4,
        "hourly_rate": Decimal("900"),
        "phone": "+91 90000 55555",
        "email": "rahul@buyright.in",
        "day_start": "09:00",
        "day_end": "17:00",
    },
    {
        "name": "Farah Ali",
        "domain": "reg",
        "description": "RBI, SEBI and local licence support.",
        "experience": "12 years • Compliance Officer",
        "base_rating": 4.9,
        "hourly_rate": Decimal("1800"),
        "phone": "+91 90000 66666",
        "email": "farah@regassist.in",
        "day_start": "10:00",
        "day_end": "18:00",
    },
]


def seed_experts(db: Session) -> int:
    """Insert the reference experts that are missing (matched by email). Returns how many."""
    created = 0
    for data in SEED_EXPERTS:
        if db.query(Expert).filter(Expert.email == data["email"]).first() is not None:
            continue
        fields = {k: v for k, v in data.items() if k not in ("day_start", "day_end")}
        db.add(
            Expert(
                **fields,
                day_start_min=to_minutes(data["day_start"]),
                day_end_min=to_minutes(data["day_end"]),
                workdays=_WEEKDAYS,
            )
        )
        created += 1
    db.commit()
    logger.info("Seeded experts", extra={"experts_created": created})
    return created
