"""Expert directory schemas."""

from typing import List, Optional

from .base import Money, StandardizedModel


class ExpertResponse(StandardizedModel):
    """Expert card with the rating aggregated from feedback."""

    id: str
    name: str
    domain: str
    description: Optional[str] = None
    experience: Optional[str] = None
    hourly_rate: Money
    rating: float
    rating_count: int
    workdays: List[int]
    day_start: str
    day_end: str


class ExpertRating(StandardizedModel):
    expert_id: str
    rating: float
    count: int
