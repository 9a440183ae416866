"""Core data models shared by the ranking engine and the rating store."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class BusinessStatus(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class PlaceRecord:
    """Normalized snapshot of a place returned by the search provider.

    Every optional field stays ``None`` when the provider omits it so that an
    unknown rating is never read as a zero rating.
    """

    business_id: str
    name: str
    rating: Optional[float] = None
    review_count: Optional[int] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    status: Optional[BusinessStatus] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    photo_reference: Optional[str] = None
    raw: Optional[Dict[str, Any]] = field(default=None, repr=False, compare=False)

    @property
    def has_coordinates(self) -> bool:
        return all(
            value is not None and math.isfinite(value) for value in (self.latitude, self.longitude)
        )


@dataclass(frozen=True)
class RankedResult:
    place: PlaceRecord
    distance_km: float
    rank_score: float

    @property
    def business_id(self) -> str:
        return self.place.business_id

    @property
    def rating(self) -> Optional[float]:
        return self.place.rating

    @property
    def status(self) -> Optional[BusinessStatus]:
        return self.place.status


@dataclass(slots=True)
class RatingRecord:
    """The single rating row kept for a business."""

    id: int
    business_id: str
    business_name: str
    user_rating: int
    user_review: Optional[str]
    visited_date: datetime
    updated_at: datetime
