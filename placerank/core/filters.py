"""User-selected filters applied to an already ranked result list."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

from placerank.core.models import BusinessStatus, RankedResult

DEFAULT_MAX_DISTANCE_KM = 10.0


@dataclass(frozen=True)
class FilterCriteria:
    min_rating: float = 0.0
    open_now: bool = False
    max_distance_km: float = DEFAULT_MAX_DISTANCE_KM


def matches(result: RankedResult, criteria: FilterCriteria) -> bool:
    if (result.rating or 0.0) < criteria.min_rating:
        return False
    if criteria.open_now and result.status is not BusinessStatus.OPEN:
        return False
    if result.distance_km > criteria.max_distance_km:
        return False
    return True


def apply_filters(results: Iterable[RankedResult], criteria: FilterCriteria) -> List[RankedResult]:
    """Keep matching results in their existing rank order."""
    return [result for result in results if matches(result, criteria)]
