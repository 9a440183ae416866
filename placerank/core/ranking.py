from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Union

from placerank.core.geo import Coordinate, distance_km
from placerank.core.models import PlaceRecord, RankedResult

logger = logging.getLogger(__name__)

RATING_WEIGHT = 50.0
REVIEW_WEIGHT = 30.0
REVIEW_SATURATION = 100
DISTANCE_WEIGHT = 20.0
DISTANCE_PENALTY_PER_KM = 2.0


def _rating_component(rating: Optional[float]) -> float:
    return ((rating or 0.0) / 5.0) * RATING_WEIGHT


def _review_component(review_count: Optional[int]) -> float:
    return min(((review_count or 0) / REVIEW_SATURATION) * REVIEW_WEIGHT, REVIEW_WEIGHT)


def _distance_component(dist_km: float) -> float:
    return max(DISTANCE_WEIGHT - dist_km * DISTANCE_PENALTY_PER_KM, 0.0)


def score(rating: Optional[float], review_count: Optional[int], dist_km: float) -> float:
    """Combine rating, popularity and proximity into a 0..100 ordering score.

    Rating contributes up to 50, review count up to 30 (saturating at 100
    reviews) and distance up to 20 (reaching zero at 10 km).
    """
    return _rating_component(rating) + _review_component(review_count) + _distance_component(dist_km)


def rank(
    raw_results: Iterable[Union[PlaceRecord, RankedResult]],
    origin: Coordinate,
) -> List[RankedResult]:
    """Attach distance and score to every locatable place and sort best first.

    Places without coordinates are dropped. The sort is stable so places with
    equal scores keep the provider's order.
    """
    ranked: list[RankedResult] = []
    skipped = 0

    for item in raw_results:
        place = item.place if isinstance(item, RankedResult) else item
        if not place.has_coordinates:
            skipped += 1
            logger.debug("Skipping %s without coordinates", place.business_id)
            continue

        dist = distance_km(origin, (place.latitude, place.longitude))
        ranked.append(
            RankedResult(
                place=place,
                distance_km=dist,
                rank_score=score(place.rating, place.review_count, dist),
            )
        )

    if skipped:
        logger.info("Excluded %d places lacking coordinates from ranking", skipped)

    return sorted(ranked, key=lambda r: r.rank_score, reverse=True)
