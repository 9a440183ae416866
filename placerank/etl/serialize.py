"""JSON payload builders for the HTTP API and the CLI."""

from datetime import datetime
from typing import Any, Dict, Optional

from placerank.core.models import PlaceRecord, RankedResult, RatingRecord


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def place_to_dict(place: PlaceRecord) -> Dict[str, Any]:
    return {
        "businessId": place.business_id,
        "name": place.name,
        "rating": place.rating,
        "reviewCount": place.review_count,
        "latitude": place.latitude,
        "longitude": place.longitude,
        "status": place.status.value if place.status is not None else None,
        "address": place.address,
        "phone": place.phone,
        "website": place.website,
        "photoReference": place.photo_reference,
    }


def ranked_to_dict(result: RankedResult) -> Dict[str, Any]:
    payload = place_to_dict(result.place)
    payload["distanceKm"] = round(result.distance_km, 3)
    payload["rankScore"] = round(result.rank_score, 2)
    return payload


def rating_to_dict(record: RatingRecord) -> Dict[str, Any]:
    return {
        "id": record.id,
        "businessId": record.business_id,
        "businessName": record.business_name,
        "userRating": record.user_rating,
        "userReview": record.user_review,
        "visitedDate": _iso(record.visited_date),
        "updatedAt": _iso(record.updated_at),
    }
