"""Utilities for transforming Google Places responses into place records."""

import logging
import math
from typing import Any, Dict, Iterable, List, Optional

from placerank.core.models import BusinessStatus, PlaceRecord

logger = logging.getLogger(__name__)


def _strip_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    value_str = str(value).strip()
    return value_str or None


def _safe_float(value: Any) -> Optional[float]:
    try:
        if value is None or isinstance(value, bool):
            return None
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _safe_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        count = int(value)
    except (TypeError, ValueError):
        return None
    return count if count >= 0 else None


def parse_status(result: Dict[str, Any]) -> Optional[BusinessStatus]:
    """Derive open/closed state; live opening hours win over the listing status."""
    opening_hours = result.get("opening_hours") or {}
    open_now = opening_hours.get("open_now")
    if open_now is True:
        return BusinessStatus.OPEN
    if open_now is False:
        return BusinessStatus.CLOSED

    business_status = result.get("business_status")
    if not business_status:
        return None
    if str(business_status).upper().startswith("CLOSED"):
        return BusinessStatus.CLOSED
    return BusinessStatus.UNKNOWN


def _first_photo_reference(photos: Iterable[Dict[str, Any]]) -> Optional[str]:
    for photo in photos or []:
        reference = _strip_or_none(photo.get("photo_reference"))
        if reference:
            return reference
    return None


def to_place_record(result: Dict[str, Any]) -> Optional[PlaceRecord]:
    """Normalize one provider result; returns None when it cannot be identified."""
    business_id = _strip_or_none(result.get("place_id"))
    name = _strip_or_none(result.get("name"))
    if not business_id or not name:
        logger.debug("Skipping result without place_id or name: %s", result)
        return None

    location = (result.get("geometry") or {}).get("location") or {}

    return PlaceRecord(
        business_id=business_id,
        name=name,
        rating=_safe_float(result.get("rating")),
        review_count=_safe_int(result.get("user_ratings_total")),
        latitude=_safe_float(location.get("lat")),
        longitude=_safe_float(location.get("lng")),
        status=parse_status(result),
        address=_strip_or_none(result.get("formatted_address")),
        phone=_strip_or_none(result.get("formatted_phone_number")),
        website=_strip_or_none(result.get("website")),
        photo_reference=_first_photo_reference(result.get("photos", [])),
        raw=result,
    )


def to_place_records(results: Iterable[Dict[str, Any]]) -> List[PlaceRecord]:
    records = []
    for result in results or []:
        record = to_place_record(result)
        if record is not None:
            records.append(record)
    return records
