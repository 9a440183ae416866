"""Client utilities for the Google Places API."""

import logging
from typing import Any, Dict, FrozenSet, Optional, Tuple

import requests

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_BASE_URL = "https://maps.googleapis.com/maps/api/place"
_OK_STATUSES = frozenset({"OK", "ZERO_RESULTS"})
# Details answers an unknown place_id with NOT_FOUND.
_DETAIL_OK_STATUSES = _OK_STATUSES | {"NOT_FOUND"}
_DETAIL_FIELDS = (
    "place_id,name,formatted_address,formatted_phone_number,geometry,website,"
    "rating,user_ratings_total,business_status,opening_hours,photos"
)


class GooglePlacesError(RuntimeError):
    """Raised when the Places API returns a non-successful response."""


def _get(endpoint: str, params: Dict[str, Any], ok_statuses: FrozenSet[str] = _OK_STATUSES) -> Dict[str, Any]:
    response = _SESSION.get(f"{_BASE_URL}/{endpoint}/json", params=params, timeout=10)
    response.raise_for_status()
    payload = response.json()
    status = payload.get("status")
    if status not in ok_statuses:
        logger.error("%s failed: status=%s, error_message=%s", endpoint, status, payload.get("error_message"))
        raise GooglePlacesError(payload.get("error_message") or status)
    return payload


def text_search(
    query: str,
    api_key: str,
    location: Optional[Tuple[float, float]] = None,
    radius_m: Optional[int] = None,
    pagetoken: Optional[str] = None,
) -> Dict[str, Any]:
    """Free-text search, biased towards ``location`` (lat, lng) when given."""
    params: Dict[str, Any] = {"query": query, "key": api_key}
    if location is not None:
        params["location"] = f"{location[0]},{location[1]}"
        if radius_m:
            params["radius"] = radius_m
    if pagetoken:
        params["pagetoken"] = pagetoken
    return _get("textsearch", params)


def place_details(place_id: str, api_key: str) -> Dict[str, Any]:
    params = {"place_id": place_id, "key": api_key, "fields": _DETAIL_FIELDS}
    payload = _get("details", params, ok_statuses=_DETAIL_OK_STATUSES)
    if payload.get("status") == "NOT_FOUND":
        logger.info("place_details: no place for place_id=%s", place_id)
        return {}
    return payload.get("result", {})
