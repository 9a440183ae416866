"""HTTP entrypoint for place search and personal ratings."""

from __future__ import annotations

import logging
import math
import os
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import requests
from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from placerank.core import ratings
from placerank.core.config import ConfigError, get_settings
from placerank.core.db import StorageError, ensure_schema
from placerank.core.filters import FilterCriteria
from placerank.core.geo import distance_km, estimate_travel_minutes
from placerank.core.ratings import ValidationError
from placerank.etl.serialize import place_to_dict, ranked_to_dict, rating_to_dict
from placerank.etl.transform import to_place_record
from placerank.jobs.search import run_search
from placerank.vendors import google_places

# ---------- Logging ----------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

# ---------- App ----------
app = Flask(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


class QueryParamError(ValueError):
    """Raised for malformed query parameters."""


# ---------- Query parsing ----------


def _arg_float(name: str, default: Optional[float] = None) -> float:
    raw = request.args.get(name)
    if raw is None or raw == "":
        if default is None:
            raise QueryParamError(f"{name} is required")
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise QueryParamError(f"{name} must be numeric") from exc
    if not math.isfinite(value):
        raise QueryParamError(f"{name} must be finite")
    return value


def _arg_int(name: str, default: int) -> int:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise QueryParamError(f"{name} must be an integer") from exc


def _arg_bool(name: str) -> bool:
    raw = (request.args.get(name) or "").strip().lower()
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise QueryParamError(f"{name} must be a boolean")


# ---------- Error handlers ----------


@app.errorhandler(StorageError)
def _storage_unavailable(exc: StorageError) -> Any:
    return jsonify({"error": "Rating storage is unavailable, please retry"}), 503


@app.errorhandler(ConfigError)
def _misconfigured(exc: ConfigError) -> Any:
    logger.error("Configuration error: %s", exc)
    return jsonify({"error": "Service is not configured"}), 503


@app.errorhandler(google_places.GooglePlacesError)
@app.errorhandler(requests.RequestException)
def _provider_failed(exc: Exception) -> Any:
    logger.warning("Place provider failed: %s", exc)
    return jsonify({"error": "Place search provider failed"}), 502


@app.errorhandler(Exception)
def _unexpected(exc: Exception) -> Any:
    if isinstance(exc, HTTPException):
        return exc
    logger.exception("Unhandled error on %s: %s", request.path, exc)
    return jsonify({"error": "Internal server error"}), 500


# ---------- Routes ----------


@app.get("/")
def root() -> Any:
    return "ok", 200


@app.get("/healthz")
def healthcheck() -> Any:
    """Lightweight health endpoint; reads settings only, never the database."""
    settings = get_settings()
    return (
        jsonify(
            {
                "status": "ok",
                "server_port_config": settings.server_port,
                "revision": os.getenv("K_REVISION", "unknown"),
            }
        ),
        200,
    )


@app.post("/api/ratings")
def save_rating() -> Any:
    """
    Create or update the rating for one business.
    Required JSON fields: businessId, businessName, rating (1-5)
    Optional: review (string)
    """
    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return jsonify({"error": "JSON object body is required"}), 400

    try:
        record = ratings.upsert_rating(
            business_id=payload.get("businessId"),
            business_name=payload.get("businessName"),
            user_rating=payload.get("rating"),
            user_review=payload.get("review"),
        )
    except ValidationError as exc:
        return jsonify({"error": str(exc)}), 400

    logger.info("Saved rating for business_id=%s", record.business_id)
    return jsonify({"success": True, "rating": rating_to_dict(record)}), 200


@app.get("/api/ratings/get")
def get_rating() -> Any:
    business_id = request.args.get("businessId", "")
    if not business_id.strip():
        return jsonify({"error": "Business ID is required"}), 400

    record = ratings.get_rating(business_id)
    return jsonify({"rating": rating_to_dict(record) if record else None}), 200


@app.get("/api/ratings/list")
def list_ratings() -> Any:
    try:
        limit = _arg_int("limit", ratings.DEFAULT_LIST_LIMIT)
        offset = _arg_int("offset", 0)
        records = ratings.list_ratings(limit=limit, offset=offset)
    except (QueryParamError, ValidationError) as exc:
        return jsonify({"error": str(exc)}), 400

    return jsonify({"ratings": [rating_to_dict(r) for r in records]}), 200


@app.get("/api/places/search")
def search_places() -> Any:
    """
    Search near a coordinate, rank, and filter.
    Required query params: query, lat, lng
    Optional: minRating, openNow, maxDistanceKm, limit
    """
    settings = get_settings()
    query = (request.args.get("query") or "").strip()
    if not query:
        return jsonify({"error": "query is required"}), 400

    try:
        origin = (_arg_float("lat"), _arg_float("lng"))
        criteria = FilterCriteria(
            min_rating=_arg_float("minRating", 0.0),
            open_now=_arg_bool("openNow"),
            max_distance_km=_arg_float("maxDistanceKm", settings.default_max_distance_km),
        )
        limit = _arg_int("limit", settings.search_limit)
    except QueryParamError as exc:
        return jsonify({"error": str(exc)}), 400
    if limit <= 0:
        return jsonify({"error": "limit must be positive"}), 400

    ranked, visible = run_search(query, origin, criteria, limit=limit, settings=settings)
    return (
        jsonify(
            {
                "data": [ranked_to_dict(r) for r in visible],
                "total": len(ranked),
                "filtered": len(visible),
            }
        ),
        200,
    )


@app.get("/api/places/<business_id>")
def place_details(business_id: str) -> Any:
    settings = get_settings()
    result = google_places.place_details(business_id, settings.require_google_api_key())
    place = to_place_record(result) if result else None
    if place is None:
        return jsonify({"error": "place not found"}), 404
    return jsonify({"data": place_to_dict(place)}), 200


@app.get("/api/directions")
def directions() -> Any:
    """Straight-line distance and a rough drive time; real routing is left to the maps app."""
    settings = get_settings()
    try:
        origin = (_arg_float("originLat"), _arg_float("originLng"))
        destination = (_arg_float("destLat"), _arg_float("destLng"))
    except QueryParamError as exc:
        return jsonify({"error": str(exc)}), 400

    distance = distance_km(origin, destination)
    maps_url = "https://www.google.com/maps/dir/?" + urlencode(
        {
            "api": 1,
            "origin": f"{origin[0]},{origin[1]}",
            "destination": f"{destination[0]},{destination[1]}",
        }
    )
    return (
        jsonify(
            {
                "distanceKm": round(distance, 3),
                "estimatedMinutes": estimate_travel_minutes(distance, settings.travel_speed_kmh),
                "mapsUrl": maps_url,
            }
        ),
        200,
    )


def main() -> None:
    settings = get_settings()
    ensure_schema()

    logger.info("[BOOT] Binding on 0.0.0.0:%d", settings.server_port)
    app.run(host="0.0.0.0", port=settings.server_port, threaded=True)


if __name__ == "__main__":
    main()
