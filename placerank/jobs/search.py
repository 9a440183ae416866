"""Search nearby places, rank them and apply the user's filters."""

import argparse
import json
import logging
import math
import time
from typing import List, Optional, Tuple

from placerank.core.config import Settings, get_settings
from placerank.core.filters import FilterCriteria, apply_filters
from placerank.core.geo import Coordinate
from placerank.core.models import PlaceRecord, RankedResult
from placerank.core.ranking import rank
from placerank.etl.serialize import ranked_to_dict
from placerank.etl.transform import to_place_records
from placerank.vendors import google_places

logger = logging.getLogger(__name__)

PAGE_SIZE = 20
MAX_PAGES = 3
# Google rejects a next_page_token that is used immediately.
PAGE_TOKEN_DELAY_SECONDS = 2.0


def search_places(
    query: str,
    origin: Coordinate,
    *,
    limit: Optional[int] = None,
    settings: Optional[Settings] = None,
) -> List[PlaceRecord]:
    """Fetch up to ``limit`` places for ``query`` near ``origin``."""
    settings = settings or get_settings()
    api_key = settings.require_google_api_key()

    query = (query or "").strip()
    if not query:
        raise ValueError("Query must be provided for place search")

    limit = limit or settings.search_limit
    max_pages = min(MAX_PAGES, max(1, math.ceil(limit / PAGE_SIZE)))

    logger.info("Running Places text search for query=%s origin=%s limit=%d", query, origin, limit)

    places: list[PlaceRecord] = []
    page_token = None
    processed_pages = 0

    while processed_pages < max_pages and len(places) < limit:
        if page_token:
            time.sleep(PAGE_TOKEN_DELAY_SECONDS)
        response = google_places.text_search(
            query=query,
            api_key=api_key,
            location=origin,
            radius_m=settings.search_radius_m,
            pagetoken=page_token,
        )
        results = response.get("results", [])
        logger.info("Fetched %d results on page %d", len(results), processed_pages + 1)
        places.extend(to_place_records(results))

        processed_pages += 1
        page_token = response.get("next_page_token")
        if not page_token:
            break

    return places[:limit]


def run_search(
    query: str,
    origin: Coordinate,
    criteria: FilterCriteria,
    *,
    limit: Optional[int] = None,
    settings: Optional[Settings] = None,
) -> Tuple[List[RankedResult], List[RankedResult]]:
    """Return the full ranked list and the filtered subset shown to the user."""
    places = search_places(query, origin, limit=limit, settings=settings)
    ranked = rank(places, origin)
    visible = apply_filters(ranked, criteria)
    logger.info("Ranked %d places, %d pass the filters", len(ranked), len(visible))
    return ranked, visible


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Search, rank and filter nearby places")
    parser.add_argument("--query", required=True, help="What to look for, e.g. 'coffee shops'")
    parser.add_argument("--lat", type=float, required=True, help="Origin latitude")
    parser.add_argument("--lng", type=float, required=True, help="Origin longitude")
    parser.add_argument("--min-rating", dest="min_rating", type=float, default=0.0)
    parser.add_argument("--open-now", dest="open_now", action="store_true")
    parser.add_argument(
        "--max-distance-km",
        dest="max_distance_km",
        type=float,
        default=settings.default_max_distance_km,
    )
    parser.add_argument("--limit", type=int, default=settings.search_limit)
    return parser


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    args = build_parser().parse_args()

    criteria = FilterCriteria(
        min_rating=args.min_rating,
        open_now=args.open_now,
        max_distance_km=args.max_distance_km,
    )
    _, visible = run_search(args.query, (args.lat, args.lng), criteria, limit=args.limit)
    for result in visible:
        print(json.dumps(ranked_to_dict(result), ensure_ascii=False))


if __name__ == "__main__":
    main()
