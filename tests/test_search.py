import argparse

import pytest

from placerank.core.config import ConfigError, Settings
from placerank.core.filters import FilterCriteria
from placerank.jobs import search


def _settings(api_key="abc", search_limit=50):
    return Settings(google_api_key=api_key, database_url="postgres://", search_limit=search_limit)


def _result(place_id, lng, rating=4.0, reviews=10, open_now=True):
    return {
        "place_id": place_id,
        "name": f"Place {place_id}",
        "rating": rating,
        "user_ratings_total": reviews,
        "geometry": {"location": {"lat": 0.0, "lng": lng}},
        "opening_hours": {"open_now": open_now},
    }


def test_search_places_requires_api_key():
    with pytest.raises(ConfigError):
        search.search_places("pizza", (0.0, 0.0), settings=_settings(api_key=""))


def test_search_places_requires_query():
    with pytest.raises(ValueError):
        search.search_places("  ", (0.0, 0.0), settings=_settings())


def test_search_places_follows_pages_up_to_limit(monkeypatch):
    monkeypatch.setattr(search.time, "sleep", lambda _: None)
    calls = []

    def fake_text_search(query, api_key, location=None, radius_m=None, pagetoken=None):
        calls.append(pagetoken)
        if not pagetoken:
            return {"results": [_result(str(i), 0.01) for i in range(20)], "next_page_token": "next"}
        return {"results": [_result(f"p2-{i}", 0.01) for i in range(20)], "next_page_token": "more"}

    monkeypatch.setattr(search.google_places, "text_search", fake_text_search)

    places = search.search_places("coffee", (0.0, 0.0), limit=25, settings=_settings())

    assert calls == [None, "next"]
    assert len(places) == 25


def test_search_places_stops_without_next_page(monkeypatch):
    monkeypatch.setattr(search.time, "sleep", lambda _: pytest.fail("should not wait"))
    monkeypatch.setattr(
        search.google_places,
        "text_search",
        lambda **kwargs: {"results": [_result("1", 0.01), {"name": "no id"}]},
    )

    places = search.search_places("coffee", (0.0, 0.0), settings=_settings())

    assert [p.business_id for p in places] == ["1"]


def test_run_search_ranks_then_filters(monkeypatch):
    raw = [
        _result("far", 0.1, rating=4.5, reviews=200),
        _result("closed", 0.01, rating=5.0, reviews=300, open_now=False),
        _result("near", 0.01, rating=4.0, reviews=50),
        {"place_id": "nowhere", "name": "No geometry", "rating": 5.0},
    ]
    monkeypatch.setattr(search.google_places, "text_search", lambda **kwargs: {"results": raw})

    ranked, visible = search.run_search(
        "coffee",
        (0.0, 0.0),
        FilterCriteria(open_now=True, max_distance_km=10.0),
        settings=_settings(),
    )

    assert [r.business_id for r in ranked] == ["closed", "far", "near"]
    assert [r.business_id for r in visible] == ["near"]


def test_build_parser_defaults(monkeypatch):
    monkeypatch.setattr(search, "get_settings", lambda: _settings(search_limit=20))
    parser = search.build_parser()
    args = parser.parse_args(["--query", "gym", "--lat", "1.5", "--lng", "-2"])
    assert isinstance(parser, argparse.ArgumentParser)
    assert args.query == "gym"
    assert args.lat == 1.5
    assert args.open_now is False
    assert args.max_distance_km == 10.0
    assert args.limit == 20
