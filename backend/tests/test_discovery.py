import random
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from domain.models import Category, Coordinates, RawCandidate
from services.category_tags import map_category
from services.discovery import (
    discover_places,
    format_radius,
    no_results_message,
    upstream_error_message,
)
from services.errors import ServiceError, ServiceTimeout

ORIGIN = Coordinates(latitude=-6.2, longitude=106.8)


class FakeIndex:
    def __init__(self, raws):
        self.raws = raws
        self.calls = []

    def query(self, origin, tag_filter, radius_m):
        self.calls.append((origin, tag_filter, radius_m))
        return list(self.raws)


def test_cafe_search_end_to_end(jakarta_origin):
    index = FakeIndex(
        [
            RawCandidate(
                id="101",
                tags={"name": "Kopi Kenangan", "amenity": "cafe", "opening_hours": "Mo-Su 07:00-21:00"},
                lat=-6.201,
                lon=106.801,
            ),
            RawCandidate(id="102", tags={"name": "Cafe", "amenity": "cafe"}, lat=-6.202, lon=106.802),
        ]
    )
    now = datetime(2025, 8, 6, 10, 0)

    places = discover_places(
        jakarta_origin, "cafe", 1000, only_open=False, now=now, client=index, rng=random.Random(0)
    )

    assert [p.name for p in places] == ["Kopi Kenangan"]
    assert places[0].is_open is True
    origin, tag_filter, radius = index.calls[0]
    assert origin == jakarta_origin
    assert tag_filter == map_category(Category.CAFE)
    assert radius == 1000


def test_only_open_filters_known_closed():
    index = FakeIndex(
        [
            RawCandidate(id="1", tags={"name": "Night Noodles", "opening_hours": "Mo-Su 20:00-02:00"}),
            RawCandidate(id="2", tags={"name": "Nasi Uduk"}),
        ]
    )
    now = datetime(2025, 8, 6, 10, 0)
    places = discover_places(ORIGIN, "all", 1000, only_open=True, now=now, client=index)
    assert [p.name for p in places] == ["Nasi Uduk"]


def test_cap_and_defaults():
    raws = [RawCandidate(id=str(i), tags={"name": f"Warung {i}"}) for i in range(80)]
    places = discover_places(ORIGIN, client=FakeIndex(raws), rng=random.Random(1), cap=10)
    assert len(places) == 10


def test_upstream_errors_propagate():
    index = MagicMock()
    index.query.side_effect = ServiceTimeout("gateway timeout", service="overpass")
    with pytest.raises(ServiceTimeout):
        discover_places(ORIGIN, "all", 1000, client=index)


def test_format_radius():
    assert format_radius(500) == "500m"
    assert format_radius(1000) == "1km"
    assert format_radius(2500) == "2.5km"


def test_no_results_message_mentions_filter_and_radius():
    msg = no_results_message(1500, only_open=True, category="cafe")
    assert "1.5km" in msg
    assert "open-now" in msg
    assert "cafe places" in msg
    assert "open-now" not in no_results_message(500, only_open=False)


def test_upstream_error_message_distinguishes_timeout():
    assert "timeout" in upstream_error_message(ServiceTimeout("x"))
    assert "internet connection" in upstream_error_message(ServiceError("x", status_code=500))
