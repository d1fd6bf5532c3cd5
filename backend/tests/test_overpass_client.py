from unittest.mock import MagicMock

import pytest
import requests

from domain.models import Coordinates
from services.category_tags import map_category
from services.errors import ServiceError, ServiceTimeout, ServiceUnavailable
from services.overpass_client import OverpassClient, build_overpass_query

ORIGIN = Coordinates(latitude=-6.2, longitude=106.8)


class DummyResponse:
    def __init__(self, json_data=None, status_code=200, reason="OK"):
        self._json = json_data
        self.status_code = status_code
        self.reason = reason

    def json(self):
        if isinstance(self._json, Exception):
            raise self._json
        return self._json


def _client(response=None, side_effect=None) -> OverpassClient:
    session = MagicMock()
    session.post.return_value = response
    session.post.side_effect = side_effect
    return OverpassClient(api_url="https://overpass.test/api", session=session)


def test_query_includes_only_non_empty_groups():
    query = build_overpass_query(ORIGIN, map_category("fast_food"), 1000, timeout_sec=90)
    assert query.startswith("[out:json][timeout:90];")
    assert 'node["amenity"~"fast_food"](around:1000,-6.2,106.8);' in query
    assert 'way["amenity"~"fast_food"](around:1000,-6.2,106.8);' in query
    assert '"shop"' not in query
    assert 'node["craft"~"caterer"]' in query
    assert query.rstrip().endswith("out center;")


def test_query_for_cafe_has_shop_group():
    query = build_overpass_query(ORIGIN, map_category("cafe"), 1500)
    assert 'node["shop"~"coffee|tea|bubble_tea"](around:1500,-6.2,106.8);' in query


def test_query_parses_elements():
    payload = {
        "elements": [
            {"type": "node", "id": 1, "lat": -6.201, "lon": 106.801, "tags": {"name": "Kopi Kenangan"}},
            {"type": "way", "id": 2, "center": {"lat": -6.21, "lon": 106.82}, "tags": {"name": "Food Hall"}},
            "junk",
        ]
    }
    client = _client(DummyResponse(payload))
    raws = client.query(ORIGIN, map_category("all"), 1000)
    assert [r.id for r in raws] == ["1", "2"]
    assert raws[0].point == Coordinates(latitude=-6.201, longitude=106.801)
    assert raws[1].point is None
    assert raws[1].center == Coordinates(latitude=-6.21, longitude=106.82)

    args, kwargs = client.session.post.call_args
    assert args[0] == "https://overpass.test/api"
    assert "out center;" in kwargs["data"]


def test_gateway_timeout_maps_to_service_timeout():
    client = _client(DummyResponse({}, status_code=504, reason="Gateway Timeout"))
    with pytest.raises(ServiceTimeout):
        client.query(ORIGIN, map_category("all"), 1000)


def test_client_timeout_maps_to_service_timeout():
    client = _client(side_effect=requests.ReadTimeout("slow"))
    with pytest.raises(ServiceTimeout):
        client.query(ORIGIN, map_category("all"), 1000)


def test_connection_error_is_unavailable_but_not_timeout():
    client = _client(side_effect=requests.ConnectionError("down"))
    with pytest.raises(ServiceUnavailable) as excinfo:
        client.query(ORIGIN, map_category("all"), 1000)
    assert not isinstance(excinfo.value, ServiceTimeout)


def test_other_status_is_service_error_with_code():
    client = _client(DummyResponse({}, status_code=429, reason="Too Many Requests"))
    with pytest.raises(ServiceError) as excinfo:
        client.query(ORIGIN, map_category("all"), 1000)
    assert excinfo.value.status_code == 429


def test_invalid_json_is_service_error():
    client = _client(DummyResponse(ValueError("not json")))
    with pytest.raises(ServiceError):
        client.query(ORIGIN, map_category("all"), 1000)
