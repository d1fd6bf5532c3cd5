"""
Overpass API client for nearby food venues.
"""
from __future__ import annotations

import logging
from typing import List, Optional

import requests

from domain.models import CategoryFilter, Coordinates, RawCandidate
from services.errors import ServiceError, UpstreamError, check_response, translate_request_error
from settings import settings

SERVICE_NAME = "overpass"


def build_overpass_query(
    origin: Coordinates,
    tag_filter: CategoryFilter,
    radius_m: float,
    timeout_sec: Optional[int] = None,
) -> str:
    """
    Build an Overpass QL query for the filter's non-empty groups.

    Amenities are matched on nodes and ways (ways report a center via
    ``out center``); shops and crafts on nodes only.
    """
    timeout = timeout_sec if timeout_sec is not None else settings.OVERPASS_QUERY_TIMEOUT_SEC
    around = f"(around:{int(radius_m)},{origin.latitude},{origin.longitude})"

    statements: List[str] = []
    if tag_filter.amenity:
        pattern = tag_filter.pattern("amenity")
        statements.append(f'node["amenity"~"{pattern}"]{around};')
        statements.append(f'way["amenity"~"{pattern}"]{around};')
    if tag_filter.shop:
        statements.append(f'node["shop"~"{tag_filter.pattern("shop")}"]{around};')
    if tag_filter.craft:
        statements.append(f'node["craft"~"{tag_filter.pattern("craft")}"]{around};')

    body = "\n".join(f"  {s}" for s in statements)
    return f"[out:json][timeout:{timeout}];\n(\n{body}\n);\nout center;"


class OverpassClient:
    def __init__(
        self,
        api_url: Optional[str] = None,
        http_timeout_sec: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.api_url = api_url or settings.OVERPASS_API_URL
        self.http_timeout_sec = http_timeout_sec or settings.OVERPASS_HTTP_TIMEOUT_SEC
        self.session = session or requests.Session()
        self.logger = logging.getLogger(__name__)

    def query(
        self,
        origin: Coordinates,
        tag_filter: CategoryFilter,
        radius_m: float,
    ) -> List[RawCandidate]:
        """
        Fetch raw venue elements around ``origin``.

        Raises ServiceTimeout on client timeouts or a 504 from the gateway,
        ServiceUnavailable when unreachable and ServiceError for other
        non-success statuses.
        """
        query = build_overpass_query(origin, tag_filter, radius_m)
        try:
            resp = self.session.post(self.api_url, data=query, timeout=self.http_timeout_sec)
        except requests.RequestException as exc:
            self.logger.warning("Overpass request failed: %s", exc)
            raise translate_request_error(exc, SERVICE_NAME) from exc

        try:
            check_response(resp, SERVICE_NAME)
        except UpstreamError as exc:
            self.logger.warning("Overpass returned HTTP %s: %s", resp.status_code, exc)
            raise

        try:
            data = resp.json()
        except ValueError as exc:
            raise ServiceError(
                f"{SERVICE_NAME} returned invalid JSON", status_code=resp.status_code, service=SERVICE_NAME
            ) from exc

        elements = (data.get("elements") or []) if isinstance(data, dict) else []
        candidates = [RawCandidate.from_element(el) for el in elements if isinstance(el, dict)]
        self.logger.debug(
            "OverpassClient.query: lat=%.6f lon=%.6f radius_m=%d got %d elements",
            origin.latitude,
            origin.longitude,
            int(radius_m),
            len(candidates),
        )
        return candidates


_default_overpass_client: Optional[OverpassClient] = None


def get_default_overpass_client() -> OverpassClient:
    global _default_overpass_client
    if _default_overpass_client is None:
        _default_overpass_client = OverpassClient()
    return _default_overpass_client
