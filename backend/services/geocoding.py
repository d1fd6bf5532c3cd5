"""Forward and reverse geocoding helpers using OpenStreetMap Nominatim.

Used only to turn a typed location into an origin coordinate and to label a
coordinate for display. Calls share one session and a simple global rate
limit, as required by the Nominatim usage policy.
"""

from __future__ import annotations

import logging
import re
import threading
import time
from typing import Any, Optional

import requests

from domain.models import Coordinates
from services.errors import ServiceError, check_response, translate_request_error
from settings import settings

SERVICE_NAME = "nominatim"
logger = logging.getLogger(__name__)
_session = requests.Session()
_last_request_ts: float = 0.0
_lock = threading.Lock()
_logged_ua = False

FALLBACK_UA = "food-picker/0.1 (contact: example@example.com)"
if settings.NOMINATIM_USER_AGENT is None:
    logger.warning(
        "NOMINATIM_USER_AGENT not set in environment; using fallback UA. "
        "This may violate Nominatim usage policy."
    )


def _redact_email(ua: str) -> str:
    if "@" not in ua:
        return ua
    return re.sub(r"\S+@\S+", "<redacted>", ua)


_ua_value = settings.NOMINATIM_USER_AGENT or FALLBACK_UA
NOMINATIM_HEADERS = {
    "User-Agent": _ua_value,
}
if settings.NOMINATIM_REFERER:
    NOMINATIM_HEADERS["Referer"] = settings.NOMINATIM_REFERER


def _throttled_get(
    url: str,
    *,
    params: dict[str, Any],
    headers: dict[str, str],
    timeout: float,
) -> requests.Response:
    """Perform a GET request with a simple global rate limit."""
    global _last_request_ts
    with _lock:
        now = time.time()
        delta = now - _last_request_ts
        if delta < settings.NOMINATIM_MIN_INTERVAL:
            time.sleep(settings.NOMINATIM_MIN_INTERVAL - delta)
        _last_request_ts = time.time()
    return _session.get(url, params=params, headers=headers, timeout=timeout)


def _get_json(path: str, params: dict[str, Any]) -> Any:
    global _logged_ua
    if not _logged_ua:
        logger.debug("Nominatim User-Agent: %s", _redact_email(_ua_value))
        _logged_ua = True

    url = f"{settings.NOMINATIM_BASE_URL}/{path}"
    try:
        resp = _throttled_get(
            url,
            params=params,
            headers=NOMINATIM_HEADERS,
            timeout=settings.NOMINATIM_HTTP_TIMEOUT_SEC,
        )
    except requests.RequestException as exc:
        logger.warning("Nominatim %s request error: %s", path, exc)
        raise translate_request_error(exc, SERVICE_NAME) from exc

    check_response(resp, SERVICE_NAME)
    try:
        return resp.json()
    except ValueError as exc:
        logger.warning("Nominatim %s JSON error: %s", path, exc)
        raise ServiceError(
            f"{SERVICE_NAME} returned invalid JSON", status_code=resp.status_code, service=SERVICE_NAME
        ) from exc


def search_by_name(text: str) -> Optional[Coordinates]:
    """Geocode free text (e.g. 'Monas, Jakarta') to the best matching point.

    Returns None when nothing matches. Transport failures raise the
    ``UpstreamError`` family.
    """
    query = (text or "").strip()
    if not query:
        return None

    data = _get_json("search", {"format": "json", "q": query, "limit": "1"})
    if not isinstance(data, list) or not data:
        logger.info("Nominatim search found nothing for %r", query)
        return None

    first = data[0]
    try:
        return Coordinates(latitude=float(first["lat"]), longitude=float(first["lon"]))
    except (KeyError, TypeError, ValueError):
        logger.warning("Nominatim search result without usable lat/lon: %r", first)
        return None


def reverse_lookup(coords: Coordinates, max_parts: int = 4) -> Optional[str]:
    """Return a short address label for a coordinate, or None if unnamed.

    Keeps the first ``max_parts`` comma-separated components of the
    ``display_name``, e.g. 'Jalan Tebet Raya, Tebet, Jakarta Selatan, ...'.
    """
    data = _get_json(
        "reverse",
        {
            "format": "json",
            "lat": str(coords.latitude),
            "lon": str(coords.longitude),
        },
    )
    display_name = data.get("display_name") if isinstance(data, dict) else None
    if not display_name:
        return None
    parts = [p.strip() for p in display_name.split(",") if p.strip()]
    return ", ".join(parts[:max_parts]) or None
