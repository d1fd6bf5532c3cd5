"""
Normalize raw Overpass elements into Place objects.
"""
import logging
from datetime import datetime
from typing import Iterable, List, Optional
from urllib.parse import quote

from domain.models import Coordinates, Place, RawCandidate
from services.opening_hours import is_open_at, parse_opening_hours

logger = logging.getLogger(__name__)

# Placeholder names mappers put on unnamed venues (English + Indonesian).
GENERIC_NAMES = frozenset(
    {
        "restaurant",
        "cafe",
        "kafe",
        "warung",
        "rumah makan",
        "food court",
        "unknown",
    }
)

MAPS_SEARCH_URL = "https://www.google.com/maps/search/?api=1"


def is_generic_name(name: str) -> bool:
    return name.strip().lower() in GENERIC_NAMES


def resolve_location(raw: RawCandidate, origin: Coordinates) -> Coordinates:
    """Node point, else way/area center, else the search origin."""
    return raw.point or raw.center or origin


def build_address(tags) -> Optional[str]:
    street = (tags.get("addr:street") or "").strip()
    if street:
        housenumber = (tags.get("addr:housenumber") or "").strip()
        return f"{street} {housenumber}".strip()
    return tags.get("addr:city") or tags.get("addr:village") or None


def build_cuisine_label(tags) -> Optional[str]:
    cuisine = tags.get("cuisine")
    if not cuisine:
        return None
    return cuisine.replace("_", " ")


def build_maps_uri(name: str, location: Coordinates) -> str:
    """Maps search link for the name near the coordinate (no Google place id is known)."""
    query = f"{name} {location.latitude},{location.longitude}"
    return f"{MAPS_SEARCH_URL}&query={quote(query, safe='')}"


def normalize_candidate(
    raw: RawCandidate,
    origin: Coordinates,
    now: datetime,
) -> Optional[Place]:
    """
    Turn a raw element into a Place, or None when it should be excluded.

    Unnamed venues and generic placeholder names are dropped. When the
    element has no usable opening hours both ``schedule`` and ``is_open``
    stay None.
    """
    name = raw.name
    if not name or not name.strip():
        return None
    if is_generic_name(name):
        return None

    location = resolve_location(raw, origin)
    schedule = parse_opening_hours(raw.tags.get("opening_hours"))
    is_open = is_open_at(schedule, now) if schedule is not None else None

    return Place(
        id=raw.id,
        name=name,
        uri=build_maps_uri(name, location),
        location=location,
        address=build_address(raw.tags),
        cuisine_label=build_cuisine_label(raw.tags),
        schedule=schedule,
        is_open=is_open,
    )


def normalize_candidates(
    raws: Iterable[RawCandidate],
    origin: Coordinates,
    now: datetime,
) -> List[Place]:
    places: List[Place] = []
    excluded = 0
    for raw in raws:
        place = normalize_candidate(raw, origin, now)
        if place is None:
            excluded += 1
            continue
        places.append(place)
    logger.debug("normalize_candidates: kept %d, excluded %d", len(places), excluded)
    return places
