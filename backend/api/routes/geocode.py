"""
Geocoding API routes.
"""
import logging

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from domain.models import Coordinates
from services.errors import ServiceTimeout, UpstreamError
from services.geocoding import reverse_lookup, search_by_name

router = APIRouter()
logger = logging.getLogger(__name__)

UNKNOWN_LOCATION_LABEL = "Unknown location"
LOOKUP_FAILED_LABEL = "Could not load address"


class CoordinatesResponse(BaseModel):
    latitude: float
    longitude: float


class LabelResponse(BaseModel):
    label: str
    resolved: bool


@router.get("/search", response_model=CoordinatesResponse)
def search_location(q: str = Query(min_length=1)):
    try:
        coords = search_by_name(q)
    except UpstreamError as exc:
        logger.warning("geocode search failed for %r: %s", q, exc)
        status_code = 504 if isinstance(exc, ServiceTimeout) else 502
        raise HTTPException(status_code=status_code, detail="Location search is unavailable right now.")
    if coords is None:
        raise HTTPException(status_code=404, detail="Location not found. Try a more specific name.")
    return CoordinatesResponse(latitude=coords.latitude, longitude=coords.longitude)


@router.get("/reverse", response_model=LabelResponse)
def reverse_location(
    lat: float = Query(ge=-90, le=90),
    lon: float = Query(ge=-180, le=180),
):
    # The label is cosmetic, so failures degrade to a placeholder instead of an error.
    try:
        label = reverse_lookup(Coordinates(latitude=lat, longitude=lon))
    except UpstreamError as exc:
        logger.warning("reverse geocode failed for %s,%s: %s", lat, lon, exc)
        return LabelResponse(label=LOOKUP_FAILED_LABEL, resolved=False)
    if not label:
        return LabelResponse(label=UNKNOWN_LOCATION_LABEL, resolved=False)
    return LabelResponse(label=label, resolved=True)
