"""
Places API routes.

Search nearby food places and run a roulette pick over a result list.
"""
import logging
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from typing import Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from domain.models import Category, Coordinates, DayCode, PickPhase, Place
from services.discovery import discover_places, no_results_message, upstream_error_message
from services.errors import NoCandidatesError, ServiceTimeout, UpstreamError
from services.selection import ImmediateScheduler, SelectionSession
from settings import settings

router = APIRouter()
logger = logging.getLogger(__name__)


class SearchRequest(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    category: str = Category.ALL.value
    radius_m: int = Field(
        default=settings.DEFAULT_RADIUS_M,
        ge=settings.MIN_RADIUS_M,
        le=settings.MAX_RADIUS_M,
    )
    only_open: bool = False
    # Client clock context; venue hours are local, the server may not be.
    time_zone: Optional[str] = None
    utc_offset_minutes: Optional[int] = Field(default=None, ge=-720, le=840)


class PlaceResponse(BaseModel):
    id: str
    name: str
    uri: str
    latitude: float
    longitude: float
    address: Optional[str] = None
    cuisine_label: Optional[str] = None
    is_open: Optional[bool] = None
    status: str = "unknown"
    today_hours: Optional[str] = None
    hours: Optional[Dict[str, str]] = None


class SearchResponse(BaseModel):
    places: List[PlaceResponse]
    count: int
    message: Optional[str] = None


class PickRequest(BaseModel):
    places: List[PlaceResponse]


class PickResponse(BaseModel):
    reveal: List[str]
    interval_ms: int
    winner: PlaceResponse


def place_to_response(place: Place, now: datetime) -> PlaceResponse:
    """Convert domain Place to API response."""
    hours = None
    if place.schedule is not None:
        hours = {}
        for day in DayCode.ordered():
            text = place.schedule.format_day(day)
            if text:
                hours[day.value] = text
    return PlaceResponse(
        id=place.id,
        name=place.name,
        uri=place.uri,
        latitude=place.location.latitude,
        longitude=place.location.longitude,
        address=place.address,
        cuisine_label=place.cuisine_label,
        is_open=place.is_open,
        status=place.status.value,
        today_hours=place.today_hours(now),
        hours=hours,
    )


def _response_to_place(item: PlaceResponse) -> Place:
    return Place(
        id=item.id,
        name=item.name,
        uri=item.uri,
        location=Coordinates(latitude=item.latitude, longitude=item.longitude),
        address=item.address,
        cuisine_label=item.cuisine_label,
        is_open=item.is_open,
    )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def resolve_local_now(data: SearchRequest) -> datetime:
    """
    Wall-clock time at the searcher, as a naive datetime.

    Prefers an IANA zone, then a fixed UTC offset, then the server clock.
    """
    utc_now = _utcnow()
    if data.time_zone:
        try:
            zone = ZoneInfo(data.time_zone)
        except (ZoneInfoNotFoundError, ValueError):
            raise HTTPException(status_code=422, detail=f"Unknown time zone: {data.time_zone}")
        return utc_now.astimezone(zone).replace(tzinfo=None)
    if data.utc_offset_minutes is not None:
        return (utc_now + timedelta(minutes=data.utc_offset_minutes)).replace(tzinfo=None)
    return utc_now.astimezone().replace(tzinfo=None)


@router.post("/search", response_model=SearchResponse)
def search_places(data: SearchRequest):
    """Find food places around a coordinate."""
    now = resolve_local_now(data)
    origin = Coordinates(latitude=data.latitude, longitude=data.longitude)
    try:
        places = discover_places(
            origin,
            category=data.category,
            radius_m=data.radius_m,
            only_open=data.only_open,
            now=now,
        )
    except UpstreamError as exc:
        logger.warning("places search failed: %s", exc)
        status_code = 504 if isinstance(exc, ServiceTimeout) else 502
        raise HTTPException(status_code=status_code, detail=upstream_error_message(exc))

    message = None
    if not places:
        message = no_results_message(data.radius_m, data.only_open, data.category)
    return SearchResponse(
        places=[place_to_response(p, now) for p in places],
        count=len(places),
        message=message,
    )


@router.post("/pick", response_model=PickResponse)
def pick_place(data: PickRequest):
    """
    Run a full roulette over the given places.

    Returns the decoy reveal sequence for the client to animate, plus the
    independently drawn winner.
    """
    places = [_response_to_place(item) for item in data.places]
    by_identity = {id(place): item for place, item in zip(places, data.places)}
    session = SelectionSession(places)
    try:
        session.start(ImmediateScheduler())
    except NoCandidatesError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    if session.phase is not PickPhase.RESULT or session.winner is None:
        logger.error("pick did not complete: phase=%s", session.phase.value)
        raise HTTPException(status_code=500, detail="Selection did not complete")

    return PickResponse(
        reveal=[p.name for p in session.revealed],
        interval_ms=session.interval_ms,
        winner=by_identity[id(session.winner)],
    )
