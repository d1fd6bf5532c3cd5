"""
End-to-end place discovery.

Wires the category mapping, the Overpass query, normalization and the filter
pipeline, and produces the guidance text shown for empty results and
upstream failures.
"""
import logging
import random
from datetime import datetime
from typing import List, Optional, Protocol, Sequence, Union

from domain.models import Category, CategoryFilter, Coordinates, Place, RawCandidate
from services.candidate_filter import process_candidates
from services.category_tags import category_label, map_category
from services.errors import ServiceTimeout, UpstreamError
from services.normalizer import normalize_candidates
from services.overpass_client import get_default_overpass_client
from settings import settings

logger = logging.getLogger(__name__)


class PlacesQueryService(Protocol):
    def query(
        self,
        origin: Coordinates,
        tag_filter: CategoryFilter,
        radius_m: float,
    ) -> Sequence[RawCandidate]:
        ...


def format_radius(radius_m: float) -> str:
    """'500m' below a kilometre, otherwise '1km' / '1.5km'."""
    if radius_m >= 1000:
        km = radius_m / 1000
        return f"{km:g}km"
    return f"{int(radius_m)}m"


def discover_places(
    origin: Coordinates,
    category: Union[Category, str, None] = Category.ALL,
    radius_m: Optional[float] = None,
    only_open: bool = False,
    now: Optional[datetime] = None,
    client: Optional[PlacesQueryService] = None,
    rng: Optional[random.Random] = None,
    cap: Optional[int] = None,
) -> List[Place]:
    """
    Find, normalize and filter food places around ``origin``.

    Upstream errors propagate unchanged. An empty list means nothing matched.
    """
    radius = radius_m if radius_m is not None else settings.DEFAULT_RADIUS_M
    when = now or datetime.now()
    client = client or get_default_overpass_client()
    tag_filter = map_category(category)

    raws = client.query(origin, tag_filter, radius)
    places = normalize_candidates(raws, origin, when)
    result = process_candidates(
        places,
        only_open=only_open,
        cap=settings.RESULT_CAP if cap is None else cap,
        rng=rng,
    )
    logger.info(
        "discover_places: category=%s radius_m=%s only_open=%s raw=%d places=%d",
        Category.parse(category).value,
        radius,
        only_open,
        len(raws),
        len(result),
    )
    return result


def no_results_message(
    radius_m: float,
    only_open: bool,
    category: Union[Category, str, None] = None,
) -> str:
    kind = category_label(category)
    what = f"{kind} places" if kind else "food places"
    radius = format_radius(radius_m)
    if only_open:
        return (
            f"No {what} open right now within {radius}. "
            "Try turning off the open-now filter or increasing the distance."
        )
    return f"No {what} found within {radius}. Try increasing the distance."


def upstream_error_message(exc: UpstreamError) -> str:
    if isinstance(exc, ServiceTimeout):
        return "The map server is busy (timeout). Try a smaller radius or try again shortly."
    return "Could not load map data. Check your internet connection."
