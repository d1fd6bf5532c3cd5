"""
Core domain models for the food picker.
These are framework-agnostic and can be used across all services.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple


class Category(str, Enum):
    """Food venue category a search can be narrowed to."""
    ALL = "all"
    RESTAURANT = "restaurant"
    CAFE = "cafe"
    FAST_FOOD = "fast_food"
    STREET_FOOD = "street_food"
    # Fallback arm for anything unrecognized; queried like ALL.
    OTHER = "other"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Category":
        if isinstance(value, cls):
            return value
        if not value:
            return cls.ALL
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.OTHER


class DayCode(str, Enum):
    """Two-letter weekday codes, declared in canonical Monday..Sunday order."""
    MO = "Mo"
    TU = "Tu"
    WE = "We"
    TH = "Th"
    FR = "Fr"
    SA = "Sa"
    SU = "Su"

    @classmethod
    def parse(cls, code: str) -> Optional["DayCode"]:
        try:
            return cls(code)
        except ValueError:
            return None

    @classmethod
    def ordered(cls) -> Tuple["DayCode", ...]:
        return tuple(cls)

    @classmethod
    def for_datetime(cls, when: datetime) -> "DayCode":
        # datetime.weekday(): Monday == 0, matching declaration order
        return cls.ordered()[when.weekday()]


class OpenStatus(str, Enum):
    """Display status of a place; UNKNOWN is distinct from OPEN."""
    OPEN = "open"
    CLOSED = "closed"
    UNKNOWN = "unknown"


class PickPhase(str, Enum):
    """Phases of a selection session."""
    IDLE = "idle"
    PICKING = "picking"
    RESULT = "result"


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class CategoryFilter:
    """
    Tag patterns to query, partitioned by OSM venue-class key.

    An empty group means the key is not queried at all.
    """
    amenity: Tuple[str, ...] = ()
    shop: Tuple[str, ...] = ()
    craft: Tuple[str, ...] = ()

    def groups(self) -> Dict[str, Tuple[str, ...]]:
        return {"amenity": self.amenity, "shop": self.shop, "craft": self.craft}

    def pattern(self, group: str) -> str:
        """Return the group as a regex alternation, e.g. 'cafe|internet_cafe'."""
        return "|".join(self.groups()[group])


@dataclass(frozen=True)
class TimeInterval:
    """An opening interval in minutes since midnight.

    ``close_minute < open_minute`` means the interval crosses midnight.
    """
    open_minute: int
    close_minute: int

    @property
    def crosses_midnight(self) -> bool:
        return self.close_minute < self.open_minute

    def contains(self, minute: int) -> bool:
        if self.crosses_midnight:
            return minute >= self.open_minute or minute < self.close_minute
        return self.open_minute <= minute < self.close_minute

    def format(self) -> str:
        return f"{_format_minute(self.open_minute)}-{_format_minute(self.close_minute)}"


def _format_minute(minute: int) -> str:
    return f"{minute // 60:02d}:{minute % 60:02d}"


@dataclass(frozen=True)
class WeeklySchedule:
    """
    Per-day opening intervals.

    A day missing from ``days`` has no listed hours. Days are only present
    when at least one interval was parsed for them.
    """
    days: Mapping[DayCode, Tuple[TimeInterval, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self) -> None:
        if not isinstance(self.days, MappingProxyType):
            object.__setattr__(self, "days", MappingProxyType(dict(self.days)))

    def intervals_for(self, day: DayCode) -> Optional[Tuple[TimeInterval, ...]]:
        return self.days.get(day)

    def format_day(self, day: DayCode) -> Optional[str]:
        intervals = self.intervals_for(day)
        if not intervals:
            return None
        return ", ".join(interval.format() for interval in intervals)

    def __bool__(self) -> bool:
        return bool(self.days)


@dataclass(frozen=True)
class RawCandidate:
    """A venue element as returned by the Overpass API."""
    id: str
    tags: Mapping[str, str] = field(default_factory=dict)
    lat: Optional[float] = None
    lon: Optional[float] = None
    center_lat: Optional[float] = None
    center_lon: Optional[float] = None

    @classmethod
    def from_element(cls, data: Dict[str, Any]) -> "RawCandidate":
        center = data.get("center") or {}
        return cls(
            id=str(data.get("id", "")),
            tags=dict(data.get("tags") or {}),
            lat=data.get("lat"),
            lon=data.get("lon"),
            center_lat=center.get("lat"),
            center_lon=center.get("lon"),
        )

    @property
    def name(self) -> Optional[str]:
        return self.tags.get("name")

    @property
    def point(self) -> Optional[Coordinates]:
        if self.lat is None or self.lon is None:
            return None
        return Coordinates(latitude=float(self.lat), longitude=float(self.lon))

    @property
    def center(self) -> Optional[Coordinates]:
        if self.center_lat is None or self.center_lon is None:
            return None
        return Coordinates(latitude=float(self.center_lat), longitude=float(self.center_lon))


@dataclass(frozen=True)
class Place:
    """
    A normalized food venue.

    ``is_open`` is None when there is no schedule data; filtering treats
    that leniently while ``status`` reports it as UNKNOWN.
    """
    id: str
    name: str
    uri: str
    location: Coordinates
    address: Optional[str] = None
    cuisine_label: Optional[str] = None
    schedule: Optional[WeeklySchedule] = None
    is_open: Optional[bool] = None

    @property
    def status(self) -> OpenStatus:
        if self.is_open is None:
            return OpenStatus.UNKNOWN
        return OpenStatus.OPEN if self.is_open else OpenStatus.CLOSED

    def hours_for_day(self, day: DayCode) -> Optional[str]:
        if self.schedule is None:
            return None
        return self.schedule.format_day(day)

    def today_hours(self, now: datetime) -> Optional[str]:
        """Return e.g. 'Mo: 08:00-22:00' for the day of ``now``, if listed."""
        day = DayCode.for_datetime(now)
        hours = self.hours_for_day(day)
        if hours is None:
            return None
        return f"{day.value}: {hours}"
