"""
Parsing and evaluation of compact OSM-style ``opening_hours`` strings.

Supported grammar (a practical subset of the OSM format)::

    schedule := clause (";" clause)*
    clause   := days " " span ("," span)*
    span     := HH:MM "-" HH:MM
    days     := DAY | DAY "-" DAY

Examples: ``"Mo-Fr 08:00-22:00"``, ``"Sa 09:00-23:00; Su 10:00-20:00"``,
``"Mo-Fr 08:00-12:00,13:00-17:00"``.
Clauses that do not match are skipped so a single odd clause (``PH off``,
``8am-10pm``) does not throw away the rest of the schedule.
"""
import logging
import re
from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional

from domain.models import DayCode, TimeInterval, WeeklySchedule

logger = logging.getLogger(__name__)

_SPAN = r"\d{2}:\d{2}-\d{2}:\d{2}"
_CLAUSE_RE = re.compile(
    r"^(?P<start>[A-Za-z]{2})(?:-(?P<end>[A-Za-z]{2}))?\s+"
    rf"(?P<spans>{_SPAN}(?:\s*,\s*{_SPAN})*)$"
)
_SPAN_RE = re.compile(r"(?P<open_h>\d{2}):(?P<open_m>\d{2})-(?P<close_h>\d{2}):(?P<close_m>\d{2})")


def _expand_days(start: str, end: Optional[str]) -> List[DayCode]:
    """Resolve a day selector into day codes in canonical order.

    Ranges wrap past Sunday (``Fr-Mo`` is Fr, Sa, Su, Mo). An unknown range
    endpoint defaults to Monday (start) or Sunday (end).
    """
    ordered = DayCode.ordered()
    if end is None:
        day = DayCode.parse(start)
        return [day] if day is not None else []

    first = DayCode.parse(start)
    last = DayCode.parse(end)
    first_idx = ordered.index(first) if first is not None else 0
    last_idx = ordered.index(last) if last is not None else len(ordered) - 1

    if first_idx <= last_idx:
        return list(ordered[first_idx:last_idx + 1])
    return list(ordered[first_idx:]) + list(ordered[:last_idx + 1])


def parse_opening_hours(raw: Optional[str]) -> Optional[WeeklySchedule]:
    """
    Parse an opening-hours string into a WeeklySchedule.

    Never raises. Returns None when no interval could be parsed, so callers
    can tell "no data" apart from an empty schedule.

    Multiple clauses naming the same day accumulate intervals in the order
    they appear instead of overwriting each other.
    """
    if not raw or not isinstance(raw, str):
        return None

    days: Dict[DayCode, List[TimeInterval]] = defaultdict(list)
    skipped = 0
    for clause in raw.split(";"):
        clause = clause.strip()
        if not clause:
            continue
        match = _CLAUSE_RE.match(clause)
        if not match:
            skipped += 1
            continue
        intervals = [
            TimeInterval(
                open_minute=int(span["open_h"]) * 60 + int(span["open_m"]),
                close_minute=int(span["close_h"]) * 60 + int(span["close_m"]),
            )
            for span in _SPAN_RE.finditer(match["spans"])
        ]
        resolved = _expand_days(match["start"], match["end"])
        if not resolved:
            skipped += 1
            continue
        for day in resolved:
            days[day].extend(intervals)

    if skipped:
        logger.debug("opening_hours: skipped %d clause(s) in %r", skipped, raw)
    if not days:
        return None
    return WeeklySchedule(days={day: tuple(intervals) for day, intervals in days.items()})


def minute_of_day(when: datetime) -> int:
    return when.hour * 60 + when.minute


def is_open_at(schedule: Optional[WeeklySchedule], now: datetime) -> bool:
    """
    Decide whether a venue is open at ``now``.

    No schedule at all is assumed open. A schedule that lists nothing for
    the current day means closed that day.
    """
    if schedule is None:
        return True
    intervals = schedule.intervals_for(DayCode.for_datetime(now))
    if not intervals:
        return False
    current = minute_of_day(now)
    return any(interval.contains(current) for interval in intervals)
