"""
chronocalc.calendar
-------------------
Date calculations with reference to a single IANA time zone: calendar-aligned
windows, named relative windows ("next week", "current weekend") and the solar
day/twilight/night segmentation of a local calendar day.

Calendar boundaries are local midnights expressed as absolute instants, so a
"day" is 23 or 25 hours long across daylight-saving transitions.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, tzinfo
from functools import lru_cache
from typing import Callable, Optional, Union

from dateutil.relativedelta import relativedelta

from .core.config import get_config
from .core.errors import InvalidInputError
from .core.time import (
    ZoneLike,
    from_epoch_millis,
    local_midnight,
    normalize,
    parse_instant,
    resolve_zone,
    unit_delta,
    zone_name,
)
from .core.types import DateWindow, GeoCoordinates, Interval, SolarIntervals
from .reference.solar import solar_boundaries

logger = logging.getLogger(__name__)

InstantLike = Union[str, int, float, datetime]
WindowLike = Union[Interval, DateWindow, str]

# Fixed grid origins for multi-unit windows. Weeks start on Sunday.
GRID_ORIGIN = date(1970, 1, 1)
WEEK_GRID_ORIGIN = date(1969, 12, 28)

_MONTHS_PER_UNIT = {"month": 1, "quarter": 3, "year": 12}


def grid_start(d: date, count: int, unit: str) -> date:
    """First local date of the `count`-unit block of the fixed grid that contains `d`."""
    if unit == "day":
        return GRID_ORIGIN + timedelta(days=(d - GRID_ORIGIN).days // count * count)
    if unit == "week":
        weeks = (d - WEEK_GRID_ORIGIN).days // 7
        return WEEK_GRID_ORIGIN + timedelta(weeks=weeks // count * count)
    per = _MONTHS_PER_UNIT.get(unit)
    if per is None:
        raise InvalidInputError(f"Unknown unit '{unit}'")
    units = ((d.year - GRID_ORIGIN.year) * 12 + d.month - 1) // per
    return GRID_ORIGIN + relativedelta(months=units // count * count * per)


@dataclass(frozen=True)
class ZonedCalendar:
    """Stateless calendar arithmetic bound to one time zone."""
    zone: ZoneLike
    tz: tzinfo = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tz", resolve_zone(self.zone))

    @property
    def zone_name(self) -> str:
        return zone_name(self.tz)

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def to_datetime(self, value: InstantLike) -> datetime:
        """
        ISO-8601 string, datetime or Unix epoch milliseconds -> datetime in this
        zone. Naive input is read as local wall-clock time.
        """
        if isinstance(value, datetime):
            if value.tzinfo is None or value.utcoffset() is None:
                return normalize(value.replace(tzinfo=self.tz))
            return value.astimezone(self.tz)
        if isinstance(value, str):
            return parse_instant(value, self.tz)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return from_epoch_millis(value, self.tz)
        raise InvalidInputError(f"Cannot convert {value!r} to a date/time")

    def _reference(self, instant: Optional[InstantLike]) -> datetime:
        return self.now() if instant is None else self.to_datetime(instant)

    def _midnight(self, d: date) -> datetime:
        return local_midnight(d, self.tz)

    @staticmethod
    def _check_count(count: int) -> None:
        if not isinstance(count, int) or count < 1:
            raise InvalidInputError(f"Invalid unit count: {count!r}")

    # ============================================================
    # Aligned windows
    # ============================================================

    def all_of(self, count: int, unit: str, instant: Optional[InstantLike] = None) -> Interval:
        """
        The window of `count` consecutive units containing `instant`.

        Single units are the local unit boundaries (midnight to midnight, first of
        month to first of month, Sunday to Sunday). Multi-unit windows tile a fixed
        grid anchored at 1970-01-01 (weeks: Sunday 1969-12-28), so successive
        windows are always adjacent.
        """
        self._check_count(count)
        ref = self._reference(instant)
        start = grid_start(ref.date(), count, unit)
        return Interval(self._midnight(start), self._midnight(start + unit_delta(unit, count)))

    def remainder_of(self, count: int, unit: str, instant: Optional[InstantLike] = None) -> Interval:
        """From `instant` to the end of the `count`-unit window containing it."""
        self._check_count(count)
        ref = self._reference(instant)
        return Interval(ref, self.all_of(count, unit, ref).end)

    # ============================================================
    # Named windows
    # ============================================================

    def resolve(self, window: WindowLike, reference: Optional[InstantLike] = None) -> Interval:
        """
        Resolve a named window relative to `reference` (default: now). An Interval
        is returned unchanged.

        Weekends are the Saturday/Sunday of the Monday-based week containing the
        reference: on a weekday the *current weekend* is the coming one, inside a
        weekend it is that weekend, and the *previous weekend* is always the one
        before that week began.
        """
        if isinstance(window, Interval):
            return window
        w = DateWindow.parse(window)
        ref = self._reference(reference)
        if w.span == "weekend":
            out = self._weekend(ref, w.step)
        else:
            out = self.all_of(1, w.span, ref)
            if w.step:
                out = self.all_of(1, w.span, self._midnight(out.start.date() + unit_delta(w.span, w.step)))
        logger.debug("%s at %s (%s) -> %s", w.value, ref, self.zone_name, out)
        return out

    def _weekend(self, ref: datetime, step: int) -> Interval:
        d = ref.date()
        monday = d - timedelta(days=d.weekday())
        if step < 0:
            start = monday - timedelta(days=2)
        else:
            start = monday + timedelta(days=5 + 7 * step)
        return Interval(self._midnight(start), self._midnight(start + timedelta(days=2)))

    # ============================================================
    # Solar intervals
    # ============================================================

    def solar_intervals(self, instant: InstantLike, coords: GeoCoordinates) -> SolarIntervals:
        """
        Day, twilight and daylight intervals for the local calendar day containing
        `instant` at `coords`. Raises ComputationDomainError where the sun does not
        cross one of the twilight altitudes (polar day or night).
        """
        day = self.to_datetime(instant).date()
        place = coords.rounded(get_config().coordinate_precision)
        return _solar_cache()(_SolarKey(self.tz, day, place, coords))


def compute_solar_intervals(tz: tzinfo, day: date, coords: GeoCoordinates) -> SolarIntervals:
    start = local_midnight(day, tz)
    end = local_midnight(day + timedelta(days=1), tz)
    b = [t.astimezone(tz) for t in solar_boundaries(start, coords)]
    return SolarIntervals(
        day=Interval(start, end),
        morning_astronomical_twilight=Interval(b[0], b[1]),
        morning_nautical_twilight=Interval(b[1], b[2]),
        morning_civil_twilight=Interval(b[2], b[3]),
        daylight=Interval(b[3], b[4]),
        evening_civil_twilight=Interval(b[4], b[5]),
        evening_nautical_twilight=Interval(b[5], b[6]),
        evening_astronomical_twilight=Interval(b[6], b[7]),
    )


@dataclass(frozen=True)
class _SolarKey:
    """Cache key: places within the configured precision share one entry."""
    tz: tzinfo
    day: date
    place: GeoCoordinates
    coords: GeoCoordinates = field(compare=False)


def _compute_for_key(key: _SolarKey) -> SolarIntervals:
    return compute_solar_intervals(key.tz, key.day, key.coords)


# Solar geometry for a given (zone, day, place) never changes: read-through memo.
# lru_cache guards only its own bookkeeping; computation runs outside its lock.
# The memo is rebuilt when the configured size changes.
_cache: Optional[Callable[[_SolarKey], SolarIntervals]] = None
_cache_lock = threading.Lock()


def _solar_cache() -> Callable[[_SolarKey], SolarIntervals]:
    global _cache
    size = get_config().solar_cache_size
    cache = _cache
    if cache is None or cache.cache_parameters()["maxsize"] != size:
        with _cache_lock:
            if _cache is None or _cache.cache_parameters()["maxsize"] != size:
                logger.debug("solar interval cache created (maxsize=%d)", size)
                _cache = lru_cache(maxsize=size)(_compute_for_key)
            cache = _cache
    return cache


def clear_solar_cache() -> None:
    global _cache
    with _cache_lock:
        _cache = None
