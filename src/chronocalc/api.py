from __future__ import annotations

from datetime import datetime
from functools import lru_cache
from typing import List, Optional, Sequence, Tuple, Union

from .calendar import InstantLike, WindowLike, ZonedCalendar
from .core.config import get_config
from .core.time import ZoneLike
from .core.types import DateWindow, GeoCoordinates, Interval, SolarIntervals

CoordsLike = Union[GeoCoordinates, Tuple[float, float], Sequence[float]]


@lru_cache(maxsize=None)
def calendar_for(zone: ZoneLike) -> ZonedCalendar:
    """Shared calendar per zone (calendars are immutable)."""
    return ZonedCalendar(zone)


def _cal(zone: Optional[ZoneLike]) -> ZonedCalendar:
    return calendar_for(zone if zone is not None else get_config().default_zone)


def _coords(coords: CoordsLike) -> GeoCoordinates:
    if isinstance(coords, GeoCoordinates):
        return coords
    return GeoCoordinates(*coords)


def list_windows() -> List[str]:
    return [w.value for w in DateWindow]


def to_datetime(value: InstantLike, *, zone: Optional[ZoneLike] = None) -> datetime:
    return _cal(zone).to_datetime(value)


def resolve(window: WindowLike, reference: Optional[InstantLike] = None, *, zone: Optional[ZoneLike] = None) -> Interval:
    return _cal(zone).resolve(window, reference)


def all_of(count: int, unit: str, instant: Optional[InstantLike] = None, *, zone: Optional[ZoneLike] = None) -> Interval:
    return _cal(zone).all_of(count, unit, instant)


def remainder_of(count: int, unit: str, instant: Optional[InstantLike] = None, *, zone: Optional[ZoneLike] = None) -> Interval:
    return _cal(zone).remainder_of(count, unit, instant)


def solar_intervals(instant: InstantLike, coords: CoordsLike, *, zone: Optional[ZoneLike] = None) -> SolarIntervals:
    return _cal(zone).solar_intervals(instant, _coords(coords))
