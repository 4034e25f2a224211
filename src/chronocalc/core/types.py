from __future__ import annotations
from dataclasses import dataclass, fields
from datetime import datetime, timedelta, timezone, tzinfo
from enum import Enum
from typing import Dict, Literal, Tuple

from dateutil.relativedelta import relativedelta

from .errors import InvalidInputError
from .time import UNITS, as_utc, format_instant, parse_instant, require_aware, unit_delta

Unit = Literal["day", "week", "month", "quarter", "year"]

# Plain pair of instants, possibly reversed.
DateRange = Tuple[datetime, datetime]


@dataclass(frozen=True, eq=False)
class Interval:
    """Half-open span [start, end) of aware instants. Equal when both ends are the same instants."""
    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        require_aware(self.start, "start")
        require_aware(self.end, "end")
        if as_utc(self.end) < as_utc(self.start):
            raise InvalidInputError(f"Interval end {self.end} precedes start {self.start}")

    @classmethod
    def from_iso(cls, text: str, tz: tzinfo = timezone.utc) -> "Interval":
        if "/" not in text:
            raise InvalidInputError("Interval must contain '/'")
        left, right = text.split("/", 1)
        return cls(parse_instant(left, tz), parse_instant(right, tz))

    @property
    def length(self) -> timedelta:
        return as_utc(self.end) - as_utc(self.start)

    def is_empty(self) -> bool:
        return self.length == timedelta(0)

    def contains(self, t: datetime) -> bool:
        return as_utc(self.start) <= as_utc(t) < as_utc(self.end)

    def overlaps(self, other: "Interval") -> bool:
        return as_utc(self.start) < as_utc(other.end) and as_utc(other.start) < as_utc(self.end)

    def abuts(self, other: "Interval") -> bool:
        return as_utc(self.end) == as_utc(other.start) or as_utc(other.end) == as_utc(self.start)

    def in_zone(self, tz: tzinfo) -> "Interval":
        return Interval(self.start.astimezone(tz), self.end.astimezone(tz))

    def to_iso(self) -> str:
        return f"{format_instant(self.start)}/{format_instant(self.end)}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Interval):
            return NotImplemented
        return (as_utc(self.start), as_utc(self.end)) == (as_utc(other.start), as_utc(other.end))

    def __hash__(self) -> int:
        return hash((as_utc(self.start), as_utc(self.end)))

    def __str__(self) -> str:
        return self.to_iso()


@dataclass(frozen=True)
class Duration:
    """Cycle length: `count` calendar units."""
    unit: Unit
    count: int = 1

    def __post_init__(self) -> None:
        if self.unit not in UNITS:
            raise InvalidInputError(f"Unknown unit '{self.unit}'. Expected one of {UNITS}")
        if not isinstance(self.count, int) or self.count < 1:
            raise InvalidInputError(f"Duration count must be a positive integer, got {self.count!r}")

    @property
    def is_calendar(self) -> bool:
        """True for units whose length varies (month, quarter, year)."""
        return self.unit in ("month", "quarter", "year")

    @property
    def days(self) -> int:
        if self.unit == "day":
            return self.count
        if self.unit == "week":
            return 7 * self.count
        raise InvalidInputError(f"'{self.unit}' has no fixed length in days")

    @property
    def months(self) -> int:
        if self.unit == "month":
            return self.count
        if self.unit == "quarter":
            return 3 * self.count
        if self.unit == "year":
            return 12 * self.count
        raise InvalidInputError(f"'{self.unit}' is not a month-based unit")

    def delta(self, cycles: int = 1) -> relativedelta:
        return unit_delta(self.unit, self.count * cycles)


@dataclass(frozen=True)
class Periodicity:
    """Recurring cycle anchored at a known cycle start."""
    base: datetime
    duration: Duration

    def __post_init__(self) -> None:
        require_aware(self.base, "base")

    @classmethod
    def every(cls, base: datetime, **kw: int) -> "Periodicity":
        """Periodicity.every(base, days=28) / every(base, quarters=1) ..."""
        items = [(k, v) for k, v in kw.items() if v]
        if len(items) != 1:
            raise InvalidInputError(f"Expected exactly one of days/weeks/months/quarters/years, got {kw}")
        key, count = items[0]
        unit = key[:-1] if key.endswith("s") else key
        return cls(base, Duration(unit, count))


@dataclass(frozen=True)
class GeoCoordinates:
    latitude: float
    longitude: float
    elevation_m: float = 0.0

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise InvalidInputError(f"Latitude out of range: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise InvalidInputError(f"Longitude out of range: {self.longitude}")
        if self.elevation_m < 0.0:
            raise InvalidInputError(f"Elevation cannot be negative: {self.elevation_m}")

    def rounded(self, digits: int) -> "GeoCoordinates":
        return GeoCoordinates(round(self.latitude, digits), round(self.longitude, digits),
                              round(self.elevation_m, 1))


@dataclass(frozen=True)
class SolarIntervals:
    """
    Solar time intervals in one local calendar day. Night is everything in `day`
    outside the twilight bands.
    """
    day: Interval
    morning_astronomical_twilight: Interval
    morning_nautical_twilight: Interval
    morning_civil_twilight: Interval
    daylight: Interval
    evening_civil_twilight: Interval
    evening_nautical_twilight: Interval
    evening_astronomical_twilight: Interval

    def twilight_bands(self) -> Tuple[Interval, ...]:
        """Seven contiguous bands, astronomical dawn to astronomical dusk."""
        return tuple(getattr(self, f.name) for f in fields(self)[1:])

    def night(self) -> Tuple[Interval, Interval]:
        start, end = self.day.start, self.day.end
        dawn = min(as_utc(self.morning_astronomical_twilight.start), as_utc(end))
        dusk = max(as_utc(self.evening_astronomical_twilight.end), as_utc(start))
        tz = start.tzinfo
        return (
            Interval(start, max(as_utc(start), dawn).astimezone(tz)),
            Interval(min(as_utc(end), dusk).astimezone(tz), end),
        )

    def as_dict(self) -> Dict[str, Interval]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


class DateWindow(str, Enum):
    """Named windows relative to a reference instant."""
    CURRENT_DAY = "current day"
    CURRENT_WEEK = "current week"
    CURRENT_MONTH = "current month"
    CURRENT_WEEKEND = "current weekend"
    PREVIOUS_DAY = "previous day"
    PREVIOUS_WEEK = "previous week"
    PREVIOUS_MONTH = "previous month"
    PREVIOUS_WEEKEND = "previous weekend"
    NEXT_DAY = "next day"
    NEXT_WEEK = "next week"
    NEXT_MONTH = "next month"
    NEXT_WEEKEND = "next weekend"

    @classmethod
    def parse(cls, value: "str | DateWindow") -> "DateWindow":
        try:
            return cls(value)
        except ValueError as e:
            raise InvalidInputError(f"Unknown date window '{value}'. Available: {[w.value for w in cls]}") from e

    @property
    def step(self) -> int:
        """-1, 0 or +1 relative to the current window."""
        return {"previous": -1, "current": 0, "next": 1}[self.value.split(" ")[0]]

    @property
    def span(self) -> str:
        """'day', 'week', 'month' or 'weekend'."""
        return self.value.split(" ")[1]
