from __future__ import annotations

import math
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

from .errors import InvalidInputError


DAY_MS = 86_400_000
J1970 = 2440588  # JDN of 1970-01-01
EPOCH_UTC = datetime(1970, 1, 1, tzinfo=timezone.utc)

_JD_UNIX_EPOCH = 2440587.5  # JD at 1970-01-01 00:00:00 UTC

UNITS = ("day", "week", "month", "quarter", "year")

ZoneLike = Union[str, tzinfo]


# ============================================================
# Zones and aware datetimes
# ============================================================

def resolve_zone(zone: ZoneLike) -> tzinfo:
    """IANA identifier (or tzinfo) -> tzinfo."""
    if isinstance(zone, tzinfo):
        return zone
    try:
        return ZoneInfo(zone)
    except (ZoneInfoNotFoundError, ValueError, TypeError) as e:
        raise InvalidInputError(f"Unknown time zone '{zone}'") from e


def zone_name(tz: tzinfo) -> str:
    return getattr(tz, "key", None) or str(tz)


def require_aware(dt: datetime, name: str = "instant") -> datetime:
    if not isinstance(dt, datetime) or dt.tzinfo is None or dt.utcoffset() is None:
        raise InvalidInputError(f"{name} must be a timezone-aware datetime, got {dt!r}")
    return dt


def as_utc(dt: datetime) -> datetime:
    """
    Same instant in UTC.

    Aware datetimes sharing one tzinfo compare and subtract on wall-clock time,
    so any elapsed-time arithmetic goes through UTC first.
    """
    return require_aware(dt).astimezone(timezone.utc)


def normalize(dt: datetime) -> datetime:
    """Re-resolve a wall-clock datetime in its own zone (skipped local times move forward)."""
    return as_utc(dt).astimezone(dt.tzinfo)


def local_midnight(d: date, tz: tzinfo) -> datetime:
    return normalize(datetime(d.year, d.month, d.day, tzinfo=tz))


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================
# Calendar units
# ============================================================

def unit_delta(unit: str, n: int = 1) -> relativedelta:
    """Calendar (not fixed-duration) step of n units."""
    if unit == "day":
        return relativedelta(days=n)
    if unit == "week":
        return relativedelta(weeks=n)
    if unit == "month":
        return relativedelta(months=n)
    if unit == "quarter":
        return relativedelta(months=3 * n)
    if unit == "year":
        return relativedelta(years=n)
    raise InvalidInputError(f"Unknown unit '{unit}'. Expected one of {UNITS}")


def plus_calendar(dt: datetime, delta: relativedelta) -> datetime:
    """Wall-clock addition in dt's own zone."""
    return normalize(dt + delta)


# ============================================================
# Epoch milliseconds / Julian dates
# ============================================================

def epoch_millis(dt: datetime) -> int:
    """Whole milliseconds since the Unix epoch (floored)."""
    return (require_aware(dt) - EPOCH_UTC) // timedelta(milliseconds=1)


def from_epoch_millis(ms: int, tz: tzinfo = timezone.utc) -> datetime:
    return (EPOCH_UTC + timedelta(milliseconds=ms)).astimezone(tz)


def start_of_utc_day(dt: datetime) -> datetime:
    return as_utc(dt).replace(hour=0, minute=0, second=0, microsecond=0)


def julian_day(instant: datetime) -> int:
    """
    Day number of the UTC calendar day containing `instant`:

      floor(ms(startOfUTCDay) / 86400000 + 2440587.5)

    This is the JD at the day's midnight, floored (one less than the civil JDN).
    Only differences between two values are meaningful.
    """
    return int(math.floor(epoch_millis(start_of_utc_day(instant)) / DAY_MS + _JD_UNIX_EPOCH))


def datetime_to_jd(dt: datetime) -> float:
    """datetime -> continuous JD (UTC) at millisecond resolution."""
    return epoch_millis(dt) / DAY_MS - 0.5 + J1970


def jd_to_datetime(jd: float) -> datetime:
    """JD (UTC) -> aware UTC datetime, truncated to the millisecond."""
    return from_epoch_millis(math.trunc((jd + 0.5 - J1970) * DAY_MS))


# ============================================================
# ISO-8601
# ============================================================

def parse_instant(text: str, tz: tzinfo = timezone.utc) -> datetime:
    """
    Parse an ISO-8601 date or date/time. An explicit offset (or 'Z') is honoured;
    naive input is read as wall-clock time in `tz`. Result is expressed in `tz`.
    """
    try:
        dt = isoparse(text.strip())
    except (ValueError, OverflowError, AttributeError) as e:
        raise InvalidInputError(f"Invalid ISO-8601 instant: {text!r}") from e
    if dt.tzinfo is None:
        return normalize(dt.replace(tzinfo=tz))
    return dt.astimezone(tz)


def format_instant(dt: datetime) -> str:
    """ISO-8601 with milliseconds; 'Z' for zero offset."""
    require_aware(dt)
    if dt.utcoffset() == timedelta(0):
        return as_utc(dt).replace(tzinfo=None).isoformat(timespec="milliseconds") + "Z"
    return dt.isoformat(timespec="milliseconds")
