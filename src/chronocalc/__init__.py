"""chronocalc public API.

Keep this surface small: users should mostly interact with functions re-exported here.
"""

from .api import (
    calendar_for,
    list_windows,
    to_datetime,
    resolve,
    all_of,
    remainder_of,
    solar_intervals,
)
from .calendar import ZonedCalendar
from .core.errors import ChronoError, ComputationDomainError, InvalidInputError
from .core.time import julian_day, now_utc
from .core.types import (
    DateRange,
    DateWindow,
    Duration,
    GeoCoordinates,
    Interval,
    Periodicity,
    SolarIntervals,
)
from .cycles import cycle_interval, period_interval, period_intervals
from .ranges import (
    collapsed_ranges,
    excluded_ranges,
    merge_intervals,
    normalized_range,
    percent,
    scale,
    to_fractions,
    to_length_fractions,
    to_percentages,
    to_transitions,
)
from .segments import PeriodSegment, period_segments

__all__ = [
    "calendar_for",
    "list_windows",
    "to_datetime",
    "resolve",
    "all_of",
    "remainder_of",
    "solar_intervals",
    "ZonedCalendar",
    "ChronoError",
    "ComputationDomainError",
    "InvalidInputError",
    "julian_day",
    "now_utc",
    "DateRange",
    "DateWindow",
    "Duration",
    "GeoCoordinates",
    "Interval",
    "Periodicity",
    "SolarIntervals",
    "cycle_interval",
    "period_interval",
    "period_intervals",
    "collapsed_ranges",
    "excluded_ranges",
    "merge_intervals",
    "normalized_range",
    "percent",
    "scale",
    "to_fractions",
    "to_length_fractions",
    "to_percentages",
    "to_transitions",
    "PeriodSegment",
    "period_segments",
]
