"""
chronocalc.cycles
-----------------
Recurring windows anchored to an externally fixed cycle start (e.g. a dataset
republished every 28 days, or at the start of every quarter).

Every window is re-anchored from the base by a single calendar addition, so
windows at offsets ..., -1, 0, 1, ... tile the timeline and never drift no
matter which reference instant they are queried from.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List

from dateutil.relativedelta import relativedelta

from .core.errors import InvalidInputError
from .core.time import as_utc, julian_day, plus_calendar, require_aware
from .core.types import Duration, Interval, Periodicity

logger = logging.getLogger(__name__)


def cycle_interval(base: datetime, length_days: int, reference: datetime, offset: int = 0) -> Interval:
    """
    Interval covered by a cycle of `length_days` days, given:
      * `base`: the known start of some cycle,
      * `reference`: the instant for which the cycle is calculated,
      * `offset`: cycles from the one containing `reference` (-1 previous, 1 next, ...).

    The window runs from the start day of the cycle to the start day of the next.
    """
    require_aware(base, "base")
    require_aware(reference, "reference")
    if not isinstance(length_days, int) or length_days < 1:
        raise InvalidInputError(f"Cycle length must be a positive number of days, got {length_days!r}")

    diff = julian_day(reference.astimezone(base.tzinfo)) - julian_day(base)
    index = diff // length_days + offset
    start = plus_calendar(base, relativedelta(days=index * length_days))
    return Interval(start, plus_calendar(start, relativedelta(days=length_days)))


def _cycle_start(base: datetime, duration: Duration, index: int) -> datetime:
    return plus_calendar(base, duration.delta(index))


def _elapsed_months(base: datetime, reference: datetime) -> int:
    rd = relativedelta(reference, base)
    return rd.years * 12 + rd.months


def period_interval(periodicity: Periodicity, reference: datetime, offset: int = 0) -> Interval:
    """
    Generalization of `cycle_interval` to calendar units.

    Day and week durations divide the elapsed day count. Month, quarter and year
    durations count whole calendar months elapsed since the base, floor to the
    cycle length and re-anchor by calendar addition, so a quarterly cycle always
    starts on the same day of month regardless of how many days it spans.
    """
    require_aware(reference, "reference")
    duration = periodicity.duration
    if not duration.is_calendar:
        return cycle_interval(periodicity.base, duration.days, reference, offset)

    base = periodicity.base
    ref = reference.astimezone(base.tzinfo)
    ref_utc = as_utc(ref)

    index = _elapsed_months(base, ref) // duration.months
    # relativedelta truncates toward zero and clamps month ends; settle on the
    # cycle whose start is the last one not after the reference.
    while as_utc(_cycle_start(base, duration, index)) > ref_utc:
        index -= 1
    while as_utc(_cycle_start(base, duration, index + 1)) <= ref_utc:
        index += 1

    start = _cycle_start(base, duration, index + offset)
    end = _cycle_start(base, duration, index + offset + 1)
    logger.debug("period %s x%d from %s: index=%d offset=%d -> %s/%s",
                 duration.unit, duration.count, base, index, offset, start, end)
    return Interval(start, end)


def period_intervals(periodicity: Periodicity, reference: datetime, offsets: Iterable[int]) -> List[Interval]:
    """Windows for several offsets from the cycle containing `reference`."""
    return [period_interval(periodicity, reference, k) for k in offsets]
