"""
chronocalc.ranges
-----------------
Zone-agnostic set algebra over collections of date ranges and intervals:
gaps between included ranges, merged boundary transitions, and fractional
positions/lengths within a bounding interval (for proportional bar widths).
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Iterable, List, Sequence

from .core.errors import InvalidInputError
from .core.time import as_utc
from .core.types import DateRange, Interval


def _key(dt: datetime) -> datetime:
    # Ranges may be naive; aware ones compare on the absolute timeline.
    return as_utc(dt) if dt.tzinfo is not None else dt


def _earlier(a: datetime, b: datetime) -> datetime:
    return a if _key(a) <= _key(b) else b


def _later(a: datetime, b: datetime) -> datetime:
    return a if _key(a) >= _key(b) else b


# ============================================================
# Date ranges
# ============================================================

def normalized_range(r: DateRange) -> DateRange:
    """Range with its endpoints in ascending order."""
    start, end = r
    return (start, end) if _key(start) <= _key(end) else (end, start)


def collapsed_ranges(ranges: Iterable[DateRange]) -> List[DateRange]:
    """Normalize, sort by start and merge overlapping or abutting ranges."""
    ordered = sorted((normalized_range(r) for r in ranges), key=lambda r: _key(r[0]))
    out: List[DateRange] = []
    for start, end in ordered:
        if out and _key(start) <= _key(out[-1][1]):
            prev_start, prev_end = out[-1]
            out[-1] = (prev_start, _later(prev_end, end))
        else:
            out.append((start, end))
    return out


def excluded_ranges(bounds: DateRange, included: Iterable[DateRange]) -> List[DateRange]:
    """
    Gaps within `bounds` not covered by any of the `included` ranges, in
    chronological order. Included ranges are clipped to the bounds; zero-length
    gaps are dropped. Useful for finding the open slots in a schedule.
    """
    lo, hi = normalized_range(bounds)
    cursor = lo
    gaps: List[DateRange] = []
    for start, end in collapsed_ranges(included):
        if _key(cursor) >= _key(hi):
            break
        gap_end = _earlier(start, hi)
        if _key(gap_end) > _key(cursor):
            gaps.append((cursor, gap_end))
        cursor = _later(cursor, end)
    if _key(cursor) < _key(hi):
        gaps.append((cursor, hi))
    return gaps


# ============================================================
# Intervals
# ============================================================

def merge_intervals(intervals: Iterable[Interval]) -> List[Interval]:
    """Sorted union of the intervals, with overlapping and abutting ones joined."""
    return [Interval(s, e) for s, e in collapsed_ranges((i.start, i.end) for i in intervals)]


def to_transitions(intervals: Iterable[Interval]) -> List[datetime]:
    """
    Instants at which time switches between being covered by some interval and
    not: the start and end of every merged span, in order.
    """
    out: List[datetime] = []
    for merged in merge_intervals(intervals):
        out.extend((merged.start, merged.end))
    return out


def to_fractions(interval: Interval, points: Sequence[datetime]) -> List[float]:
    """
    Fractional position ([0, 1]) of each point within `interval`: 0 at the
    start, 1 at the end, 0.5 at the midpoint. Points must lie within the
    interval or equal its end.
    """
    for p in points:
        if not interval.contains(p) and as_utc(p) != as_utc(interval.end):
            raise InvalidInputError(f"{p} is not contained within the bounding interval {interval}")
    if points and interval.is_empty():
        raise InvalidInputError(f"Cannot take fractions of the empty interval {interval}")
    start, length = as_utc(interval.start), interval.length
    return [(as_utc(p) - start) / length for p in points]


def to_length_fractions(interval: Interval, split_points: Sequence[datetime]) -> List[float]:
    """
    Fractional lengths of the sub-intervals produced by splitting `interval` at
    `split_points`. The interval end is appended as a final split unless the
    last split point is that very end object. Lengths are taken as differences
    of cumulative fractions so that they sum to 1.
    """
    splits = list(split_points)
    if not (splits and splits[-1] is interval.end):
        splits.append(interval.end)
    fractions = to_fractions(interval, splits)
    return [f if i == 0 else f - fractions[i - 1] for i, f in enumerate(fractions)]


# ============================================================
# Percentages
# ============================================================

def scale(value: float, digits: int) -> float:
    """Round half up to `digits` decimal digits."""
    if digits < 0:
        raise InvalidInputError("Digits cannot be negative.")
    if digits == 0:
        return float(math.floor(value + 0.5))
    multiplier = 10 ** digits
    return math.floor(value * multiplier + 0.5) / multiplier


def percent(fraction: float, digits: int = 2) -> float:
    return scale(fraction * 100, digits)


def to_percentages(interval: Interval, split_points: Sequence[datetime], digits: int = 2) -> List[float]:
    """
    `to_length_fractions` as percentages; the last sub-interval takes whatever
    remains of 100 after rounding the others.
    """
    fractions = to_length_fractions(interval, split_points)
    head = [percent(f, digits) for f in fractions[:-1]]
    return head + [scale(100 - sum(head), digits)]
