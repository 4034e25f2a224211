# tests/test_ranges.py

import pytest
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from chronocalc.core.errors import InvalidInputError
from chronocalc.core.time import parse_instant
from chronocalc.core.types import Interval
from chronocalc.ranges import (
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


def t(text):
    return parse_instant(text)


def iv(start, end):
    return Interval(t(start), t(end))


def isos(times):
    return [x.isoformat(timespec="milliseconds").replace("+00:00", "Z") for x in times]


@pytest.fixture
def bounds():
    return (t("2023-03-17T00:00:00Z"), t("2023-03-18T00:00:00Z"))


@pytest.fixture
def day():
    return iv("2023-04-16T00:00:00Z", "2023-04-17T00:00:00Z")


# ============================================================
# excluded_ranges
# ============================================================

def test_excluded_no_included_ranges(bounds):
    assert excluded_ranges(bounds, []) == [bounds]


def test_excluded_fully_included(bounds):
    assert excluded_ranges(bounds, [bounds]) == []


def test_excluded_no_overlap_after(bounds):
    assert excluded_ranges(bounds, [(t("2023-03-18T00:00:00Z"), t("2023-03-18T00:00:00Z"))]) == [bounds]


def test_excluded_no_overlap_before(bounds):
    assert excluded_ranges(bounds, [(t("2023-03-16T00:00:00Z"), t("2023-03-17T00:00:00Z"))]) == [bounds]


def test_excluded_overlap_after(bounds):
    assert excluded_ranges(bounds, [(t("2023-03-17T12:34:56.789Z"), t("2023-03-18T12:34:56.789Z"))]) == [
        (t("2023-03-17T00:00:00Z"), t("2023-03-17T12:34:56.789Z")),
    ]


def test_excluded_overlap_before(bounds):
    assert excluded_ranges(bounds, [(t("2023-03-16T12:34:56.789Z"), t("2023-03-17T12:34:56.789Z"))]) == [
        (t("2023-03-17T12:34:56.789Z"), t("2023-03-18T00:00:00Z")),
    ]


def test_excluded_discrete_ranges(bounds):
    assert excluded_ranges(bounds, [
        (t("2023-03-17T02:00:00Z"), t("2023-03-17T04:00:00Z")),
        (t("2023-03-17T05:00:00Z"), t("2023-03-17T06:00:00Z")),
    ]) == [
        (t("2023-03-17T00:00:00Z"), t("2023-03-17T02:00:00Z")),
        (t("2023-03-17T04:00:00Z"), t("2023-03-17T05:00:00Z")),
        (t("2023-03-17T06:00:00Z"), t("2023-03-18T00:00:00Z")),
    ]


def test_excluded_overlapping_and_unsorted_ranges(bounds):
    assert excluded_ranges(bounds, [
        (t("2023-03-17T05:00:00Z"), t("2023-03-17T03:00:00Z")),
        (t("2023-03-17T02:00:00Z"), t("2023-03-17T04:00:00Z")),
    ]) == [
        (t("2023-03-17T00:00:00Z"), t("2023-03-17T02:00:00Z")),
        (t("2023-03-17T05:00:00Z"), t("2023-03-18T00:00:00Z")),
    ]


def test_excluded_range_outside_bounds_after_gap(bounds):
    assert excluded_ranges(bounds, [
        (t("2023-03-17T22:00:00Z"), t("2023-03-17T23:00:00Z")),
        (t("2023-03-19T00:00:00Z"), t("2023-03-20T00:00:00Z")),
    ]) == [
        (t("2023-03-17T00:00:00Z"), t("2023-03-17T22:00:00Z")),
        (t("2023-03-17T23:00:00Z"), t("2023-03-18T00:00:00Z")),
    ]


def test_collapsed_keeps_longest_end():
    merged = collapsed_ranges([
        (t("2023-03-17T00:00:00Z"), t("2023-03-17T10:00:00Z")),
        (t("2023-03-17T02:00:00Z"), t("2023-03-17T04:00:00Z")),
        (t("2023-03-17T10:00:00Z"), t("2023-03-17T11:00:00Z")),
    ])
    assert merged == [(t("2023-03-17T00:00:00Z"), t("2023-03-17T11:00:00Z"))]


def test_normalized_range_accepts_naive():
    a, b = datetime(2023, 1, 2), datetime(2023, 1, 1)
    assert normalized_range((a, b)) == (b, a)


# ============================================================
# to_transitions
# ============================================================

def test_transitions_empty():
    assert to_transitions([]) == []


def test_transitions_single():
    assert isos(to_transitions([iv("2023-04-22T00:00:00Z", "2023-04-23T00:00:00Z")])) == [
        "2023-04-22T00:00:00.000Z", "2023-04-23T00:00:00.000Z",
    ]


def test_transitions_abutted():
    assert isos(to_transitions([
        iv("2023-04-21T00:00:00Z", "2023-04-22T00:00:00Z"),
        iv("2023-04-22T00:00:00Z", "2023-04-23T00:00:00Z"),
    ])) == ["2023-04-21T00:00:00.000Z", "2023-04-23T00:00:00.000Z"]


def test_transitions_disjoint():
    assert isos(to_transitions([
        iv("2023-04-22T00:00:00Z", "2023-04-23T00:00:00Z"),
        iv("2023-04-20T00:00:00Z", "2023-04-21T00:00:00Z"),
    ])) == [
        "2023-04-20T00:00:00.000Z", "2023-04-21T00:00:00.000Z",
        "2023-04-22T00:00:00.000Z", "2023-04-23T00:00:00.000Z",
    ]


def test_transitions_overlapped():
    assert isos(to_transitions([
        iv("2023-04-20T00:00:00Z", "2023-04-23T00:00:00Z"),
        iv("2023-04-21T00:00:00Z", "2023-04-22T00:00:00Z"),
    ])) == ["2023-04-20T00:00:00.000Z", "2023-04-23T00:00:00.000Z"]


def test_merge_intervals_returns_intervals():
    merged = merge_intervals([
        iv("2023-04-21T00:00:00Z", "2023-04-22T00:00:00Z"),
        iv("2023-04-20T00:00:00Z", "2023-04-21T00:00:00Z"),
    ])
    assert merged == [iv("2023-04-20T00:00:00Z", "2023-04-22T00:00:00Z")]


# ============================================================
# Fractions
# ============================================================

def test_fractions_for_known_interval(day):
    values = [t(x) for x in (
        "2023-04-16T00:00:00Z", "2023-04-16T02:00:00Z", "2023-04-16T03:00:00Z",
        "2023-04-16T06:00:00Z", "2023-04-16T16:00:00Z", "2023-04-17T00:00:00Z",
    )]
    assert to_fractions(day, values) == [0, 0.08333333333333333, 0.125, 0.25, 0.6666666666666666, 1]


def test_fractions_reject_outside_points(day):
    with pytest.raises(InvalidInputError):
        to_fractions(day, [t("2023-04-15T23:59:59Z")])
    with pytest.raises(InvalidInputError):
        to_fractions(day, [t("2023-04-17T00:00:00.001Z")])


def test_fractions_of_empty_interval():
    point = iv("2023-04-16T00:00:00Z", "2023-04-16T00:00:00Z")
    assert to_fractions(point, []) == []
    with pytest.raises(InvalidInputError):
        to_fractions(point, [point.end])


def test_length_fractions_no_sub_intervals(day):
    assert to_length_fractions(day, []) == [1]


def test_length_fractions_single_at_start(day):
    assert to_length_fractions(day, [t("2023-04-16T00:00:00Z")]) == [0, 1]


def test_length_fractions_single_at_end(day):
    assert to_length_fractions(day, [t("2023-04-17T00:00:00Z")]) == [1, 0]


def test_length_fractions_at_both_ends(day):
    assert to_length_fractions(day, [t("2023-04-16T00:00:00Z"), t("2023-04-17T00:00:00Z")]) == [0, 1, 0]


def test_length_fractions_last_split_is_interval_end(day):
    assert to_length_fractions(day, [t("2023-04-16T12:00:00Z"), day.end]) == [0.5, 0.5]


def test_length_fractions_multiple(day):
    values = [t(x) for x in (
        "2023-04-16T00:00:00Z", "2023-04-16T02:00:00Z", "2023-04-16T03:00:00Z",
        "2023-04-16T06:00:00Z", "2023-04-16T16:00:00Z", "2023-04-17T00:00:00Z",
    )]
    assert to_length_fractions(day, values) == [
        0, 0.08333333333333333, 0.04166666666666667, 0.125, 0.41666666666666663, 0.33333333333333337, 0,
    ]


def test_length_fractions_sum_to_one(day):
    values = [t(f"2023-04-16T{h:02d}:17:00Z") for h in (1, 5, 7, 13, 19, 23)]
    assert sum(to_length_fractions(day, values)) == pytest.approx(1.0, abs=1e-12)


def test_fraction_bounds(day):
    assert to_fractions(day, [day.start, day.end]) == [0, 1]


# ============================================================
# Scaling and percentages
# ============================================================

def test_percent():
    assert percent(0.66667) == 66.67
    assert percent(0.66666, 1) == 66.7


def test_scale():
    with pytest.raises(InvalidInputError):
        scale(123, -1)
    assert scale(123.1, 0) == 123
    assert scale(123.5, 0) == 124
    assert scale(123.01, 1) == 123
    assert scale(123.05, 1) == 123.1


def test_percentages_sum_to_hundred(day):
    values = [t("2023-04-16T08:00:00Z"), t("2023-04-16T16:00:00Z")]
    pcts = to_percentages(day, values)
    assert pcts[:2] == [33.33, 33.33]
    assert pcts[2] == pytest.approx(33.34)
    assert sum(pcts) == pytest.approx(100.0)


def test_interval_rejects_reversed_and_naive():
    with pytest.raises(InvalidInputError):
        iv("2023-04-17T00:00:00Z", "2023-04-16T00:00:00Z")
    with pytest.raises(InvalidInputError):
        Interval(datetime(2023, 4, 16), datetime(2023, 4, 17, tzinfo=timezone.utc))


# ============================================================
# Ambiguous wall-clock times (America/Chicago falls back 2023-11-05 02:00 CDT)
# ============================================================

CHICAGO = ZoneInfo("America/Chicago")
MIDNIGHT = datetime(2023, 11, 5, 0, 0, tzinfo=CHICAGO)
HALF_PAST_ONE_CDT = datetime(2023, 11, 5, 1, 30, tzinfo=CHICAGO)
HALF_PAST_ONE_CST = datetime(2023, 11, 5, 1, 30, fold=1, tzinfo=CHICAGO)


def test_fractions_reject_repeated_wall_clock_after_end():
    interval = Interval(MIDNIGHT, HALF_PAST_ONE_CDT)
    with pytest.raises(InvalidInputError):
        to_fractions(interval, [HALF_PAST_ONE_CST])


def test_fractions_across_fall_back():
    interval = Interval(MIDNIGHT, HALF_PAST_ONE_CST)
    assert interval.length == timedelta(hours=2, minutes=30)
    assert to_fractions(interval, [HALF_PAST_ONE_CDT, HALF_PAST_ONE_CST]) == [0.6, 1.0]


def test_abuts_uses_instants():
    first = Interval(MIDNIGHT, HALF_PAST_ONE_CDT)
    repeated_hour = Interval(HALF_PAST_ONE_CDT, HALF_PAST_ONE_CST)
    later = Interval(HALF_PAST_ONE_CST, datetime(2023, 11, 5, 3, 0, tzinfo=CHICAGO))
    assert first.abuts(repeated_hour)
    assert repeated_hour.abuts(first)
    assert repeated_hour.abuts(later)
    assert not first.abuts(later)


def test_abuts_across_zones():
    a = Interval(MIDNIGHT, HALF_PAST_ONE_CST)
    b = Interval(datetime(2023, 11, 5, 7, 30, tzinfo=timezone.utc), datetime(2023, 11, 5, 8, 0, tzinfo=timezone.utc))
    assert a.abuts(b)
    assert not a.overlaps(b)


def test_interval_equality_is_on_instants():
    assert Interval(MIDNIGHT, HALF_PAST_ONE_CDT) != Interval(MIDNIGHT, HALF_PAST_ONE_CST)
    assert Interval(MIDNIGHT, HALF_PAST_ONE_CST) == Interval(MIDNIGHT, HALF_PAST_ONE_CST).in_zone(timezone.utc)
    assert len({Interval(MIDNIGHT, HALF_PAST_ONE_CDT), Interval(MIDNIGHT, HALF_PAST_ONE_CST)}) == 2
