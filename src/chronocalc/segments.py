from __future__ import annotations
from dataclasses import dataclass
from operator import attrgetter
from typing import Callable, Generic, List, Optional, Sequence, TypeVar

from .core.time import as_utc
from .core.types import Interval
from .ranges import percent, scale

T = TypeVar("T")


@dataclass(frozen=True)
class PeriodSegment(Generic[T]):
    """A piece of a period: a segment's visible part, or a gap (`segment is None`)."""
    interval: Interval
    percent: float
    segment: Optional[T] = None

    @property
    def is_gap(self) -> bool:
        return self.segment is None


def period_segments(
    period: Optional[Interval],
    segments: Sequence[T],
    key: Callable[[T], Interval] = attrgetter("interval"),
) -> List[PeriodSegment[T]]:
    """
    Divide `period` into contiguous pieces covering all of it: one per visible
    segment plus gaps where no segment applies.

    Segments outside the period are ignored. Where segments overlap, the one
    starting first is kept whole and the later one is truncated at its start;
    segments completely covered by earlier ones are dropped. Without an explicit
    period, the span runs from the earliest segment start to the latest end.

    The last piece's percentage is whatever remains of 100, so the percentages
    always add up for proportional rendering.
    """
    if period is None:
        if not segments:
            return []
        spans = [key(s) for s in segments]
        period = Interval(min((i.start for i in spans), key=as_utc), max((i.end for i in spans), key=as_utc))
    if not segments:
        return [PeriodSegment(period, 100.0)]

    included = sorted((s for s in segments if key(s).overlaps(period)), key=lambda s: as_utc(key(s).start))

    pieces: List[tuple] = []
    cursor = period.start
    for seg in included:
        span = key(seg)
        if as_utc(span.end) <= as_utc(cursor):
            continue
        if as_utc(span.start) > as_utc(cursor):
            pieces.append((Interval(cursor, span.start), None))
        start = max(span.start, cursor, key=as_utc)
        end = min(span.end, period.end, key=as_utc)
        pieces.append((Interval(start, end), seg))
        cursor = end
    if as_utc(cursor) < as_utc(period.end):
        pieces.append((Interval(cursor, period.end), None))

    pieces = [(iv, seg) for iv, seg in pieces if not iv.is_empty()]
    out: List[PeriodSegment[T]] = []
    for index, (iv, seg) in enumerate(pieces):
        if index < len(pieces) - 1:
            pct = percent(iv.length / period.length)
        else:
            pct = scale(100 - sum(p.percent for p in out), 2)
        out.append(PeriodSegment(iv, pct, seg))
    return out
