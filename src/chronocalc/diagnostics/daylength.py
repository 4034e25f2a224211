#!/usr/bin/env python3
from __future__ import annotations

import argparse
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, List, Optional

from chronocalc.calendar import ZonedCalendar
from chronocalc.core.types import GeoCoordinates, Interval, SolarIntervals


def _need_numpy():
    try:
        import numpy as np
        return np
    except ImportError as e:
        raise RuntimeError('Need numpy. Install: pip install "chronocalc[diagnostics]"') from e


BANDS = ("daylight", "civil", "nautical", "astronomical", "night")


def _hours(*intervals: Interval) -> float:
    return sum(i.length.total_seconds() for i in intervals) / 3600.0


def band_hours(s: SolarIntervals) -> Dict[str, float]:
    """Hours spent in each band over one local day (night is the rest of the day)."""
    out = {
        "daylight": _hours(s.daylight),
        "civil": _hours(s.morning_civil_twilight, s.evening_civil_twilight),
        "nautical": _hours(s.morning_nautical_twilight, s.evening_nautical_twilight),
        "astronomical": _hours(s.morning_astronomical_twilight, s.evening_astronomical_twilight),
    }
    out["night"] = _hours(s.day) - sum(out.values())
    return out


@dataclass(frozen=True)
class DaylengthTable:
    days: "np.ndarray"                # datetime64[D]
    hours: Dict[str, "np.ndarray"]    # band -> hours per day


def daylength_table(np, cal: ZonedCalendar, coords: GeoCoordinates, year: int) -> DaylengthTable:
    start, stop = date(year, 1, 1), date(year + 1, 1, 1)
    n = (stop - start).days
    days = np.arange(np.datetime64(start.isoformat()), np.datetime64(stop.isoformat()))
    hours = {b: np.empty(n, dtype=float) for b in BANDS}
    for i in range(n):
        d = start + timedelta(days=i)
        for band, h in band_hours(cal.solar_intervals(d.isoformat(), coords)).items():
            hours[band][i] = h
    return DaylengthTable(days=days, hours=hours)


def summarize(np, table: DaylengthTable) -> Dict[str, Dict[str, float]]:
    return {
        band: {
            "min": float(np.min(h)),
            "max": float(np.max(h)),
            "mean": float(np.mean(h)),
        }
        for band, h in table.hours.items()
    }


def monthly_means(np, table: DaylengthTable) -> List[Dict[str, float]]:
    months = table.days.astype("datetime64[M]")
    rows = []
    for m in np.unique(months):
        mask = months == m
        row = {"month": str(m)}
        row.update({band: float(np.mean(h[mask])) for band, h in table.hours.items()})
        rows.append(row)
    return rows


def main(argv: Optional[List[str]] = None) -> int:
    np = _need_numpy()

    p = argparse.ArgumentParser(prog="chronocalc diag daylength",
                                description="Monthly mean hours of daylight and twilight for a year.")
    p.add_argument("--lat", type=float, required=True, help="Latitude in degrees")
    p.add_argument("--lon", type=float, required=True, help="Longitude in degrees (positive East)")
    p.add_argument("--year", type=int, default=date.today().year)
    p.add_argument("--zone", default="UTC", help="IANA time zone for local days")
    args = p.parse_args(argv)

    table = daylength_table(np, ZonedCalendar(args.zone), GeoCoordinates(args.lat, args.lon), args.year)

    print(f"{'month':8s}" + "".join(f"{b:>14s}" for b in BANDS))
    for row in monthly_means(np, table):
        print(f"{row['month']:8s}" + "".join(f"{row[b]:14.3f}" for b in BANDS))
    print()
    for band, stats in summarize(np, table).items():
        print(f"{band:13s} min={stats['min']:.3f} h  max={stats['max']:.3f} h  mean={stats['mean']:.3f} h")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
