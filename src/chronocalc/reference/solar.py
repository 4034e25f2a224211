# reference/solar.py

"""
Closed-form, low-precision solar geometry (the Astronomy Answers model):
mean anomaly, equation of centre, declination and solar transit for the
Julian cycle nearest a given instant, then hour-angle crossings of fixed
solar altitudes for sunrise/sunset and the three twilight bands.

Accuracy is on the order of a minute, which is ample for day/night shading.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Sequence, Tuple

from ..core.errors import ComputationDomainError
from ..core.time import datetime_to_jd, epoch_millis, from_epoch_millis, jd_to_datetime
from ..core.types import GeoCoordinates

logger = logging.getLogger(__name__)

RAD = math.pi / 180.0
J2000 = 2451545
J0 = 0.0009  # mean solar transit correction (days)

OBLIQUITY_RAD = RAD * 23.4397
PERIHELION_RAD = RAD * 102.9372


@dataclass(frozen=True)
class SunThreshold:
    """Solar altitude (degrees) and the names of its morning/evening crossings."""
    altitude_deg: float
    rise_name: str
    set_name: str


SUN_THRESHOLDS: Tuple[SunThreshold, ...] = (
    SunThreshold(-0.833, "sunrise", "sunset"),
    SunThreshold(-0.3, "sunrise_end", "sunset_start"),
    SunThreshold(-6.0, "dawn", "dusk"),
    SunThreshold(-12.0, "nautical_dawn", "nautical_dusk"),
    SunThreshold(-18.0, "night_end", "night"),
    SunThreshold(6.0, "golden_hour_end", "golden_hour"),
)

# Visual horizon, civil, nautical, astronomical.
TWILIGHT_THRESHOLDS: Tuple[SunThreshold, ...] = (
    SUN_THRESHOLDS[0], SUN_THRESHOLDS[2], SUN_THRESHOLDS[3], SUN_THRESHOLDS[4],
)


# ============================================================
# Solar position
# ============================================================

def solar_mean_anomaly(d: float) -> float:
    """Mean anomaly (radians) at `d` days from J2000."""
    return RAD * (357.5291 + 0.98560028 * d)


def ecliptic_longitude(M: float) -> float:
    """Ecliptic longitude (radians) from mean anomaly, via the equation of centre."""
    C = RAD * (1.9148 * math.sin(M) + 0.02 * math.sin(2 * M) + 0.0003 * math.sin(3 * M))
    return M + C + PERIHELION_RAD + math.pi


def declination(L: float) -> float:
    """Solar declination (radians); the sun has zero ecliptic latitude."""
    return math.asin(math.sin(OBLIQUITY_RAD) * math.sin(L))


def julian_cycle(d: float, lw: float) -> int:
    # round half up
    return math.floor(d - J0 - lw / (2 * math.pi) + 0.5)


def approx_transit(Ht: float, lw: float, n: int) -> float:
    return J0 + (Ht + lw) / (2 * math.pi) + n


def solar_transit_j(ds: float, M: float, L: float) -> float:
    """JD of the solar transit (includes the equation of time)."""
    return J2000 + ds + 0.0053 * math.sin(M) - 0.0069 * math.sin(2 * L)


def observer_angle(elevation_m: float) -> float:
    """Horizon dip (degrees) for an observer `elevation_m` above the surface."""
    return -2.076 * math.sqrt(elevation_m) / 60.0


def hour_angle(h: float, phi: float, dec: float, *, label: str = "altitude") -> float:
    """
    Hour angle H (radians) at which the sun crosses altitude `h`:
      cos H = (sin h - sin φ sin δ) / (cos φ cos δ)
    Raises ComputationDomainError if the sun never reaches (or never leaves) `h`.
    """
    cos_H = (math.sin(h) - math.sin(phi) * math.sin(dec)) / (math.cos(phi) * math.cos(dec))
    if not -1.0 <= cos_H <= 1.0:
        logger.debug("no %s crossing: cos(H)=%r (lat=%.4f deg, dec=%.4f deg)",
                     label, cos_H, math.degrees(phi), math.degrees(dec))
        state = "never sets below" if cos_H < -1.0 else "never rises above"
        raise ComputationDomainError(
            f"Sun {state} {math.degrees(h):.3f} deg ({label}) at latitude {math.degrees(phi):.4f}"
        )
    return math.acos(cos_H)


# ============================================================
# Rise/set events
# ============================================================

@dataclass(frozen=True)
class SunTimes:
    """Solar transit, nadir and the named altitude crossings (UTC)."""
    solar_noon: datetime
    nadir: datetime
    events: Dict[str, datetime]

    def __getitem__(self, name: str) -> datetime:
        return self.events[name]


def sun_times(
    moment: datetime,
    coords: GeoCoordinates,
    thresholds: Sequence[SunThreshold] = SUN_THRESHOLDS,
) -> SunTimes:
    """
    Altitude crossings around the solar transit nearest `moment`.

    The transit is chosen from the Julian cycle closest to `moment` at the given
    longitude; see `solar_boundaries` for selecting a particular local day.
    """
    lw = RAD * -coords.longitude
    phi = RAD * coords.latitude
    dh = observer_angle(coords.elevation_m)

    d = datetime_to_jd(moment) - J2000
    n = julian_cycle(d, lw)
    ds = approx_transit(0, lw, n)

    M = solar_mean_anomaly(ds)
    L = ecliptic_longitude(M)
    dec = declination(L)
    j_noon = solar_transit_j(ds, M, L)

    events: Dict[str, datetime] = {}
    for t in thresholds:
        h0 = (t.altitude_deg + dh) * RAD
        w = hour_angle(h0, phi, dec, label=t.rise_name)
        j_set = solar_transit_j(approx_transit(w, lw, n), M, L)
        j_rise = j_noon - (j_set - j_noon)
        events[t.rise_name] = jd_to_datetime(j_rise)
        events[t.set_name] = jd_to_datetime(j_set)

    return SunTimes(solar_noon=jd_to_datetime(j_noon), nadir=jd_to_datetime(j_noon - 0.5), events=events)


def solar_query_instant(day_start: datetime, longitude_deg: float) -> datetime:
    """
    Shift a local midnight so that the Julian cycle nearest the result is the
    transit of that local day rather than the previous one. The model knows
    only longitude, so the zone's UTC offset is folded in here.
    """
    offset_min = day_start.utcoffset().total_seconds() / 60
    adjustment = 0.5 + -longitude_deg + offset_min / 4
    return from_epoch_millis(math.trunc(epoch_millis(day_start) + adjustment / 15 * 3_600_000))


def solar_boundaries(day_start: datetime, coords: GeoCoordinates) -> Tuple[datetime, ...]:
    """
    The eight twilight boundaries of the local day beginning at `day_start`,
    from astronomical dawn to astronomical dusk:

      night_end, nautical_dawn, dawn, sunrise, sunset, dusk, nautical_dusk, night
    """
    times = sun_times(solar_query_instant(day_start, coords.longitude), coords, TWILIGHT_THRESHOLDS)
    return tuple(times[name] for name in (
        "night_end", "nautical_dawn", "dawn", "sunrise",
        "sunset", "dusk", "nautical_dusk", "night",
    ))
