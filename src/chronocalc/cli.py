from __future__ import annotations

import argparse
import importlib
import inspect
import logging
import sys

from .core.errors import ChronoError


def _run_module_main(modpath: str, argv: list[str]) -> int:
    """
    Import module and run its main().

    Supports:
      - main(argv: list[str] | None = None) -> int|None
      - main() -> int|None
    """
    mod = importlib.import_module(modpath)
    if not hasattr(mod, "main"):
        raise SystemExit(f"Module {modpath} has no main()")
    fn = getattr(mod, "main")

    sig = inspect.signature(fn)
    if len(sig.parameters) == 0:
        rv = fn()
    else:
        rv = fn(argv)
    return int(rv or 0)


def _zone_arg(p: argparse.ArgumentParser) -> None:
    from .core.config import get_config
    p.add_argument("--zone", default=get_config().default_zone, help="IANA time zone (default from CHRONOCALC_ZONE)")


def cmd_window(argv: list[str]) -> int:
    from .api import list_windows
    from .calendar import ZonedCalendar

    p = argparse.ArgumentParser(prog="chronocalc window", description="Resolve a named date window.")
    p.add_argument("name", choices=list_windows(), metavar="NAME",
                   help="e.g. 'current week', 'next weekend'")
    p.add_argument("--at", help="Reference instant, ISO-8601 (default: now)")
    _zone_arg(p)
    args = p.parse_args(argv)

    print(ZonedCalendar(args.zone).resolve(args.name, args.at))
    return 0


def cmd_all_of(argv: list[str], *, remainder: bool = False) -> int:
    from .calendar import ZonedCalendar
    from .core.time import UNITS

    name = "remainder-of" if remainder else "all-of"
    p = argparse.ArgumentParser(prog=f"chronocalc {name}", description="Calendar-aligned window of COUNT units.")
    p.add_argument("count", type=int)
    p.add_argument("unit", choices=UNITS)
    p.add_argument("--at", help="Instant, ISO-8601 (default: now)")
    _zone_arg(p)
    args = p.parse_args(argv)

    cal = ZonedCalendar(args.zone)
    fn = cal.remainder_of if remainder else cal.all_of
    print(fn(args.count, args.unit, args.at))
    return 0


def cmd_cycle(argv: list[str]) -> int:
    from .core.time import now_utc, parse_instant
    from .cycles import cycle_interval

    p = argparse.ArgumentParser(prog="chronocalc cycle", description="Fixed-length cycle window from a known cycle start.")
    p.add_argument("base", help="Known cycle start, ISO-8601")
    p.add_argument("--days", type=int, required=True, help="Cycle length in days")
    p.add_argument("--at", help="Reference instant, ISO-8601 (default: now)")
    p.add_argument("--offset", type=int, action="append", help="Cycle offset (repeatable, default 0)")
    args = p.parse_args(argv)

    base = parse_instant(args.base)
    ref = parse_instant(args.at) if args.at else now_utc()
    for k in args.offset or [0]:
        print(f"{k:+d}  {cycle_interval(base, args.days, ref, k)}")
    return 0


def cmd_period(argv: list[str]) -> int:
    from .core.time import UNITS, now_utc, parse_instant
    from .core.types import Duration, Periodicity
    from .cycles import period_intervals

    p = argparse.ArgumentParser(prog="chronocalc period", description="Calendar-unit cycle window from a known cycle start.")
    p.add_argument("base", help="Known cycle start, ISO-8601")
    p.add_argument("--every", nargs=2, metavar=("COUNT", "UNIT"), required=True, help="e.g. --every 1 quarter")
    p.add_argument("--at", help="Reference instant, ISO-8601 (default: now)")
    p.add_argument("--offset", type=int, action="append", help="Cycle offset (repeatable, default 0)")
    args = p.parse_args(argv)

    count, unit = args.every
    if unit not in UNITS:
        p.error(f"UNIT must be one of {UNITS}")
    periodicity = Periodicity(parse_instant(args.base), Duration(unit, int(count)))
    ref = parse_instant(args.at) if args.at else now_utc()
    offsets = args.offset or [0]
    for k, interval in zip(offsets, period_intervals(periodicity, ref, offsets)):
        print(f"{k:+d}  {interval}")
    return 0


def cmd_solar(argv: list[str]) -> int:
    from .calendar import ZonedCalendar
    from .core.types import GeoCoordinates

    p = argparse.ArgumentParser(prog="chronocalc solar", description="Day, twilight and daylight intervals for a local day.")
    p.add_argument("date", help="YYYY-MM-DD or any ISO-8601 instant within the day")
    p.add_argument("--lat", type=float, required=True, help="Observer latitude in degrees")
    p.add_argument("--lon", type=float, required=True, help="Observer longitude in degrees (positive East)")
    p.add_argument("--elevation", type=float, default=0.0, help="Observer height in metres")
    _zone_arg(p)
    args = p.parse_args(argv)

    s = ZonedCalendar(args.zone).solar_intervals(args.date, GeoCoordinates(args.lat, args.lon, args.elevation))
    for name, interval in s.as_dict().items():
        print(f"  {name:30s} {interval}")
    return 0


def cmd_julian_day(argv: list[str]) -> int:
    from .core.time import julian_day, parse_instant

    p = argparse.ArgumentParser(prog="chronocalc julian-day", description="Day number of the UTC day containing an instant.")
    p.add_argument("instant", help="ISO-8601 instant")
    args = p.parse_args(argv)

    print(julian_day(parse_instant(args.instant)))
    return 0


def _dispatch(args: argparse.Namespace, rest: list[str]) -> int:
    if args.cmd == "window":
        return cmd_window(rest)

    if args.cmd == "all-of":
        return cmd_all_of(rest)

    if args.cmd == "remainder-of":
        return cmd_all_of(rest, remainder=True)

    if args.cmd == "cycle":
        return cmd_cycle(rest)

    if args.cmd == "period":
        return cmd_period(rest)

    if args.cmd == "solar":
        return cmd_solar(rest)

    if args.cmd == "julian-day":
        return cmd_julian_day(rest)

    if args.cmd == "diag":
        tool_map = {
            "daylength": "chronocalc.diagnostics.daylength",
        }
        return _run_module_main(tool_map[args.tool], rest)

    raise RuntimeError("unreachable")


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    p = argparse.ArgumentParser(prog="chronocalc", description="Zone-aware interval and cycle calculator.")
    p.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("window", help="Resolve a named window ('current week', 'next weekend', ...)", add_help=False)
    sub.add_parser("all-of", help="Calendar-aligned window of COUNT units containing an instant", add_help=False)
    sub.add_parser("remainder-of", help="From an instant to the end of its COUNT-unit window", add_help=False)
    sub.add_parser("cycle", help="Fixed-length cycle window (days)", add_help=False)
    sub.add_parser("period", help="Calendar-unit cycle window (day/week/month/quarter/year)", add_help=False)
    sub.add_parser("solar", help="Solar day/twilight/night intervals for a local day", add_help=False)
    sub.add_parser("julian-day", help="Day number of the UTC day containing an instant", add_help=False)

    p_diag = sub.add_parser("diag", help="Diagnostics tools (numpy extra)")
    p_diag.add_argument("tool", choices=["daylength"], help="Which diagnostic to run")

    args, rest = p.parse_known_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    try:
        return _dispatch(args, rest)
    except ChronoError as e:
        print(f"chronocalc: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
