# tests/test_daylength.py

import pytest

np = pytest.importorskip("numpy")

from chronocalc.calendar import ZonedCalendar, clear_solar_cache
from chronocalc.core.types import GeoCoordinates
from chronocalc.diagnostics import daylength

MADISON = GeoCoordinates(43.073051, -89.401230)


@pytest.fixture(scope="module")
def table():
    clear_solar_cache()
    return daylength.daylength_table(np, ZonedCalendar("America/Chicago"), MADISON, 2023)


def test_one_row_per_day(table):
    assert table.days.shape == (365,)
    assert str(table.days[0]) == "2023-01-01"
    assert set(table.hours) == set(daylength.BANDS)


def test_bands_fill_each_day(table):
    total = sum(table.hours[b] for b in daylength.BANDS)
    # 23- and 25-hour days at the DST transitions
    assert np.all((total > 22.99) & (total < 25.01))
    assert np.sum(np.isclose(total, 24.0)) == 363


def test_daylight_peaks_in_june(table):
    stats = daylength.summarize(np, table)
    assert 15.0 < stats["daylight"]["max"] < 15.6
    assert 8.8 < stats["daylight"]["min"] < 9.3
    june = table.days.astype("datetime64[M]") == np.datetime64("2023-06")
    assert table.hours["daylight"][june].max() == pytest.approx(stats["daylight"]["max"])


def test_monthly_means(table):
    rows = daylength.monthly_means(np, table)
    assert [r["month"] for r in rows][:2] == ["2023-01", "2023-02"]
    assert len(rows) == 12
    assert rows[5]["daylight"] > rows[0]["daylight"]


def test_main_prints_table(capsys):
    assert daylength.main(["--lat", "43.07", "--lon", "-89.40", "--year", "2023", "--zone", "America/Chicago"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("month")
    assert "daylight" in out
