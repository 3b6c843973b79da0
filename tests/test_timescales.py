# tests/test_timescales.py
from __future__ import annotations

import pytest

from astrocore.core.astronomy import calendar_to_julian_day
from astrocore.core.timescales import BirthMoment, days_in_month, is_leap_year
from astrocore.core.validators import ValidationError


# ─────────────────────────────────────────────────────────────────────────────
# Calendar helpers
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.parametrize("year, leap", [(2000, True), (1900, False), (2024, True), (2023, False), (1600, True)])
def test_leap_years(year, leap) -> None:
    assert is_leap_year(year) is leap


def test_days_in_month() -> None:
    assert days_in_month(2024, 2) == 29
    assert days_in_month(2023, 2) == 28
    assert days_in_month(2023, 4) == 30
    assert days_in_month(2023, 12) == 31


# ─────────────────────────────────────────────────────────────────────────────
# BirthMoment
# ─────────────────────────────────────────────────────────────────────────────

def test_valid_leap_day() -> None:
    m = BirthMoment(2000, 2, 29, 6, 30)
    assert m.local_julian_day == pytest.approx(calendar_to_julian_day(2000, 2, 29, 6, 30))


@pytest.mark.parametrize("args", [
    (1900, 2, 29),
    (2023, 4, 31),
    (2023, 13, 1),
    (2023, 1, 1, 24),
    (2023, 1, 1, 10, 60),
    (2023, 1, 1, 10.5),
])
def test_invalid_moments(args) -> None:
    with pytest.raises(ValidationError):
        BirthMoment(*args)


@pytest.mark.parametrize("offset", [-14.5, 14.25, float("nan")])
def test_offset_bounds(offset) -> None:
    with pytest.raises(ValidationError):
        BirthMoment(2020, 1, 1, utc_offset_hours=offset)


def test_moment_is_frozen() -> None:
    m = BirthMoment(2020, 1, 1)
    with pytest.raises(Exception):
        m.year = 2021  # type: ignore[misc]


def test_from_civil_resolves_fixed_offset(ensure_tzdata) -> None:
    m = BirthMoment.from_civil("1992-11-04", "05:25", "Asia/Kolkata")
    assert m.utc_offset_hours == pytest.approx(5.5)
    assert m.julian_day == pytest.approx(m.local_julian_day - 5.5 / 24.0)


def test_from_civil_dst(ensure_tzdata) -> None:
    summer = BirthMoment.from_civil("2021-07-01", "12:00", "America/New_York")
    winter = BirthMoment.from_civil("2021-01-01", "12:00", "America/New_York")
    assert summer.utc_offset_hours == pytest.approx(-4.0)
    assert winter.utc_offset_hours == pytest.approx(-5.0)


def test_from_civil_without_zone_is_utc() -> None:
    m = BirthMoment.from_civil("2000-01-01", "12:00:00")
    assert m.utc_offset_hours is None
    assert m.julian_day == pytest.approx(2451545.0)


def test_from_civil_bad_zone() -> None:
    with pytest.raises(ValidationError) as ei:
        BirthMoment.from_civil("2000-01-01", "12:00", "Mars/Olympus_Mons")
    assert ei.value.errors()[0]["loc"] == ["tz"]


def test_from_dict_accepts_both_shapes() -> None:
    a = BirthMoment.from_dict({"date": "2000-01-01", "time": "12:00", "tz": "UTC"})
    b = BirthMoment.from_dict({"year": 2000, "month": 1, "day": 1, "hour": 12})
    assert a.julian_day == pytest.approx(b.julian_day)


def test_integral_floats_become_ints() -> None:
    m = BirthMoment.from_dict({"year": 1984.0, "month": 3.0, "day": 1.0, "hour": 6.0})
    assert (m.year, m.month, m.day, m.hour) == (1984, 3, 1, 6)
    assert all(type(v) is int for v in (m.year, m.month, m.day, m.hour, m.minute))


def test_from_dict_reports_missing_fields() -> None:
    with pytest.raises(ValidationError) as ei:
        BirthMoment.from_dict({"year": 2000})
    locs = [e["loc"] for e in ei.value.errors()]
    assert ["month"] in locs and ["day"] in locs


def test_to_dict_carries_julian_day() -> None:
    d = BirthMoment(2000, 1, 1, 12).to_dict()
    assert d["julian_day"] == pytest.approx(2451545.0)
    assert d["year"] == 2000
