# astrocore/core/astronomy.py
# -*- coding: utf-8 -*-
"""
Astronomical time / angle primitives.

Everything here is a pure function over floats. Longitudes are degrees in
[0, 360); Julian Days are plain floats (UT unless a caller says otherwise).

Public API:
    normalize_angle(a, precision=1e-6) -> float
    mod(a, b) -> float
    deg_to_rad(d) / rad_to_deg(r)
    angular_separation(a, b) -> float        # shortest arc, 0..180
    is_between(lon, start, end) -> bool      # wraparound arc containment
    calendar_to_julian_day(y, m, d, h=0, mi=0, s=0) -> float
    julian_day_to_calendar(jd) -> CalendarTime
    julian_centuries(jd) -> float
    solar_ecliptic_longitude(jd) -> float
    greenwich_sidereal_time(jd) / local_sidereal_time(jd, longitude) -> float
    mean_obliquity(jd) -> float              # IAU 2006, via ERFA
    ecliptic_to_equatorial(lon, lat, jd) -> (ra, dec)
    ascendant_and_midheaven(jd, latitude, longitude) -> (asc, mc)
    lahiri_ayanamsa(jd) -> float
"""
from __future__ import annotations

import math
from typing import NamedTuple, Optional, Tuple

import erfa  # pyERFA

from astrocore.core.constants import DAYS_PER_CENTURY, J2000_JD
from astrocore.core.validators import ValidationError, _err, require_finite

__all__ = [
    "CalendarTime",
    "normalize_angle",
    "mod",
    "deg_to_rad",
    "rad_to_deg",
    "angular_separation",
    "is_between",
    "calendar_to_julian_day",
    "julian_day_to_calendar",
    "julian_centuries",
    "solar_ecliptic_longitude",
    "greenwich_sidereal_time",
    "local_sidereal_time",
    "mean_obliquity",
    "ecliptic_to_equatorial",
    "ascendant_and_midheaven",
    "lahiri_ayanamsa",
]

# Ascendant is undefined at the poles.
_POLAR_HARD_LAT = 89.9

# Lahiri: 23°51'11" at J2000, general precession 50.2388475"/yr.
_LAHIRI_J2000_DEG = 23.853055
_PRECESSION_ARCSEC_PER_YEAR = 50.2388475

_MICROS_PER_DAY = 86_400_000_000


class CalendarTime(NamedTuple):
    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: float


# ───────────────────────────── angles ─────────────────────────────
def _round_to(x: float, precision: Optional[float]) -> float:
    if not precision or precision <= 0:
        return x
    digits = -math.log10(precision)
    if abs(digits - round(digits)) < 1e-9:
        return round(x, int(round(digits)))
    return round(x / precision) * precision


def normalize_angle(a: float, precision: Optional[float] = 1e-6) -> float:
    """Reduce any real degree value into [0, 360), rounded to `precision`."""
    x = math.fmod(float(a), 360.0)
    if x < 0.0:
        x += 360.0
    x = _round_to(x, precision)
    if x >= 360.0:
        x = 0.0
    return x + 0.0  # no negative zero


def mod(a: float, b: float) -> float:
    """Floor modulo: the result carries the sign of `b` (mod(-7, 3) == 2)."""
    if b == 0:
        raise ValidationError(_err("b", "modulus must be non-zero"))
    return a % b


def deg_to_rad(d: float) -> float:
    return math.radians(d)


def rad_to_deg(r: float) -> float:
    return math.degrees(r)


def angular_separation(a: float, b: float) -> float:
    """Shortest arc between two longitudes, 0..180."""
    d = math.fmod(abs(float(a) - float(b)), 360.0)
    return 360.0 - d if d > 180.0 else d


def is_between(lon: float, start: float, end: float) -> bool:
    """
    True when `lon` lies on the arc running forward from `start` to `end`.
    If start < end the arc is [start, end]; otherwise it wraps through 0°,
    i.e. [start, 360) ∪ [0, end]. A zero-length arc holds only its endpoint.
    """
    l = normalize_angle(lon)
    a = normalize_angle(start)
    b = normalize_angle(end)
    if a == b:
        return l == a
    if a < b:
        return a <= l <= b
    return l >= a or l <= b


# ───────────────────────────── calendar ↔ JD ─────────────────────────────
def _field(name: str, value: float, lo: float, hi: float, *, integral: bool, hi_open: bool) -> float:
    x = require_finite(value, name)
    if integral and x != int(x):
        raise ValidationError(_err(name, f"{name} must be an integer"))
    upper_ok = x < hi if hi_open else x <= hi
    if not (lo <= x and upper_ok):
        bracket = ")" if hi_open else "]"
        raise ValidationError(_err(name, f"{name} must be in [{lo:g}, {hi:g}{bracket}", "value_error.range"))
    return x


def calendar_to_julian_day(
    year: int,
    month: int,
    day: int,
    hour: float = 0,
    minute: float = 0,
    second: float = 0.0,
) -> float:
    """
    Gregorian calendar (proleptic before 1582) → Julian Day.

    Meeus, Astronomical Algorithms ch. 7: January/February count as months
    13/14 of the previous year, plus the Gregorian century correction.
    """
    y = int(_field("year", year, -4712, 9999, integral=True, hi_open=False))
    m = int(_field("month", month, 1, 12, integral=True, hi_open=False))
    d = int(_field("day", day, 1, 31, integral=True, hi_open=False))
    h = _field("hour", hour, 0, 24, integral=False, hi_open=True)
    mi = _field("minute", minute, 0, 60, integral=False, hi_open=True)
    s = _field("second", second, 0, 60, integral=False, hi_open=True)

    if m <= 2:
        y -= 1
        m += 12
    a = math.floor(y / 100)
    b = 2 - a + math.floor(a / 4)
    day_fraction = (h + mi / 60.0 + s / 3600.0) / 24.0
    return (
        math.floor(365.25 * (y + 4716))
        + math.floor(30.6001 * (m + 1))
        + d + day_fraction + b - 1524.5
    )


def julian_day_to_calendar(jd: float) -> CalendarTime:
    """
    Julian Day → proleptic Gregorian calendar.

    The integer day uses the Richards integer algorithm (exact for JDN >= 0);
    time of day is rounded to the microsecond and carried into the date.
    """
    x = require_finite(jd, "jd")
    if x < 0.0:
        raise ValidationError(_err("jd", "jd must be non-negative", "value_error.range"))
    z = math.floor(x + 0.5)
    micros = round(((x + 0.5) - z) * _MICROS_PER_DAY)
    if micros >= _MICROS_PER_DAY:
        z += 1
        micros -= _MICROS_PER_DAY

    j = int(z)
    f = j + 1401 + (((4 * j + 274277) // 146097) * 3) // 4 - 38
    e = 4 * f + 3
    g = (e % 1461) // 4
    h = 5 * g + 2
    day = (h % 153) // 5 + 1
    month = (h // 153 + 2) % 12 + 1
    year = e // 1461 - 4716 + (14 - month) // 12

    hour, rem = divmod(micros, 3_600_000_000)
    minute, rem = divmod(rem, 60_000_000)
    return CalendarTime(year, month, day, int(hour), int(minute), rem / 1e6)


def julian_centuries(jd: float) -> float:
    return (float(jd) - J2000_JD) / DAYS_PER_CENTURY


# ───────────────────────────── Sun / sidereal time ─────────────────────────────
def solar_ecliptic_longitude(jd: float) -> float:
    """
    Apparent geocentric ecliptic longitude of the Sun (degrees).

    Meeus ch. 25 low-precision series: mean longitude, equation of centre in
    M, 2M, 3M, then aberration and nutation in longitude via Ω.
    Good to ~0.01° within a few centuries of J2000.
    """
    t = julian_centuries(require_finite(jd, "jd"))
    l0 = 280.46646 + 36000.76983 * t + 0.0003032 * t * t
    m = math.radians(357.52911 + 35999.05029 * t - 0.0001537 * t * t)
    c = (
        (1.914602 - 0.004817 * t - 0.000014 * t * t) * math.sin(m)
        + (0.019993 - 0.000101 * t) * math.sin(2.0 * m)
        + 0.000289 * math.sin(3.0 * m)
    )
    omega = math.radians(125.04 - 1934.136 * t)
    return normalize_angle(l0 + c - 0.00569 - 0.00478 * math.sin(omega))


def greenwich_sidereal_time(jd: float) -> float:
    """Greenwich mean sidereal time in degrees (IAU 1982 polynomial in UT)."""
    d = require_finite(jd, "jd") - J2000_JD
    t = d / DAYS_PER_CENTURY
    gmst = 280.46061837 + 360.98564736629 * d + 0.000387933 * (t * t) - (t * t * t) / 38710000.0
    return normalize_angle(gmst)


def local_sidereal_time(jd: float, longitude: float) -> float:
    """Local mean sidereal time in degrees; `longitude` is east-positive."""
    lon = require_finite(longitude, "longitude")
    if not (-180.0 <= lon <= 180.0):
        raise ValidationError(_err("longitude", "longitude must be between -180 and 180"))
    return normalize_angle(greenwich_sidereal_time(jd) + lon)


# ───────────────────────────── frames ─────────────────────────────
def _split_jd(jd: float) -> Tuple[float, float]:
    d = float(math.floor(jd))
    return d, float(jd - d)


def mean_obliquity(jd: float) -> float:
    """Mean obliquity of the ecliptic (IAU 2006) in degrees."""
    d1, d2 = _split_jd(require_finite(jd, "jd"))
    return math.degrees(erfa.obl06(d1, d2))


def ecliptic_to_equatorial(lon: float, lat: float = 0.0, jd: float = J2000_JD) -> Tuple[float, float]:
    """Ecliptic (λ, β) → equatorial (α, δ), degrees, mean equator of date."""
    eps = math.radians(mean_obliquity(jd))
    lam = math.radians(normalize_angle(lon, None))
    beta = math.radians(lat)
    y = math.sin(lam) * math.cos(eps) - math.tan(beta) * math.sin(eps)
    x = math.cos(lam)
    alpha = normalize_angle(math.degrees(math.atan2(y, x)))
    s = math.sin(beta) * math.cos(eps) + math.cos(beta) * math.sin(eps) * math.sin(lam)
    delta = math.degrees(math.asin(max(-1.0, min(1.0, s))))
    return alpha, delta


def ascendant_and_midheaven(jd: float, latitude: float, longitude: float) -> Tuple[float, float]:
    """Tropical ascendant and MC from local sidereal time (RAMC) and obliquity."""
    lat = require_finite(latitude, "latitude")
    if abs(lat) > _POLAR_HARD_LAT:
        raise ValidationError(_err("latitude", f"ascendant undefined beyond ±{_POLAR_HARD_LAT}°"))
    ramc = math.radians(local_sidereal_time(jd, longitude))
    eps = math.radians(mean_obliquity(jd))
    mc = math.degrees(math.atan2(math.sin(ramc), math.cos(ramc) * math.cos(eps)))
    asc = math.degrees(math.atan2(
        math.cos(ramc),
        -(math.sin(ramc) * math.cos(eps) + math.tan(math.radians(lat)) * math.sin(eps)),
    ))
    return normalize_angle(asc), normalize_angle(mc)


def lahiri_ayanamsa(jd: float) -> float:
    """Lahiri (Chitrapaksha) ayanamsa, linear precession from its J2000 value."""
    years = (require_finite(jd, "jd") - J2000_JD) / 365.25
    return _LAHIRI_J2000_DEG + years * _PRECESSION_ARCSEC_PER_YEAR / 3600.0
