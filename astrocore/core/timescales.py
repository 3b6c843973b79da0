# astrocore/core/timescales.py
# -----------------------------------------------------------------------------
# Birth-moment value object and civil-time → Julian Day conversion.
#
# Public API:
#   BirthMoment(year, month, day, hour=0, minute=0, second=0.0, utc_offset_hours=None)
#   BirthMoment.from_civil(date_str, time_str, tz_name) -> BirthMoment
#   moment.julian_day        # UT
#   moment.local_julian_day  # civil clock, no offset applied
#
# Guarantees:
#   • Calendar-correct day-of-month (proleptic Gregorian leap rules).
#   • Time zone offset resolved once via zoneinfo; DST ambiguity resolved
#     with fold=0 (the earlier instant).
#   • Frozen; validated on construction.
# -----------------------------------------------------------------------------

from __future__ import annotations

from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Any, Dict, Optional

from astrocore.core.astronomy import calendar_to_julian_day
from astrocore.core.validators import (
    ValidationError,
    _err,
    parse_date,
    parse_time_str,
    parse_tz,
    require_finite,
)

__all__ = ["BirthMoment", "is_leap_year", "days_in_month"]

_MONTH_DAYS = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


def is_leap_year(year: int) -> bool:
    return (year % 4 == 0 and year % 100 != 0) or year % 400 == 0


def days_in_month(year: int, month: int) -> int:
    if month == 2 and is_leap_year(year):
        return 29
    return _MONTH_DAYS[month - 1]


# ───────────────────────────── Dataclass ─────────────────────────────

@dataclass(frozen=True)
class BirthMoment:
    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0
    second: float = 0.0
    utc_offset_hours: Optional[float] = None

    def __post_init__(self) -> None:
        # range checks for y/m/d/h/mi/s live in the JD conversion
        calendar_to_julian_day(self.year, self.month, self.day, self.hour, self.minute, self.second)
        for name in ("hour", "minute"):
            if int(getattr(self, name)) != getattr(self, name):
                raise ValidationError(_err(name, f"{name} must be an integer"))
        # JSON may carry integral floats (1984.0); downstream cycle maths needs ints
        for name in ("year", "month", "day", "hour", "minute"):
            object.__setattr__(self, name, int(getattr(self, name)))
        limit = days_in_month(self.year, self.month)
        if self.day > limit:
            raise ValidationError(_err(
                "day", f"day must be in [1, {limit}] for {self.year:04d}-{self.month:02d}", "value_error.range"
            ))
        if self.utc_offset_hours is not None:
            off = require_finite(self.utc_offset_hours, "utc_offset_hours")
            if not (-14.0 <= off <= 14.0):
                raise ValidationError(_err("utc_offset_hours", "utc_offset_hours must be in [-14, 14]", "value_error.range"))

    # ---- constructors ----
    @classmethod
    def from_civil(cls, date_str: str, time_str: str, tz_name: Optional[str] = None) -> "BirthMoment":
        """Parse 'YYYY-MM-DD' + 'HH:MM[:SS]' and resolve an IANA zone to a fixed offset."""
        d = parse_date(date_str)
        hh, mm, ss = parse_time_str(time_str)
        offset: Optional[float] = None
        if tz_name:
            zone = parse_tz(tz_name)
            local = datetime(d.year, d.month, d.day, hh, mm, int(ss), tzinfo=zone, fold=0)
            utcoff = local.utcoffset()
            offset = utcoff.total_seconds() / 3600.0 if utcoff is not None else 0.0
        return cls(d.year, d.month, d.day, hh, mm, ss, offset)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "BirthMoment":
        if "date" in payload:
            return cls.from_civil(payload["date"], payload.get("time", "00:00"), payload.get("tz") or payload.get("place_tz"))
        missing = [k for k in ("year", "month", "day") if k not in payload]
        if missing:
            raise ValidationError([_err(k, "field required", "value_error.missing") for k in missing])
        return cls(
            payload["year"], payload["month"], payload["day"],
            payload.get("hour", 0), payload.get("minute", 0), payload.get("second", 0.0),
            payload.get("utc_offset_hours"),
        )

    # ---- derived ----
    @property
    def local_julian_day(self) -> float:
        return calendar_to_julian_day(self.year, self.month, self.day, self.hour, self.minute, self.second)

    @property
    def julian_day(self) -> float:
        """UT Julian Day; a missing offset is treated as UTC."""
        return self.local_julian_day - (self.utc_offset_hours or 0.0) / 24.0

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["julian_day"] = self.julian_day
        return out
