# astrocore/core/validators.py
from __future__ import annotations

import math
import re
from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional, Tuple, Union
from zoneinfo import ZoneInfo

from astrocore.core.constants import PURPOSE_MULTIPLIERS

__all__ = [
    "ValidationError",
    "parse_date",
    "parse_time_str",
    "parse_latlon",
    "parse_zodiac",
    "parse_house_system",
    "parse_purpose",
    "parse_tz",
    "require_finite",
]

# ───────────────────────── errors ─────────────────────────

class ValidationError(ValueError):
    """Structured validator error (has .errors(), each entry names the offending field)."""
    def __init__(self, details: Union[str, Dict[str, Any], List[Dict[str, Any]]]):
        if isinstance(details, str):
            self._details = [{"loc": [], "msg": details, "type": "value_error"}]
            super().__init__(details)
        elif isinstance(details, dict):
            self._details = [details]
            super().__init__(details.get("msg", "validation_error"))
        elif isinstance(details, list):
            self._details = details
            super().__init__(self._details[0]["msg"] if self._details else "validation_error")
        else:
            self._details = [{"loc": [], "msg": "validation_error", "type": "value_error"}]
            super().__init__("validation_error")

    def errors(self) -> List[Dict[str, Any]]:
        return list(self._details)


# ───────────────────────── helpers ─────────────────────────

def _err(loc: List[str] | str, msg: str, typ: str = "value_error") -> Dict[str, Any]:
    return {"loc": [loc] if isinstance(loc, str) else loc, "msg": msg, "type": typ}

def _as_float(v: Any) -> Optional[float]:
    if v is None or isinstance(v, bool):
        return None
    try:
        x = float(v)
    except (TypeError, ValueError):
        return None
    return x if math.isfinite(x) else None

def require_finite(value: Any, loc: List[str] | str) -> float:
    """Coerce to a finite float or raise a field-attributed ValidationError."""
    x = _as_float(value)
    if x is None:
        raise ValidationError(_err(loc, "must be a finite number", "type_error.float"))
    return x


# ───────────────────────── atomic parsers ─────────────────────────

_TIME_RE = re.compile(r"^\s*(?P<h>\d{1,2}):(?P<m>\d{2})(?::(?P<s>\d{2})(?:\.(?P<f>\d+))?)?\s*$")

def parse_date(s: Any) -> date:
    try:
        return datetime.strptime(str(s), "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(_err("date", "date must be 'YYYY-MM-DD'", "value_error.date"))

def parse_time_str(s: Any) -> Tuple[int, int, float]:
    """
    Accept 'HH:MM', 'HH:MM:SS' or 'HH:MM:SS.frac' and return (hour, minute, second).
    Hours run 0..23; there is no 24:00 in a birth moment.
    """
    m = _TIME_RE.match(str(s or ""))
    if not m:
        raise ValidationError(_err("time", "time must be 'HH:MM' or 'HH:MM:SS[.frac]'", "value_error.time"))
    hh = int(m.group("h")); mm = int(m.group("m"))
    ss = float(f"{m.group('s') or 0}.{m.group('f') or 0}")
    if not (0 <= hh <= 23 and 0 <= mm <= 59 and 0 <= ss < 60):
        raise ValidationError(_err("time", "time fields out of range", "value_error.time"))
    return hh, mm, ss

def parse_tz(tz: Any, loc: Optional[List[str]] = None) -> ZoneInfo:
    try:
        return ZoneInfo(str(tz))
    except Exception:
        raise ValidationError([{
            "loc": loc or ["tz"],
            "msg": "must be a valid IANA zone like 'Asia/Kolkata'",
            "type": "value_error",
        }])

def parse_latlon(lat: Any, lon: Any, lat_key="latitude", lon_key="longitude") -> Tuple[float, float]:
    """Range-checked coordinates. Out-of-range values are rejected, never clamped."""
    lat_f = _as_float(lat); lon_f = _as_float(lon)
    if lat_f is None or lon_f is None:
        raise ValidationError(_err([lat_key, lon_key], "latitude/longitude must be finite numbers", "type_error.float"))
    if not (-90.0 <= lat_f <= 90.0):
        raise ValidationError(_err(lat_key, "latitude must be between -90 and 90"))
    if not (-180.0 <= lon_f <= 180.0):
        raise ValidationError(_err(lon_key, "longitude must be between -180 and 180"))
    return float(lat_f), float(lon_f)

def parse_zodiac(mode: Any | None) -> Literal["sidereal", "tropical"]:
    m = str(mode or "tropical").strip().lower()
    if m not in ("sidereal", "tropical"):
        raise ValidationError(_err("zodiac", "zodiac must be 'tropical' or 'sidereal'", "value_error.zodiac"))
    return m  # type: ignore

def parse_house_system(system: Any | None) -> Literal["whole_sign", "equal"]:
    s = str(system or "whole_sign").strip().lower().replace("-", "_").replace(" ", "_")
    if s in ("whole", "wholesign"):
        s = "whole_sign"
    if s not in ("whole_sign", "equal"):
        raise ValidationError(_err("house_system", "house_system must be 'whole_sign' or 'equal'", "value_error.house_system"))
    return s  # type: ignore

def parse_purpose(purpose: Any | None) -> str:
    p = str(purpose or "general").strip().lower()
    if p not in PURPOSE_MULTIPLIERS:
        allowed = ", ".join(sorted(PURPOSE_MULTIPLIERS))
        raise ValidationError(_err("purpose", f"purpose must be one of: {allowed}", "value_error.purpose"))
    return p
