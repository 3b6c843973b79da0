# astrocore/core/houses.py
"""
House assignment and cusp builders.

Cusps are 12 ecliptic longitudes; cusp[0] is the ascendant (the start of
the ascendant's sign for whole-sign houses) and the list runs forward around
the zodiac, wrapping through 0° at most once. `validate_cusps` enforces that
shape once, when a Chart is built, so `house_of` can assume it.
"""
from __future__ import annotations

import logging
import math
from typing import List, Sequence

from astrocore.core.astronomy import normalize_angle
from astrocore.core.validators import ValidationError, _err

log = logging.getLogger(__name__)

__all__ = [
    "HOUSE_SYSTEMS",
    "house_of",
    "sign_of",
    "house_from",
    "validate_cusps",
    "whole_sign_cusps",
    "equal_cusps",
    "build_cusps",
]

HOUSE_SYSTEMS = ("whole_sign", "equal")

_CUSP_TOL = 1e-6


def sign_of(longitude: float) -> int:
    """Zodiac sign 1..12 (1 = Aries) of an ecliptic longitude."""
    return int(normalize_angle(longitude) // 30.0) + 1


def house_from(reference_sign: int, sign: int) -> int:
    """Sign-count house of `sign` counted from `reference_sign` (same sign = 1)."""
    return (sign - reference_sign) % 12 + 1


def house_of(longitude: float, cusps: Sequence[float]) -> int:
    """
    House 1..12 containing `longitude`.

    Each house spans [cusp[i], cusp[i+1]). A house whose next cusp is lower
    than its own wraps through 0°.
    """
    lon = normalize_angle(longitude)
    for i in range(12):
        start = cusps[i]
        end = cusps[(i + 1) % 12]
        if start < end:
            if start <= lon < end:
                return i + 1
        elif lon >= start or lon < end:
            return i + 1
    # Unreachable for cusps accepted by validate_cusps.
    if __debug__:
        raise AssertionError(f"no house for longitude {lon} with cusps {list(cusps)}")
    log.warning("house_of fallback to house 1 for longitude=%s cusps=%s", lon, list(cusps))
    return 1


def validate_cusps(cusps: Sequence[float], ascendant: float, *, anchored: bool = True) -> List[float]:
    """
    Return normalized cusps or raise ValidationError describing the defect.

    anchored=True requires cusp 1 to equal the ascendant; whole-sign charts
    pass False and only require the ascendant to fall in house 1.
    """
    if cusps is None or len(cusps) != 12:
        n = 0 if cusps is None else len(cusps)
        raise ValidationError(_err("cusps", f"exactly 12 house cusps required, got {n}", "value_error.cusps"))
    out: List[float] = []
    for i, c in enumerate(cusps):
        try:
            x = float(c)
        except (TypeError, ValueError):
            x = math.nan
        if not math.isfinite(x):
            raise ValidationError(_err(["cusps", str(i)], "cusp must be a finite number", "type_error.float"))
        out.append(normalize_angle(x))

    total = 0.0
    for i in range(12):
        span = _span(out[i], out[(i + 1) % 12])
        if span <= 0.0:
            raise ValidationError(_err(["cusps", str((i + 1) % 12)], "cusps must increase monotonically (mod 360)", "value_error.cusps"))
        total += span
    if abs(total - 360.0) > 1e-4:
        raise ValidationError(_err("cusps", "cusps must wrap the zodiac exactly once", "value_error.cusps"))

    asc = normalize_angle(ascendant)
    if anchored:
        if min(_span(asc, out[0]), _span(out[0], asc)) > _CUSP_TOL:
            raise ValidationError(_err(["cusps", "0"], "first cusp must equal the ascendant", "value_error.cusps"))
    elif _span(out[0], asc) >= _span(out[0], out[1]):
        raise ValidationError(_err(["cusps", "0"], "ascendant must fall in house 1", "value_error.cusps"))
    return out


def _span(a: float, b: float) -> float:
    """Forward arc a → b in [0, 360)."""
    return (b - a) % 360.0


def whole_sign_cusps(ascendant: float) -> List[float]:
    """Whole-sign houses: house 1 is the ascendant's sign from 0° of that sign."""
    start = (sign_of(ascendant) - 1) * 30.0
    return [normalize_angle(start + 30.0 * i) for i in range(12)]


def equal_cusps(ascendant: float) -> List[float]:
    return [normalize_angle(ascendant + 30.0 * i) for i in range(12)]


def build_cusps(ascendant: float, system: str = "whole_sign") -> List[float]:
    if system == "whole_sign":
        return whole_sign_cusps(ascendant)
    if system == "equal":
        return equal_cusps(ascendant)
    raise ValidationError(_err("house_system", f"unsupported house system '{system}'", "value_error.house_system"))
