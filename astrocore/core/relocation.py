# astrocore/core/relocation.py
# -*- coding: utf-8 -*-
"""
Astro-cartography lines & location scoring.

Simplified meridian model: each body projects 8 lines onto geographic
longitudes (its ecliptic longitude plus the aspect offset); optional parallel
lines run along the body's declination. A location is scored by how close it
sits to each line, inside a planet- and aspect-dependent orb.

    influence = strength * (1 - distance / orb)
    overall   = clamp(50 + 25 * total * purpose_multiplier + local_adjustment, 0, 100)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union
import logging

import numpy as np

from astrocore.core.astronomy import (
    angular_separation,
    ecliptic_to_equatorial,
    normalize_angle,
)
from astrocore.core.chart import Chart, PlanetaryPosition, canonical_body_name
from astrocore.core.constants import (
    BENEFICIAL_LINE_ASPECTS,
    BENEFICIAL_LINE_PLANETS,
    CHALLENGING_LINE_ASPECTS,
    CHALLENGING_LINE_PLANETS,
    J2000_JD,
    LINE_ASPECTS,
    LINE_BASE_ORBS,
    LINE_MEANINGS,
    PARALLEL_STRENGTH,
    PLANET_ORB_MULTIPLIERS,
    PURPOSE_MULTIPLIERS,
)
from astrocore.core.validators import ValidationError, _err, parse_latlon, parse_purpose, require_finite

log = logging.getLogger(__name__)

__all__ = [
    "GeoLine",
    "LocationScore",
    "planetary_lines",
    "score_location",
    "local_factors",
    "recommendations",
    "describe_line",
    "line_meaning",
    "rank_locations",
]

# local-factor weights (latitude band, geomagnetic proxy)
_LOCAL_WEIGHT = 0.2
_COLD_LATITUDE = 60.0
_TROPICAL_LATITUDE = 30.0

_SCORE_SCALE = 25.0
_NEUTRAL_SCORE = 50.0
_CHALLENGE_FACTOR = 0.5


# ── value objects ────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class GeoLine:
    planet: str
    aspect: str
    strength: float
    longitude: Optional[float] = None     # meridian lines
    latitude: Optional[float] = None      # parallel lines

    def __post_init__(self) -> None:
        if not (0.0 <= self.strength <= 1.0):
            raise ValidationError(_err("strength", "line strength must be in [0, 1]"))
        if (self.longitude is None) == (self.latitude is None):
            raise ValidationError(_err(["longitude", "latitude"], "a line has exactly one of longitude or latitude"))

    @property
    def is_parallel(self) -> bool:
        return self.latitude is not None

    @property
    def orb(self) -> float:
        return LINE_BASE_ORBS.get(self.aspect, 1.0) * PLANET_ORB_MULTIPLIERS.get(self.planet, 1.0)

    def distance_to(self, latitude: float, longitude: float) -> float:
        if self.is_parallel:
            return abs(latitude - self.latitude)  # type: ignore[operator]
        return angular_separation(self.longitude, normalize_angle(longitude))  # type: ignore[arg-type]

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"planet": self.planet, "aspect": self.aspect, "strength": self.strength}
        if self.is_parallel:
            out["latitude"] = self.latitude
        else:
            out["longitude"] = self.longitude
        return out

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "GeoLine":
        try:
            planet, aspect = d["planet"], d["aspect"]
        except (KeyError, TypeError):
            raise ValidationError(_err("lines", "each line needs 'planet' and 'aspect'", "value_error.missing"))
        lon = d.get("longitude")
        lat = d.get("latitude")
        return cls(
            planet=canonical_body_name(planet),
            aspect=str(aspect).lower(),
            strength=require_finite(d.get("strength", 1.0), ["lines", "strength"]),
            longitude=None if lon is None else normalize_angle(require_finite(lon, ["lines", "longitude"])),
            latitude=None if lat is None else require_finite(lat, ["lines", "latitude"]),
        )


@dataclass(frozen=True)
class LocationScore:
    latitude: float
    longitude: float
    purpose: str
    beneficial: Tuple[Dict[str, Any], ...]
    challenging: Tuple[Dict[str, Any], ...]
    neutral: Tuple[Dict[str, Any], ...]
    total_score: float
    purpose_multiplier: float
    local: Dict[str, Any] = field(default_factory=dict)
    overall_score: float = 0.0

    @property
    def recommendations(self) -> List[Dict[str, str]]:
        return recommendations(self.overall_score, self.purpose)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "location": {"latitude": self.latitude, "longitude": self.longitude},
            "purpose": self.purpose,
            "line_influences": {
                "beneficial": list(self.beneficial),
                "challenging": list(self.challenging),
                "neutral": list(self.neutral),
                "total_score": self.total_score,
            },
            "purpose_multiplier": self.purpose_multiplier,
            "local_factors": self.local,
            "overall_score": self.overall_score,
            "recommendations": self.recommendations,
        }


# ── lines ────────────────────────────────────────────────────────────────────
PositionsLike = Union[Chart, Mapping[str, Any]]


def _rows(source: PositionsLike) -> Tuple[List[PlanetaryPosition], float]:
    if isinstance(source, Chart):
        return list(source.positions.values()), source.julian_day or J2000_JD
    rows: List[PlanetaryPosition] = []
    for name, v in source.items():
        body = canonical_body_name(name)
        if isinstance(v, PlanetaryPosition):
            rows.append(v)
        elif isinstance(v, Mapping):
            rows.append(PlanetaryPosition(body, require_finite(v.get("longitude"), [body, "longitude"]), v.get("latitude")))
        else:
            rows.append(PlanetaryPosition(body, require_finite(v, [body, "longitude"])))
    return rows, J2000_JD


def planetary_lines(
    source: PositionsLike,
    bodies: Optional[Iterable[str]] = None,
    include_parallels: bool = False,
) -> List[GeoLine]:
    """8 meridian lines per body (plus one declination parallel if asked)."""
    rows, jd = _rows(source)
    wanted = None if bodies is None else {canonical_body_name(b) for b in bodies}
    out: List[GeoLine] = []
    for p in rows:
        if wanted is not None and p.name not in wanted:
            continue
        for aspect, offset, strength in LINE_ASPECTS:
            out.append(GeoLine(p.name, aspect, strength, longitude=normalize_angle(p.longitude + offset)))
        if include_parallels:
            _, dec = ecliptic_to_equatorial(p.longitude, p.latitude or 0.0, jd)
            out.append(GeoLine(p.name, "parallel", PARALLEL_STRENGTH, latitude=round(dec, 6)))
    return out


def line_meaning(planet: str, aspect: str) -> str:
    """Interpretive meaning of a planet/aspect line; generic text for unlisted pairs."""
    return LINE_MEANINGS.get(planet, {}).get(aspect) or f"{planet} {aspect} influence"


def describe_line(line: GeoLine) -> str:
    meaning = line_meaning(line.planet, line.aspect)
    if line.is_parallel:
        return f"{line.planet} parallel at latitude {line.latitude:.2f}°: {meaning}"
    return f"{line.planet} {line.aspect} line at longitude {line.longitude:.2f}° (strength {line.strength:.1f}): {meaning}"


def _classify(line: GeoLine) -> str:
    if line.aspect in BENEFICIAL_LINE_ASPECTS or line.planet in BENEFICIAL_LINE_PLANETS:
        return "beneficial"
    if line.aspect in CHALLENGING_LINE_ASPECTS or line.planet in CHALLENGING_LINE_PLANETS:
        return "challenging"
    return "neutral"


# ── local factors & recommendations ──────────────────────────────────────────
def _latitude_band(latitude: float) -> Tuple[str, float]:
    if abs(latitude) > _COLD_LATITUDE:
        return "cold", -10.0
    if abs(latitude) < _TROPICAL_LATITUDE:
        return "tropical", 5.0
    return "temperate", 0.0


def local_factors(latitude: float, longitude: float) -> Dict[str, Any]:
    """Latitude band and a geomagnetic proxy; `adjustment` is added to the overall score."""
    lat, lon = parse_latlon(latitude, longitude)
    band, band_score = _latitude_band(lat)
    strength = float(np.cos(np.radians(abs(lat)))) * 10.0
    geo_score = 2.0 if strength > 5.0 else 0.0
    return {
        "latitude_band": band,
        "latitude_score": band_score,
        "geomagnetic_strength": round(strength, 4),
        "geomagnetic_score": geo_score,
        "adjustment": round(_LOCAL_WEIGHT * (band_score + geo_score), 4),
    }


_BANDS: Tuple[Tuple[float, str, str, str], ...] = (
    (80.0, "excellent", "Excellent astrological compatibility for {purpose}: strong planetary support",
     "Proceed with confidence"),
    (60.0, "good", "Good compatibility with some beneficial influences",
     "Consider timing and preparation"),
    (40.0, "moderate", "Moderate compatibility: positive and challenging influences balance out",
     "Focus on personal growth opportunities"),
)


def recommendations(overall_score: float, purpose: str = "general") -> List[Dict[str, str]]:
    for bound, kind, msg, action in _BANDS:
        if overall_score > bound:
            return [{"type": kind, "message": msg.format(purpose=purpose), "action": action}]
    return [{
        "type": "challenging",
        "message": "Challenging location astrologically: significant growth opportunities",
        "action": "Consider alternative locations or extended preparation",
    }]


# ── scoring ──────────────────────────────────────────────────────────────────
def _overall(total: float, multiplier: float, adjustment: float) -> float:
    raw = _NEUTRAL_SCORE + _SCORE_SCALE * total * multiplier + adjustment
    return round(max(0.0, min(100.0, raw)), 2)


def score_location(
    lines: Sequence[GeoLine],
    latitude: float,
    longitude: float,
    purpose: str = "general",
) -> LocationScore:
    lat, lon = parse_latlon(latitude, longitude)
    p = parse_purpose(purpose)
    multiplier = PURPOSE_MULTIPLIERS[p]

    buckets: Dict[str, List[Dict[str, Any]]] = {"beneficial": [], "challenging": [], "neutral": []}
    total = 0.0
    for line in lines:
        orb = line.orb
        d = line.distance_to(lat, lon)
        if orb <= 0.0 or d > orb:
            continue
        influence = line.strength * (1.0 - d / orb)
        kind = _classify(line)
        buckets[kind].append({
            **line.to_dict(),
            "distance": round(d, 4),
            "orb": round(orb, 4),
            "influence": round(influence, 4),
        })
        if kind == "beneficial":
            total += influence
        elif kind == "challenging":
            total -= _CHALLENGE_FACTOR * influence

    local = local_factors(lat, lon)
    return LocationScore(
        latitude=lat,
        longitude=lon,
        purpose=p,
        beneficial=tuple(buckets["beneficial"]),
        challenging=tuple(buckets["challenging"]),
        neutral=tuple(buckets["neutral"]),
        total_score=round(total, 4),
        purpose_multiplier=multiplier,
        local=local,
        overall_score=_overall(total, multiplier, local["adjustment"]),
    )


def rank_locations(
    lines: Sequence[GeoLine],
    candidates: Sequence[Tuple[float, float]],
    purpose: str = "general",
) -> List[Dict[str, Any]]:
    """
    Score many (lat, lon) candidates at once and return them best-first.

    Equal scores keep input order. Each row carries the candidate's input
    `index`, coordinates and `overall_score`.
    """
    p = parse_purpose(purpose)
    multiplier = PURPOSE_MULTIPLIERS[p]
    coords = [parse_latlon(lat, lon) for lat, lon in candidates]
    if not coords:
        return []
    lat = np.array([c[0] for c in coords], dtype=float)
    lon = np.mod(np.array([c[1] for c in coords], dtype=float), 360.0)

    total = np.zeros(len(coords))
    for line in lines:
        orb = line.orb
        if orb <= 0.0:
            continue
        if line.is_parallel:
            d = np.abs(lat - line.latitude)
        else:
            d = np.mod(np.abs(lon - line.longitude), 360.0)
            d = np.where(d > 180.0, 360.0 - d, d)
        influence = np.where(d <= orb, line.strength * (1.0 - d / orb), 0.0)
        kind = _classify(line)
        if kind == "beneficial":
            total += influence
        elif kind == "challenging":
            total -= _CHALLENGE_FACTOR * influence

    abs_lat = np.abs(lat)
    band = np.where(abs_lat > _COLD_LATITUDE, -10.0, np.where(abs_lat < _TROPICAL_LATITUDE, 5.0, 0.0))
    geo = np.where(np.cos(np.radians(abs_lat)) * 10.0 > 5.0, 2.0, 0.0)
    adjustment = _LOCAL_WEIGHT * (band + geo)
    overall = np.clip(_NEUTRAL_SCORE + _SCORE_SCALE * total * multiplier + adjustment, 0.0, 100.0)
    overall = np.round(overall, 2)

    # stable sort on -score keeps input order for ties
    order = np.argsort(-overall, kind="stable")
    return [
        {
            "index": int(i),
            "latitude": coords[i][0],
            "longitude": coords[i][1],
            "overall_score": float(overall[i]),
            "total_score": round(float(total[i]), 4),
        }
        for i in order
    ]
