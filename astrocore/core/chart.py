# astrocore/core/chart.py
"""
Canonical in-memory birth chart.

Positions arrive from an external ephemeris; this module only normalizes and
validates them. A `Chart` is validated once on construction (12 cusps,
required bodies, finite normalized longitudes, coordinate bounds) so that
every detector downstream can trust its shape.

Public API:
    PlanetaryPosition(name, longitude, latitude=None, speed=None, retrograde=None)
    Chart(...)                      # validated value object
    build_chart(positions, ascendant=None, cusps=None, **options) -> Chart
    Chart.from_dict(payload) -> Chart
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from astrocore.core.astronomy import (
    angular_separation,
    ascendant_and_midheaven,
    lahiri_ayanamsa,
    normalize_angle,
)
from astrocore.core.constants import ALL_BODIES, BODY_ALIASES, REQUIRED_BODIES, SIGN_NAMES
from astrocore.core.houses import build_cusps, house_of, sign_of, validate_cusps
from astrocore.core.timescales import BirthMoment
from astrocore.core.validators import (
    ValidationError,
    _err,
    parse_house_system,
    parse_latlon,
    parse_zodiac,
    require_finite,
)

__all__ = ["PlanetaryPosition", "Chart", "build_chart", "canonical_body_name"]

# supplied Ketu may differ from Rahu + 180 by at most this much (degrees)
_NODE_AXIS_TOL = 0.01


def canonical_body_name(name: Any) -> str:
    """'north node' / 'RAHU' / 'True Node' → 'Rahu'; unknown names pass through stripped."""
    raw = str(name or "").strip()
    if not raw:
        raise ValidationError(_err("positions", "body name must be a non-empty string"))
    slug = "".join(ch for ch in raw.lower() if ch.isalnum())
    return BODY_ALIASES.get(slug, raw)


# ───────────────────────────── positions ─────────────────────────────

@dataclass(frozen=True)
class PlanetaryPosition:
    name: str
    longitude: float
    latitude: Optional[float] = None
    speed: Optional[float] = None
    retrograde: Optional[bool] = None

    def __post_init__(self) -> None:
        loc = ["positions", self.name]
        object.__setattr__(self, "longitude", normalize_angle(require_finite(self.longitude, loc + ["longitude"])))
        if self.latitude is not None:
            lat = require_finite(self.latitude, loc + ["latitude"])
            if not (-90.0 <= lat <= 90.0):
                raise ValidationError(_err(loc + ["latitude"], "ecliptic latitude must be between -90 and 90"))
            object.__setattr__(self, "latitude", lat)
        if self.speed is not None:
            object.__setattr__(self, "speed", require_finite(self.speed, loc + ["speed"]))
        if self.retrograde is None:
            object.__setattr__(self, "retrograde", bool(self.speed is not None and self.speed < 0.0))

    @property
    def sign(self) -> int:
        return sign_of(self.longitude)

    @property
    def degree_in_sign(self) -> float:
        return self.longitude - (self.sign - 1) * 30.0

    def shifted(self, delta: float) -> "PlanetaryPosition":
        return PlanetaryPosition(self.name, self.longitude + delta, self.latitude, self.speed, self.retrograde)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "longitude": self.longitude,
            "latitude": self.latitude,
            "speed": self.speed,
            "retrograde": self.retrograde,
            "sign": self.sign,
            "sign_name": SIGN_NAMES[self.sign - 1],
            "degree_in_sign": round(self.degree_in_sign, 6),
        }


def _body_order(name: str) -> Tuple[int, str]:
    return (ALL_BODIES.index(name) if name in ALL_BODIES else len(ALL_BODIES), name)


# ───────────────────────────── chart ─────────────────────────────

@dataclass(frozen=True)
class Chart:
    ascendant: float
    cusps: Tuple[float, ...]
    positions: Mapping[str, PlanetaryPosition]
    house_system: str = "whole_sign"
    zodiac: str = "tropical"
    ayanamsa: Optional[float] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    julian_day: Optional[float] = None
    _houses: Mapping[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        asc = normalize_angle(require_finite(self.ascendant, "ascendant"))
        object.__setattr__(self, "ascendant", asc)
        cusps = validate_cusps(self.cusps, asc, anchored=self.house_system != "whole_sign")
        object.__setattr__(self, "cusps", tuple(cusps))

        if (self.latitude is None) != (self.longitude is None):
            raise ValidationError(_err(["latitude", "longitude"], "latitude and longitude must be given together"))
        if self.latitude is not None:
            lat, lon = parse_latlon(self.latitude, self.longitude)
            object.__setattr__(self, "latitude", lat)
            object.__setattr__(self, "longitude", lon)

        missing = [b for b in REQUIRED_BODIES if b not in self.positions]
        if missing:
            raise ValidationError([_err(["positions", b], "required body missing", "value_error.missing") for b in missing])
        for key, pos in self.positions.items():
            if not isinstance(pos, PlanetaryPosition) or pos.name != key:
                raise ValidationError(_err(["positions", str(key)], "position entry does not match its key"))

        ordered = {k: self.positions[k] for k in sorted(self.positions, key=_body_order)}
        object.__setattr__(self, "positions", MappingProxyType(ordered))
        object.__setattr__(self, "_houses", MappingProxyType(
            {k: house_of(p.longitude, cusps) for k, p in ordered.items()}
        ))

    # ---- lookups ----
    @property
    def bodies(self) -> Tuple[str, ...]:
        return tuple(self.positions)

    @property
    def ascendant_sign(self) -> int:
        return sign_of(self.ascendant)

    def has(self, body: str) -> bool:
        return body in self.positions

    def longitude_of(self, body: str) -> float:
        return self.positions[body].longitude

    def sign_of(self, body: str) -> int:
        return self.positions[body].sign

    def house_of(self, body: str) -> int:
        return self._houses[body]

    def bodies_in_house(self, house: int) -> List[str]:
        return [b for b, h in self._houses.items() if h == house]

    # ---- serialization ----
    def to_dict(self) -> Dict[str, Any]:
        positions = {}
        for name, pos in self.positions.items():
            row = pos.to_dict()
            row["house"] = self._houses[name]
            positions[name] = row
        return {
            "ascendant": self.ascendant,
            "ascendant_sign": SIGN_NAMES[self.ascendant_sign - 1],
            "cusps": list(self.cusps),
            "house_system": self.house_system,
            "zodiac": self.zodiac,
            "ayanamsa": self.ayanamsa,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "julian_day": self.julian_day,
            "positions": positions,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Chart":
        """Build from an API-shaped payload (see `build_chart` for the keys)."""
        if not isinstance(payload, Mapping):
            raise ValidationError(_err([], "chart payload must be an object", "type_error.dict"))
        positions = payload.get("positions", payload.get("planets"))
        if positions is None:
            raise ValidationError(_err("positions", "field required", "value_error.missing"))
        jd = payload.get("julian_day")
        if jd is None and isinstance(payload.get("birth"), Mapping):
            jd = BirthMoment.from_dict(payload["birth"]).julian_day
        return build_chart(
            positions,
            ascendant=payload.get("ascendant"),
            cusps=payload.get("cusps"),
            house_system=payload.get("house_system"),
            latitude=payload.get("latitude"),
            longitude=payload.get("longitude"),
            julian_day=jd,
            zodiac=payload.get("zodiac"),
        )


# ───────────────────────────── builder ─────────────────────────────

PositionsInput = Union[Mapping[str, Any], Iterable[Mapping[str, Any]]]


def _coerce_position(name: str, value: Any) -> PlanetaryPosition:
    if isinstance(value, PlanetaryPosition):
        return PlanetaryPosition(name, value.longitude, value.latitude, value.speed, value.retrograde)
    if isinstance(value, Mapping):
        if "longitude" not in value:
            raise ValidationError(_err(["positions", name, "longitude"], "field required", "value_error.missing"))
        retro = value.get("retrograde")
        return PlanetaryPosition(
            name,
            value["longitude"],
            value.get("latitude"),
            value.get("speed"),
            None if retro is None else bool(retro),
        )
    return PlanetaryPosition(name, value)


def _collect_positions(positions: PositionsInput) -> Dict[str, PlanetaryPosition]:
    if isinstance(positions, Mapping):
        items = list(positions.items())
    elif isinstance(positions, (list, tuple)):
        items = []
        for i, row in enumerate(positions):
            if not isinstance(row, Mapping) or not row.get("name"):
                raise ValidationError(_err(["positions", str(i)], "each position needs a 'name'"))
            items.append((row["name"], row))
    else:
        raise ValidationError(_err("positions", "positions must be an object or a list", "type_error"))

    out: Dict[str, PlanetaryPosition] = {}
    for raw_name, value in items:
        name = canonical_body_name(raw_name)
        if name in out:
            raise ValidationError(_err(["positions", name], "duplicate body"))
        out[name] = _coerce_position(name, value)

    # Ketu is always opposite Rahu.
    if "Rahu" in out and "Ketu" in out:
        gap = angular_separation(out["Rahu"].longitude, out["Ketu"].longitude)
        if abs(gap - 180.0) > _NODE_AXIS_TOL:
            raise ValidationError(_err(
                ["positions", "Ketu"], f"Ketu must be opposite Rahu (separation {gap:.4f}°)", "value_error.node_axis",
            ))
    elif "Rahu" in out:
        rahu = out["Rahu"]
        out["Ketu"] = PlanetaryPosition(
            "Ketu", rahu.longitude + 180.0,
            None if rahu.latitude is None else -rahu.latitude,
            rahu.speed, rahu.retrograde,
        )
    return out


def build_chart(
    positions: PositionsInput,
    ascendant: Optional[float] = None,
    cusps: Optional[Sequence[float]] = None,
    *,
    house_system: Optional[str] = None,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    julian_day: Optional[float] = None,
    zodiac: Optional[str] = "tropical",
) -> Chart:
    """
    Normalize ephemeris output into a validated Chart.

    positions: {name: longitude | {longitude, latitude?, speed?, retrograde?}}
               or [{name, longitude, ...}, ...]; names are canonicalized.
    ascendant: tropical longitude; computed from sidereal time when omitted
               and julian_day/latitude/longitude are all supplied.
    cusps:     explicit 12 cusps, labelled "custom" and anchored on the
               ascendant unless `house_system` names another system;
               otherwise built for `house_system` (default whole_sign).
    zodiac:    'sidereal' subtracts the Lahiri ayanamsa (needs julian_day).
    """
    # explicit cusps come from an external house engine; label them, never rebuild
    system = parse_house_system(house_system) if cusps is None else str(house_system or "custom")
    mode = parse_zodiac(zodiac)
    bodies = _collect_positions(positions)

    jd = None if julian_day is None else require_finite(julian_day, "julian_day")
    if latitude is not None or longitude is not None:
        latitude, longitude = parse_latlon(latitude, longitude)

    if ascendant is None:
        if jd is None or latitude is None:
            raise ValidationError(_err(
                "ascendant", "ascendant required unless julian_day, latitude and longitude are given",
                "value_error.missing",
            ))
        asc, _mc = ascendant_and_midheaven(jd, latitude, longitude)
    else:
        asc = require_finite(ascendant, "ascendant")

    ayanamsa: Optional[float] = None
    shifted_cusps: Optional[List[float]] = None
    if mode == "sidereal":
        if jd is None:
            raise ValidationError(_err("julian_day", "julian_day required for the sidereal zodiac", "value_error.missing"))
        ayanamsa = lahiri_ayanamsa(jd)
        bodies = {k: p.shifted(-ayanamsa) for k, p in bodies.items()}
        asc = asc - ayanamsa
        if cusps is not None:
            shifted_cusps = [require_finite(c, ["cusps", str(i)]) - ayanamsa for i, c in enumerate(cusps)]

    asc = normalize_angle(asc)
    if cusps is None:
        final_cusps = build_cusps(asc, system)
    else:
        final_cusps = shifted_cusps if shifted_cusps is not None else list(cusps)

    return Chart(
        ascendant=asc,
        cusps=tuple(final_cusps),
        positions=bodies,
        house_system=system,
        zodiac=mode,
        ayanamsa=ayanamsa,
        latitude=latitude,
        longitude=longitude,
        julian_day=jd,
    )
