# astrocore/core/yoga.py
from __future__ import annotations

from typing import Dict, List, NamedTuple, Tuple

from astrocore.core.astronomy import angular_separation
from astrocore.core.chart import Chart
from astrocore.core.constants import (
    DEBILITATION_SIGNS,
    DUSTHANA_HOUSES,
    EXALTATION_SIGNS,
    KENDRA_HOUSES,
    OWN_SIGNS,
    TRIKONA_HOUSES,
)
from astrocore.core.houses import house_from
from astrocore.core.patterns import Detector, PatternResult, absent_result, missing_bodies, present_result
from astrocore.core.scoring import ScoringRule, evaluate

__all__ = [
    "gaja_kesari",
    "gaja_kesari_yoga",
    "budhaditya_yoga",
    "chandra_mangala_yoga",
    "pancha_mahapurusha_yoga",
    "YOGA_DETECTORS",
]

# Mercury closer than this to the Sun is combust.
_COMBUSTION_ORB = 3.0

_MAHAPURUSHA: Tuple[Tuple[str, str], ...] = (
    ("Mars", "Ruchaka"),
    ("Mercury", "Bhadra"),
    ("Jupiter", "Hamsa"),
    ("Venus", "Malavya"),
    ("Saturn", "Sasa"),
)


def gaja_kesari(jupiter_sign: int, moon_sign: int) -> bool:
    # Jupiter in kendra (1,4,7,10) from the Moon
    return house_from(moon_sign, jupiter_sign) in KENDRA_HOUSES


def _dignified(body: str, sign: int) -> bool:
    return sign in OWN_SIGNS.get(body, ()) or EXALTATION_SIGNS.get(body) == sign


def _debilitated(body: str, sign: int) -> bool:
    return DEBILITATION_SIGNS.get(body) == sign


# ───────────────────────── Gaja Kesari ─────────────────────────

_GAJA_KESARI_RULES = (
    ScoringRule("jupiter_dignity", 2.0, lambda c: _dignified("Jupiter", c.sign_of("Jupiter"))),
    ScoringRule("jupiter_debilitated", -2.0, lambda c: _debilitated("Jupiter", c.sign_of("Jupiter"))),
    ScoringRule("moon_dignity", 1.0, lambda c: _dignified("Moon", c.sign_of("Moon"))),
    ScoringRule("kendra_from_lagna", 1.0, lambda c: c.house_of("Jupiter") in KENDRA_HOUSES),
    ScoringRule("dusthana", -1.0, lambda c: c.house_of("Jupiter") in DUSTHANA_HOUSES),
)


def gaja_kesari_yoga(chart: Chart) -> PatternResult:
    key, name = "gaja_kesari", "Gaja Kesari Yoga"
    if not chart.has("Jupiter"):
        return absent_result(key, name, kind="yoga", reason="Jupiter position missing")
    distance = house_from(chart.sign_of("Moon"), chart.sign_of("Jupiter"))
    if not gaja_kesari(chart.sign_of("Jupiter"), chart.sign_of("Moon")):
        return absent_result(key, name, kind="yoga", reason="Jupiter is not in a kendra from the Moon",
                             details={"house_from_moon": distance})
    score = evaluate(_GAJA_KESARI_RULES, chart, base=5.0)
    return present_result(
        key, name, score, kind="yoga",
        indicators=[f"Jupiter in house {distance} from the Moon"],
        effects=["Wisdom, reputation and lasting prosperity", "Respect from peers and authorities"],
        details={"house_from_moon": distance, "jupiter_house": chart.house_of("Jupiter")},
    )


# ───────────────────────── Budhaditya ─────────────────────────

class _SunMercury(NamedTuple):
    chart: Chart
    separation: float


_BUDHADITYA_RULES = (
    ScoringRule("combust", -2.0, lambda s: s.separation < _COMBUSTION_ORB),
    ScoringRule("mercury_dignity", 2.0, lambda s: _dignified("Mercury", s.chart.sign_of("Mercury"))),
    ScoringRule("sun_dignity", 1.0, lambda s: _dignified("Sun", s.chart.sign_of("Sun"))),
    ScoringRule("good_house", 1.0, lambda s: s.chart.house_of("Sun") in (KENDRA_HOUSES | TRIKONA_HOUSES)),
    ScoringRule("dusthana", -1.0, lambda s: s.chart.house_of("Sun") in DUSTHANA_HOUSES),
)


def budhaditya_yoga(chart: Chart) -> PatternResult:
    key, name = "budhaditya", "Budhaditya Yoga"
    if not chart.has("Mercury"):
        return absent_result(key, name, kind="yoga", reason="Mercury position missing")
    if chart.sign_of("Sun") != chart.sign_of("Mercury"):
        return absent_result(key, name, kind="yoga", reason="Sun and Mercury occupy different signs")
    sep = angular_separation(chart.longitude_of("Sun"), chart.longitude_of("Mercury"))
    score = evaluate(_BUDHADITYA_RULES, _SunMercury(chart, sep), base=5.0)
    effects = ["Sharp intellect and communication skills", "Success in education and administration"]
    if sep < _COMBUSTION_ORB:
        effects.append("Mercury combust: results arrive after effort")
    return present_result(
        key, name, score, kind="yoga",
        indicators=[f"Sun and Mercury together in house {chart.house_of('Sun')}"],
        effects=effects,
        details={"separation": round(sep, 6), "combust": sep < _COMBUSTION_ORB},
    )


# ───────────────────────── Chandra-Mangala ─────────────────────────

_CHANDRA_MANGALA_RULES = (
    ScoringRule("conjunction", 1.0, lambda c: c.sign_of("Moon") == c.sign_of("Mars")),
    ScoringRule("mars_dignity", 1.5, lambda c: _dignified("Mars", c.sign_of("Mars"))),
    ScoringRule("moon_dignity", 1.5, lambda c: _dignified("Moon", c.sign_of("Moon"))),
    ScoringRule("moon_debilitated", -1.5, lambda c: _debilitated("Moon", c.sign_of("Moon"))),
    ScoringRule("kendra", 1.0, lambda c: c.house_of("Moon") in KENDRA_HOUSES),
    ScoringRule("dusthana", -1.0, lambda c: c.house_of("Moon") in DUSTHANA_HOUSES),
)


def chandra_mangala_yoga(chart: Chart) -> PatternResult:
    key, name = "chandra_mangala", "Chandra-Mangala Yoga"
    if not chart.has("Mars"):
        return absent_result(key, name, kind="yoga", reason="Mars position missing")
    distance = house_from(chart.sign_of("Moon"), chart.sign_of("Mars"))
    if distance not in (1, 7):
        return absent_result(key, name, kind="yoga", reason="Moon and Mars are neither conjunct nor opposed",
                             details={"house_from_moon": distance})
    score = evaluate(_CHANDRA_MANGALA_RULES, chart, base=5.0)
    relation = "conjunct" if distance == 1 else "opposite"
    return present_result(
        key, name, score, kind="yoga",
        indicators=[f"Mars {relation} the Moon by sign"],
        effects=["Drive to earn and accumulate wealth", "Enterprising, decisive temperament"],
        details={"relation": relation},
    )


# ───────────────────────── Pancha Mahapurusha ─────────────────────────

def _mahapurusha_forming(chart: Chart) -> List[Dict[str, object]]:
    out: List[Dict[str, object]] = []
    for body, yoga_name in _MAHAPURUSHA:
        if not chart.has(body):
            continue
        sign = chart.sign_of(body)
        house = house_from(chart.ascendant_sign, sign)
        if house in KENDRA_HOUSES and _dignified(body, sign):
            out.append({
                "planet": body,
                "yoga": yoga_name,
                "house": house,
                "exalted": EXALTATION_SIGNS.get(body) == sign,
            })
    return out


_MAHAPURUSHA_RULES = (
    ScoringRule("additional_yogas", 1.0, lambda rows: max(0, len(rows) - 1)),
    ScoringRule("exalted", 1.0, lambda rows: sum(1 for r in rows if r["exalted"])),
)


def pancha_mahapurusha_yoga(chart: Chart) -> PatternResult:
    key, name = "pancha_mahapurusha", "Pancha Mahapurusha Yoga"
    rows = _mahapurusha_forming(chart)
    if not rows:
        missing = missing_bodies(chart, [b for b, _ in _MAHAPURUSHA])
        reason = "no planet in own or exalted sign in a kendra from the lagna"
        return absent_result(key, name, kind="yoga", reason=reason, found=0, required=1,
                             details={"missing": missing} if missing else None)
    score = evaluate(_MAHAPURUSHA_RULES, rows, base=6.0)
    return present_result(
        key, name, score, kind="yoga",
        indicators=[f"{r['yoga']} ({r['planet']} in house {r['house']})" for r in rows],
        effects=[f"{r['yoga']}: distinguished qualities of {r['planet']}" for r in rows],
        details={"yogas": rows},
    )


# Fixed run order for the orchestrator.
YOGA_DETECTORS: Tuple[Tuple[str, str, Detector], ...] = (
    ("gaja_kesari", "Gaja Kesari Yoga", gaja_kesari_yoga),
    ("budhaditya", "Budhaditya Yoga", budhaditya_yoga),
    ("chandra_mangala", "Chandra-Mangala Yoga", chandra_mangala_yoga),
    ("pancha_mahapurusha", "Pancha Mahapurusha Yoga", pancha_mahapurusha_yoga),
)
