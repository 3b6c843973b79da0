# astrocore/core/doshas.py
"""
Dosha (affliction) detectors.

Each detector is `Chart -> PatternResult` and follows the same four steps:
precondition, declarative intensity rules, classification, remedies.
House numbers come from the chart's own cusps.

    kalasarpa_dosha     all classical planets hemmed on one side of the nodal axis
    pitru_dosha         Sun / Moon / Rahu / Saturn in the 9th house
    guru_chandal_dosha  Jupiter conjunct Saturn
    sarp_dosha          Rahu or Ketu in the 5th or 9th house
    manglik_dosha       Mars in 1/4/7/8/12 from the lagna or the Moon
"""
from __future__ import annotations

from typing import Any, Dict, List, NamedTuple, Tuple

from astrocore.core.astronomy import angular_separation, is_between
from astrocore.core.chart import Chart
from astrocore.core.constants import (
    BENEFICS,
    CLASSICAL_PLANETS,
    DEBILITATION_SIGNS,
    DUSTHANA_HOUSES,
    EXALTATION_SIGNS,
    MALEFICS,
    NODES,
    OUTER_PLANETS,
    OWN_SIGNS,
    SIGN_NAMES,
)
from astrocore.core.houses import house_from
from astrocore.core.patterns import (
    Detector,
    PatternResult,
    absent_result,
    missing_bodies,
    present_result,
)
from astrocore.core.scoring import CFG, ScoringRule, evaluate

__all__ = [
    "kalasarpa_dosha",
    "pitru_dosha",
    "guru_chandal_dosha",
    "sarp_dosha",
    "manglik_dosha",
    "DOSHA_DETECTORS",
    "KALASARPA_VARIANTS",
]

_PLANETS = CLASSICAL_PLANETS + OUTER_PLANETS


# ───────────────────────── Kalasarpa ─────────────────────────

# Named by Rahu's house, 1..12.
KALASARPA_VARIANTS: Tuple[str, ...] = (
    "Anant", "Kulik", "Vasuki", "Shankhpal", "Padma", "Mahapadma",
    "Takshak", "Karkotak", "Shankhachud", "Ghatak", "Vishdhar", "Sheshnag",
)


class _Hemmed(NamedTuple):
    chart: Chart
    participants: Tuple[str, ...]


_KALASARPA_RULES = (
    ScoringRule("participants", 2.0, lambda s: len(s.participants)),
    ScoringRule("malefics", 1.5, lambda s: sum(1 for p in s.participants if p in MALEFICS)),
    ScoringRule("benefics", -1.0, lambda s: sum(1 for p in s.participants if p in BENEFICS)),
    ScoringRule("dusthana", 1.0, lambda s: sum(1 for p in s.participants if s.chart.house_of(p) in DUSTHANA_HOUSES)),
)


def _hemmed(chart: Chart, start: float, end: float) -> Tuple[str, ...]:
    return tuple(b for b in _PLANETS if chart.has(b) and is_between(chart.longitude_of(b), start, end))


def kalasarpa_dosha(chart: Chart) -> PatternResult:
    key, name = "kalasarpa", "Kalasarpa Dosha"
    missing = missing_bodies(chart, NODES)
    if missing:
        return absent_result(key, name, reason=f"nodal positions missing: {', '.join(missing)}",
                             found=0, required=len(CLASSICAL_PLANETS))

    rahu, ketu = chart.longitude_of("Rahu"), chart.longitude_of("Ketu")
    arcs = {
        "rahu_to_ketu": _hemmed(chart, rahu, ketu),
        "ketu_to_rahu": _hemmed(chart, ketu, rahu),
    }
    # larger classical count wins; ties keep rahu_to_ketu
    direction = max(arcs, key=lambda d: sum(1 for b in arcs[d] if b in CLASSICAL_PLANETS))
    participants = arcs[direction]
    found = sum(1 for b in participants if b in CLASSICAL_PLANETS)
    required = len(CLASSICAL_PLANETS)
    if found < required:
        return absent_result(
            key, name,
            reason="classical planets are not all hemmed between Rahu and Ketu",
            found=found, required=required,
            details={"direction": direction},
        )

    score = evaluate(_KALASARPA_RULES, _Hemmed(chart, participants))
    rahu_house = chart.house_of("Rahu")
    axis_signs = {chart.sign_of("Rahu"), chart.sign_of("Ketu")}
    axis = f"{SIGN_NAMES[chart.sign_of('Rahu') - 1]}-{SIGN_NAMES[chart.sign_of('Ketu') - 1]} axis"

    effects = [
        "Delays in major life events",
        "Obstacles in career and relationships",
        "Spiritual and psychological challenges",
    ]
    if score.score >= 7:
        effects += ["Severe life obstacles", "Need for strong spiritual practices"]
    if axis_signs & {4, 10}:
        effects.append("Career and authority challenges")
    if axis_signs & {1, 7}:
        effects.append("Relationship and partnership issues")

    return present_result(
        key, name, score,
        indicators=[f"{p} hemmed {direction.replace('_', ' ')}" for p in participants],
        effects=effects,
        details={
            "direction": direction,
            "variant": KALASARPA_VARIANTS[rahu_house - 1],
            "axis": axis,
            "rahu_house": rahu_house,
            "participants": [
                {"planet": p, "longitude": chart.longitude_of(p),
                 "type": "benefic" if p in BENEFICS else "malefic", "house": chart.house_of(p)}
                for p in participants
            ],
        },
    )


# ───────────────────────── Pitru ─────────────────────────

_PITRU_INDICATORS: Tuple[Tuple[str, str, float, str], ...] = (
    ("Sun", "High", 3.0, "Strained relationship with father and paternal lineage"),
    ("Moon", "High", 3.0, "Emotional burdens inherited from the maternal line"),
    ("Rahu", "High", 3.0, "Unresolved ancestral karma and irregular rites"),
    ("Saturn", "Medium", 2.0, "Delayed blessings and duties owed to ancestors"),
)

_PITRU_RULES = tuple(
    ScoringRule(f"{body.lower()}_in_9th", points,
                lambda c, b=body: c.has(b) and c.house_of(b) == 9)
    for body, _sev, points, _eff in _PITRU_INDICATORS
)


def pitru_dosha(chart: Chart) -> PatternResult:
    key, name = "pitru", "Pitru Dosha"
    hits = [row for row in _PITRU_INDICATORS if chart.has(row[0]) and chart.house_of(row[0]) == 9]
    if not hits:
        return absent_result(key, name, reason="no indicator planet in the 9th house", found=0, required=1)

    score = evaluate(_PITRU_RULES, chart)
    effects = [eff for _b, _s, _p, eff in hits] + [
        "Ancestral karma affecting current life",
        "Challenges in father-child relationships",
        "Obstacles in spiritual progress",
    ]
    return present_result(
        key, name, score,
        indicators=[f"{body} in 9th house ({sev})" for body, sev, _p, _e in hits],
        effects=effects,
        details={"indicators": [
            {"planet": body, "house": 9, "severity": sev, "effect": eff}
            for body, sev, _p, eff in hits
        ]},
    )


# ───────────────────────── Guru Chandal ─────────────────────────

# Cancer, Libra, Capricorn for Jupiter; the fixed signs for Saturn.
_JUPITER_AFFLICTED_SIGNS = frozenset({4, 7, 10})
_SATURN_AFFLICTED_SIGNS = frozenset({2, 5, 8, 11})


class _Conjunction(NamedTuple):
    chart: Chart
    separation: float


_GURU_CHANDAL_RULES = (
    ScoringRule("closeness", -2.0, lambda s: s.separation),
    ScoringRule("jupiter_sign", 1.0, lambda s: s.chart.sign_of("Jupiter") in _JUPITER_AFFLICTED_SIGNS),
    ScoringRule("saturn_sign", 1.0, lambda s: s.chart.sign_of("Saturn") in _SATURN_AFFLICTED_SIGNS),
)


def guru_chandal_dosha(chart: Chart) -> PatternResult:
    key, name = "guru_chandal", "Guru Chandal Dosha"
    missing = missing_bodies(chart, ("Jupiter", "Saturn"))
    if missing:
        return absent_result(key, name, reason=f"positions missing: {', '.join(missing)}")

    orb = CFG.conjunction_orb_deg
    sep = angular_separation(chart.longitude_of("Jupiter"), chart.longitude_of("Saturn"))
    if sep > orb:
        return absent_result(key, name, reason="Jupiter and Saturn are not conjunct",
                             found=round(sep, 6), required=orb, details={"separation": round(sep, 6)})

    score = evaluate(_GURU_CHANDAL_RULES, _Conjunction(chart, sep), base=10.0)
    effects = [
        "Conflicts with teachers and authority in career",
        "Fluctuating wealth and financial judgement",
        "Stress-related health concerns",
    ]
    if score.score >= 7:
        effects += ["Major life challenges", "Need for spiritual guidance"]
    return present_result(
        key, name, score,
        indicators=[f"Jupiter conjunct Saturn within {sep:.2f}°"],
        effects=effects,
        details={
            "separation": round(sep, 6),
            "jupiter_longitude": chart.longitude_of("Jupiter"),
            "saturn_longitude": chart.longitude_of("Saturn"),
            "house": chart.house_of("Jupiter"),
        },
    )


# ───────────────────────── Sarp ─────────────────────────

_SARP_HOUSES = (5, 9)
_SARP_EFFECTS = {
    5: "Challenges with progeny and creative pursuits",
    9: "Obstacles to fortune and paternal blessings",
}

_SARP_RULES = (
    ScoringRule("indicators", 3.0, lambda hits: len(hits)),
    ScoringRule("ninth_house", 2.0, lambda hits: sum(1 for _p, h in hits if h == 9)),
    ScoringRule("rahu", 1.0, lambda hits: sum(1 for p, _h in hits if p == "Rahu")),
)


def sarp_dosha(chart: Chart) -> PatternResult:
    key, name = "sarp", "Sarp Dosha"
    missing = missing_bodies(chart, NODES)
    if missing:
        return absent_result(key, name, reason=f"nodal positions missing: {', '.join(missing)}",
                             found=0, required=1)

    hits = [(node, chart.house_of(node)) for node in NODES if chart.house_of(node) in _SARP_HOUSES]
    if not hits:
        return absent_result(key, name, reason="neither node occupies the 5th or 9th house",
                             found=0, required=1)

    score = evaluate(_SARP_RULES, hits)
    effects = [_SARP_EFFECTS[h] for _p, h in hits] + [
        "Spiritual and karmic challenges",
        "Obstacles in life progression",
    ]
    return present_result(
        key, name, score,
        indicators=[f"{p} in house {h}" for p, h in hits],
        effects=effects,
        details={"indicators": [{"planet": p, "house": h, "effect": _SARP_EFFECTS[h]} for p, h in hits]},
    )


# ───────────────────────── Manglik ─────────────────────────

MANGLIK_HOUSES = frozenset({1, 4, 7, 8, 12})
_MARS_FRIENDLY_SIGNS = frozenset({5, 9, 12})
_MARS_ENEMY_SIGNS = frozenset({3, 6})
_CLOSE_BENEFIC_ORB = 5.0


def _mars_dignity(sign: int) -> Tuple[str, float]:
    if sign == EXALTATION_SIGNS["Mars"]:
        return "exalted", 1.5
    if sign in OWN_SIGNS["Mars"]:
        return "own", 1.2
    if sign == DEBILITATION_SIGNS["Mars"]:
        return "debilitated", 0.4
    if sign in _MARS_FRIENDLY_SIGNS:
        return "friendly", 1.0
    if sign in _MARS_ENEMY_SIGNS:
        return "enemy", 0.6
    return "neutral", 0.8


def _house_weight(house: int) -> float:
    if house == 7:
        return 10.0
    if house in (1, 4, 8, 12):
        return 7.0
    return 4.0


class _MarsContext(NamedTuple):
    chart: Chart
    mars: float

    def others(self) -> List[str]:
        return [b for b in self.chart.bodies if b != "Mars" and b in _PLANETS + NODES]

    def benefic_aspects(self) -> int:
        n = 0
        for b in self.others():
            if b not in BENEFICS:
                continue
            sep = angular_separation(self.chart.longitude_of(b), self.mars)
            n += sum(1 for angle in (60.0, 90.0, 120.0) if abs(sep - angle) <= CFG.aspect_orb_deg)
        return n

    def conjunct(self, benefic: bool) -> int:
        return sum(
            1 for b in self.others()
            if (b in BENEFICS) == benefic
            and angular_separation(self.chart.longitude_of(b), self.mars) <= CFG.conjunction_orb_deg
        )


_MANGLIK_RULES = (
    ScoringRule("benefic_aspects", -1.5, lambda m: m.benefic_aspects()),
    ScoringRule("malefic_conjunctions", 2.0, lambda m: m.conjunct(benefic=False)),
    ScoringRule("benefic_conjunctions", -3.0, lambda m: m.conjunct(benefic=True)),
)


def _manglik_cancellations(chart: Chart, ctx: _MarsContext, dignity: str) -> List[str]:
    out: List[str] = []
    if dignity == "own":
        out.append("Mars in own sign")
    if dignity == "exalted":
        out.append("Mars exalted")
    if chart.house_of("Mars") == 7:
        seventh = chart.bodies_in_house(7)
        if "Jupiter" in seventh or "Venus" in seventh:
            out.append("Benefic conjunction in 7th house")
    close = sorted(
        b for b in ctx.others()
        if b in BENEFICS and angular_separation(chart.longitude_of(b), ctx.mars) <= _CLOSE_BENEFIC_ORB
    )
    if close:
        out.append(f"Benefic aspects: {', '.join(b.lower() for b in close)}")
    return out


def manglik_dosha(chart: Chart) -> PatternResult:
    key, name = "manglik", "Manglik Dosha"
    if not chart.has("Mars"):
        return absent_result(key, name, reason="Mars position missing")

    mars_sign = chart.sign_of("Mars")
    from_lagna = house_from(chart.ascendant_sign, mars_sign)
    from_moon = house_from(chart.sign_of("Moon"), mars_sign)
    lagna_manglik = from_lagna in MANGLIK_HOUSES
    moon_manglik = from_moon in MANGLIK_HOUSES
    base_details: Dict[str, Any] = {
        "lagna_manglik": lagna_manglik,
        "moon_manglik": moon_manglik,
        "house_from_lagna": from_lagna,
        "house_from_moon": from_moon,
    }
    if not (lagna_manglik or moon_manglik):
        return absent_result(key, name, reason="Mars is not in a Manglik house from the lagna or the Moon",
                             found=0, required=1, details=base_details)

    ctx = _MarsContext(chart, chart.longitude_of("Mars"))
    house = chart.house_of("Mars")
    dignity, multiplier = _mars_dignity(mars_sign)
    score = evaluate(_MANGLIK_RULES, ctx, base=_house_weight(house) * multiplier)
    cancellations = _manglik_cancellations(chart, ctx, dignity)

    effects = ["Potential delays in marriage", "Challenges in marital harmony"]
    if house == 7:
        effects += ["Strong effects on spouse and marriage", "Possible health issues for partner"]
    elif house == 1:
        effects += ["Health and vitality concerns", "Aggressive tendencies"]
    elif house == 4:
        effects += ["Property and home-related challenges", "Emotional instability"]
    if score.score >= 8:
        effects += ["Significant life challenges", "Need for strong remedial measures"]

    indicators = []
    if lagna_manglik:
        indicators.append(f"Mars in house {from_lagna} from the lagna")
    if moon_manglik:
        indicators.append(f"Mars in house {from_moon} from the Moon")

    return present_result(
        key, name, score,
        indicators=indicators,
        effects=effects,
        cancelled=bool(cancellations),
        details={
            **base_details,
            "cancellations": cancellations,
            "mars": {
                "longitude": ctx.mars,
                "sign": mars_sign,
                "house": house,
                "dignity": dignity,
                "dignity_multiplier": multiplier,
            },
        },
    )


# Fixed run order for the orchestrator.
DOSHA_DETECTORS: Tuple[Tuple[str, str, Detector], ...] = (
    ("kalasarpa", "Kalasarpa Dosha", kalasarpa_dosha),
    ("pitru", "Pitru Dosha", pitru_dosha),
    ("guru_chandal", "Guru Chandal Dosha", guru_chandal_dosha),
    ("sarp", "Sarp Dosha", sarp_dosha),
    ("manglik", "Manglik Dosha", manglik_dosha),
)
