# astrocore/core/constants.py
# -*- coding: utf-8 -*-
"""
Core constants

Purpose
-------
Single source of truth for:
- body sets & canonical names (incl. lunar nodes)
- natural benefic / malefic classification
- zodiac signs, dignities and house groups
- astro-cartography line geometry (aspect offsets, strengths, orbs)
- purpose multipliers for location scoring
- time constants

Design
------
- Pure-Python, no external dependencies.
- Safe to import from any core module.
- Tables are tuples / frozensets / read-only mappings so callers cannot
  mutate them in place.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping, Tuple

__all__ = [
    # bodies
    "CLASSICAL_PLANETS", "OUTER_PLANETS", "NODES", "ALL_BODIES", "REQUIRED_BODIES",
    "BODY_ALIASES", "BENEFICS", "MALEFICS",
    # zodiac
    "SIGN_NAMES", "OWN_SIGNS", "EXALTATION_SIGNS", "DEBILITATION_SIGNS",
    "KENDRA_HOUSES", "TRIKONA_HOUSES", "DUSTHANA_HOUSES",
    # cartography
    "LINE_ASPECTS", "LINE_BASE_ORBS", "PARALLEL_STRENGTH", "PLANET_ORB_MULTIPLIERS",
    "PURPOSE_MULTIPLIERS", "BENEFICIAL_LINE_ASPECTS", "CHALLENGING_LINE_ASPECTS",
    "BENEFICIAL_LINE_PLANETS", "CHALLENGING_LINE_PLANETS", "LINE_MEANINGS",
    # time
    "J2000_JD", "DAYS_PER_CENTURY",
]

# ── canonical bodies ─────────────────────────────────────────────────────────
CLASSICAL_PLANETS: Tuple[str, ...] = (
    "Sun", "Moon", "Mercury", "Venus", "Mars", "Jupiter", "Saturn",
)
OUTER_PLANETS: Tuple[str, ...] = ("Uranus", "Neptune", "Pluto")
NODES: Tuple[str, ...] = ("Rahu", "Ketu")

# Stable output order for charts and line sets.
ALL_BODIES: Tuple[str, ...] = CLASSICAL_PLANETS + OUTER_PLANETS + NODES

REQUIRED_BODIES: Tuple[str, ...] = ("Sun", "Moon")

# Lower-cased / slugged input → canonical name.
BODY_ALIASES: Mapping[str, str] = MappingProxyType({
    **{b.lower(): b for b in ALL_BODIES},
    "northnode": "Rahu", "truenode": "Rahu", "meannode": "Rahu", "node": "Rahu",
    "southnode": "Ketu",
    "surya": "Sun", "chandra": "Moon", "budha": "Mercury", "shukra": "Venus",
    "mangal": "Mars", "guru": "Jupiter", "shani": "Saturn",
})

# Natural benefics / malefics. Outer planets are treated as malefic.
BENEFICS: FrozenSet[str] = frozenset({"Jupiter", "Venus", "Mercury", "Moon"})
MALEFICS: FrozenSet[str] = frozenset({
    "Sun", "Mars", "Saturn", "Rahu", "Ketu", "Uranus", "Neptune", "Pluto",
})

# ── zodiac (signs are 1-based: 1 = Aries … 12 = Pisces) ──────────────────────
SIGN_NAMES: Tuple[str, ...] = (
    "Aries", "Taurus", "Gemini", "Cancer", "Leo", "Virgo",
    "Libra", "Scorpio", "Sagittarius", "Capricorn", "Aquarius", "Pisces",
)

OWN_SIGNS: Mapping[str, Tuple[int, ...]] = MappingProxyType({
    "Sun": (5,),
    "Moon": (4,),
    "Mars": (1, 8),
    "Mercury": (3, 6),
    "Jupiter": (9, 12),
    "Venus": (2, 7),
    "Saturn": (10, 11),
})

EXALTATION_SIGNS: Mapping[str, int] = MappingProxyType({
    "Sun": 1, "Moon": 2, "Mars": 10, "Mercury": 6,
    "Jupiter": 4, "Venus": 12, "Saturn": 7,
})

DEBILITATION_SIGNS: Mapping[str, int] = MappingProxyType(
    {k: (v + 5) % 12 + 1 for k, v in EXALTATION_SIGNS.items()}
)

KENDRA_HOUSES: FrozenSet[int] = frozenset({1, 4, 7, 10})
TRIKONA_HOUSES: FrozenSet[int] = frozenset({1, 5, 9})
DUSTHANA_HOUSES: FrozenSet[int] = frozenset({6, 8, 12})

# ── astro-cartography lines ──────────────────────────────────────────────────
# (aspect, offset°, base strength). Squares/trines/sextiles appear twice
# (waxing and waning side), giving 8 lines per body.
LINE_ASPECTS: Tuple[Tuple[str, float, float], ...] = (
    ("conjunction", 0.0, 1.0),
    ("opposition", 180.0, 0.8),
    ("square", 90.0, 0.6),
    ("square", 270.0, 0.6),
    ("trine", 120.0, 0.7),
    ("trine", 240.0, 0.7),
    ("sextile", 60.0, 0.5),
    ("sextile", 300.0, 0.5),
)

LINE_BASE_ORBS: Mapping[str, float] = MappingProxyType({
    "conjunction": 2.0,
    "opposition": 1.5,
    "trine": 1.0,
    "square": 1.0,
    "sextile": 0.8,
    "parallel": 1.0,
})

PARALLEL_STRENGTH: float = 0.5

PLANET_ORB_MULTIPLIERS: Mapping[str, float] = MappingProxyType({
    "Sun": 1.2, "Moon": 1.0, "Mercury": 0.8, "Venus": 1.0, "Mars": 1.1,
    "Jupiter": 1.3, "Saturn": 1.4, "Uranus": 1.2, "Neptune": 1.1, "Pluto": 1.5,
    "Rahu": 1.0, "Ketu": 1.0,
})

PURPOSE_MULTIPLIERS: Mapping[str, float] = MappingProxyType({
    "general": 1.0,
    "career": 1.2,
    "relationship": 1.1,
    "health": 1.3,
    "spiritual": 1.4,
})

BENEFICIAL_LINE_ASPECTS: FrozenSet[str] = frozenset({"trine", "sextile"})
CHALLENGING_LINE_ASPECTS: FrozenSet[str] = frozenset({"opposition", "square"})
BENEFICIAL_LINE_PLANETS: FrozenSet[str] = frozenset({"Jupiter", "Venus"})
CHALLENGING_LINE_PLANETS: FrozenSet[str] = frozenset({"Saturn", "Mars", "Pluto"})

# Interpretive meaning of each planet × aspect line.
LINE_MEANINGS: Mapping[str, Mapping[str, str]] = MappingProxyType({
    "Sun": {
        "conjunction": "Leadership, vitality, recognition, and self-expression",
        "opposition": "Challenges to ego, need for balance in authority",
        "square": "Growth through overcoming obstacles to self-identity",
        "trine": "Natural flow of creative and leadership energy",
        "sextile": "Opportunities for self-development and recognition",
    },
    "Moon": {
        "conjunction": "Emotional sensitivity, family connections, intuition",
        "opposition": "Emotional challenges, need for emotional balance",
        "square": "Growth through emotional processing and healing",
        "trine": "Natural emotional harmony and family support",
        "sextile": "Supportive emotional environment and nurturing",
    },
    "Mercury": {
        "conjunction": "Communication, learning, business, and intellectual pursuits",
        "opposition": "Communication challenges, need for clear expression",
        "square": "Growth through overcoming mental obstacles",
        "trine": "Natural flow of communication and learning",
        "sextile": "Opportunities for education and skill development",
    },
    "Venus": {
        "conjunction": "Love, beauty, finances, relationships, and harmony",
        "opposition": "Relationship challenges, need for balance in partnerships",
        "square": "Growth through overcoming financial or relationship obstacles",
        "trine": "Natural flow of love and financial abundance",
        "sextile": "Opportunities for romance and financial gain",
    },
    "Mars": {
        "conjunction": "Energy, action, courage, physical activity, and drive",
        "opposition": "Conflicts, need for controlled energy",
        "square": "Growth through overcoming aggression or impatience",
        "trine": "Natural flow of physical energy and motivation",
        "sextile": "Opportunities for physical achievement and leadership",
    },
    "Jupiter": {
        "conjunction": "Expansion, luck, wisdom, spirituality, and travel",
        "opposition": "Excessive optimism, need for realistic goals",
        "square": "Growth through overcoming limitations in belief systems",
        "trine": "Natural flow of abundance and spiritual growth",
        "sextile": "Opportunities for learning and philosophical development",
    },
    "Saturn": {
        "conjunction": "Discipline, responsibility, career, structure, and limitations",
        "opposition": "Authority issues, need for self-discipline",
        "square": "Growth through overcoming fears and restrictions",
        "trine": "Natural flow of achievement and stability",
        "sextile": "Opportunities for career advancement and maturity",
    },
    "Uranus": {
        "conjunction": "Innovation, freedom, technology, change, and rebellion",
        "opposition": "Sudden changes, need for stability",
        "square": "Growth through embracing innovation and change",
        "trine": "Natural flow of creative and technological breakthroughs",
        "sextile": "Opportunities for progressive change and liberation",
    },
    "Neptune": {
        "conjunction": "Spirituality, creativity, intuition, dreams, and compassion",
        "opposition": "Illusions, need for grounding",
        "square": "Growth through overcoming confusion and escapism",
        "trine": "Natural flow of artistic and spiritual inspiration",
        "sextile": "Opportunities for creative expression and healing",
    },
    "Pluto": {
        "conjunction": "Transformation, power, rebirth, intensity, and depth",
        "opposition": "Power struggles, need for empowerment",
        "square": "Growth through profound transformation",
        "trine": "Natural flow of deep psychological insight",
        "sextile": "Opportunities for healing and personal evolution",
    },
})

# ── time constants ───────────────────────────────────────────────────────────
J2000_JD: float = 2451545.0
DAYS_PER_CENTURY: float = 36525.0


def _table_sizes() -> Dict[str, int]:
    return {"signs": len(SIGN_NAMES), "line_aspects": len(LINE_ASPECTS)}


# Guard at import to catch accidental table edits early
assert _table_sizes() == {"signs": 12, "line_aspects": 8}, _table_sizes()
