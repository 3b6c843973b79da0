# astrocore/core/remedies.py
"""
Remedy catalog, per-pattern generation and cross-pattern merging.

Output shape is always {category: [remedy, ...]} with every category of
REMEDY_CATEGORIES present in that fixed order, so serialized results are
byte-stable for identical input.
"""
from __future__ import annotations

from collections import Counter
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from astrocore.core.scoring import CFG

__all__ = [
    "REMEDY_CATEGORIES",
    "REMEDY_CATALOG",
    "ESCALATIONS",
    "generate_remedies",
    "merge_remedies",
]

REMEDY_CATEGORIES: Tuple[str, ...] = (
    "ritual", "gemstone", "mantra", "spiritual", "charitable", "lifestyle",
)

_C = Mapping[str, Tuple[str, ...]]

_KALASARPA: _C = {
    "ritual": (
        "Kalasarpa Dosha Nivaran Puja",
        "Donation of black items",
        "Feeding the poor and needy",
    ),
    "gemstone": ("Hessonite (Gomed) for Rahu", "Cat's eye (Lehsunia) for Ketu"),
    "mantra": (
        "Om Rahave Namaha (Rahu mantra)",
        "Om Ketave Namaha (Ketu mantra)",
        "Maha Mrityunjaya Mantra",
    ),
    "spiritual": (
        "Regular meditation and spiritual practices",
        "Visiting temples and holy places",
    ),
    "lifestyle": ("Avoid major ventures during Rahu-Ketu transits over natal nodes",),
}

_PITRU: _C = {
    "ritual": (
        "Pitru Paksha ceremonies",
        "Tarpan rituals for ancestors",
        "Shraddha ceremonies",
    ),
    "mantra": ("Pitru Gayatri Mantra",),
    "spiritual": ("Regular ancestor prayers", "Visiting ancestral temples"),
    "charitable": (
        "Donation to Brahmins",
        "Feeding the poor and needy",
        "Planting trees in ancestors' names",
    ),
    "lifestyle": ("Respect and care for elders and father figures",),
}

_GURU_CHANDAL: _C = {
    "ritual": (
        "Jupiter-Saturn specific pujas",
        "Donation of yellow and blue items",
        "Fasting on Thursdays and Saturdays",
    ),
    "gemstone": ("Yellow Sapphire (for Jupiter)", "Blue Sapphire (for Saturn)"),
    "mantra": (
        "Om Brim Brihaspataye Namaha (Jupiter)",
        "Om Sham Shanaischaraye Namaha (Saturn)",
    ),
    "lifestyle": ("Seek guidance from teachers and mentors before major decisions",),
}

_SARP: _C = {
    "ritual": (
        "Sarp Dosha Nivaran Puja",
        "Offering milk at a Shiva temple",
        "Worship of Lord Shiva",
    ),
    "gemstone": ("Hessonite (Gomed) for Rahu", "Cat's eye (Lehsunia) for Ketu"),
    "mantra": (
        "Om Rahave Namaha (Rahu mantra)",
        "Om Ketave Namaha (Ketu mantra)",
        "Maha Mrityunjaya Mantra",
    ),
}

_MANGLIK: _C = {
    "ritual": (
        "Kumbh Vivah (symbolic marriage ceremony)",
        "Tuesday fasting and prayers",
        "Donation of red items to temples",
    ),
    "gemstone": ("Red Coral (for Mars strengthening)", "Pearl (for emotional balance)"),
    "mantra": (
        "Om Angarakaya Namaha (Mars mantra)",
        "Hanuman Chalisa recitation",
        "Mangal Stotra chanting",
    ),
    "lifestyle": (
        "Compatibility assessment before marriage",
        "Counseling for relationship harmony",
        "Stress management techniques",
    ),
}

# Yogas: strengthening practices rather than remedies.
_GAJA_KESARI: _C = {
    "mantra": ("Om Brim Brihaspataye Namaha (Jupiter)",),
    "gemstone": ("Yellow Sapphire (for Jupiter), after consultation",),
    "spiritual": ("Thursday prayers and study of scripture",),
}
_BUDHADITYA: _C = {
    "mantra": ("Aditya Hridayam recitation", "Om Budhaya Namaha (Mercury)"),
    "lifestyle": ("Pursue learning, writing and analytical work",),
}
_CHANDRA_MANGALA: _C = {
    "mantra": ("Om Chandraya Namaha (Moon)", "Om Angarakaya Namaha (Mars mantra)"),
    "charitable": ("Donation of rice and red lentils on Mondays and Tuesdays",),
}
_PANCHA_MAHAPURUSHA: _C = {
    "spiritual": ("Strengthen the yoga-forming planet through its weekday prayers",),
    "lifestyle": ("Use the planet's natural domain for career choices",),
}

REMEDY_CATALOG: Mapping[str, _C] = MappingProxyType({
    "kalasarpa": _KALASARPA,
    "pitru": _PITRU,
    "guru_chandal": _GURU_CHANDAL,
    "sarp": _SARP,
    "manglik": _MANGLIK,
    "gaja_kesari": _GAJA_KESARI,
    "budhaditya": _BUDHADITYA,
    "chandra_mangala": _CHANDRA_MANGALA,
    "pancha_mahapurusha": _PANCHA_MAHAPURUSHA,
})

# (category, entry) added at or above CFG.escalation_threshold
_DEFAULT_ESCALATION = ("ritual", "Special pujas and ceremonies")
ESCALATIONS: Mapping[str, Tuple[Tuple[str, str], ...]] = MappingProxyType({
    "manglik": (_DEFAULT_ESCALATION, ("gemstone", "Professional gemstone consultation")),
    "kalasarpa": (_DEFAULT_ESCALATION, ("spiritual", "Guidance from an experienced astrologer")),
})

# Manglik cancellations trim the set to light-touch entries.
_CANCELLED_KEEP = ("mantra", "lifestyle")


def _empty() -> Dict[str, List[str]]:
    return {c: [] for c in REMEDY_CATEGORIES}


def generate_remedies(
    key: str,
    intensity: float,
    *,
    cancelled: bool = False,
    catalog: Optional[Mapping[str, _C]] = None,
    escalation_threshold: Optional[float] = None,
) -> Dict[str, List[str]]:
    """Deterministic lookup of the categorized remedy set for one pattern."""
    table = (catalog if catalog is not None else REMEDY_CATALOG).get(key, {})
    out = _empty()
    for cat in REMEDY_CATEGORIES:
        if cancelled and cat not in _CANCELLED_KEEP:
            continue
        out[cat].extend(table.get(cat, ()))
    threshold = CFG.escalation_threshold if escalation_threshold is None else escalation_threshold
    if not cancelled and intensity >= threshold:
        for cat, entry in ESCALATIONS.get(key, (_DEFAULT_ESCALATION,)):
            if entry not in out[cat]:
                out[cat].append(entry)
    return out


def merge_remedies(
    remedy_sets: Iterable[Mapping[str, Sequence[str]]],
    cap: Optional[int] = None,
) -> Dict[str, List[str]]:
    """
    Union remedy sets across patterns.

    Within a category, entries recommended by more patterns come first, ties
    broken alphabetically; each category is cut to `cap` entries.
    """
    limit = CFG.remedy_cap if cap is None else int(cap)
    counts: Dict[str, Counter] = {c: Counter() for c in REMEDY_CATEGORIES}
    for rs in remedy_sets:
        for cat, entries in rs.items():
            bucket = counts.setdefault(cat, Counter())
            for entry in set(entries):
                bucket[entry] += 1
    out: Dict[str, List[str]] = {}
    for cat, bucket in counts.items():
        ranked = sorted(bucket.items(), key=lambda kv: (-kv[1], kv[0]))
        out[cat] = [entry for entry, _ in ranked[:limit]]
    return out
