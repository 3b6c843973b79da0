# astrocore/core/stem_branch.py
"""
Sexagenary (Heavenly Stem / Earthly Branch) cycle.

    year   stem = (Y - 4) mod 10, branch = (Y - 4) mod 12; year 4 CE is Jia-Zi
    month  30° solar sectors from Lichun (315°); stems by the five-tigers rule
    day    (JDN + 49) mod 60
    hour   double-hours from 23:00; stems by the five-rats rule

The Chinese year changes at Lichun (Sun at 315°), not on 1 January, and a
23:00 birth already belongs to the next day's stem cycle.
"""
from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Tuple

from astrocore.core.astronomy import (
    calendar_to_julian_day,
    mod,
    normalize_angle,
    solar_ecliptic_longitude,
)
from astrocore.core.timescales import BirthMoment
from astrocore.core.validators import ValidationError, _err, require_finite

__all__ = [
    "Stem",
    "Branch",
    "StemBranchPillar",
    "FourPillars",
    "STEMS",
    "BRANCHES",
    "ELEMENTS",
    "SOLAR_TERMS",
    "stem_branch_of",
    "sexagenary_index",
    "sexagenary_pair",
    "sexagenary_cycle",
    "year_pillar",
    "month_pillar",
    "day_pillar",
    "hour_pillar",
    "four_pillars",
    "pillar_of",
    "solar_term",
    "element_balance",
]

ELEMENTS: Tuple[str, ...] = ("Wood", "Fire", "Earth", "Metal", "Water")

LICHUN_LONGITUDE = 315.0
_WINTER_SOLSTICE = 270.0


# ───────────────────────────── tables ─────────────────────────────
@dataclass(frozen=True)
class Stem:
    index: int
    name: str
    chinese: str
    element: str
    polarity: str


@dataclass(frozen=True)
class Branch:
    index: int
    name: str
    chinese: str
    animal: str
    element: str
    polarity: str


def _polarity(i: int) -> str:
    return "Yang" if i % 2 == 0 else "Yin"


STEMS: Tuple[Stem, ...] = tuple(
    Stem(i, name, zh, ELEMENTS[i // 2], _polarity(i))
    for i, (name, zh) in enumerate((
        ("Jia", "甲"), ("Yi", "乙"), ("Bing", "丙"), ("Ding", "丁"), ("Wu", "戊"),
        ("Ji", "己"), ("Geng", "庚"), ("Xin", "辛"), ("Ren", "壬"), ("Gui", "癸"),
    ))
)

BRANCHES: Tuple[Branch, ...] = tuple(
    Branch(i, name, zh, animal, element, _polarity(i))
    for i, (name, zh, animal, element) in enumerate((
        ("Zi", "子", "Rat", "Water"),
        ("Chou", "丑", "Ox", "Earth"),
        ("Yin", "寅", "Tiger", "Wood"),
        ("Mao", "卯", "Rabbit", "Wood"),
        ("Chen", "辰", "Dragon", "Earth"),
        ("Si", "巳", "Snake", "Fire"),
        ("Wu", "午", "Horse", "Fire"),
        ("Wei", "未", "Goat", "Earth"),
        ("Shen", "申", "Monkey", "Metal"),
        ("You", "酉", "Rooster", "Metal"),
        ("Xu", "戌", "Dog", "Earth"),
        ("Hai", "亥", "Pig", "Water"),
    ))
)

# 24 jieqi, one per 15° of solar longitude starting at the March equinox.
SOLAR_TERMS: Tuple[str, ...] = (
    "Chunfen", "Qingming", "Guyu", "Lixia", "Xiaoman", "Mangzhong",
    "Xiazhi", "Xiaoshu", "Dashu", "Liqiu", "Chushu", "Bailu",
    "Qiufen", "Hanlu", "Shuangjiang", "Lidong", "Xiaoxue", "Daxue",
    "Dongzhi", "Xiaohan", "Dahan", "Lichun", "Yushui", "Jingzhe",
)


# ───────────────────────────── pillars ─────────────────────────────
@dataclass(frozen=True)
class StemBranchPillar:
    stem: Stem
    branch: Branch

    @property
    def index(self) -> int:
        return sexagenary_index(self.stem.index, self.branch.index)

    @property
    def stem_element(self) -> str:
        return self.stem.element

    @property
    def branch_element(self) -> str:
        return self.branch.element

    @property
    def polarity(self) -> str:
        return self.stem.polarity

    @property
    def animal(self) -> str:
        return self.branch.animal

    @property
    def label(self) -> str:
        return f"{self.stem.name}{self.branch.name}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stem": self.stem.name,
            "stem_chinese": self.stem.chinese,
            "branch": self.branch.name,
            "branch_chinese": self.branch.chinese,
            "stem_element": self.stem_element,
            "branch_element": self.branch_element,
            "polarity": self.polarity,
            "animal": self.animal,
            "index": self.index,
        }


@dataclass(frozen=True)
class FourPillars:
    year: StemBranchPillar
    month: StemBranchPillar
    day: StemBranchPillar
    hour: StemBranchPillar
    solar_longitude: Optional[float] = None
    cycle_year: Optional[int] = None

    def pillars(self) -> Tuple[StemBranchPillar, ...]:
        return (self.year, self.month, self.day, self.hour)

    def summary(self) -> str:
        return " ".join(p.label for p in self.pillars())

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "year": self.year.to_dict(),
            "month": self.month.to_dict(),
            "day": self.day.to_dict(),
            "hour": self.hour.to_dict(),
            "summary": self.summary(),
            "element_balance": element_balance(self),
        }
        if self.solar_longitude is not None:
            out["solar_longitude"] = self.solar_longitude
            out["solar_term"] = solar_term(self.solar_longitude)
        if self.cycle_year is not None:
            out["cycle_year"] = self.cycle_year
        return out


# ───────────────────────────── cycle arithmetic ─────────────────────────────
def _check_index(value: Any, size: int, loc: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not (0 <= value < size):
        raise ValidationError([_err([loc], f"must be an integer in 0..{size - 1}")])
    return value


def _check_year(year: Any) -> int:
    if isinstance(year, bool) or not isinstance(year, int):
        raise ValidationError([_err(["year"], "year must be an integer")])
    return year


def pillar_of(stem: int, branch: int) -> StemBranchPillar:
    sexagenary_index(stem, branch)
    return StemBranchPillar(STEMS[stem], BRANCHES[branch])


def sexagenary_index(stem: int, branch: int) -> int:
    """Position 0..59 of a (stem, branch) pair; the pair must share parity."""
    _check_index(stem, 10, "stem")
    _check_index(branch, 12, "branch")
    if stem % 2 != branch % 2:
        raise ValidationError([_err(["stem", "branch"], "stem and branch parity differ; pair is not in the cycle")])
    return int(mod(6 * stem - 5 * branch, 60))


def sexagenary_pair(index: int) -> Tuple[int, int]:
    _check_index(index, 60, "index")
    return index % 10, index % 12


def sexagenary_cycle() -> Iterator[StemBranchPillar]:
    for i in range(60):
        s, b = sexagenary_pair(i)
        yield StemBranchPillar(STEMS[s], BRANCHES[b])


def stem_branch_of(year: int) -> Tuple[int, int]:
    y = _check_year(year)
    return int(mod(y - 4, 10)), int(mod(y - 4, 12))


def year_pillar(year: int) -> StemBranchPillar:
    return pillar_of(*stem_branch_of(year))


def month_pillar(year_stem: int, solar_longitude: float) -> StemBranchPillar:
    _check_index(year_stem, 10, "year_stem")
    lon = require_finite(solar_longitude, ["solar_longitude"])
    sector = int(math.floor(normalize_angle(lon - LICHUN_LONGITUDE) / 30.0)) % 12
    branch = (sector + 2) % 12
    # five tigers: Jia/Ji years open on Bing-Yin, Yi/Geng on Wu-Yin, ...
    stem = (year_stem * 2 + 2 + sector) % 10
    return pillar_of(stem, branch)


def _day_index(year: int, month: int, day: int) -> int:
    jdn = int(calendar_to_julian_day(year, month, day, 12))
    return int(mod(jdn + 49, 60))


def day_pillar(year: int, month: int, day: int) -> StemBranchPillar:
    s, b = sexagenary_pair(_day_index(year, month, day))
    return pillar_of(s, b)


def hour_pillar(day_stem: int, hour: int) -> StemBranchPillar:
    _check_index(day_stem, 10, "day_stem")
    _check_index(hour, 24, "hour")
    branch = ((hour + 1) // 2) % 12
    # five rats: Jia/Ji days open on Jia-Zi, Yi/Geng on Bing-Zi, ...
    stem = (day_stem * 2 + branch) % 10
    return pillar_of(stem, branch)


def solar_term(solar_longitude: float) -> str:
    lon = normalize_angle(require_finite(solar_longitude, ["solar_longitude"]))
    return SOLAR_TERMS[int(lon // 15.0) % 24]


# ───────────────────────────── chart ─────────────────────────────
def _cycle_year(year: int, month: int, sun: float) -> int:
    # Jan/Feb before Lichun still belongs to the previous cycle year
    if month <= 2 and _WINTER_SOLSTICE <= sun < LICHUN_LONGITUDE:
        return year - 1
    return year


def four_pillars(moment: BirthMoment, solar_longitude: Optional[float] = None) -> FourPillars:
    """
    Year, month, day and hour pillars for a birth moment.

    Day and hour pillars use the civil (local) date and clock; the solar
    longitude comes from the UT Julian Day unless given explicitly.
    """
    sun = solar_ecliptic_longitude(moment.julian_day) if solar_longitude is None \
        else normalize_angle(require_finite(solar_longitude, ["solar_longitude"]))

    cycle_year = _cycle_year(moment.year, moment.month, sun)
    yp = year_pillar(cycle_year)
    mp = month_pillar(yp.stem.index, sun)

    day_idx = _day_index(moment.year, moment.month, moment.day)
    dp = pillar_of(*sexagenary_pair(day_idx))

    hour = int(moment.hour)
    stem_day = (day_idx + 1) % 60 if hour == 23 else day_idx
    hp = hour_pillar(stem_day % 10, hour)

    return FourPillars(yp, mp, dp, hp, solar_longitude=round(sun, 6), cycle_year=cycle_year)


def element_balance(pillars: FourPillars) -> Dict[str, Any]:
    """Counts of each element over the four stems and four branches."""
    counts: Counter = Counter({e: 0 for e in ELEMENTS})
    for p in pillars.pillars():
        counts[p.stem_element] += 1
        counts[p.branch_element] += 1
    top = max(counts.values())
    return {
        "counts": {e: counts[e] for e in ELEMENTS},
        "dominant": [e for e in ELEMENTS if counts[e] == top],
        "missing": [e for e in ELEMENTS if counts[e] == 0],
        "day_master": pillars.day.stem_element,
    }
