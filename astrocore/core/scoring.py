# astrocore/core/scoring.py
"""
Declarative intensity scoring.

A detector describes its score as a list of `ScoringRule(name, weight, factor)`
and `evaluate` folds them over a subject:

    score = base + Σ weight · factor(subject)        clamped to [1, 10]

`factor` may return a bool (0/1) or a count/magnitude. Keeping the rules as
data lets tests drive the scoring loop without building charts.

Intensity → label thresholds are configuration (env or YAML), not constants
baked into each detector.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Sequence, Tuple

__all__ = [
    "CFG",
    "ScoringRule",
    "ScoreBreakdown",
    "IntensityScale",
    "SEVERITY_SCALE",
    "FAVORABILITY_SCALE",
    "evaluate",
    "clamp_intensity",
    "scales_from_config",
]

INTENSITY_MIN = 1.0
INTENSITY_MAX = 10.0


# ───────────────────────────── Config (single source) ─────────────────
@dataclass(frozen=True)
class _ScoringCfg:
    mild_max: float
    moderate_max: float
    severe_max: float
    escalation_threshold: float
    remedy_cap: int
    conjunction_orb_deg: float
    aspect_orb_deg: float


CFG = _ScoringCfg(
    mild_max=float(os.getenv("ASTRO_INTENSITY_MILD_MAX", "3")),
    moderate_max=float(os.getenv("ASTRO_INTENSITY_MODERATE_MAX", "6")),
    severe_max=float(os.getenv("ASTRO_INTENSITY_SEVERE_MAX", "8")),
    escalation_threshold=float(os.getenv("ASTRO_REMEDY_ESCALATION_AT", "8")),
    remedy_cap=int(os.getenv("ASTRO_REMEDY_CAP", "5")),
    conjunction_orb_deg=float(os.getenv("ASTRO_CONJUNCTION_ORB_DEG", "10")),
    aspect_orb_deg=float(os.getenv("ASTRO_ASPECT_ORB_DEG", "6")),
)


# ───────────────────────────── rules ─────────────────────────────
@dataclass(frozen=True)
class ScoringRule:
    name: str
    weight: float
    factor: Callable[[Any], Any]

    def contribution(self, subject: Any) -> float:
        return self.weight * float(self.factor(subject))


@dataclass(frozen=True)
class ScoreBreakdown:
    score: float
    raw: float
    contributions: Tuple[Tuple[str, float], ...]

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "raw": round(self.raw, 4),
            "contributions": {name: round(v, 4) for name, v in self.contributions if v},
        }


def clamp_intensity(x: float, lo: float = INTENSITY_MIN, hi: float = INTENSITY_MAX) -> float:
    return round(max(lo, min(hi, float(x))), 2)


def evaluate(
    rules: Sequence[ScoringRule],
    subject: Any,
    *,
    base: float = 0.0,
    lo: float = INTENSITY_MIN,
    hi: float = INTENSITY_MAX,
) -> ScoreBreakdown:
    parts = tuple((r.name, r.contribution(subject)) for r in rules)
    raw = base + sum(v for _, v in parts)
    return ScoreBreakdown(clamp_intensity(raw, lo, hi), raw, parts)


# ───────────────────────────── classification ─────────────────────────────
@dataclass(frozen=True)
class IntensityScale:
    """Ordinal labels for a 1..10 score; `thresholds` are inclusive upper bounds."""
    thresholds: Tuple[float, float, float]
    labels: Tuple[str, str, str, str]

    def __post_init__(self) -> None:
        a, b, c = self.thresholds
        if not (a < b < c):
            raise ValueError(f"intensity thresholds must increase strictly, got {self.thresholds}")

    def classify(self, intensity: float) -> str:
        for bound, label in zip(self.thresholds, self.labels):
            if intensity <= bound:
                return label
        return self.labels[-1]


SEVERITY_LABELS = ("Mild", "Moderate", "Severe", "Critical")
FAVORABILITY_LABELS = ("Weak", "Moderate", "Strong", "Exceptional")

SEVERITY_SCALE = IntensityScale((CFG.mild_max, CFG.moderate_max, CFG.severe_max), SEVERITY_LABELS)
FAVORABILITY_SCALE = IntensityScale((CFG.mild_max, CFG.moderate_max, CFG.severe_max), FAVORABILITY_LABELS)


def scales_from_config(cfg: Optional[Mapping[str, Any]]) -> Tuple[IntensityScale, IntensityScale]:
    """
    Build (severity, favorability) scales from a config mapping such as
    `load_config(...)["intensity"]`; missing keys fall back to CFG.
    """
    cfg = cfg or {}
    t = (
        float(cfg.get("mild_max", CFG.mild_max)),
        float(cfg.get("moderate_max", CFG.moderate_max)),
        float(cfg.get("severe_max", CFG.severe_max)),
    )
    return IntensityScale(t, SEVERITY_LABELS), IntensityScale(t, FAVORABILITY_LABELS)
