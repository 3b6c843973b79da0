# astrocore/core/patterns.py
"""
Common envelope for pattern (dosha / yoga) detectors.

Every detector is a pure `Chart -> PatternResult`. Detector-specific data goes
into `details`; an unmet precondition is a normal result with present=False
and `diagnostics` saying what was found versus required.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from astrocore.core.chart import Chart
from astrocore.core.remedies import generate_remedies
from astrocore.core.scoring import SEVERITY_SCALE, FAVORABILITY_SCALE, IntensityScale, ScoreBreakdown

__all__ = [
    "PatternResult",
    "PatternError",
    "Detector",
    "missing_bodies",
    "present_result",
    "absent_result",
]


@dataclass(frozen=True)
class PatternResult:
    key: str
    name: str
    kind: str                                   # "dosha" | "yoga"
    present: bool
    intensity: float = 0.0
    intensity_level: Optional[str] = None
    indicators: Tuple[str, ...] = ()
    effects: Tuple[str, ...] = ()
    remedies: Mapping[str, Sequence[str]] = field(default_factory=dict)
    details: Mapping[str, Any] = field(default_factory=dict)
    diagnostics: Mapping[str, Any] = field(default_factory=dict)
    error: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "name": self.name,
            "kind": self.kind,
            "present": self.present,
            "intensity": self.intensity,
            "intensity_level": self.intensity_level,
            "indicators": list(self.indicators),
            "effects": list(self.effects),
            "remedies": {k: list(v) for k, v in self.remedies.items()},
            "details": dict(self.details),
            "diagnostics": dict(self.diagnostics),
            "error": False,
        }


@dataclass(frozen=True)
class PatternError:
    """Stand-in for a detector that raised; keeps the aggregate usable."""
    key: str
    analysis_name: str
    message: str
    kind: str = "dosha"
    error: bool = True
    present: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "analysis_name": self.analysis_name,
            "kind": self.kind,
            "error": True,
            "present": False,
            "message": self.message,
        }


Detector = Callable[[Chart], PatternResult]


def missing_bodies(chart: Chart, names: Iterable[str]) -> List[str]:
    return [n for n in names if not chart.has(n)]


def absent_result(
    key: str,
    name: str,
    *,
    kind: str = "dosha",
    reason: str,
    found: Optional[float] = None,
    required: Optional[float] = None,
    details: Optional[Mapping[str, Any]] = None,
) -> PatternResult:
    diag: Dict[str, Any] = {"reason": reason}
    if found is not None:
        diag["found"] = found
    if required is not None:
        diag["required"] = required
    return PatternResult(
        key=key, name=name, kind=kind, present=False,
        details=dict(details or {}), diagnostics=diag,
    )


def present_result(
    key: str,
    name: str,
    score: ScoreBreakdown,
    *,
    kind: str = "dosha",
    indicators: Sequence[str] = (),
    effects: Sequence[str] = (),
    details: Optional[Mapping[str, Any]] = None,
    cancelled: bool = False,
    scale: Optional[IntensityScale] = None,
) -> PatternResult:
    scale = scale or (FAVORABILITY_SCALE if kind == "yoga" else SEVERITY_SCALE)
    body = dict(details or {})
    body["score"] = score.to_dict()
    return PatternResult(
        key=key,
        name=name,
        kind=kind,
        present=True,
        intensity=score.score,
        intensity_level=scale.classify(score.score),
        indicators=tuple(indicators),
        effects=tuple(effects),
        remedies=generate_remedies(key, score.score, cancelled=cancelled),
        details=body,
    )
