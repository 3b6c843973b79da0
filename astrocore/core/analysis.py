# astrocore/core/analysis.py
"""
Pattern orchestrator.

Runs every registered detector over one chart, isolates failures, and folds
the results into an aggregate report with merged remedies. Output order is the
registry order regardless of how many workers ran the detectors.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from astrocore.core.chart import Chart
from astrocore.core.doshas import DOSHA_DETECTORS
from astrocore.core.patterns import Detector, PatternError, PatternResult
from astrocore.core.remedies import merge_remedies
from astrocore.core.scoring import FAVORABILITY_SCALE, SEVERITY_SCALE, IntensityScale
from astrocore.core.yoga import YOGA_DETECTORS

log = logging.getLogger(__name__)

__all__ = ["AnalysisReport", "analyze_chart", "run_detector", "Registry"]

Outcome = Union[PatternResult, PatternError]
Registry = Sequence[Tuple[str, str, Detector]]


@dataclass(frozen=True)
class AnalysisReport:
    doshas: Tuple[Outcome, ...]
    yogas: Tuple[Outcome, ...]
    aggregate_intensity: float
    overall_level: Optional[str]
    yoga_strength: float
    yoga_level: Optional[str]
    remedies: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def present(self) -> List[str]:
        return [r.key for r in self.doshas + self.yogas if r.present]

    @property
    def errors(self) -> List[str]:
        return [r.key for r in self.doshas + self.yogas if r.error]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "doshas": [r.to_dict() for r in self.doshas],
            "yogas": [r.to_dict() for r in self.yogas],
            "summary": {
                "present": self.present,
                "errors": self.errors,
                "aggregate_intensity": self.aggregate_intensity,
                "overall_level": self.overall_level,
                "yoga_strength": self.yoga_strength,
                "yoga_level": self.yoga_level,
            },
            "remedies": self.remedies,
        }


def run_detector(key: str, name: str, fn: Detector, chart: Chart, kind: str = "dosha") -> Outcome:
    """Call one detector; any exception becomes a PatternError."""
    try:
        return fn(chart)
    except Exception as e:
        log.warning("detector %s failed: %s", key, e, exc_info=True)
        return PatternError(key=key, analysis_name=name, message=str(e), kind=kind)


def _run_all(registry: Registry, chart: Chart, kind: str, max_workers: int) -> Tuple[Outcome, ...]:
    if max_workers <= 1 or len(registry) <= 1:
        return tuple(run_detector(k, n, fn, chart, kind) for k, n, fn in registry)

    slots: List[Optional[Outcome]] = [None] * len(registry)
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = {
            pool.submit(run_detector, k, n, fn, chart, kind): i
            for i, (k, n, fn) in enumerate(registry)
        }
        for fut in as_completed(futures):
            slots[futures[fut]] = fut.result()
    return tuple(slots)  # type: ignore[arg-type]


def _relabel(results: Tuple[Outcome, ...], scale: IntensityScale) -> Tuple[Outcome, ...]:
    """Re-classify present results so per-pattern levels match the aggregate scale."""
    return tuple(
        replace(r, intensity_level=scale.classify(r.intensity)) if not r.error and r.present else r
        for r in results
    )


def _mean_present(results: Sequence[Outcome]) -> float:
    vals = [r.intensity for r in results if not r.error and r.present]
    if not vals:
        return 0.0
    return round(sum(vals) / len(vals), 2)


def analyze_chart(
    chart: Chart,
    *,
    detectors: Optional[Registry] = None,
    yogas: Optional[Registry] = None,
    max_workers: int = 1,
    remedy_cap: Optional[int] = None,
    severity_scale: Optional[IntensityScale] = None,
    favorability_scale: Optional[IntensityScale] = None,
) -> AnalysisReport:
    """
    Run the dosha and yoga registries over `chart`.

    aggregate_intensity is the mean over present doshas only (0 when none);
    failed detectors are reported as PatternError and excluded from the mean.
    """
    dosha_reg = DOSHA_DETECTORS if detectors is None else detectors
    yoga_reg = YOGA_DETECTORS if yogas is None else yogas

    sev = severity_scale or SEVERITY_SCALE
    fav = favorability_scale or FAVORABILITY_SCALE
    dosha_out = _relabel(_run_all(dosha_reg, chart, "dosha", max_workers), sev)
    yoga_out = _relabel(_run_all(yoga_reg, chart, "yoga", max_workers), fav)

    aggregate = _mean_present(dosha_out)
    yoga_strength = _mean_present(yoga_out)

    remedy_sets = [r.remedies for r in dosha_out + yoga_out if not r.error and r.present]
    remedies = merge_remedies(remedy_sets, cap=remedy_cap)

    return AnalysisReport(
        doshas=dosha_out,
        yogas=yoga_out,
        aggregate_intensity=aggregate,
        overall_level=sev.classify(aggregate) if aggregate else None,
        yoga_strength=yoga_strength,
        yoga_level=fav.classify(yoga_strength) if yoga_strength else None,
        remedies=remedies,
    )
