# tests/test_analysis.py
from __future__ import annotations

import pytest

from astrocore.core.analysis import analyze_chart, run_detector
from astrocore.core.doshas import DOSHA_DETECTORS, pitru_dosha
from astrocore.core.patterns import PatternError
from astrocore.core.remedies import REMEDY_CATEGORIES, generate_remedies, merge_remedies
from astrocore.core.scoring import IntensityScale, ScoringRule, clamp_intensity, evaluate


def _boom(chart):
    raise RuntimeError("ephemeris row corrupt")


# ─────────────────────────────────────────────────────────────────────────────
# Scoring & remedies
# ─────────────────────────────────────────────────────────────────────────────

def test_evaluate_folds_rules_and_clamps() -> None:
    rules = (ScoringRule("a", 2.0, lambda s: s), ScoringRule("b", -1.0, lambda s: True))
    out = evaluate(rules, 3, base=1.0)
    assert out.raw == pytest.approx(6.0)
    assert out.score == pytest.approx(6.0)
    assert evaluate(rules, 20).score == 10.0
    assert evaluate(rules, -5).score == 1.0


def test_clamp_rounds_to_two_places() -> None:
    assert clamp_intensity(4.4567) == 4.46


@pytest.mark.parametrize("value, label", [(1.0, "Mild"), (3.0, "Mild"), (3.01, "Moderate"), (8.0, "Severe"), (8.5, "Critical")])
def test_severity_thresholds(value, label) -> None:
    scale = IntensityScale((3.0, 6.0, 8.0), ("Mild", "Moderate", "Severe", "Critical"))
    assert scale.classify(value) == label


def test_scale_rejects_unordered_thresholds() -> None:
    with pytest.raises(ValueError):
        IntensityScale((6.0, 3.0, 8.0), ("a", "b", "c", "d"))


def test_remedy_escalation_and_cancellation() -> None:
    low = generate_remedies("manglik", 5.0)
    high = generate_remedies("manglik", 9.0)
    assert "Special pujas and ceremonies" not in low["ritual"]
    assert "Special pujas and ceremonies" in high["ritual"]
    assert "Professional gemstone consultation" in high["gemstone"]
    cancelled = generate_remedies("manglik", 9.0, cancelled=True)
    assert cancelled["ritual"] == [] and cancelled["mantra"]


def test_merge_ranks_shared_entries_first() -> None:
    a = {"mantra": ["Z", "Shared"]}
    b = {"mantra": ["Shared", "A"]}
    merged = merge_remedies([a, b], cap=2)
    assert merged["mantra"] == ["Shared", "A"]
    assert list(merged) == list(REMEDY_CATEGORIES)


# ─────────────────────────────────────────────────────────────────────────────
# Orchestrator
# ─────────────────────────────────────────────────────────────────────────────

def test_run_detector_isolates_exceptions(make_chart) -> None:
    out = run_detector("boom", "Boom Dosha", _boom, make_chart())
    assert isinstance(out, PatternError)
    assert out.to_dict() == {
        "key": "boom",
        "analysis_name": "Boom Dosha",
        "kind": "dosha",
        "error": True,
        "present": False,
        "message": "ephemeris row corrupt",
    }


def test_failed_detector_does_not_affect_aggregate(make_chart) -> None:
    chart = make_chart({"Sun": 250.0})
    registry = (("boom", "Boom Dosha", _boom), ("pitru", "Pitru Dosha", pitru_dosha))
    report = analyze_chart(chart, detectors=registry, yogas=())
    assert report.errors == ["boom"]
    assert report.present == ["pitru"]
    assert report.aggregate_intensity == pytest.approx(3.0)
    assert report.overall_level == "Mild"


def test_no_present_doshas_gives_zero(make_chart) -> None:
    report = analyze_chart(make_chart(), yogas=())
    assert report.aggregate_intensity == 0.0
    assert report.overall_level is None
    assert all(v == [] for v in report.remedies.values())


def test_mean_over_present_doshas(make_chart) -> None:
    chart = make_chart({"Sun": 250.0, "Rahu": 130.0})     # pitru 3, sarp 4
    report = analyze_chart(chart, yogas=())
    assert set(report.present) == {"pitru", "sarp"}
    assert report.aggregate_intensity == pytest.approx(3.5)


def test_parallel_matches_sequential(make_chart) -> None:
    chart = make_chart({"Mars": 195.0, "Rahu": 130.0, "Jupiter": 135.0})
    registry = DOSHA_DETECTORS + (("boom", "Boom Dosha", _boom),)
    seq = analyze_chart(chart, detectors=registry, max_workers=1).to_dict()
    par = analyze_chart(chart, detectors=registry, max_workers=4).to_dict()
    assert seq == par
    assert [d["key"] for d in par["doshas"]] == [k for k, _n, _fn in registry]


def test_remedy_cap(make_chart) -> None:
    chart = make_chart({"Mars": 195.0, "Rahu": 130.0, "Sun": 250.0})
    report = analyze_chart(chart, remedy_cap=1)
    assert all(len(v) <= 1 for v in report.remedies.values())


def test_yoga_summary(make_chart) -> None:
    report = analyze_chart(make_chart({"Jupiter": 100.0}), detectors=())
    summary = report.to_dict()["summary"]
    assert "gaja_kesari" not in summary["present"]           # 3rd from the Moon
    assert "pancha_mahapurusha" in summary["present"]
    assert summary["yoga_strength"] > 0
    assert summary["yoga_level"] in ("Weak", "Moderate", "Strong", "Exceptional")


def test_instrumented_detector_counts_failures(make_chart) -> None:
    from astrocore.utils.metrics import DETECTOR_ERRORS, instrument_detector

    wrapped = instrument_detector(_boom, "boom_metrics")
    before = DETECTOR_ERRORS.labels(detector="boom_metrics")._value.get()
    out = run_detector("boom_metrics", "Boom Dosha", wrapped, make_chart())
    assert isinstance(out, PatternError)
    assert DETECTOR_ERRORS.labels(detector="boom_metrics")._value.get() == before + 1


def test_custom_scale_labels_each_result(make_chart) -> None:
    chart = make_chart({"Sun": 250.0, "Saturn": 260.0, "Rahu": 245.0})
    registry = (("pitru", "Pitru Dosha", pitru_dosha),)
    scale = IntensityScale((2.0, 4.0, 6.0), ("Mild", "Moderate", "Severe", "Critical"))
    default = analyze_chart(chart, detectors=registry, yogas=())
    custom = analyze_chart(chart, detectors=registry, yogas=(), severity_scale=scale)
    assert default.doshas[0].intensity_level == "Severe"
    assert custom.doshas[0].intensity == pytest.approx(8.0)
    assert custom.doshas[0].intensity_level == "Critical"
    assert custom.overall_level == custom.doshas[0].intensity_level
