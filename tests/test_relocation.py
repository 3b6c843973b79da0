# tests/test_relocation.py
from __future__ import annotations

import pytest
from hypothesis import given, strategies as st

from astrocore.core.astronomy import mean_obliquity
from astrocore.core.constants import J2000_JD
from astrocore.core.relocation import (
    GeoLine,
    describe_line,
    line_meaning,
    local_factors,
    planetary_lines,
    rank_locations,
    recommendations,
    score_location,
)
from astrocore.core.validators import ValidationError

POSITIONS = {"Sun": 10.0, "Moon": 100.0, "Venus": 200.0, "Jupiter": 250.0, "Saturn": 300.0, "Mars": 40.0}


# ─────────────────────────────────────────────────────────────────────────────
# Lines
# ─────────────────────────────────────────────────────────────────────────────

def test_eight_lines_per_body() -> None:
    lines = planetary_lines({"Sun": 10.0})
    assert len(lines) == 8
    assert sorted(l.longitude for l in lines) == [10.0, 70.0, 100.0, 130.0, 190.0, 250.0, 280.0, 310.0]
    conj = [l for l in lines if l.aspect == "conjunction"]
    assert conj[0].strength == 1.0


def test_lines_from_chart_and_body_filter(make_chart) -> None:
    lines = planetary_lines(make_chart(), bodies=["jupiter", "venus"])
    assert {l.planet for l in lines} == {"Jupiter", "Venus"}
    assert len(lines) == 16


def test_parallel_uses_declination() -> None:
    lines = planetary_lines({"Sun": 90.0}, include_parallels=True)
    par = [l for l in lines if l.is_parallel]
    assert len(par) == 1 and len(lines) == 9
    assert par[0].latitude == pytest.approx(mean_obliquity(J2000_JD), abs=1e-5)
    assert par[0].strength == 0.5


def test_geoline_validation() -> None:
    with pytest.raises(ValidationError):
        GeoLine("Sun", "conjunction", 1.5, longitude=0.0)
    with pytest.raises(ValidationError):
        GeoLine("Sun", "conjunction", 1.0)
    with pytest.raises(ValidationError):
        GeoLine("Sun", "conjunction", 1.0, longitude=0.0, latitude=0.0)
    with pytest.raises(ValidationError):
        GeoLine.from_dict({"aspect": "trine", "longitude": 10.0})


def test_geoline_from_dict_normalizes() -> None:
    line = GeoLine.from_dict({"planet": "shukra", "aspect": "TRINE", "longitude": 370.0, "strength": 0.7})
    assert line.planet == "Venus" and line.aspect == "trine"
    assert line.longitude == 10.0
    assert line.orb == pytest.approx(1.0)
    assert "Venus trine line" in describe_line(line)


@pytest.mark.parametrize("planet, aspect, meaning", [
    ("Sun", "conjunction", "Leadership, vitality, recognition, and self-expression"),
    ("Saturn", "trine", "Natural flow of achievement and stability"),
    ("Rahu", "square", "Rahu square influence"),
])
def test_line_meanings(planet, aspect, meaning) -> None:
    assert line_meaning(planet, aspect) == meaning


def test_description_carries_meaning() -> None:
    line = planetary_lines({"Sun": 10.0})[0]
    assert line.aspect == "conjunction"
    assert describe_line(line).endswith(": Leadership, vitality, recognition, and self-expression")


# ─────────────────────────────────────────────────────────────────────────────
# Local factors & recommendations
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.parametrize("lat, band, adjustment", [
    (0.0, "tropical", 1.4),
    (45.0, "temperate", 0.4),
    (70.0, "cold", -2.0),
    (-70.0, "cold", -2.0),
])
def test_local_factors(lat, band, adjustment) -> None:
    lf = local_factors(lat, 0.0)
    assert lf["latitude_band"] == band
    assert lf["adjustment"] == pytest.approx(adjustment)


@pytest.mark.parametrize("score, kind", [(85.0, "excellent"), (80.0, "good"), (61.0, "good"), (45.0, "moderate"), (40.0, "challenging")])
def test_recommendation_bands(score, kind) -> None:
    rec = recommendations(score, "career")
    assert rec[0]["type"] == kind


def test_excellent_mentions_purpose() -> None:
    assert "career" in recommendations(90.0, "career")[0]["message"]


# ─────────────────────────────────────────────────────────────────────────────
# Scoring
# ─────────────────────────────────────────────────────────────────────────────

def test_longitude_distance_wraps() -> None:
    line = GeoLine("Jupiter", "conjunction", 1.0, longitude=359.0)
    s = score_location([line], 10.0, 1.0)
    assert len(s.beneficial) == 1
    assert s.beneficial[0]["distance"] == pytest.approx(2.0)
    assert s.total_score > 0


def test_negative_location_longitude() -> None:
    line = GeoLine("Jupiter", "conjunction", 1.0, longitude=179.0)
    s = score_location([line], 10.0, -179.0)
    assert s.beneficial[0]["distance"] == pytest.approx(2.0)


def test_challenging_line_lowers_score() -> None:
    line = GeoLine("Saturn", "conjunction", 1.0, longitude=0.0)
    s = score_location([line], 45.0, 0.0)
    assert len(s.challenging) == 1
    assert s.total_score == pytest.approx(-0.5)
    assert s.overall_score == pytest.approx(37.9)
    assert s.recommendations[0]["type"] == "challenging"


def test_neutral_line_does_not_move_total() -> None:
    line = GeoLine("Sun", "conjunction", 1.0, longitude=0.0)
    s = score_location([line], 45.0, 0.0)
    assert len(s.neutral) == 1
    assert s.total_score == 0.0
    assert s.overall_score == pytest.approx(50.4)


def test_outside_orb_is_ignored() -> None:
    line = GeoLine("Jupiter", "conjunction", 1.0, longitude=0.0)
    s = score_location([line], 45.0, 10.0)
    assert not (s.beneficial or s.challenging or s.neutral)


def test_purpose_multiplier() -> None:
    line = GeoLine("Jupiter", "conjunction", 1.0, longitude=0.0)
    general = score_location([line], 45.0, 0.0)
    career = score_location([line], 45.0, 0.0, purpose="career")
    assert career.purpose_multiplier == 1.2
    assert career.overall_score > general.overall_score


def test_invalid_inputs() -> None:
    lines = planetary_lines(POSITIONS)
    with pytest.raises(ValidationError):
        score_location(lines, 91.0, 0.0)
    with pytest.raises(ValidationError):
        score_location(lines, 0.0, 181.0)
    with pytest.raises(ValidationError):
        score_location(lines, 0.0, 0.0, purpose="lottery")


def test_score_to_dict_shape() -> None:
    d = score_location(planetary_lines(POSITIONS), 28.6, 77.2).to_dict()
    assert set(d) == {
        "location", "purpose", "line_influences", "purpose_multiplier",
        "local_factors", "overall_score", "recommendations",
    }
    assert set(d["line_influences"]) == {"beneficial", "challenging", "neutral", "total_score"}


@given(
    lat=st.floats(min_value=-90.0, max_value=90.0, allow_nan=False, allow_infinity=False),
    lon=st.floats(min_value=-180.0, max_value=180.0, allow_nan=False, allow_infinity=False),
    purpose=st.sampled_from(["general", "career", "relationship", "health", "spiritual"]),
)
def test_overall_score_bounded(lat, lon, purpose) -> None:
    s = score_location(planetary_lines(POSITIONS, include_parallels=True), lat, lon, purpose)
    assert 0.0 <= s.overall_score <= 100.0


# ─────────────────────────────────────────────────────────────────────────────
# Ranking
# ─────────────────────────────────────────────────────────────────────────────

def test_rank_matches_single_scores() -> None:
    lines = planetary_lines(POSITIONS, include_parallels=True)
    candidates = [(28.6, 77.2), (51.5, -0.1), (-33.9, 151.2), (40.7, -74.0), (64.1, -21.9)]
    ranked = rank_locations(lines, candidates, "career")
    assert sorted(r["index"] for r in ranked) == list(range(len(candidates)))
    scores = [r["overall_score"] for r in ranked]
    assert scores == sorted(scores, reverse=True)
    for r in ranked:
        single = score_location(lines, r["latitude"], r["longitude"], "career")
        assert r["overall_score"] == pytest.approx(single.overall_score, abs=0.011)


def test_rank_ties_keep_input_order() -> None:
    ranked = rank_locations([], [(10.0, 0.0), (10.0, 50.0), (10.0, 100.0)])
    assert [r["index"] for r in ranked] == [0, 1, 2]
    assert ranked[0]["overall_score"] == pytest.approx(51.4)


def test_rank_empty_and_invalid() -> None:
    assert rank_locations([], []) == []
    with pytest.raises(ValidationError):
        rank_locations([], [(100.0, 0.0)])
