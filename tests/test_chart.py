# tests/test_chart.py
from __future__ import annotations

import pytest
from hypothesis import given, strategies as st

from astrocore.core.chart import Chart, PlanetaryPosition, build_chart, canonical_body_name
from astrocore.core.houses import (
    build_cusps,
    equal_cusps,
    house_from,
    house_of,
    sign_of,
    validate_cusps,
    whole_sign_cusps,
)
from astrocore.core.validators import ValidationError


# ─────────────────────────────────────────────────────────────────────────────
# Houses
# ─────────────────────────────────────────────────────────────────────────────

def test_sign_of_boundaries() -> None:
    assert sign_of(0.0) == 1
    assert sign_of(29.999) == 1
    assert sign_of(30.0) == 2
    assert sign_of(359.9) == 12
    assert sign_of(-1.0) == 12


def test_house_from_counts_signs() -> None:
    assert house_from(1, 1) == 1
    assert house_from(1, 7) == 7
    assert house_from(10, 1) == 4
    assert house_from(12, 11) == 12


def test_equal_cusps_start_at_ascendant() -> None:
    cusps = equal_cusps(100.0)
    assert cusps[0] == 100.0
    assert cusps[3] == 190.0
    assert house_of(100.0, cusps) == 1
    assert house_of(99.999, cusps) == 12


def test_whole_sign_cusps_start_at_sign() -> None:
    cusps = whole_sign_cusps(100.0)
    assert cusps[0] == 90.0
    assert house_of(95.0, cusps) == 1
    assert house_of(85.0, cusps) == 12


def test_house_of_wraps_through_zero() -> None:
    cusps = equal_cusps(350.0)
    assert house_of(355.0, cusps) == 1
    assert house_of(5.0, cusps) == 1
    assert house_of(20.0, cusps) == 2


@given(
    asc=st.floats(min_value=0.0, max_value=359.999, allow_nan=False, allow_infinity=False),
    lon=st.floats(min_value=-720.0, max_value=720.0, allow_nan=False, allow_infinity=False),
    system=st.sampled_from(["whole_sign", "equal"]),
)
def test_house_of_is_total(asc, lon, system) -> None:
    cusps = build_cusps(asc, system)
    assert 1 <= house_of(lon, cusps) <= 12


def test_validate_cusps_defects() -> None:
    good = equal_cusps(10.0)
    assert validate_cusps(good, 10.0) == good
    with pytest.raises(ValidationError):
        validate_cusps(good[:11], 10.0)
    with pytest.raises(ValidationError):
        validate_cusps(good, 20.0)                         # first cusp != ascendant
    bad = list(good)
    bad[3], bad[4] = bad[4], bad[3]
    with pytest.raises(ValidationError):
        validate_cusps(bad, 10.0)                          # non-monotonic
    nan = list(good)
    nan[5] = float("nan")
    with pytest.raises(ValidationError) as ei:
        validate_cusps(nan, 10.0)
    assert ei.value.errors()[0]["loc"] == ["cusps", "5"]


def test_whole_sign_cusps_are_not_anchored() -> None:
    cusps = whole_sign_cusps(100.0)
    assert validate_cusps(cusps, 100.0, anchored=False) == cusps
    with pytest.raises(ValidationError):
        validate_cusps(cusps, 130.0, anchored=False)       # ascendant outside house 1


def test_unknown_house_system() -> None:
    with pytest.raises(ValidationError):
        build_cusps(0.0, "placidus")


# ─────────────────────────────────────────────────────────────────────────────
# Positions & chart
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.parametrize("raw, expected", [
    ("north node", "Rahu"),
    ("True_Node", "Rahu"),
    ("RAHU", "Rahu"),
    ("south node", "Ketu"),
    ("shani", "Saturn"),
    ("sun", "Sun"),
    ("Chiron", "Chiron"),
])
def test_canonical_body_name(raw, expected) -> None:
    assert canonical_body_name(raw) == expected


def test_position_normalizes_and_derives_retrograde() -> None:
    p = PlanetaryPosition("Mars", 725.0, speed=-0.2)
    assert p.longitude == 5.0
    assert p.retrograde is True
    assert p.sign == 1
    assert p.degree_in_sign == pytest.approx(5.0)


def test_non_finite_longitude_names_body(make_chart) -> None:
    with pytest.raises(ValidationError) as ei:
        make_chart({"Venus": float("inf")})
    assert ei.value.errors()[0]["loc"] == ["positions", "Venus", "longitude"]


def test_build_chart_derives_ketu() -> None:
    chart = build_chart({"Sun": 10, "Moon": 20, "north node": 100.0}, 0.0)
    assert chart.longitude_of("Ketu") == pytest.approx(280.0)
    assert chart.bodies[-2:] == ("Rahu", "Ketu")


def test_supplied_ketu_must_oppose_rahu() -> None:
    chart = build_chart({"Sun": 10, "Moon": 20, "Rahu": 100.0, "south node": 280.0}, 0.0)
    assert chart.longitude_of("Ketu") == pytest.approx(280.0)
    with pytest.raises(ValidationError) as ei:
        build_chart({"Sun": 10, "Moon": 20, "Rahu": 100.0, "Ketu": 100.0}, 0.0)
    assert ei.value.errors()[0]["loc"] == ["positions", "Ketu"]


def test_required_bodies() -> None:
    with pytest.raises(ValidationError) as ei:
        build_chart({"Sun": 10.0}, 0.0)
    assert ei.value.errors()[0]["loc"] == ["positions", "Moon"]


def test_duplicate_alias_rejected() -> None:
    with pytest.raises(ValidationError):
        build_chart({"Sun": 10, "Moon": 20, "Rahu": 5, "north node": 6}, 0.0)


def test_houses_follow_cusps(make_chart) -> None:
    chart = make_chart()
    assert chart.house_system == "whole_sign"
    assert chart.house_of("Sun") == 1
    assert chart.house_of("Jupiter") == 9
    assert chart.bodies_in_house(6) == ["Mars"]


def test_equal_house_chart(make_chart) -> None:
    chart = make_chart(ascendant=20.0, house_system="equal")
    assert chart.cusps[0] == 20.0
    assert chart.house_of("Sun") == 12   # 15° sits before the 20° ascendant


def test_explicit_cusps_are_labelled_custom() -> None:
    cusps = [10.0 + 30.0 * i for i in range(12)]
    chart = build_chart({"Sun": 15.0, "Moon": 45.0}, 10.0, cusps)
    assert chart.house_system == "custom"
    assert chart.house_of("Moon") == 2


def test_explicit_cusps_must_start_at_ascendant() -> None:
    cusps = [30.0 * i for i in range(12)]
    with pytest.raises(ValidationError):
        build_chart({"Sun": 15.0, "Moon": 45.0}, 20.0, cusps)


def test_coordinates_validated(make_chart) -> None:
    with pytest.raises(ValidationError):
        make_chart(latitude=95.0, longitude=0.0)
    with pytest.raises(ValidationError):
        make_chart(latitude=10.0, longitude=-181.0)


def test_ascendant_computed_from_time_and_place() -> None:
    chart = build_chart({"Sun": 280.0, "Moon": 10.0}, julian_day=2451545.0, latitude=13.08, longitude=80.27)
    assert 0.0 <= chart.ascendant < 360.0
    assert chart.latitude == pytest.approx(13.08)


def test_ascendant_required_without_time() -> None:
    with pytest.raises(ValidationError):
        build_chart({"Sun": 10.0, "Moon": 20.0})


def test_sidereal_shifts_by_lahiri() -> None:
    jd = 2451545.0
    trop = build_chart({"Sun": 100.0, "Moon": 200.0}, 50.0, julian_day=jd)
    sid = build_chart({"Sun": 100.0, "Moon": 200.0}, 50.0, julian_day=jd, zodiac="sidereal")
    assert sid.ayanamsa == pytest.approx(23.853055)
    assert sid.longitude_of("Sun") == pytest.approx(trop.longitude_of("Sun") - 23.853055, abs=1e-6)
    assert sid.ascendant == pytest.approx(50.0 - 23.853055, abs=1e-6)


def test_sidereal_needs_julian_day() -> None:
    with pytest.raises(ValidationError):
        build_chart({"Sun": 100.0, "Moon": 200.0}, 50.0, zodiac="sidereal")


def test_chart_from_dict_round_trip(make_chart) -> None:
    chart = make_chart({"Rahu": 200.0})
    payload = chart.to_dict()
    again = Chart.from_dict({
        "ascendant": payload["ascendant"],
        "positions": {k: v["longitude"] for k, v in payload["positions"].items()},
    })
    assert again.to_dict()["positions"] == payload["positions"]


def test_chart_from_dict_accepts_list_positions() -> None:
    chart = Chart.from_dict({
        "ascendant": 0.0,
        "planets": [{"name": "sun", "longitude": 10.0}, {"name": "moon", "longitude": 40.0, "speed": 13.2}],
    })
    assert chart.house_of("Moon") == 2
    assert chart.positions["Moon"].retrograde is False
