# tests/conftest.py
from __future__ import annotations

"""
Pytest configuration for the astrocore suite.

- Registers Hypothesis profiles for local dev and CI.
- Freezes the process TZ to UTC (we always pass IANA zones explicitly).
- Sanity-checks ERFA availability and basic tzdata presence.
- Provides a small chart factory shared by the detector tests.
"""

import os
from typing import Any, Dict, Optional, Sequence

import pytest
from hypothesis import settings, HealthCheck


# ──────────────────────────────────────────────────────────────────────────────
# Hypothesis profiles
# ──────────────────────────────────────────────────────────────────────────────
settings.register_profile(
    "dev",
    settings(
        deadline=None,
        max_examples=60,
        suppress_health_check=[HealthCheck.too_slow],
    ),
)
settings.register_profile(
    "ci",
    settings(
        deadline=None,
        max_examples=120,
        suppress_health_check=[HealthCheck.too_slow],
    ),
)

_profile = (
    "ci"
    if (os.getenv("CI") or os.getenv("GITHUB_ACTIONS"))
    else os.getenv("HYPOTHESIS_PROFILE", "dev")
)
settings.load_profile(_profile)


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "slow: mark test as slow")
    config.addinivalue_line("filterwarnings", "ignore::DeprecationWarning")


def pytest_report_header(config: pytest.Config) -> str:
    return f"Hypothesis profile: '{_profile}'"


# ──────────────────────────────────────────────────────────────────────────────
# Global fixtures
# ──────────────────────────────────────────────────────────────────────────────

@pytest.fixture(scope="session", autouse=True)
def freeze_tz_env():
    prev = os.environ.get("TZ")
    os.environ["TZ"] = "UTC"
    try:
        yield
    finally:
        if prev is None:
            os.environ.pop("TZ", None)
        else:
            os.environ["TZ"] = prev


@pytest.fixture(scope="session")
def ensure_erfa():
    """Fail early if pyERFA is missing the routines the cross-checks use."""
    import erfa
    for fn in ("cal2jd", "gmst82", "obl06"):
        assert hasattr(erfa, fn), f"ERFA.{fn} not available"
    return erfa


@pytest.fixture(scope="session")
def ensure_tzdata():
    from zoneinfo import ZoneInfo
    for name in ("UTC", "Asia/Kolkata", "America/New_York"):
        ZoneInfo(name)


# ──────────────────────────────────────────────────────────────────────────────
# Chart factory
# ──────────────────────────────────────────────────────────────────────────────

# Aries rising, whole-sign: house n is sign n. Planets sit mid-sign so a
# test can move one body without disturbing the others.
BASE_POSITIONS: Dict[str, float] = {
    "Sun": 15.0,        # Aries, H1
    "Moon": 45.0,       # Taurus, H2
    "Mercury": 75.0,    # Gemini, H3
    "Venus": 105.0,     # Cancer, H4
    "Mars": 165.0,      # Virgo, H6
    "Jupiter": 255.0,   # Sagittarius, H9
    "Saturn": 315.0,    # Aquarius, H11
}


@pytest.fixture
def make_chart():
    from astrocore.core.chart import build_chart

    def _make(
        overrides: Optional[Dict[str, Any]] = None,
        *,
        drop: Sequence[str] = (),
        ascendant: float = 5.0,
        **kwargs: Any,
    ):
        positions: Dict[str, Any] = dict(BASE_POSITIONS)
        positions.update(overrides or {})
        for name in drop:
            positions.pop(name, None)
        return build_chart(positions, ascendant, **kwargs)

    return _make
