# astrocore/utils/metrics.py
from __future__ import annotations
from functools import wraps
from time import perf_counter
from typing import Callable, Sequence, Tuple, Final

from prometheus_client import Counter, Gauge, Histogram

# Metric names are part of the ops contract; keep them stable.
MET_REQUESTS: Final = Counter("astro_api_requests_total", "API requests", ["route"])
REQ_LATENCY: Final = Histogram("astro_request_seconds", "API request latency", ["route"])
DETECTOR_LATENCY: Final = Histogram("astro_detector_seconds", "Pattern detector run time", ["detector"])
DETECTOR_ERRORS: Final = Counter("astro_detector_errors_total", "Pattern detector failures", ["detector"])
GAUGE_APP_UP: Final = Gauge("astro_app_up", "1 if app is running")

__all__ = [
    "MET_REQUESTS",
    "REQ_LATENCY",
    "DETECTOR_LATENCY",
    "DETECTOR_ERRORS",
    "GAUGE_APP_UP",
    "instrument_detector",
    "instrument_registry",
]


def instrument_detector(fn: Callable, name: str = None) -> Callable:
    """Time a detector and count its failures; exceptions still propagate."""
    label = name or getattr(fn, "__name__", "detector")

    @wraps(fn)
    def wrapper(*args, **kwargs):
        t0 = perf_counter()
        try:
            return fn(*args, **kwargs)
        except Exception:
            DETECTOR_ERRORS.labels(detector=label).inc()
            raise
        finally:
            DETECTOR_LATENCY.labels(detector=label).observe(perf_counter() - t0)
    return wrapper


def instrument_registry(registry: Sequence[Tuple[str, str, Callable]]) -> Tuple[Tuple[str, str, Callable], ...]:
    return tuple((key, name, instrument_detector(fn, key)) for key, name, fn in registry)
