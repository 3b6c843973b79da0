# astrocore/utils/config.py
import logging
import os
from pathlib import Path

import yaml

log = logging.getLogger(__name__)

# repo-root config/defaults.yaml, used when the configured path does not exist
PACKAGED_DEFAULTS = Path(__file__).resolve().parents[2] / "config" / "defaults.yaml"


class AttrDict(dict):
    """Dict that also supports attribute access: cfg.zodiac and cfg['zodiac'] both work."""
    def __getattr__(self, item):
        try:
            return self[item]
        except KeyError as e:
            raise AttributeError(item) from e
    def __setattr__(self, key, value):
        self[key] = value


def _to_attr(obj):
    if isinstance(obj, dict):
        return AttrDict({k: _to_attr(v) for k, v in obj.items()})
    if isinstance(obj, list):
        return [_to_attr(x) for x in obj]
    return obj


def _env_int(name: str):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError:
        log.warning("ignoring non-integer %s=%r", name, raw)
        return None


def load_config(path: str = None):
    """
    Load YAML config from `path` (falls back to the repo's config/defaults.yaml).
    Env overrides:
      - ASTRO_MODE           -> zodiac ('tropical' | 'sidereal')
      - ASTRO_MAX_WORKERS    -> analysis.max_workers
    Returns an AttrDict for convenient access.
    """
    p = Path(path) if path else PACKAGED_DEFAULTS
    if not p.exists():
        log.info("config %s not found; using %s", p, PACKAGED_DEFAULTS)
        p = PACKAGED_DEFAULTS
    with open(p, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"config {p} must be a mapping at the top level")

    astro_mode = os.getenv("ASTRO_MODE")
    if astro_mode:
        data["zodiac"] = astro_mode.strip().lower()

    workers = _env_int("ASTRO_MAX_WORKERS")
    if workers is not None:
        data.setdefault("analysis", {})["max_workers"] = workers

    return _to_attr(data)
