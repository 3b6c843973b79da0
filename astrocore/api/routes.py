# astrocore/api/routes.py
"""
Astrocore — API Routes
- Chart normalization
- Pattern analysis (doshas + yogas)
- Stem-Branch four pillars
- Astro-cartography lines and location scoring
- Ops: /api/health, /api/config

ValidationError raised anywhere below is mapped to HTTP 422 by the app's
error handlers (see astrocore.main).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping

from flask import Blueprint, current_app, jsonify, request
from werkzeug.exceptions import BadRequest

from astrocore.version import VERSION
from astrocore.core.analysis import analyze_chart
from astrocore.core.chart import Chart
from astrocore.core.doshas import DOSHA_DETECTORS
from astrocore.core.relocation import (
    GeoLine,
    describe_line,
    line_meaning,
    planetary_lines,
    rank_locations,
    score_location,
)
from astrocore.core.scoring import scales_from_config
from astrocore.core.stem_branch import four_pillars
from astrocore.core.timescales import BirthMoment
from astrocore.core.validators import ValidationError, _err
from astrocore.core.yoga import YOGA_DETECTORS
from astrocore.utils.metrics import instrument_registry

log = logging.getLogger(__name__)
api = Blueprint("api", __name__)

# Detector registries wrapped once with timing/error metrics.
_DOSHAS = instrument_registry(DOSHA_DETECTORS)
_YOGAS = instrument_registry(YOGA_DETECTORS)


# ───────────────────────── helpers ─────────────────────────
def _body_json() -> Dict[str, Any]:
    data = request.get_json(force=True, silent=False)
    if not isinstance(data, dict):
        raise BadRequest("JSON body must be an object")
    return data


def _cfg() -> Mapping[str, Any]:
    return getattr(current_app, "cfg", None) or {}


def _section(name: str) -> Mapping[str, Any]:
    sec = _cfg().get(name)
    return sec if isinstance(sec, Mapping) else {}


def _chart_from(body: Mapping[str, Any]) -> Chart:
    """Accept either {"chart": {...}} or the chart payload at top level."""
    payload = body.get("chart", body)
    if not isinstance(payload, Mapping):
        raise ValidationError(_err("chart", "chart must be an object", "type_error.dict"))
    payload = dict(payload)
    payload.setdefault("zodiac", _cfg().get("zodiac", "tropical"))
    if payload.get("cusps") is None:
        payload.setdefault("house_system", _cfg().get("house_system", "whole_sign"))
    return Chart.from_dict(payload)


def _int_option(body: Mapping[str, Any], key: str, default: int, lo: int, hi: int) -> int:
    raw = body.get(key, default)
    if isinstance(raw, bool) or not isinstance(raw, int) or not (lo <= raw <= hi):
        raise ValidationError(_err(key, f"{key} must be an integer in [{lo}, {hi}]"))
    return raw


def _lines_from(body: Mapping[str, Any]) -> List[GeoLine]:
    if "lines" in body:
        rows = body["lines"]
        if not isinstance(rows, list):
            raise ValidationError(_err("lines", "lines must be a list", "type_error.list"))
        return [GeoLine.from_dict(r) for r in rows]
    bodies = body.get("bodies")
    if bodies is not None and not isinstance(bodies, list):
        raise ValidationError(_err("bodies", "bodies must be a list of names", "type_error.list"))
    include_parallels = bool(body.get("include_parallels", _section("cartography").get("include_parallels", False)))
    source: Any
    if "chart" in body or "ascendant" in body:
        source = _chart_from(body)
    else:
        source = body.get("positions", body.get("planets"))
        if not isinstance(source, Mapping):
            raise ValidationError(_err("positions", "provide 'lines', 'chart' or a 'positions' object", "value_error.missing"))
    return planetary_lines(source, bodies=bodies, include_parallels=include_parallels)


# ───────────────────────── health / ops ─────────────────────────
@api.get("/api/health")
def health():
    return jsonify({"ok": True, "status": "ok", "version": VERSION}), 200


@api.get("/api/config")
def config_info():
    cfg = _cfg()
    return jsonify({
        "ok": True,
        "zodiac": cfg.get("zodiac"),
        "house_system": cfg.get("house_system"),
        "intensity": dict(_section("intensity")),
        "analysis": dict(_section("analysis")),
        "cartography": dict(_section("cartography")),
        "version": VERSION,
    }), 200


# ───────────────────────── chart ─────────────────────────
@api.post("/api/chart")
def chart_endpoint():
    chart = _chart_from(_body_json())
    return jsonify({"ok": True, "chart": chart.to_dict()}), 200


# ───────────────────────── patterns ─────────────────────────
@api.post("/api/patterns")
def patterns_endpoint():
    body = _body_json()
    chart = _chart_from(body)
    analysis_cfg = _section("analysis")
    workers = _int_option(body, "max_workers", int(analysis_cfg.get("max_workers", 1)), 1, 16)
    severity, favorability = scales_from_config(_section("intensity"))
    report = analyze_chart(
        chart,
        detectors=_DOSHAS,
        yogas=_YOGAS,
        max_workers=workers,
        remedy_cap=analysis_cfg.get("remedy_cap"),
        severity_scale=severity,
        favorability_scale=favorability,
    )
    if report.errors:
        log.warning("pattern analysis finished with detector errors: %s", report.errors)
    return jsonify({"ok": True, **report.to_dict()}), 200


# ───────────────────────── stem-branch ─────────────────────────
@api.post("/api/stem-branch")
def stem_branch_endpoint():
    body = _body_json()
    moment = BirthMoment.from_dict(body)
    pillars = four_pillars(moment)
    return jsonify({"ok": True, "moment": moment.to_dict(), "pillars": pillars.to_dict()}), 200


# ───────────────────────── cartography ─────────────────────────
@api.post("/api/cartography/lines")
def cartography_lines():
    lines = _lines_from(_body_json())
    return jsonify({
        "ok": True,
        "count": len(lines),
        "lines": [
            {**ln.to_dict(), "meaning": line_meaning(ln.planet, ln.aspect), "description": describe_line(ln)}
            for ln in lines
        ],
    }), 200


@api.post("/api/cartography/score")
def cartography_score():
    body = _body_json()
    lines = _lines_from(body)
    purpose = body.get("purpose", _section("cartography").get("default_purpose", "general"))

    locations = body.get("locations")
    if locations is None:
        score = score_location(lines, body.get("latitude"), body.get("longitude"), purpose)
        return jsonify({"ok": True, **score.to_dict()}), 200

    if not isinstance(locations, list) or not locations:
        raise ValidationError(_err("locations", "locations must be a non-empty list", "type_error.list"))
    limit = int(_section("cartography").get("max_locations", 500))
    if len(locations) > limit:
        raise ValidationError(_err("locations", f"at most {limit} locations per request"))
    candidates = []
    for i, loc in enumerate(locations):
        if not isinstance(loc, Mapping):
            raise ValidationError(_err(["locations", str(i)], "each location needs latitude and longitude"))
        candidates.append((loc.get("latitude"), loc.get("longitude")))
    ranked = rank_locations(lines, candidates, purpose)
    return jsonify({"ok": True, "purpose": purpose, "count": len(ranked), "ranked": ranked}), 200
