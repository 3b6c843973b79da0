# astrocore/main.py
from __future__ import annotations

import logging
import os
import traceback
from time import perf_counter
from typing import Tuple

from flask import Flask, Response, jsonify, request
from flask_cors import CORS
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, generate_latest
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix
import yaml

from astrocore.api.routes import api as _routes_bp
from astrocore.core.validators import ValidationError
from astrocore.utils.config import AttrDict, load_config
from astrocore.utils.metrics import GAUGE_APP_UP, MET_REQUESTS, REQ_LATENCY
from astrocore.version import VERSION

_SEEDED_ROUTES: Tuple[str, ...] = (
    "/", "/api/health", "/api/config",
    "/api/chart", "/api/patterns", "/api/stem-branch",
    "/api/cartography/lines", "/api/cartography/score",
    "/metrics",
)


# ───────────────────────── helpers: logging & errors ─────────────────────────
def _configure_logging(app: Flask) -> None:
    gerr = logging.getLogger("gunicorn.error")
    if gerr.handlers:
        app.logger.handlers = gerr.handlers
        app.logger.setLevel(gerr.level)
    else:
        logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))


def _register_errors(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def _validation(e: ValidationError):
        app.logger.info("validation error at %s %s: %s", request.method, request.path, e.errors())
        return jsonify(ok=False, error="validation_error", details=e.errors()), 422

    @app.errorhandler(HTTPException)
    def _http(e: HTTPException):
        app.logger.warning("HTTP %s at %s %s: %s", e.code, request.method, request.path, e.description)
        return jsonify(
            ok=False,
            error="http_error",
            code=e.code,
            name=e.name,
            message=e.description,
            path=request.path,
        ), e.code

    @app.errorhandler(Exception)
    def _any(e: Exception):
        tb = traceback.format_exc()
        app.logger.error("UNHANDLED %s at %s %s\n%s", type(e).__name__, request.method, request.path, tb)
        return jsonify(
            ok=False,
            error="internal_error",
            type=type(e).__name__,
            message=str(e),
            path=request.path,
        ), 500


def _tracked(path: str) -> bool:
    return path.startswith("/api/") or path in ("/", "/metrics")


# ───────────────────────── app factory ─────────────────────────
def create_app() -> Flask:
    app = Flask(__name__)
    app.json.sort_keys = False
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)  # type: ignore

    _configure_logging(app)

    cfg_path = os.environ.get("ASTRO_CONFIG", "config/defaults.yaml")
    try:
        app.cfg = load_config(cfg_path)  # type: ignore[attr-defined]
    except (OSError, ValueError, yaml.YAMLError) as e:
        app.logger.warning("config %s unusable (%s); running with built-in defaults", cfg_path, e)
        app.cfg = AttrDict()  # type: ignore[attr-defined]

    for route in _SEEDED_ROUTES:
        MET_REQUESTS.labels(route=route).inc(0)
    GAUGE_APP_UP.set(1.0)

    @app.before_request
    def _before():
        p = request.path or ""
        if _tracked(p):
            MET_REQUESTS.labels(route=p).inc()
            request.environ["astro.t0"] = perf_counter()

    @app.after_request
    def _after(resp):
        p = request.path or ""
        t0 = request.environ.get("astro.t0")
        if _tracked(p) and t0 is not None:
            REQ_LATENCY.labels(route=p).observe(perf_counter() - t0)
        return resp

    _register_errors(app)

    @app.route("/", methods=["GET"])
    def root():
        return jsonify(ok=True, service="astrocore", version=VERSION, health="/api/health"), 200

    @app.route("/metrics", methods=["GET"])
    def metrics_endpoint():
        GAUGE_APP_UP.set(1.0)
        return Response(generate_latest(REGISTRY), mimetype=CONTENT_TYPE_LATEST)

    app.register_blueprint(_routes_bp)

    app.logger.info("App initialized; version=%s zodiac=%s", VERSION, app.cfg.get("zodiac"))  # type: ignore[attr-defined]
    return app


# ───────────────────────── app instance ─────────────────────────
app = create_app()

# CORS for browser UIs
_allowed_origin = os.environ.get("CORS_ALLOW_ORIGIN") or "*"
CORS(
    app,
    resources={r"/.*": {"origins": _allowed_origin}},
    supports_credentials=False,
    methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=600,
)

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.environ.get("PORT", 5000)))
