# vera/__init__.py
import logging
import os

from flask import Flask, jsonify, request
from flask_cors import CORS

from .config import config
from .extensions import _NOT_SET, init_extensions
from .routes.auth import bp as auth_bp
from .routes.core import bp as core_bp
from .routes.stats import bp as stats_bp

logger = logging.getLogger(__name__)


def create_app(config_name=None, store=_NOT_SET, store_source=None, **overrides):
    """Build the Flask app.

    *store* injects a ready-made SurveyStore (or None for "unconfigured")
    instead of resolving Supabase credentials from config/env.
    """
    app = Flask(__name__)
    name = config_name or os.getenv("APP_ENV", "default")
    app.config.from_object(config.get(name, config["default"]))
    app.config.update(overrides)
    app.json.sort_keys = False
    app.url_map.strict_slashes = False

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=app.config["LOG_LEVEL"],
    )

    CORS(app, origins=app.config["CORS_ORIGINS"])
    init_extensions(app, store=store, source=store_source)

    app.register_blueprint(core_bp)
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(stats_bp, url_prefix="/api/stats")

    # /api/* errors stay JSON
    @app.errorhandler(404)
    def _404(e):
        if request.path.startswith("/api/"):
            return jsonify({"error": "not found", "path": request.path}), 404
        return e

    @app.errorhandler(405)
    def _405(e):
        if request.path.startswith("/api/"):
            return jsonify({"error": "method not allowed", "path": request.path}), 405
        return e

    for rule in app.url_map.iter_rules():
        logger.debug("route %s", rule)
    return app
