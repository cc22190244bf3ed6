# vera/routes/core.py
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify, request

from ..extensions import get_store_status

bp = Blueprint("core", __name__)

ENDPOINTS = [
    "/health",
    "/echo (POST)",
    "/supabase-check",
    "/api/auth/register (POST)",
    "/api/auth/login (POST)",
    "/api/stats/overview (GET)",
    "/api/stats/stream (GET - SSE)",
]


@bp.get("/")
def index():
    return jsonify({"message": "vera-back is running", "endpoints": ENDPOINTS})


@bp.get("/health")
def health():
    return jsonify({
        "status": "ok",
        "environment": current_app.config.get("APP_ENV") or "development",
        "time": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
    })


@bp.post("/echo")
def echo():
    return jsonify({"received": request.get_json(silent=True)})


@bp.get("/supabase-check")
def supabase_check():
    status = get_store_status()
    if not status.configured:
        if status.source == "config":
            message = "Supabase client config missing or invalid."
        else:
            message = "Set SUPABASE_URL and SUPABASE_ANON_KEY to enable Supabase client."
        return jsonify({"configured": False, "message": message, "source": status.source})
    return jsonify({
        "configured": True,
        "message": "Supabase client initialized (no network call attempted).",
        "source": status.source,
    })
