# backend/pos_bengkel/routes/system.py
"""
Liveness probe and root endpoint.

/health does not touch the database: it answers whether the process is up
and serving, nothing more.
"""

from flask import Blueprint, current_app, jsonify

from ..time_utils import to_utc_z, utcnow
from .responses import success

system_bp = Blueprint("system", __name__)


@system_bp.get("/health")
def health():
    return jsonify({
        "status": "ok",
        "message": f"{current_app.config['APP_NAME']} is running",
        "timestamp": to_utc_z(utcnow()),
    }), 200


@system_bp.get("/")
def root():
    return success(
        f"Welcome to {current_app.config['APP_NAME']}",
        {"name": current_app.config["APP_NAME"], "api": "/api/v1", "health": "/health"},
    )
