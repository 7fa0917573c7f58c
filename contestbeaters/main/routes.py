"""Routes for the main blueprint."""

from __future__ import annotations

from typing import Any

from flask import jsonify

from contestbeaters.auth.decorators import public
from contestbeaters.store import store_ready

from . import bp


@bp.route("/", methods=["GET"])
@public
def index() -> Any:
    return "Contest beaters server is running"


@bp.route("/health", methods=["GET"])
@public
def health() -> Any:
    """Liveness check."""
    return jsonify({"status": "ok"})


@bp.route("/ready", methods=["GET"])
@public
def ready() -> Any:
    """Readiness check: 503 until the store is connected."""
    if not store_ready():
        return jsonify({"status": "unavailable", "store": False}), 503
    return jsonify({"status": "ok", "store": True})
