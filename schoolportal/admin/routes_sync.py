"""
Theme toggle and cloud sync endpoints.

Blueprint: sync_bp
Prefix: /api
Routes:
    POST /api/theme/toggle    # Flip dark mode and save (public)
    GET  /api/sync/status     # Online flag, last save, pending push
    POST /api/sync/retry      # Re-push a failed save now
"""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify

from .helpers import admin_required, get_store, wait_remote

sync_bp = Blueprint("sync", __name__)

logger = logging.getLogger(__name__)


@sync_bp.route("/theme/toggle", methods=["POST"])
def toggle_theme():
    store = get_store()
    result = store.toggle_theme(wait_remote=wait_remote())
    return jsonify({
        "isDarkMode": store.document.theme_config.is_dark_mode,
        "save": result.to_dict(),
    })


@sync_bp.route("/sync/status", methods=["GET"])
@admin_required
def sync_status():
    store = get_store()
    status = store.coordinator.status_dict()
    status["revision"] = store.document.revision
    status["loaded_from"] = store.loaded_from
    return jsonify(status)


@sync_bp.route("/sync/retry", methods=["POST"])
@admin_required
def sync_retry():
    result = get_store().coordinator.retry_pending(force=True)
    if result is None:
        return jsonify({"retried": False, "message": "Nothing to retry"})
    return jsonify({"retried": True, "save": result.to_dict()})
