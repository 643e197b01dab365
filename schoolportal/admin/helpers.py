"""
Admin server shared helpers.

Accessors for the per-app document store and session flags, used
across the route blueprints.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Dict, Optional, Tuple

from flask import current_app, jsonify, request, session

from ..auth import ADMIN_SESSION_KEY, ADMIN_SESSION_VALUE, OFFICE_SESSION_KEY, OFFICE_SESSION_VALUE
from ..config.loader import PortalConfig
from ..state import DocumentStore

logger = logging.getLogger(__name__)

EXTENSION_KEY = "schoolportal"


def get_store() -> DocumentStore:
    return current_app.extensions[EXTENSION_KEY]


def get_config() -> PortalConfig:
    return current_app.config["PORTAL_CONFIG"]


def wait_remote() -> bool:
    """Whether saves block on the remote push (off: push in background)."""
    return not current_app.config.get("BACKGROUND_SYNC", True)


def is_admin() -> bool:
    return session.get(ADMIN_SESSION_KEY) == ADMIN_SESSION_VALUE


def has_office_access() -> bool:
    return session.get(OFFICE_SESSION_KEY) == OFFICE_SESSION_VALUE


def admin_required(view):
    """Reject API calls without the admin session flag."""

    @functools.wraps(view)
    def wrapper(*args, **kwargs):
        if not is_admin():
            logger.warning(f"Unauthorized {request.method} {request.path}")
            return jsonify({"error": "Unauthorized"}), 401
        return view(*args, **kwargs)

    return wrapper


def json_body() -> Tuple[Optional[Dict[str, Any]], Optional[Tuple[Any, int]]]:
    """
    Parse the request body as a JSON object.

    Returns:
        (data, None) on success, (None, error_response) otherwise
    """
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        return None, (jsonify({"error": "Request body must be a JSON object"}), 400)
    return data, None
