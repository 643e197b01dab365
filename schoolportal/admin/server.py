"""
Portal Server — Flask app serving the public site and admin API.

The document store is created once per app and kept in
``app.extensions["schoolportal"]``; routes reach it through
`helpers.get_store()`.
"""

from __future__ import annotations

import logging
import time
import traceback
import webbrowser
from threading import Timer
from typing import Optional

from flask import Flask, jsonify, request

from ..config.loader import PortalConfig, load_config
from ..logging_config import setup_logging
from ..persistence.coordinator import PersistenceCoordinator
from ..state import DocumentStore
from .helpers import EXTENSION_KEY
from .routes_auth import auth_bp
from .routes_content import content_bp
from .routes_public import public_bp
from .routes_sync import sync_bp

logger = logging.getLogger(__name__)

# Uploads are inlined as base64; anything larger is unusable in the document
MAX_UPLOAD_MB = 64


def create_app(
    config: Optional[PortalConfig] = None,
    store: Optional[DocumentStore] = None,
) -> Flask:
    """Create the Flask application."""
    config = config or load_config()
    if store is None:
        store = DocumentStore(PersistenceCoordinator.from_config(config))
    if store.draft is None:
        store.bootstrap()

    app = Flask(__name__, static_folder=None)

    app.secret_key = config.ensure_secret_key()
    app.config["PORTAL_CONFIG"] = config
    app.config["BACKGROUND_SYNC"] = True
    app.config["MAX_CONTENT_LENGTH"] = MAX_UPLOAD_MB * 1024 * 1024
    app.extensions[EXTENSION_KEY] = store

    # ── Register Blueprints ───────────────────────────────────────
    app.register_blueprint(content_bp, url_prefix="/api/admin")   # /api/admin/*
    app.register_blueprint(sync_bp, url_prefix="/api")            # /api/theme/*, /api/sync/*
    app.register_blueprint(auth_bp)                               # /login, /logout, /admin
    app.register_blueprint(public_bp)                             # site pages + fallback

    # ── Error Handlers ────────────────────────────────────────────

    @app.errorhandler(413)
    def request_entity_too_large(e):
        return jsonify({"error": f"File too large (max {MAX_UPLOAD_MB} MB)"}), 413

    @app.errorhandler(500)
    def internal_server_error(e):
        """Return JSON for any unhandled 500 so clients never see raw HTML."""
        tb = traceback.format_exc()
        logger.error(f"Unhandled 500 on {request.method} {request.path}: {e}\n{tb}")
        return jsonify({"error": f"Internal server error: {e}"}), 500

    # ── Request Logging ───────────────────────────────────────────

    @app.before_request
    def log_request_start():
        request._start_time = time.time()

    @app.after_request
    def log_request_end(response):
        """Log request with duration for API endpoints."""
        duration_ms = 0
        if hasattr(request, "_start_time"):
            duration_ms = int((time.time() - request._start_time) * 1000)

        if request.path.startswith("/api/"):
            # Dashboard polls sync status
            log_fn = logger.debug if request.path == "/api/sync/status" else logger.info
            log_fn(f"{request.method} {request.path} → {response.status_code} ({duration_ms}ms)")
        return response

    logger.info(f"Portal server initialized (document from {store.loaded_from})")

    return app


def run_server(
    host: str = "127.0.0.1",
    port: int = 5050,
    open_browser: bool = False,
    debug: bool = False,
    config: Optional[PortalConfig] = None,
) -> None:
    """
    Run the portal server.

    Args:
        host: Bind address
        port: Port to run on
        open_browser: Whether to open a browser tab once started
        debug: Enable Flask debug mode and DEBUG logging
    """
    config = config or load_config()
    setup_logging("DEBUG" if debug else config.log_level, config.log_format)

    app = create_app(config)
    store: DocumentStore = app.extensions[EXTENSION_KEY]

    url = f"http://{host}:{port}"
    remote = "configured" if config.has_remote() else "not configured"
    print(f"""
╔══════════════════════════════════════════════════════════════╗
║                     SCHOOL PORTAL SERVER                     ║
╠══════════════════════════════════════════════════════════════╣
║                                                              ║
║  → {url:<58}║
║  Cloud sync: {remote:<48}║
║                                                              ║
║  Press Ctrl+C to stop                                        ║
║                                                              ║
╚══════════════════════════════════════════════════════════════╝
""")

    if open_browser:
        Timer(1.0, lambda: webbrowser.open(url)).start()

    try:
        app.run(host=host, port=port, debug=debug, use_reloader=False, threaded=True)
    finally:
        store.coordinator.shutdown(wait=True)
