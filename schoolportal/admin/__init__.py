"""
Portal Server — Public site pages plus the admin JSON API.

Usage:
    python -m schoolportal.admin
    # Serves http://127.0.0.1:5050

Features:
    - Public pages rendered from the live document
    - Admin login, draft editing, uploads and publishing
    - Cloud sync status and manual retry
"""

from .server import create_app, run_server

__all__ = ["create_app", "run_server"]
