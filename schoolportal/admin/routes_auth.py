"""
Admin login, logout, password reset and the dashboard shell.

Blueprint: auth_bp
Routes:
    GET  /login          # Login form (redirects to /admin when logged in)
    POST /login          # Check admin credentials
    POST /login/reset    # Reset password with the security reset code
    POST /logout         # Clear the admin flag
    GET  /admin          # Dashboard (redirects to /login when logged out)
"""

from __future__ import annotations

import logging

from flask import Blueprint, redirect, request, session

from ..auth import ADMIN_SESSION_KEY, ADMIN_SESSION_VALUE, check_admin_login, reset_admin_password
from ..site import pages
from .helpers import get_store, is_admin, wait_remote
from .routes_public import render

auth_bp = Blueprint("auth", __name__)

logger = logging.getLogger(__name__)

PASSWORD_RESET_DONE = "Password updated. Please log in with the new password."


@auth_bp.route("/login", methods=["GET"])
def login_form():
    if is_admin():
        return redirect("/admin")
    return render("Login", pages.login_content())


@auth_bp.route("/login", methods=["POST"])
def login():
    error = check_admin_login(
        get_store().document,
        request.form.get("username", ""),
        request.form.get("password", ""),
    )
    if error:
        return render("Login", pages.login_content(error=error), 401)
    session[ADMIN_SESSION_KEY] = ADMIN_SESSION_VALUE
    return redirect("/admin")


@auth_bp.route("/login/reset", methods=["POST"])
def reset_password():
    store = get_store()
    document, error = reset_admin_password(
        store.document,
        request.form.get("reset_code", ""),
        request.form.get("new_password", ""),
        request.form.get("confirm_password", ""),
    )
    if error:
        return render("Login", pages.login_content(reset_error=error), 400)
    store.commit(document, wait_remote=wait_remote())
    return render("Login", pages.login_content(reset_message=PASSWORD_RESET_DONE))


@auth_bp.route("/logout", methods=["POST"])
def logout():
    session.pop(ADMIN_SESSION_KEY, None)
    return redirect("/")


@auth_bp.route("/admin")
def admin():
    if not is_admin():
        return redirect("/login")
    store = get_store()
    draft = store.draft
    return render(
        "Admin Dashboard",
        pages.admin_content(
            store.document,
            {"edit_mode": draft.edit_mode, "dirty": draft.dirty},
            store.coordinator.status_dict(),
        ),
    )
