"""
Public site pages.

Blueprint: public_bp
Routes:
    GET  /                         # Home
    GET  /about                    # About us
    GET  /administration           # Head teacher and committees
    GET  /academics                # Syllabuses, routines, class teachers
    GET  /co-curricular
    GET  /admission
    GET  /gallery
    GET  /teachers
    GET  /corner?class=&section=&roll=   # Notice board
    GET  /office-profiles          # Login form or profiles (office_auth)
    POST /office-profiles          # Office login
    POST /office-profiles/logout
    GET  /<anything else>          # Redirect to /
"""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify, redirect, request, session

from ..auth import OFFICE_SESSION_KEY, OFFICE_SESSION_VALUE, check_office_access
from ..site import pages, views
from .helpers import get_store, has_office_access, is_admin

public_bp = Blueprint("public", __name__)

logger = logging.getLogger(__name__)


def render(title: str, content: str, status: int = 200):
    html = pages.render_page(
        get_store().document,
        title=title,
        content=content,
        active_path=request.path,
        is_admin=is_admin(),
    )
    return html, status, {"Content-Type": "text/html; charset=utf-8"}


@public_bp.route("/")
def home():
    return render("Home", pages.home_content(get_store().document))


@public_bp.route("/about")
def about():
    doc = get_store().document
    return render("About Us", pages.generic_content("About Us", doc.about_content, doc.about_pdf_url))


@public_bp.route("/administration")
def administration():
    return render("Administration", pages.administration_content(get_store().document))


@public_bp.route("/academics")
def academics():
    return render("Academics", pages.academics_content(get_store().document))


@public_bp.route("/co-curricular")
def co_curricular():
    doc = get_store().document
    return render(
        "Co-Curricular",
        pages.generic_content("Co-Curricular", doc.co_curricular_content, doc.co_curricular_pdf_url),
    )


@public_bp.route("/admission")
def admission():
    return render("Admission", pages.admission_content(get_store().document))


@public_bp.route("/gallery")
def gallery():
    return render("Gallery", pages.gallery_content(get_store().document))


@public_bp.route("/teachers")
def teachers():
    return render("Teachers", pages.teachers_content(get_store().document))


@public_bp.route("/corner")
def corner():
    flt = views.StudentFilter.from_args(request.args)
    return render("Notice Board", pages.corner_content(get_store().document, flt))


# ── Office profiles ──────────────────────────────────────────────


@public_bp.route("/office-profiles", methods=["GET", "POST"])
def office_profiles():
    if request.method == "POST":
        error = check_office_access(
            get_store().document,
            request.form.get("username", ""),
            request.form.get("password", ""),
        )
        if error:
            return render("Office Profiles", pages.office_login_content(error), 401)
        session[OFFICE_SESSION_KEY] = OFFICE_SESSION_VALUE
        return redirect("/office-profiles")

    if not has_office_access():
        return render("Office Profiles", pages.office_login_content())
    return render("Office Profiles", pages.office_profiles_content(get_store().document))


@public_bp.route("/office-profiles/logout", methods=["POST"])
def office_logout():
    session.pop(OFFICE_SESSION_KEY, None)
    return redirect("/office-profiles")


# ── Fallback ─────────────────────────────────────────────────────


@public_bp.route("/<path:unknown>")
def fallback(unknown: str):
    if unknown.startswith("api/"):
        return jsonify({"error": f"Unknown endpoint: /{unknown}"}), 404
    logger.debug(f"Unknown page /{unknown}, redirecting home")
    return redirect("/")
