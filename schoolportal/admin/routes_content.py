"""
Admin API — Draft editing and publishing.

Blueprint: content_bp
Prefix: /api/admin
Routes:
    GET    /api/admin/document                 # Committed document
    GET    /api/admin/draft                    # Working copy + edit mode
    POST   /api/admin/draft/edit-mode          # {"enabled": bool}
    POST   /api/admin/draft/<field>            # Add record (newest first)
    PATCH  /api/admin/draft/<field>/<id>       # Shallow-merge into record
    DELETE /api/admin/draft/<field>/<id>       # Remove record
    PATCH  /api/admin/draft/fields             # Scalar top-level fields
    PATCH  /api/admin/draft/blocks/<block>     # themeConfig / tickerConfig / stats
    PUT    /api/admin/draft/head-teacher       # Set head teacher
    DELETE /api/admin/draft/head-teacher       # Clear head teacher
    POST   /api/admin/draft/uploads            # One file -> data URI
    POST   /api/admin/draft/gallery/uploads    # Many files -> gallery items
    POST   /api/admin/draft/reset-code         # New admin reset code
    POST   /api/admin/commit                   # Publish the draft
    POST   /api/admin/discard                  # Drop staged edits

Every route requires the admin session flag. Mutating draft routes
return 409 while edit mode is off.
"""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request
from pydantic import ValidationError

from ..content.media import MediaRejected, MediaSource, ingest_file, ingest_gallery
from ..editing.records import UnknownCollectionError
from .helpers import admin_required, get_config, get_store, json_body, wait_remote

content_bp = Blueprint("content", __name__)

logger = logging.getLogger(__name__)

EDIT_MODE_OFF = "Edit mode is off"


def _draft():
    return get_store().draft


def _edit_mode_error():
    if not _draft().edit_mode:
        return jsonify({"error": EDIT_MODE_OFF}), 409
    return None


def _invalid(e: ValidationError):
    return jsonify({
        "error": "Invalid data",
        "details": [
            {"loc": ".".join(str(p) for p in err["loc"]), "msg": err["msg"]}
            for err in e.errors()
        ],
    }), 400


def _draft_state():
    draft = _draft()
    return {
        "edit_mode": draft.edit_mode,
        "dirty": draft.dirty,
        "document": draft.document.to_wire(),
    }


# ── Read ─────────────────────────────────────────────────────────


@content_bp.route("/document", methods=["GET"])
@admin_required
def get_document():
    return jsonify(get_store().document.to_wire())


@content_bp.route("/draft", methods=["GET"])
@admin_required
def get_draft():
    return jsonify(_draft_state())


@content_bp.route("/draft/edit-mode", methods=["POST"])
@admin_required
def set_edit_mode():
    data, error = json_body()
    if error:
        return error
    _draft().set_edit_mode(bool(data.get("enabled", not _draft().edit_mode)))
    return jsonify({"edit_mode": _draft().edit_mode})


# ── Scalar fields, blocks, head teacher ──────────────────────────
# Registered before the generic <field> routes so the static paths win.


@content_bp.route("/draft/fields", methods=["PATCH"])
@admin_required
def patch_fields():
    blocked = _edit_mode_error()
    if blocked:
        return blocked
    data, error = json_body()
    if error:
        return error
    try:
        changed = _draft().set_fields(data)
    except UnknownCollectionError as e:
        return jsonify({"error": str(e)}), 400
    except ValidationError as e:
        return _invalid(e)
    return jsonify({"changed": changed})


@content_bp.route("/draft/blocks/<block>", methods=["PATCH"])
@admin_required
def patch_block(block: str):
    blocked = _edit_mode_error()
    if blocked:
        return blocked
    data, error = json_body()
    if error:
        return error
    try:
        changed = _draft().update_block(block, data)
    except UnknownCollectionError as e:
        return jsonify({"error": str(e)}), 404
    except ValidationError as e:
        return _invalid(e)
    return jsonify({"changed": changed})


@content_bp.route("/draft/head-teacher", methods=["PUT", "DELETE"])
@admin_required
def head_teacher():
    blocked = _edit_mode_error()
    if blocked:
        return blocked
    if request.method == "DELETE":
        return jsonify({"changed": _draft().clear_singleton("head_teacher")})
    data, error = json_body()
    if error:
        return error
    try:
        changed = _draft().set_singleton("head_teacher", data)
    except ValidationError as e:
        return _invalid(e)
    return jsonify({"changed": changed})


@content_bp.route("/draft/reset-code", methods=["POST"])
@admin_required
def new_reset_code():
    blocked = _edit_mode_error()
    if blocked:
        return blocked
    return jsonify({"adminResetCode": _draft().new_reset_code()})


# ── Uploads ──────────────────────────────────────────────────────


@content_bp.route("/draft/uploads", methods=["POST"])
@admin_required
def upload_file():
    """
    Encode one uploaded file as a data URI.

    The draft is not modified; the client puts the returned URL into the
    record it is editing.
    """
    file = request.files.get("file")
    if file is None or not file.filename:
        return jsonify({"error": "No file uploaded"}), 400
    try:
        media = ingest_file(
            file.filename,
            file.read(),
            file.mimetype,
            ceiling=get_config().payload_ceiling,
        )
    except MediaRejected as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(media.to_dict())


@content_bp.route("/draft/gallery/uploads", methods=["POST"])
@admin_required
def upload_gallery():
    """Add many files to the gallery; each lands as soon as it is encoded."""
    blocked = _edit_mode_error()
    if blocked:
        return blocked
    files = [f for f in request.files.getlist("files") if f.filename]
    if not files:
        return jsonify({"error": "No files uploaded"}), 400

    sources = [MediaSource(f.filename, f.read, f.mimetype) for f in files]
    draft = _draft()
    report = ingest_gallery(
        sources,
        on_item=lambda item: draft.append("gallery", item),
        ceiling=get_config().payload_ceiling,
    )
    if report.added:
        return jsonify(report.to_dict()), 200
    # Edit mode switched off mid-upload drops every item
    return jsonify(report.to_dict()), 400 if draft.edit_mode else 409


# ── Records ──────────────────────────────────────────────────────


@content_bp.route("/draft/<field>", methods=["POST"])
@admin_required
def add_record(field: str):
    blocked = _edit_mode_error()
    if blocked:
        return blocked
    data, error = json_body()
    if error:
        return error
    prepend = request.args.get("position", "start") != "end"
    try:
        record = _draft().add(field, data, prepend=prepend)
    except UnknownCollectionError as e:
        return jsonify({"error": str(e)}), 404
    except ValidationError as e:
        return _invalid(e)
    return jsonify(record.to_wire()), 201


@content_bp.route("/draft/<field>/<record_id>", methods=["PATCH"])
@admin_required
def update_record(field: str, record_id: str):
    blocked = _edit_mode_error()
    if blocked:
        return blocked
    data, error = json_body()
    if error:
        return error
    try:
        changed = _draft().update(field, record_id, data)
    except UnknownCollectionError as e:
        return jsonify({"error": str(e)}), 404
    except ValidationError as e:
        return _invalid(e)
    return jsonify({"changed": changed})


@content_bp.route("/draft/<field>/<record_id>", methods=["DELETE"])
@admin_required
def delete_record(field: str, record_id: str):
    blocked = _edit_mode_error()
    if blocked:
        return blocked
    try:
        changed = _draft().delete(field, record_id)
    except UnknownCollectionError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"changed": changed})


# ── Publish ──────────────────────────────────────────────────────


@content_bp.route("/commit", methods=["POST"])
@admin_required
def commit():
    store = get_store()
    result = store.commit_draft(wait_remote=wait_remote())
    return jsonify({"revision": store.document.revision, "save": result.to_dict()})


@content_bp.route("/discard", methods=["POST"])
@admin_required
def discard():
    get_store().discard_draft()
    return jsonify(_draft_state())
