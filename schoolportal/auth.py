"""
Credential checks for the admin dashboard and the office profiles page.

Credentials live in plain text inside the content document, so anyone
who can read the document (including the remote endpoint) can read
them. Comparison is a constant-time string check; there is no lockout.

Every check returns an inline error message, or None on success.
"""

from __future__ import annotations

import hmac
import logging
from typing import Optional, Tuple

from .models.document import SchoolDocument

logger = logging.getLogger(__name__)

ADMIN_SESSION_KEY = "admin_session"
ADMIN_SESSION_VALUE = "active"
OFFICE_SESSION_KEY = "office_auth"
OFFICE_SESSION_VALUE = "true"

MIN_PASSWORD_LENGTH = 6

LOGIN_FAILED = "Wrong ID or password! Try again."
OFFICE_LOGIN_FAILED = "Invalid Access Credentials"
RESET_CODE_INVALID = "Invalid Security Reset Code!"
PASSWORD_TOO_SHORT = f"New password must be at least {MIN_PASSWORD_LENGTH} characters."
PASSWORDS_DIFFER = "Passwords do not match!"


def _matches(given: str, expected: str) -> bool:
    return hmac.compare_digest((given or "").encode("utf-8"), (expected or "").encode("utf-8"))


def check_admin_login(document: SchoolDocument, username: str, password: str) -> Optional[str]:
    """Compare against the admin credentials stored in the document."""
    if _matches(username, document.admin_username) and _matches(password, document.admin_password):
        logger.info("Admin login succeeded")
        return None
    logger.warning("Admin login failed")
    return LOGIN_FAILED


def check_office_access(document: SchoolDocument, username: str, password: str) -> Optional[str]:
    """Compare against the office profiles credentials."""
    if _matches(username, document.office_access_user) and _matches(password, document.office_access_pass):
        return None
    logger.warning("Office profiles login failed")
    return OFFICE_LOGIN_FAILED


def reset_admin_password(
    document: SchoolDocument,
    reset_code: str,
    new_password: str,
    confirm_password: str,
) -> Tuple[SchoolDocument, Optional[str]]:
    """
    Replace the admin password using the security reset code.

    Checks run in order: reset code, minimum length, confirmation. The
    document is returned unchanged with an error message on any failure.

    Returns:
        (document, error) where document has the new password on success
    """
    if not _matches(reset_code, document.admin_reset_code):
        logger.warning("Password reset rejected: bad reset code")
        return document, RESET_CODE_INVALID
    if len(new_password or "") < MIN_PASSWORD_LENGTH:
        return document, PASSWORD_TOO_SHORT
    if new_password != confirm_password:
        return document, PASSWORDS_DIFFER

    logger.info("Admin password reset")
    return document.model_copy(update={"admin_password": new_password}), None
