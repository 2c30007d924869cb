"""
Account lookups and password reset for the admin login screen.

IMPORTANT: Read `DESIGN.md` before making changes.
"""

import re

from flask import current_app, jsonify

from steelbuckle.errors import NotFoundError, ValidationError
from steelbuckle.extensions import db
from steelbuckle.models.user import User
from steelbuckle.utils.content import request_language, t
from steelbuckle.utils.csrf import csrf_protect
from steelbuckle.utils.http import json_body, string_field
from steelbuckle.utils.login_security import client_ip, enforce_rate_limit

from ..blueprint import bp

MIN_PASSWORD_LENGTH = 8
_UPPERCASE = re.compile(r"[A-Z]")
_SPECIAL = re.compile(r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?]")


def password_problem(password):
    """A description of why `password` is too weak, or None."""
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
    if not _UPPERCASE.search(password):
        return "Password must contain at least one uppercase letter"
    if not _SPECIAL.search(password):
        return "Password must contain at least one special character"
    return None


@bp.route("/check-username", methods=["POST"])
@csrf_protect
def check_username():
    enforce_rate_limit("check_username", t("errors.too_many_attempts", lang=request_language()))
    username = string_field(json_body(), "username")
    if not username:
        raise ValidationError("Username is required")
    return jsonify({"exists": User.get_by_username(username) is not None})


@bp.route("/reset-password", methods=["POST"])
@csrf_protect
def reset_password():
    enforce_rate_limit("reset_password", t("errors.too_many_attempts", lang=request_language()))

    data = json_body()
    username = string_field(data, "username")
    new_password = string_field(data, "newPassword", strip=False)
    if not username or not new_password:
        raise ValidationError("Username and new password are required")

    problem = password_problem(new_password)
    if problem:
        raise ValidationError(problem)

    user = User.get_by_username(username)
    if user is None:
        raise NotFoundError("User not found")

    try:
        user.set_password(new_password)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Password reset failed for {username}: {e}", exc_info=True)
        return jsonify({"success": False, "error": "Failed to reset password"}), 500

    current_app.logger.warning(f"Password reset for {username} from {client_ip()}")
    return jsonify({"success": True, "message": "Password changed successfully"})
