"""
Session routes: CSRF token issue, login, logout and the current user.

IMPORTANT: Read `DESIGN.md` before making changes.
"""

from flask import current_app, jsonify
from flask_login import current_user, login_required

from steelbuckle.errors import AuthenticationError, ValidationError
from steelbuckle.models.user import User
from steelbuckle.utils.content import request_language, t
from steelbuckle.utils.csrf import csrf_protect, generate_csrf_token, set_csrf_cookie
from steelbuckle.utils.http import json_body, no_cache, string_field
from steelbuckle.utils.login_security import client_ip, enforce_rate_limit
from steelbuckle.utils.session_tokens import clear_session_cookie, issue_token, set_session_cookie

from ..blueprint import bp


@bp.route("/csrf-token", methods=["GET"])
def csrf_token():
    token = generate_csrf_token()
    response = jsonify({"csrfToken": token})
    set_csrf_cookie(response, token)
    return no_cache(response)


@bp.route("/login", methods=["POST"])
@csrf_protect
def login():
    """Check credentials and set the session cookie plus a fresh CSRF token."""
    lang = request_language()
    enforce_rate_limit("login", t("errors.too_many_attempts", "Too many login attempts. Please try again later.", lang=lang))

    data = json_body()
    username = string_field(data, "username")
    password = string_field(data, "password", strip=False)
    if not username or not password:
        raise ValidationError("Username and password are required")

    user = User.get_by_username(username)
    if user is None or not user.check_password(password):
        current_app.logger.warning(f"Failed login for {username!r} from {client_ip()}")
        raise AuthenticationError(t("errors.invalid_credentials", "Invalid username or password", lang=lang))

    new_csrf = generate_csrf_token()
    response = jsonify({"success": True, "user": user.to_summary(), "csrfToken": new_csrf})
    set_session_cookie(response, issue_token(user))
    set_csrf_cookie(response, new_csrf)
    current_app.logger.info(f"User {user.username} logged in from {client_ip()}")
    return no_cache(response)


@bp.route("/logout", methods=["POST"])
@csrf_protect
def logout():
    response = jsonify({"success": True})
    clear_session_cookie(response)
    return no_cache(response)


@bp.route("/user", methods=["GET"])
@login_required
def get_user():
    return no_cache(jsonify({"user": current_user.to_summary()}))
