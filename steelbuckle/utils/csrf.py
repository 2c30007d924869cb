"""
Double-submit CSRF protection: the token lives in a readable cookie and must be
echoed in the X-CSRF-Token header of every state-changing request.
"""
import hmac
import secrets
from functools import wraps

from flask import current_app, request

from steelbuckle.errors import CsrfError

CSRF_COOKIE_NAME = "csrf_token"
CSRF_HEADER_NAME = "X-CSRF-Token"
UNSAFE_METHODS = ("POST", "PUT", "PATCH", "DELETE")


def generate_csrf_token():
    return secrets.token_urlsafe(32)


def set_csrf_cookie(response, token):
    response.set_cookie(
        CSRF_COOKIE_NAME,
        token,
        max_age=int(current_app.config.get("CSRF_TOKEN_TTL", 1800)),
        httponly=False,
        secure=bool(current_app.config.get("COOKIE_SECURE")),
        samesite="Strict",
        path="/",
    )
    return response


def validate_csrf():
    """True when the header token matches the cookie token."""
    cookie_token = request.cookies.get(CSRF_COOKIE_NAME)
    header_token = request.headers.get(CSRF_HEADER_NAME)
    if not cookie_token or not header_token:
        return False
    return hmac.compare_digest(cookie_token.encode(), header_token.encode())


def csrf_protect(view):
    """Reject unsafe requests without a matching token. Apply outside login_required."""

    @wraps(view)
    def wrapped(*args, **kwargs):
        if request.method in UNSAFE_METHODS and not validate_csrf():
            current_app.logger.warning(f"CSRF validation failed for {request.method} {request.path}")
            raise CsrfError("Invalid CSRF token")
        return view(*args, **kwargs)

    return wrapped
