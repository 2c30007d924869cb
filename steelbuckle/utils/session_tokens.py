"""
Signed session tokens (JWT, HS256) carried in the `auth_token` cookie.

IMPORTANT: Read `DESIGN.md` before making changes.
"""
import logging
from datetime import datetime, timedelta, timezone

import jwt
from flask import current_app, request

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "auth_token"
JWT_ALGORITHM = "HS256"


def _secret():
    return current_app.config.get("JWT_SECRET") or current_app.config["SECRET_KEY"]


def issue_token(user):
    """Sign {id, username, role} with the configured lifetime."""
    now = datetime.now(timezone.utc)
    ttl = int(current_app.config.get("SESSION_TOKEN_TTL", 7200))
    payload = {
        "id": user.id,
        "username": user.username,
        "role": user.role,
        "iat": now,
        "exp": now + timedelta(seconds=ttl),
    }
    return jwt.encode(payload, _secret(), algorithm=JWT_ALGORITHM)


def verify_token(token):
    """Decoded claims, or None when the token is missing, expired or forged."""
    if not token:
        return None
    try:
        return jwt.decode(token, _secret(), algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.info("Session token expired")
        return None
    except jwt.InvalidTokenError as e:
        logger.warning(f"Rejected session token: {e}")
        return None


def current_claims():
    """Claims of the session cookie on the current request, verified on every call."""
    return verify_token(request.cookies.get(SESSION_COOKIE_NAME))


def set_session_cookie(response, token):
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        max_age=int(current_app.config.get("SESSION_COOKIE_MAX_AGE", 86400)),
        httponly=True,
        secure=bool(current_app.config.get("COOKIE_SECURE")),
        samesite="Strict",
        path="/",
    )
    return response


def clear_session_cookie(response):
    response.delete_cookie(
        SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=bool(current_app.config.get("COOKIE_SECURE")),
        samesite="Strict",
    )
    return response
