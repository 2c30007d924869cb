"""
Authentication blueprint and route registration.

IMPORTANT: Read `DESIGN.md` before making changes.
"""

from flask import Blueprint

bp = Blueprint("auth", __name__, url_prefix="/api/auth")


# Import route modules for side-effects (decorators attach to bp).
from .routes import account, auth  # noqa: E402,F401
