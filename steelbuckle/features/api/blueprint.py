"""
Content API blueprint and route registration.

IMPORTANT: Read `DESIGN.md` before making changes.
"""

from flask import Blueprint

bp = Blueprint("api", __name__, url_prefix="/api")


# Import route modules for side-effects (decorators attach to bp).
from .routes import (  # noqa: E402,F401
    color_scheme,
    contact,
    content_version,
    languages,
    media,
    projects,
    reset,
    seo,
    translations,
)
