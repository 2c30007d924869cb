"""
Crawler-facing documents served from the site root.
"""

from flask import Blueprint

bp = Blueprint("site", __name__)


# Import route modules for side-effects (decorators attach to bp).
from . import routes  # noqa: E402,F401
