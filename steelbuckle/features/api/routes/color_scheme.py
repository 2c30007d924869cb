"""
Site colour scheme selection.

IMPORTANT: Read `DESIGN.md` before making changes.
"""

from flask import current_app, jsonify
from flask_login import login_required

from steelbuckle.errors import ValidationError
from steelbuckle.extensions import db
from steelbuckle.models.setting import SiteSetting
from steelbuckle.utils.csrf import csrf_protect
from steelbuckle.utils.http import json_body, no_cache, notify_content_changed

from ..blueprint import bp

SETTING_KEY = "color_scheme"
DEFAULT_SCHEME_ID = "blue"

COLOR_SCHEMES = {
    "default": {
        "id": "default",
        "name": "Kollane",
        "themeClass": "theme-default",
        "logoVariant": "dark",
        "lineVariant": "dark",
        "colors": {
            "background": "#fde047",
            "text": "#000000",
            "accent": "#6b7280",
            "border": "#000000",
            "line": "#000000",
        },
    },
    "blue": {
        "id": "blue",
        "name": "Sinine",
        "themeClass": "theme-blue",
        "logoVariant": "white",
        "lineVariant": "white",
        "colors": {
            "background": "#000957",
            "text": "#ffffff",
            "accent": "#577BC1",
            "border": "#ffffff",
            "line": "#ffffff",
        },
    },
    "green": {
        "id": "green",
        "name": "Roheline",
        "themeClass": "theme-green",
        "logoVariant": "dark",
        "lineVariant": "dark",
        "colors": {
            "background": "#C5FF95",
            "text": "#16423C",
            "accent": "#5CB338",
            "border": "#16423C",
            "line": "#16423C",
        },
    },
}


def current_scheme():
    scheme_id = SiteSetting.get_value(SETTING_KEY, DEFAULT_SCHEME_ID)
    return COLOR_SCHEMES.get(scheme_id, COLOR_SCHEMES[DEFAULT_SCHEME_ID])


@bp.route("/color-scheme", methods=["GET"])
def get_color_scheme():
    try:
        return no_cache(jsonify({"colorScheme": current_scheme(), "available": list(COLOR_SCHEMES)}))
    except Exception as e:
        current_app.logger.error(f"Error reading color scheme: {e}", exc_info=True)
        return jsonify({"success": False, "error": "Failed to read color scheme"}), 500


@bp.route("/color-scheme", methods=["POST"])
@csrf_protect
@login_required
def set_color_scheme():
    requested = json_body().get("colorScheme")
    scheme_id = requested.get("id") if isinstance(requested, dict) else None
    if not isinstance(scheme_id, str):
        scheme_id = None
    if scheme_id not in COLOR_SCHEMES:
        raise ValidationError("Invalid color scheme")

    try:
        SiteSetting.set_value(SETTING_KEY, scheme_id)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error saving color scheme {scheme_id}: {e}", exc_info=True)
        return jsonify({"success": False, "error": "Failed to save color scheme"}), 500

    notify_content_changed("colorScheme", schemeId=scheme_id)
    return jsonify({"success": True, "colorScheme": COLOR_SCHEMES[scheme_id]})
