"""
Company contact information.
"""

from flask import current_app, jsonify
from flask_login import login_required

from steelbuckle.errors import ValidationError
from steelbuckle.extensions import db
from steelbuckle.models.contact import EMPTY_CONTACT, ContactInfo
from steelbuckle.utils.csrf import csrf_protect
from steelbuckle.utils.http import json_body, no_cache, string_field

from ..blueprint import bp


@bp.route("/contact-info", methods=["GET"])
def get_contact_info():
    try:
        info = ContactInfo.current()
        return no_cache(jsonify(info.to_dict() if info else EMPTY_CONTACT))
    except Exception as e:
        current_app.logger.error(f"Error fetching contact info: {e}", exc_info=True)
        return jsonify({"success": False, "error": "Failed to fetch contact info"}), 500


def _parse_contact(data):
    office = data.get("office")
    phones = data.get("phones", [])
    if not isinstance(office, dict):
        raise ValidationError("office must be an object")
    if not isinstance(phones, list):
        raise ValidationError("phones must be a list")
    cleaned = []
    for phone in phones:
        if not isinstance(phone, dict):
            raise ValidationError("Every phone needs a number")
        number = string_field(phone, "number")
        if not number:
            raise ValidationError("Every phone needs a number")
        cleaned.append({"number": number, "label": string_field(phone, "label")})
    return string_field(data, "email"), office, cleaned


@bp.route("/contact-info", methods=["PUT"])
@csrf_protect
@login_required
def update_contact_info():
    """Replace the contact record, phone list included."""
    email, office, phones = _parse_contact(json_body())
    try:
        info = ContactInfo.replace(email, office, phones)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error updating contact info: {e}", exc_info=True)
        return jsonify({"success": False, "error": "Failed to update contact info"}), 500

    return jsonify({"status": "success", "contactInfo": info.to_dict()})
