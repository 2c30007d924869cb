"""
Per-page SEO metadata.
"""

from flask import current_app, jsonify, request
from flask_login import login_required

from steelbuckle.errors import NotFoundError, ValidationError
from steelbuckle.extensions import db
from steelbuckle.models.seo import SEO_FIELDS, SeoMetadata
from steelbuckle.models.translation import DEFAULT_LANGUAGE, SUPPORTED_LANGUAGES
from steelbuckle.utils.csrf import csrf_protect
from steelbuckle.utils.http import json_body, no_cache, string_field

from ..blueprint import bp


@bp.route("/seo", methods=["GET"])
def get_seo():
    """Metadata for `pageKey` in `lang`, falling back to the default language."""
    page_key = (request.args.get("pageKey") or "").strip()
    lang = request.args.get("lang") or DEFAULT_LANGUAGE
    if not page_key:
        raise ValidationError("Page key is required")

    metadata = SeoMetadata.get_by_page_key(page_key)
    translation = metadata.translation_for(lang) if metadata else None
    is_fallback = False
    if metadata is not None and translation is None and lang != DEFAULT_LANGUAGE:
        translation = metadata.translation_for(DEFAULT_LANGUAGE)
        is_fallback = translation is not None

    if translation is None:
        raise NotFoundError("SEO metadata not found for the specified page and language")

    payload = translation.to_dict(metadata.page_key)
    payload["isFallback"] = is_fallback
    return no_cache(jsonify(payload))


@bp.route("/seo", methods=["PUT"])
@csrf_protect
@login_required
def update_seo():
    data = json_body()
    page_key = string_field(data, "pageKey")
    lang = string_field(data, "language") or DEFAULT_LANGUAGE
    if not page_key:
        raise ValidationError("Page key is required")
    if lang not in SUPPORTED_LANGUAGES:
        raise ValidationError(f"Unsupported language: {lang}")
    if not string_field(data, "title"):
        raise ValidationError("Title is required")

    fields = {name: string_field(data, name) for name in SEO_FIELDS if name in data}
    try:
        translation = SeoMetadata.upsert(page_key, lang, fields)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error saving SEO metadata for {page_key} ({lang}): {e}", exc_info=True)
        return jsonify({"success": False, "error": "Failed to save SEO metadata"}), 500

    return jsonify({"success": True, "seo": translation.to_dict(page_key)})
