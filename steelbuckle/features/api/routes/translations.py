"""
Translation tree read and editor updates.

IMPORTANT: Read `DESIGN.md` before making changes.
"""

from flask import current_app, jsonify, request
from flask_login import login_required

from steelbuckle.errors import ApiError, ValidationError
from steelbuckle.extensions import db
from steelbuckle.models.translation import DEFAULT_LANGUAGE, Translation
from steelbuckle.utils.content import build_tree
from steelbuckle.utils.csrf import csrf_protect
from steelbuckle.utils.http import batch_response, json_body, no_cache, notify_content_changed

from ..blueprint import bp


@bp.route("/translations", methods=["GET"])
def get_translations():
    """Nested translation tree for one language (always read fresh)."""
    lang = request.args.get("lang") or DEFAULT_LANGUAGE
    try:
        tree = build_tree(Translation.rows_for_language(lang))
        return no_cache(jsonify(tree))
    except Exception as e:
        current_app.logger.error(f"Error fetching translations for {lang}: {e}", exc_info=True)
        return jsonify({"success": False, "error": "Failed to fetch translations"}), 500


def _apply_update(item):
    path = item.get("path") if isinstance(item, dict) else None
    if not isinstance(path, str) or not path.strip():
        return {"path": path if isinstance(path, str) else "", "success": False, "error": "Missing path"}
    path = path.strip()
    language_code = item.get("languageCode") or DEFAULT_LANGUAGE
    if not isinstance(language_code, str):
        return {"path": path, "success": False, "error": "languageCode must be a string"}
    content = item.get("content")
    if not isinstance(content, str):
        return {"path": path, "success": False, "error": "Content must be a string"}

    try:
        with db.session.begin_nested():
            translation = Translation.upsert(path, language_code, content)
        return {"path": path, "success": True, "updated": True, "translationId": translation.id}
    except Exception as e:
        current_app.logger.error(f"Error updating translation {path} ({language_code}): {e}", exc_info=True)
        return {"path": path, "success": False, "error": "Failed to update translation"}


@bp.route("/translations/update", methods=["POST"])
@csrf_protect
@login_required
def update_translations():
    """Upsert a batch of {path, content, languageCode} items."""
    updates = json_body().get("updates")
    if not isinstance(updates, list) or not updates:
        raise ValidationError("Invalid updates data")

    try:
        results = [_apply_update(item) for item in updates]
        db.session.commit()
    except ApiError:
        raise
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error updating translations: {e}", exc_info=True)
        return jsonify({"success": False, "error": "Failed to update translations"}), 500

    if any(r["success"] for r in results):
        notify_content_changed("translations")
    return batch_response(results)
