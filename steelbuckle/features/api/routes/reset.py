"""
Admin-only reset of all site content to the seeded defaults.

IMPORTANT: Read `DESIGN.md` before making changes.
"""

from flask import current_app, jsonify
from flask_login import login_required

from steelbuckle.errors import AuthenticationError, ForbiddenError, ReseedError
from steelbuckle.utils.broadcast import SCOPES
from steelbuckle.utils.content import request_language, t
from steelbuckle.utils.csrf import csrf_protect
from steelbuckle.utils.db_reset import reset_content
from steelbuckle.utils.http import notify_content_changed
from steelbuckle.utils.session_tokens import current_claims

from ..blueprint import bp


def _notify_all_scopes():
    for scope in SCOPES:
        notify_content_changed(scope)


@bp.route("/reset-database", methods=["POST"])
@csrf_protect
@login_required
def reset_database():
    lang = request_language()

    # The session cookie is checked again here, independent of the login loader.
    claims = current_claims()
    if not claims:
        raise AuthenticationError(t("errors.invalid_credentials", "Authentication required", lang=lang))
    if claims.get("role") != "admin":
        raise ForbiddenError(t("errors.admin_required", "Admin access required", lang=lang))

    # Resolve messages before the translation rows are wiped.
    delete_message = t("errors.reset_failed", "Resetting content failed", lang=lang)
    reseed_message = t("errors.reseed_failed", "Content was cleared but could not be restored", lang=lang)
    done_message = t("messages.reset_done", "Content reset to defaults", lang=lang)

    current_app.logger.warning(f"Content reset requested by {claims.get('username')}")
    try:
        counts = reset_content(delete_message=delete_message, reseed_message=reseed_message)
    except ReseedError:
        # The delete committed, so cached content is already stale.
        _notify_all_scopes()
        raise

    _notify_all_scopes()
    return jsonify({"success": True, "message": done_message, "seeded": counts})
