from flask import current_app, jsonify

from steelbuckle.models.translation import Language

from ..blueprint import bp


@bp.route("/languages", methods=["GET"])
def get_languages():
    try:
        return jsonify(Language.get_all())
    except Exception as e:
        current_app.logger.error(f"Error fetching languages: {e}", exc_info=True)
        return jsonify({"success": False, "error": "Failed to fetch languages"}), 500
