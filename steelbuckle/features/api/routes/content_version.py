"""
Last change timestamp per content scope, for consumers outside this process.
"""

from flask import current_app, jsonify

from steelbuckle.utils.http import no_cache

from ..blueprint import bp


@bp.route("/content-version", methods=["GET"])
def content_version():
    return no_cache(jsonify(current_app.extensions["content_bus"].versions()))
