"""
Small helpers shared by the API route modules.
"""
from flask import current_app, jsonify, request

from steelbuckle.errors import ValidationError

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def no_cache(response):
    response.headers.update(NO_CACHE_HEADERS)
    return response


def json_body():
    """The request's JSON object; 400 when the body is not a JSON object."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def string_field(data, name, strip=True):
    """`data[name]` as a string ("" when absent or null); 400 for any other type."""
    value = data.get(name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be a string")
    return value.strip() if strip else value


def batch_response(results, **extra):
    """200 when every item succeeded, else 207 with the per-item results."""
    failed = [r for r in results if not r.get("success")]
    payload = {"success": not failed, "results": results, "updatedCount": len(results) - len(failed)}
    payload.update(extra)
    return jsonify(payload), (207 if failed else 200)


def notify_content_changed(scope, **details):
    return current_app.extensions["content_bus"].notify_content_changed(scope, **details)
