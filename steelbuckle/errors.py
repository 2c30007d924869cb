"""
API error taxonomy.

Handlers raise these; the app-level error handlers registered in
`register_error_handlers` turn them into JSON responses.
"""
from flask import current_app, jsonify, request
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge


class ApiError(Exception):
    """Base class for errors that map to an HTTP status."""

    status_code = 500

    def __init__(self, message, status_code=None, **extra):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.extra = extra

    def to_dict(self):
        payload = {"success": False, "error": self.message}
        payload.update(self.extra)
        return payload


class ValidationError(ApiError):
    status_code = 400


class AuthenticationError(ApiError):
    status_code = 401


class ForbiddenError(ApiError):
    status_code = 403


class CsrfError(ApiError):
    """Anti-forgery token missing or mismatched (not a role problem)."""

    status_code = 403


class NotFoundError(ApiError):
    status_code = 404


class RateLimitError(ApiError):
    status_code = 429

    def __init__(self, message, retry_after=0, **extra):
        super().__init__(message, retryAfter=retry_after, **extra)
        self.retry_after = retry_after


class UpstreamError(ApiError):
    """The remote media host failed or is not configured."""

    status_code = 500


class QueryTimeoutError(ApiError):
    status_code = 504


class ReseedError(ApiError):
    """Content tables were cleared but the default content could not be restored."""

    status_code = 500


def register_error_handlers(app):
    """Render ApiError subclasses, oversized uploads and unexpected failures as JSON."""

    @app.errorhandler(ApiError)
    def handle_api_error(e):
        if e.status_code >= 500:
            app.logger.error(f"{type(e).__name__} on {request.path}: {e.message}")
        response = jsonify(e.to_dict())
        response.status_code = e.status_code
        if isinstance(e, RateLimitError):
            response.headers["Retry-After"] = str(int(e.retry_after))
        return response

    @app.errorhandler(RequestEntityTooLarge)
    def handle_file_too_large(_e):
        max_mb = current_app.config.get("MAX_CONTENT_LENGTH", 0) // (1024 * 1024)
        return jsonify({"success": False, "error": f"Request too large. Maximum size is {max_mb}MB."}), 413

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        if isinstance(e, HTTPException):
            return e
        app.logger.error(f"Unhandled {type(e).__name__} on {request.path}: {e}", exc_info=True)
        return jsonify({"success": False, "error": "Internal server error"}), 500
