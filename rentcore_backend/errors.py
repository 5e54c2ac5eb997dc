# rentcore_backend/errors.py
from flask import jsonify, request


class RentCoreError(Exception):
    """Base class for errors the services report to callers."""

    status_code = 400
    code = "error"

    def __init__(self, message, code=None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code

    def to_dict(self):
        return {"error": self.code, "message": self.message}


class ValidationError(RentCoreError):
    status_code = 400
    code = "validation_error"


class NotFoundError(ValidationError):
    # An unknown renter is also a rejected input
    status_code = 404
    code = "not_found"


class ConflictError(RentCoreError):
    status_code = 409
    code = "conflict"


def register_error_handlers(app):
    @app.errorhandler(RentCoreError)
    def _rentcore_error(e):
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(400)
    def _bad_request(e):
        msg = getattr(e, "description", "Bad Request")
        return jsonify(error="bad_request", message=msg), 400

    @app.errorhandler(401)
    def _unauthorized(e): return jsonify(error="unauthorized"), 401

    @app.errorhandler(403)
    def _forbidden(e): return jsonify(error="forbidden"), 403

    @app.errorhandler(404)
    def _not_found(e): return jsonify(error="not_found", path=request.path), 404

    @app.errorhandler(500)
    def _server_error(e):
        app.logger.exception("Unhandled exception: %s", e)
        return jsonify(error="server_error"), 500
