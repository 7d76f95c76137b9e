# errors.py
from flask import jsonify
from werkzeug.exceptions import HTTPException

from models import db


class FoodShareError(Exception):
    """Base error; carries the HTTP status it maps to"""
    status_code = 500

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class ValidationError(FoodShareError):
    status_code = 400


class AuthenticationError(FoodShareError):
    status_code = 401


class AuthorizationError(FoodShareError):
    status_code = 403


class NotFoundError(FoodShareError):
    status_code = 404


class InvalidTransitionError(FoodShareError):
    status_code = 409


class UpstreamError(FoodShareError):
    """External classification service failed or timed out"""
    status_code = 502


def register_error_handlers(app):
    """Every failure leaves a handler as {"error": message}"""

    @app.errorhandler(FoodShareError)
    def handle_foodshare_error(error):
        db.session.rollback()
        return jsonify({"error": error.message}), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({"error": error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        app.logger.exception('Unhandled error: %s', error)
        return jsonify({"error": "Internal server error"}), 500
