"""Error handlers for the application.

Every error is rendered as JSON: {"error": <title>, "message": <detail>}.
Identity provider failures are already logged at ERROR by the user finder,
so the handlers here only add a WARNING line tying them to the request.
"""
import requests
from flask import jsonify, request
from werkzeug.exceptions import HTTPException

from userservice.core.keycloak.exceptions import KeycloakAPIError, UserDecodeError
from userservice.core.validators import CriteriaValidationError


def _invalid_provider_response():
    return jsonify({"error": "Bad Gateway", "message": "Invalid identity provider response"}), 502


def register_error_handlers(app):
    """Register error handlers with the Flask app."""

    @app.errorhandler(CriteriaValidationError)
    def invalid_criteria(error):
        """Handle malformed search criteria."""
        return jsonify({"error": "Bad Request", "message": str(error)}), 400

    @app.errorhandler(KeycloakAPIError)
    def keycloak_api_error(error):
        """Handle Keycloak rejections (token endpoint or strict status)."""
        app.logger.warning(f"{request.method} {request.path} -> 502 (Keycloak HTTP {error.status_code})")
        return jsonify({
            "error": "Bad Gateway",
            "message": f"Identity provider returned HTTP {error.status_code}",
        }), 502

    @app.errorhandler(UserDecodeError)
    def user_decode_error(error):
        """Handle a users endpoint body that is not an array of users."""
        app.logger.warning(f"{request.method} {request.path} -> 502 (undecodable users response)")
        return _invalid_provider_response()

    @app.errorhandler(requests.RequestException)
    def transport_error(error):
        """Handle network failures and non-JSON bodies from Keycloak."""
        if isinstance(error, requests.JSONDecodeError):
            app.logger.warning(f"{request.method} {request.path} -> 502 (non-JSON users response)")
            return _invalid_provider_response()
        app.logger.warning(f"{request.method} {request.path} -> 502 (Keycloak unreachable)")
        return jsonify({"error": "Bad Gateway", "message": "Identity provider unreachable"}), 502

    @app.errorhandler(400)
    def bad_request(error):
        """Handle 400 Bad Request errors."""
        return jsonify({"error": "Bad Request", "message": error.description}), 400

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 Not Found errors."""
        return jsonify({"error": "Not Found", "message": "Resource not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        """Handle 405 Method Not Allowed errors."""
        return jsonify({"error": "Method Not Allowed", "message": str(error.description)}), 405

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 Internal Server Error."""
        app.logger.error(f"Internal error: {error}", exc_info=True)
        return jsonify({"error": "Internal Server Error", "message": "An unexpected error occurred"}), 500

    @app.errorhandler(Exception)
    def handle_exception(error):
        """Handle uncaught exceptions."""
        # Pass through HTTP errors
        if isinstance(error, HTTPException):
            return error

        app.logger.error(f"Unhandled exception: {error}", exc_info=True)
        return jsonify({"error": "Internal Server Error", "message": "An unexpected error occurred"}), 500
