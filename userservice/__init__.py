"""User search service backed by the Keycloak Admin API.

To use the Flask app:
    from userservice.flask_app import create_app

To search users directly:
    from userservice.core.user_finder import UserFinder
    from userservice.core.keycloak import KeycloakClient
"""
# Note: We don't import flask_app by default to avoid Flask dependency
# for CLI scripts that only use userservice.core
