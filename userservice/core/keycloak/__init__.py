"""Keycloak Admin API client library.

Architecture:
- client.py: HTTP client with authentication and auto-refresh
- exceptions.py: Typed exceptions for error handling

Usage:
    from userservice.core.keycloak import KeycloakClient

    client = KeycloakClient("http://keycloak:8080")
    client.configure_service_account("demo", "automation-cli", "secret")
    session, request = client.get_http_client_and_request("GET", url)
"""
from .client import (
    KeycloakClient,
    create_client_with_token,
    REQUEST_TIMEOUT,
)
from .exceptions import (
    KeycloakError,
    KeycloakAPIError,
    UserDecodeError,
)

__all__ = [
    # Client
    "KeycloakClient",
    "create_client_with_token",
    "REQUEST_TIMEOUT",

    # Exceptions
    "KeycloakError",
    "KeycloakAPIError",
    "UserDecodeError",
]
