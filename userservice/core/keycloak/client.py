"""Low-level HTTP client for Keycloak Admin API.

Handles authentication, token management, and preparing authenticated
requests for the user lookup layer.
"""
from __future__ import annotations
import os
from typing import Optional, Dict, Any, Tuple
from datetime import datetime, timedelta

import requests

from .exceptions import KeycloakAPIError

REQUEST_TIMEOUT = float(os.environ.get("KEYCLOAK_REQUEST_TIMEOUT", "5"))

# Fallback lifetime when the token endpoint omits expires_in
DEFAULT_TOKEN_TTL = 60


class KeycloakClient:
    """HTTP client for Keycloak Admin API with automatic token management.

    Features:
    - Automatic token refresh when expired
    - Lazy authentication (credentials stored, token fetched on first use)
    - Support for both admin and service account authentication

    Usage:
        client = KeycloakClient("http://keycloak:8080")
        client.configure_service_account("demo", "automation-cli", "secret")
        session, request = client.get_http_client_and_request(
            "GET", "http://keycloak:8080/admin/realms/demo/users"
        )
        response = session.send(request, timeout=REQUEST_TIMEOUT)
    """

    def __init__(self, base_url: Optional[str] = None, session: Optional[requests.Session] = None):
        """Initialize Keycloak client.

        Args:
            base_url: Keycloak base URL (defaults to KEYCLOAK_URL env var)
            session: Optional requests session reused for all user lookups
        """
        self.base_url = (base_url or os.environ.get("KEYCLOAK_URL", "http://keycloak:8080")).rstrip("/")
        self.session = session or requests.Session()
        self._token: Optional[str] = None
        self._token_expires_at: Optional[datetime] = None
        self._auth_method: Optional[str] = None
        self._auth_params: Dict[str, Any] = {}

    def authenticate_admin(self, username: str, password: str, realm: str = "master") -> str:
        """Authenticate as admin user and store credentials for auto-refresh.

        Args:
            username: Admin username
            password: Admin password
            realm: Authentication realm (default: master)

        Returns:
            Access token
        """
        self._auth_method = "admin"
        self._auth_params = {"username": username, "password": password, "realm": realm}
        self._refresh_token()
        return self._token

    def authenticate_service_account(self, auth_realm: str, client_id: str, client_secret: str) -> str:
        """Authenticate as service account and store credentials for auto-refresh.

        Args:
            auth_realm: Realm where service account client exists
            client_id: Service account client ID
            client_secret: Service account client secret

        Returns:
            Access token
        """
        self.configure_service_account(auth_realm, client_id, client_secret)
        self._refresh_token()
        return self._token

    def configure_service_account(self, auth_realm: str, client_id: str, client_secret: str) -> None:
        """Store service account credentials; the token is fetched on first request."""
        self._auth_method = "service_account"
        self._auth_params = {
            "auth_realm": auth_realm,
            "client_id": client_id,
            "client_secret": client_secret,
        }
        self._token = None
        self._token_expires_at = None

    def get_http_client_and_request(
        self,
        method: str,
        url: str,
        data: Optional[Any] = None,
    ) -> Tuple[requests.Session, requests.PreparedRequest]:
        """Return a session and a prepared request carrying a bearer token.

        Args:
            method: HTTP method (e.g., "GET")
            url: Absolute URL, query string included
            data: Optional request body

        Returns:
            Tuple of (session, prepared request) ready for session.send()

        Raises:
            KeycloakAPIError: If no credentials are configured or the token
                endpoint rejects them
        """
        self._ensure_authenticated()
        request = requests.Request(
            method,
            url,
            data=data,
            headers={"Authorization": f"Bearer {self._token}", "Accept": "application/json"},
        )
        return self.session, self.session.prepare_request(request)

    def _ensure_authenticated(self) -> None:
        """Ensure we have a valid token, refreshing if necessary."""
        if not self._auth_method:
            raise KeycloakAPIError(401, "Not authenticated - configure a service account or admin credentials first", "")

        # Refresh if token missing, expired or expiring soon (within 10 seconds)
        if (
            not self._token
            or not self._token_expires_at
            or datetime.now() >= self._token_expires_at - timedelta(seconds=10)
        ):
            self._refresh_token()

    def _refresh_token(self) -> None:
        if self._auth_method == "admin":
            payload = self._get_admin_token(
                self._auth_params["username"],
                self._auth_params["password"],
                self._auth_params["realm"],
            )
        elif self._auth_method == "service_account":
            payload = self._get_service_account_token(
                self._auth_params["auth_realm"],
                self._auth_params["client_id"],
                self._auth_params["client_secret"],
            )
        else:
            raise KeycloakAPIError(401, "Pre-issued token expired and cannot be refreshed", "")
        self._token = payload["access_token"]
        try:
            expires_in = int(payload.get("expires_in") or DEFAULT_TOKEN_TTL)
        except (TypeError, ValueError):
            expires_in = DEFAULT_TOKEN_TTL
        self._token_expires_at = datetime.now() + timedelta(seconds=expires_in)

    def _get_admin_token(self, username: str, password: str, realm: str = "master") -> dict:
        """Obtain an admin token via direct access grant."""
        url = f"{self.base_url}/realms/{realm}/protocol/openid-connect/token"
        data = {
            "grant_type": "password",
            "client_id": "admin-cli",
            "username": username,
            "password": password,
        }
        return self._post_token_request(url, data)

    def _get_service_account_token(self, auth_realm: str, client_id: str, client_secret: str) -> dict:
        """Fetch a service account token using client credentials flow."""
        url = f"{self.base_url}/realms/{auth_realm}/protocol/openid-connect/token"
        data = {
            "grant_type": "client_credentials",
            "client_id": client_id,
            "client_secret": client_secret,
        }
        return self._post_token_request(url, data)

    def _post_token_request(self, url: str, data: dict) -> dict:
        resp = requests.post(url, data=data, timeout=REQUEST_TIMEOUT)
        if resp.status_code != 200:
            raise KeycloakAPIError(resp.status_code, resp.text, url)
        payload = resp.json()
        if not isinstance(payload, dict) or not payload.get("access_token"):
            raise KeycloakAPIError(resp.status_code, "token response missing access_token", url)
        return payload


# ─────────────────────────────────────────────────────────────────────────────
# Standalone functions
# ─────────────────────────────────────────────────────────────────────────────
def create_client_with_token(kc_url: str, token: str, expires_in: int = 3600) -> KeycloakClient:
    """Create a pre-authenticated KeycloakClient from an already issued token.

    Useful for callers that obtained a token elsewhere (CLI, tests). The
    client cannot refresh the token once it expires.

    Args:
        kc_url: Keycloak base URL
        token: Pre-obtained access token
        expires_in: Token validity in seconds (default: 1 hour)

    Returns:
        KeycloakClient instance with token pre-set
    """
    client = KeycloakClient(kc_url)
    client._auth_method = "static"
    client._token = token
    client._token_expires_at = datetime.now() + timedelta(seconds=expires_in)
    return client
