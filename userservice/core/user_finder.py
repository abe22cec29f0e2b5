"""User lookup against the Keycloak users endpoint.

A search resolves to exactly one SelectionMode, issues one or more GET
requests, decodes each JSON array into User records, normalises custom
attributes and truncates the aggregated list to the requested limit.

Usage:
    client = KeycloakClient("http://keycloak:8080")
    client.configure_service_account("demo", "automation-cli", secret)

    finder = UserFinder(client, "http://keycloak:8080/admin/realms/demo/users")
    users = finder.find_users(FindUsersCriteria(emails=("alice@example.com",)))
"""
from __future__ import annotations
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Tuple
from urllib.parse import urlencode

import requests

from .attributes import process_users_custom_attributes
from .keycloak import REQUEST_TIMEOUT
from .keycloak.exceptions import KeycloakAPIError, UserDecodeError
from .models import FindUsersCriteria, SelectionMode, User, resolve_selection_mode

logger = logging.getLogger(__name__)

ORG_FILTER_PARAM = "q"
EMAIL_PARAM = "email"
USERNAME_PARAM = "username"
USER_ID_PARAM = "id"


class AuthenticatedRequestProvider(Protocol):
    """Supplies a ready-to-send (client, request) pair with authentication attached."""

    def get_http_client_and_request(
        self, method: str, url: str, data: Optional[Any] = None
    ) -> Tuple[requests.Session, requests.PreparedRequest]:
        ...


def org_filter(org_id: str) -> str:
    return f"org_id:{org_id}"


def build_users_url(
    users_url: str,
    base_filters: Dict[str, str],
    key: Optional[str] = None,
    value: Optional[str] = None,
) -> str:
    """Build a users endpoint URL from shared filters plus one per-item parameter.

    ``base_filters`` is copied, never mutated. Parameters are form-encoded
    and sorted by name.
    """
    params = dict(base_filters)
    if key is not None:
        params[key] = value
    if not params:
        return users_url
    return f"{users_url}?{urlencode(sorted(params.items()))}"


def limit_results(criteria: FindUsersCriteria, users: List[User]) -> List[User]:
    """Keep the first query_limit users when a positive limit is set."""
    if criteria.query_limit > 0 and len(users) > criteria.query_limit:
        return users[:criteria.query_limit]
    return users


class UserFinder:
    """Resolve search criteria into Keycloak user queries."""

    def __init__(
        self,
        provider: AuthenticatedRequestProvider,
        users_url: str,
        strict_status: bool = False,
    ):
        """Initialize user finder.

        Args:
            provider: Supplies authenticated (session, request) pairs
            users_url: Absolute URL of the users endpoint
                (e.g., http://keycloak:8080/admin/realms/demo/users)
            strict_status: Raise KeycloakAPIError on non-200 responses instead
                of treating them as an empty result
        """
        self.provider = provider
        self.users_url = users_url
        self.strict_status = strict_status

    def find_users(self, criteria: FindUsersCriteria) -> List[User]:
        """Return the users matching the criteria.

        Raises:
            KeycloakAPIError: Token could not be obtained, or a non-200
                response in strict mode
            requests.RequestException: Transport failure
            ValueError: Response body is not a JSON array of users
        """
        mode = resolve_selection_mode(criteria)
        handlers: Dict[SelectionMode, Callable[[FindUsersCriteria], List[User]]] = {
            SelectionMode.ALL_USERS: self._find_all_users,
            SelectionMode.ORG_ONLY: self._find_users_by_org_id,
            SelectionMode.EMAILS: lambda c: self._find_users_by_param(c, EMAIL_PARAM, c.emails),
            SelectionMode.USERNAMES: lambda c: self._find_users_by_param(c, USERNAME_PARAM, c.usernames),
            SelectionMode.USER_IDS: lambda c: self._find_users_by_param(c, USER_ID_PARAM, c.user_ids),
        }
        logger.debug(f"Resolved user search mode: {mode.value}")
        users = handlers[mode](criteria)
        return limit_results(criteria, users)

    def _find_all_users(self, criteria: FindUsersCriteria) -> List[User]:
        url = build_users_url(self.users_url, {})
        logger.info(url)
        return self._execute_get_user_request(url)

    def _find_users_by_org_id(self, criteria: FindUsersCriteria) -> List[User]:
        # Raw concatenation: the colon in the filter value stays unescaped
        url = f"{self.users_url}?{ORG_FILTER_PARAM}={org_filter(criteria.org_id)}"
        logger.info(url)
        return self._execute_get_user_request(url)

    def _find_users_by_param(self, criteria: FindUsersCriteria, key: str, values: Iterable[str]) -> List[User]:
        base_filters: Dict[str, str] = {}
        if criteria.org_id:
            base_filters[ORG_FILTER_PARAM] = org_filter(criteria.org_id)

        users: List[User] = []
        for value in values:
            if not value.strip():
                continue
            url = build_users_url(self.users_url, base_filters, key, value)
            logger.info(url)
            users.extend(self._execute_get_user_request(url))
        return users

    def _execute_get_user_request(self, url: str) -> List[User]:
        """Issue one authenticated GET and decode the user array.

        Only a 200 body is decoded; other statuses yield no users unless
        strict_status is set.
        """
        try:
            http_client, request = self.provider.get_http_client_and_request("GET", url, None)
            response = http_client.send(request, timeout=REQUEST_TIMEOUT)
        except (KeycloakAPIError, requests.RequestException) as exc:
            logger.error(f"User lookup failed for {url}: {exc}")
            raise

        if response.status_code != 200:
            if self.strict_status:
                logger.error(f"User lookup returned HTTP {response.status_code} for {url}")
                raise KeycloakAPIError(response.status_code, response.text, url)
            logger.warning(f"User lookup returned HTTP {response.status_code} for {url}; treating as no users")
            return []

        try:
            users = _decode_users(response.json())
        except ValueError as exc:
            logger.error(f"Could not decode users from {url}: {exc}")
            raise

        return process_users_custom_attributes(users)


def _decode_users(payload: Any) -> List[User]:
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise UserDecodeError(f"Expected JSON array of users, got {type(payload).__name__}")
    return [User.from_representation(item) for item in payload]
