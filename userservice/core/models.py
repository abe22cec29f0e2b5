"""User search criteria, user records and selection modes.

Usage:
    criteria = FindUsersCriteria(org_id="acme", emails=("alice@example.com",))
    mode = resolve_selection_mode(criteria)   # SelectionMode.EMAILS

    user = User.from_representation(kc_user)
    payload = user.to_dict()
"""
from __future__ import annotations
import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from .keycloak.exceptions import UserDecodeError


class SelectionMode(enum.Enum):
    """Which single query dimension a search uses."""

    ALL_USERS = "all_users"
    ORG_ONLY = "org_only"
    EMAILS = "emails"
    USERNAMES = "usernames"
    USER_IDS = "user_ids"


@dataclass(frozen=True)
class FindUsersCriteria:
    """Search criteria for a single find_users() call.

    Attributes:
        org_id: Organisation filter (empty string means no filter)
        emails: Email addresses to look up; blank entries are skipped
        usernames: Usernames to look up; blank entries are skipped
        user_ids: Keycloak user ids to look up; blank entries are skipped
        query_limit: Maximum number of users returned (0 or negative = unlimited)
    """

    org_id: str = ""
    emails: Tuple[str, ...] = ()
    usernames: Tuple[str, ...] = ()
    user_ids: Tuple[str, ...] = ()
    query_limit: int = 0

    def __post_init__(self):
        # Accept any sequence from callers but store immutable tuples
        object.__setattr__(self, "org_id", self.org_id or "")
        object.__setattr__(self, "emails", tuple(self.emails or ()))
        object.__setattr__(self, "usernames", tuple(self.usernames or ()))
        object.__setattr__(self, "user_ids", tuple(self.user_ids or ()))
        object.__setattr__(self, "query_limit", int(self.query_limit or 0))


def resolve_selection_mode(criteria: FindUsersCriteria) -> SelectionMode:
    """Resolve the selection mode for the criteria (first match wins).

    Precedence:
        1. ALL_USERS  - no org id and every list empty
        2. ORG_ONLY   - org id set, every list empty
        3. EMAILS     - emails non-empty
        4. USERNAMES  - usernames non-empty
        5. USER_IDS   - user ids non-empty

    Mode selection looks at list length only: a list that holds nothing but
    blank (empty or whitespace) strings still selects its mode, and that
    mode then issues no requests because blank entries are skipped. So
    ``emails=["  "]`` with ``usernames=["bob"]`` returns no users rather
    than falling through to the usernames lookup.
    """
    has_lists = bool(criteria.emails or criteria.usernames or criteria.user_ids)
    if not has_lists:
        return SelectionMode.ORG_ONLY if criteria.org_id else SelectionMode.ALL_USERS
    if criteria.emails:
        return SelectionMode.EMAILS
    if criteria.usernames:
        return SelectionMode.USERNAMES
    return SelectionMode.USER_IDS


@dataclass
class User:
    """User record returned by Keycloak, enriched with derived attribute fields.

    ``representation`` is kept verbatim; ``to_dict()`` appends the derived
    fields after the provider-supplied ones.
    """

    representation: Dict[str, Any]
    attributes: Dict[str, List[str]] = field(default_factory=dict)
    is_internal: bool = False
    org_admin: bool = False
    type: str = ""

    @classmethod
    def from_representation(cls, rep: Any) -> "User":
        """Build a User from a decoded Keycloak user representation.

        Raises:
            UserDecodeError: If the representation is not an object or its
                attributes are not a mapping of string to list of strings
        """
        if not isinstance(rep, dict):
            raise UserDecodeError(f"Expected user object, got {type(rep).__name__}")

        raw_attributes = rep.get("attributes")
        if raw_attributes is None:
            raw_attributes = {}
        if not isinstance(raw_attributes, dict):
            raise UserDecodeError(f"User attributes must be an object, got {type(raw_attributes).__name__}")

        attributes: Dict[str, List[str]] = {}
        for key, values in raw_attributes.items():
            if values is None:
                values = []
            if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
                raise UserDecodeError(f"User attribute '{key}' must be a list of strings")
            attributes[key] = list(values)

        return cls(representation=rep, attributes=attributes)

    @property
    def id(self) -> str:
        return self.representation.get("id", "")

    @property
    def username(self) -> str:
        return self.representation.get("username", "")

    @property
    def email(self) -> str:
        return self.representation.get("email", "")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for API responses: provider fields first, derived fields last."""
        payload = dict(self.representation)
        payload["is_internal"] = self.is_internal
        payload["org_admin"] = self.org_admin
        payload["type"] = self.type
        return payload
