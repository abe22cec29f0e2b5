"""Custom attribute normalisation for Keycloak user records."""
from __future__ import annotations
import dataclasses
from typing import Iterable, List, Optional

from .models import User

IS_INTERNAL_ATTRIBUTE = "is_internal"
ORG_ADMIN_ATTRIBUTE = "org_admin"
TYPE_ATTRIBUTE = "type"

_TRUE_LITERALS = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_LITERALS = {"0", "f", "F", "FALSE", "false", "False"}


def parse_bool(raw: str) -> bool:
    """Parse a boolean literal.

    Raises:
        ValueError: If the value is not a recognised literal
    """
    if raw in _TRUE_LITERALS:
        return True
    if raw in _FALSE_LITERALS:
        return False
    raise ValueError(f"Invalid boolean literal: {raw!r}")


def _first_value(user: User, key: str) -> Optional[str]:
    values = user.attributes.get(key)
    if values:
        return values[0]
    return None


def _bool_attribute(user: User, key: str, current: bool) -> bool:
    raw = _first_value(user, key)
    if raw is None:
        return current
    try:
        return parse_bool(raw)
    except ValueError:
        # Unparseable values leave the field at its default
        return False


def process_user_custom_attributes(user: User) -> User:
    """Derive is_internal, org_admin and type from the user's attributes.

    Only the first value of each attribute is used. The input record is not
    modified; a new User is returned.
    """
    user_type = _first_value(user, TYPE_ATTRIBUTE)
    return dataclasses.replace(
        user,
        is_internal=_bool_attribute(user, IS_INTERNAL_ATTRIBUTE, user.is_internal),
        org_admin=_bool_attribute(user, ORG_ADMIN_ATTRIBUTE, user.org_admin),
        type=user_type if user_type is not None else user.type,
    )


def process_users_custom_attributes(users: Iterable[User]) -> List[User]:
    return [process_user_custom_attributes(user) for user in users]
