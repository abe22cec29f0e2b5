"""Input validation helpers for user search criteria."""
from __future__ import annotations
from typing import Any, Iterable, List, Mapping, Optional

from .models import FindUsersCriteria

# Accepted payload keys per criteria field (camelCase first, snake_case alias)
_FIELD_KEYS = {
    "org_id": ("orgId", "org_id"),
    "emails": ("emails", "email"),
    "usernames": ("usernames", "username"),
    "user_ids": ("userIds", "user_ids", "id"),
    "query_limit": ("queryLimit", "query_limit", "limit"),
}


class CriteriaValidationError(ValueError):
    """Search criteria payload is malformed."""
    pass


def _lookup(payload: Mapping[str, Any], field: str) -> Any:
    for key in _FIELD_KEYS[field]:
        if key in payload:
            return payload[key]
    return None


def validate_org_id(raw: Any) -> str:
    """Validate the organisation filter.

    Raises:
        CriteriaValidationError: If the value is not a string
    """
    if raw is None:
        return ""
    if not isinstance(raw, str):
        raise CriteriaValidationError("orgId must be a string")
    return raw.strip()


def validate_string_list(raw: Any, field: str) -> List[str]:
    """Validate a list of lookup values.

    A single string is treated as a one-element list. Entries are stripped;
    blank entries are kept (the finder skips them).

    Raises:
        CriteriaValidationError: If the value is not a string or list of strings
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, list):
        raise CriteriaValidationError(f"{field} must be a list of strings")
    values = []
    for item in raw:
        if not isinstance(item, str):
            raise CriteriaValidationError(f"{field} must be a list of strings")
        values.append(item.strip())
    return values


def validate_query_limit(raw: Any) -> int:
    """Validate the result limit; 0 or negative means unlimited.

    Raises:
        CriteriaValidationError: If the value is not an integer
    """
    if raw is None or raw == "":
        return 0
    if isinstance(raw, bool):
        raise CriteriaValidationError("queryLimit must be an integer")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        try:
            return int(raw.strip())
        except ValueError:
            raise CriteriaValidationError("queryLimit must be an integer") from None
    raise CriteriaValidationError("queryLimit must be an integer")


def criteria_from_payload(payload: Any) -> FindUsersCriteria:
    """Build FindUsersCriteria from a decoded JSON object.

    Raises:
        CriteriaValidationError: If the payload or one of its fields is invalid
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise CriteriaValidationError("Search criteria must be a JSON object")

    return FindUsersCriteria(
        org_id=validate_org_id(_lookup(payload, "org_id")),
        emails=tuple(validate_string_list(_lookup(payload, "emails"), "emails")),
        usernames=tuple(validate_string_list(_lookup(payload, "usernames"), "usernames")),
        user_ids=tuple(validate_string_list(_lookup(payload, "user_ids"), "userIds")),
        query_limit=validate_query_limit(_lookup(payload, "query_limit")),
    )


def _split_values(values: Iterable[str]) -> Optional[List[str]]:
    result: List[str] = []
    for value in values:
        result.extend(part.strip() for part in value.split(","))
    return result or None


def criteria_from_query_args(args: Any) -> FindUsersCriteria:
    """Build FindUsersCriteria from query-string arguments.

    ``args`` is a werkzeug MultiDict (``request.args``). List fields accept
    repeated parameters and comma-separated values.
    """
    payload = {}
    for field, keys in _FIELD_KEYS.items():
        for key in keys:
            if key not in args:
                continue
            if field in ("org_id", "query_limit"):
                payload[field] = args.get(key)
            else:
                payload[field] = _split_values(args.getlist(key))
            break
    return criteria_from_payload(payload)
