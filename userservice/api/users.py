"""User search endpoints.

Routes:
    GET  /users         - criteria from query string (orgId, emails, usernames, userIds, queryLimit)
    POST /users/search  - criteria from a JSON object body

Both return a JSON array of user representations with the derived
is_internal, org_admin and type fields appended.
"""
from __future__ import annotations
import logging

from flask import Blueprint, current_app, jsonify, request
from werkzeug.exceptions import BadRequest

from userservice.core.models import FindUsersCriteria
from userservice.core.user_finder import UserFinder
from userservice.core.validators import (
    CriteriaValidationError,
    criteria_from_payload,
    criteria_from_query_args,
)

bp = Blueprint("users", __name__)

logger = logging.getLogger(__name__)


def _get_finder() -> UserFinder:
    finder = current_app.config.get("USER_FINDER")
    if finder is None:
        raise RuntimeError("USER_FINDER is not configured on the application")
    return finder


def _search(criteria: FindUsersCriteria):
    users = _get_finder().find_users(criteria)
    logger.info(f"User search returned {len(users)} user(s)")
    return jsonify([user.to_dict() for user in users]), 200


@bp.route("/users", methods=["GET"])
def list_users():
    """Search users with criteria taken from the query string."""
    criteria = criteria_from_query_args(request.args)
    return _search(criteria)


@bp.route("/users/search", methods=["POST"])
def search_users():
    """Search users with criteria taken from a JSON body."""
    try:
        payload = request.get_json(force=True, silent=False)
    except BadRequest:
        raise CriteriaValidationError("Request body must be valid JSON") from None
    criteria = criteria_from_payload(payload)
    return _search(criteria)
