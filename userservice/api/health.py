"""Health check endpoints."""
from flask import Blueprint, current_app

bp = Blueprint("health", __name__)


@bp.route("/health")
def health_check():
    """Liveness: the process is serving requests."""
    return ("ok", 200, {"Content-Type": "text/plain"})


@bp.route("/ready")
def readiness_check():
    """Readiness: a user finder is wired to a users endpoint.

    Keycloak itself is not contacted; the token is fetched on first search.
    """
    finder = current_app.config.get("USER_FINDER")
    if finder is None or not getattr(finder, "users_url", ""):
        return ("user finder not configured", 503, {"Content-Type": "text/plain"})
    return ("ready", 200, {"Content-Type": "text/plain"})
