import json

import pytest
import requests
from flask import Flask, abort

from userservice.api.errors import register_error_handlers
from userservice.core.keycloak.exceptions import KeycloakAPIError, UserDecodeError
from userservice.core.validators import CriteriaValidationError


class RecordingLogger:
    """Collects (level, message) pairs in place of app.logger."""

    def __init__(self):
        self.records = []

    def warning(self, msg, *args, **kwargs):
        self.records.append(("WARNING", msg))

    def error(self, msg, *args, **kwargs):
        self.records.append(("ERROR", msg))

    def levels(self):
        return [level for level, _ in self.records]


@pytest.fixture()
def app_logger():
    return RecordingLogger()


@pytest.fixture()
def flask_client(app_logger):
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.logger = app_logger

    register_error_handlers(app)

    @app.route("/criteria")
    def bad_criteria():
        raise CriteriaValidationError("emails must be a list of strings")

    @app.route("/keycloak")
    def keycloak_down():
        raise KeycloakAPIError(503, "unavailable", "http://kc.test/token")

    @app.route("/network")
    def network_down():
        raise requests.ConnectTimeout("timed out")

    @app.route("/decode")
    def decode_failure():
        raise UserDecodeError("Expected JSON array of users, got dict")

    @app.route("/not-json")
    def not_json():
        try:
            json.loads("<html>")
        except json.JSONDecodeError as exc:
            raise requests.JSONDecodeError(exc.msg, exc.doc, exc.pos) from exc

    @app.route("/value-error")
    def value_error():
        raise ValueError("bad arithmetic in a view")

    @app.route("/crash")
    def crash():
        raise RuntimeError("boom")

    @app.route("/abort400")
    def abort_400():
        abort(400, "invalid payload")

    @app.route("/post-only", methods=["POST"])
    def post_only():
        return "ok"

    with app.test_client() as client:
        yield client


def test_criteria_error_returns_400(flask_client):
    response = flask_client.get("/criteria")
    assert response.status_code == 400
    assert response.get_json() == {"error": "Bad Request", "message": "emails must be a list of strings"}


def test_keycloak_error_returns_502_with_upstream_status(flask_client):
    response = flask_client.get("/keycloak")
    assert response.status_code == 502
    assert response.get_json() == {"error": "Bad Gateway", "message": "Identity provider returned HTTP 503"}


def test_transport_error_returns_502(flask_client):
    response = flask_client.get("/network")
    assert response.status_code == 502
    assert response.get_json()["message"] == "Identity provider unreachable"


def test_decode_error_returns_502(flask_client):
    response = flask_client.get("/decode")
    assert response.status_code == 502
    assert response.get_json()["message"] == "Invalid identity provider response"


def test_non_json_provider_body_returns_502(flask_client):
    response = flask_client.get("/not-json")
    assert response.status_code == 502
    assert response.get_json() == {"error": "Bad Gateway", "message": "Invalid identity provider response"}


def test_plain_value_error_is_internal_error(flask_client):
    response = flask_client.get("/value-error")
    assert response.status_code == 500
    assert response.get_json() == {"error": "Internal Server Error", "message": "An unexpected error occurred"}


@pytest.mark.parametrize("path", ["/keycloak", "/network", "/decode", "/not-json"])
def test_provider_failures_logged_at_warning_only(flask_client, app_logger, path):
    flask_client.get(path)
    assert app_logger.levels() == ["WARNING"]
    assert path in app_logger.records[0][1]


def test_unhandled_exception_returns_500_json(flask_client, app_logger):
    response = flask_client.get("/crash")
    assert response.status_code == 500
    assert response.get_json() == {"error": "Internal Server Error", "message": "An unexpected error occurred"}
    assert app_logger.levels() == ["ERROR"]


def test_abort_400_keeps_description(flask_client):
    response = flask_client.get("/abort400")
    assert response.status_code == 400
    assert response.get_json() == {"error": "Bad Request", "message": "invalid payload"}


def test_unknown_route_returns_json_404(flask_client):
    response = flask_client.get("/missing")
    assert response.status_code == 404
    assert response.get_json() == {"error": "Not Found", "message": "Resource not found"}


def test_wrong_method_returns_json_405(flask_client):
    response = flask_client.get("/post-only")
    assert response.status_code == 405
    assert response.get_json()["error"] == "Method Not Allowed"
