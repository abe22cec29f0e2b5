"""Flask application factory and bootstrap.

This module provides the create_app() factory function for initializing
the Flask application with all blueprints and configuration.
"""
from __future__ import annotations
from typing import Optional

from flask import Flask

from userservice.config import AppConfig, load_settings
from userservice.core.keycloak import KeycloakClient
from userservice.core.user_finder import UserFinder


# ─────────────────────────────────────────────────────────────────────────────
# Application Factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(cfg: Optional[AppConfig] = None, finder: Optional[UserFinder] = None) -> Flask:
    """Create and configure Flask application.

    Args:
        cfg: Configuration (defaults to load_settings())
        finder: Pre-built UserFinder (defaults to one backed by a
            service-account KeycloakClient)
    """
    cfg = cfg or load_settings()

    app = Flask(__name__)
    app.config["APP_CONFIG"] = cfg
    app.config["USER_FINDER"] = finder or build_user_finder(cfg)
    app.json.sort_keys = False

    from userservice.api import errors, health, users

    app.register_blueprint(health.bp)
    app.register_blueprint(users.bp)

    errors.register_error_handlers(app)

    mode_label = "DEMO" if cfg.demo_mode else "PRODUCTION"
    app.logger.info(f"[flask_app] Mode={mode_label}; users endpoint={cfg.users_url}")

    return app


def build_user_finder(cfg: AppConfig) -> UserFinder:
    """Build a UserFinder whose token is fetched lazily on the first search."""
    client = KeycloakClient(cfg.keycloak_url)
    client.configure_service_account(
        cfg.keycloak_service_realm,
        cfg.keycloak_service_client_id,
        cfg.keycloak_service_client_secret,
    )
    return UserFinder(client, cfg.users_url, strict_status=cfg.strict_status)


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000, debug=True)
