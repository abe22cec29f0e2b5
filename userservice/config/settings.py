"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path

DEMO_SERVICE_CLIENT_SECRET = "demo-service-secret"


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = Path("/run/secrets") / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                print(f"[settings] ✓ Loaded {secret_name} from /run/secrets")
                return secret_value
        except OSError as e:
            print(f"[settings] ✗ Failed to read /run/secrets/{secret_name}: {e}")

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            return secret_value

    return None


def _env_flag(var_name: str, default: str = "false") -> bool:
    return os.environ.get(var_name, default).strip().lower() == "true"


@dataclass
class AppConfig:
    """Application configuration container."""
    # Mode
    demo_mode: bool

    # Keycloak
    keycloak_url: str = ""
    keycloak_realm: str = "demo"
    keycloak_users_path: str = "/admin/realms/demo/users"

    # Service Account
    keycloak_service_realm: str = "demo"
    keycloak_service_client_id: str = "automation-cli"
    keycloak_service_client_secret: str = ""

    # User lookup
    strict_status: bool = False

    @property
    def users_url(self) -> str:
        """Absolute URL of the Keycloak users endpoint."""
        return f"{self.keycloak_url.rstrip('/')}{self.keycloak_users_path}"


def load_settings() -> AppConfig:
    """Load application settings from environment and /run/secrets."""
    demo_mode = _env_flag("DEMO_MODE")

    keycloak_url = os.environ.get("KEYCLOAK_URL", "http://127.0.0.1:8080" if demo_mode else "")
    if not keycloak_url:
        raise RuntimeError("Environment variable KEYCLOAK_URL is required in production mode.")

    keycloak_realm = os.environ.get("KEYCLOAK_REALM", "demo")
    keycloak_users_path = os.environ.get("KEYCLOAK_USERS_PATH", f"/admin/realms/{keycloak_realm}/users")
    if not keycloak_users_path.startswith("/"):
        keycloak_users_path = f"/{keycloak_users_path}"

    keycloak_service_realm = os.environ.get("KEYCLOAK_SERVICE_REALM", keycloak_realm)
    keycloak_service_client_id = os.environ.get("KEYCLOAK_SERVICE_CLIENT_ID", "automation-cli")
    keycloak_service_client_secret = _load_secret_from_file(
        "keycloak_service_client_secret",
        "KEYCLOAK_SERVICE_CLIENT_SECRET",
    )
    if not keycloak_service_client_secret:
        if not demo_mode:
            raise RuntimeError(
                "KEYCLOAK_SERVICE_CLIENT_SECRET not found in /run/secrets or environment. "
                "Set DEMO_MODE=true or provide the secret."
            )
        keycloak_service_client_secret = DEMO_SERVICE_CLIENT_SECRET
        print("[demo-mode] Using default for KEYCLOAK_SERVICE_CLIENT_SECRET")

    strict_status = _env_flag("USER_FINDER_STRICT_STATUS")

    mode_label = "DEMO" if demo_mode else "PRODUCTION"
    print(f"[settings] Mode={mode_label}; keycloak={keycloak_url}; users_path={keycloak_users_path}")

    if keycloak_service_client_secret == DEMO_SERVICE_CLIENT_SECRET:
        print("[settings] WARNING: Demo credentials in use. Do not deploy with these defaults.")

    return AppConfig(
        demo_mode=demo_mode,
        keycloak_url=keycloak_url,
        keycloak_realm=keycloak_realm,
        keycloak_users_path=keycloak_users_path,
        keycloak_service_realm=keycloak_service_realm,
        keycloak_service_client_id=keycloak_service_client_id,
        keycloak_service_client_secret=keycloak_service_client_secret,
        strict_status=strict_status,
    )
