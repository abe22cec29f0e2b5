"""Command-line user search against the Keycloak Admin API.

This module serves as a CLI wrapper around userservice.core.user_finder.
"""
from __future__ import annotations
import argparse
import json
import os
import sys
from pathlib import Path

import requests

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from userservice.core.keycloak import KeycloakClient
from userservice.core.keycloak.exceptions import KeycloakAPIError
from userservice.core.models import FindUsersCriteria
from userservice.core.user_finder import UserFinder


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Search Keycloak users")
    parser.add_argument("--kc-url", default=os.environ.get("KEYCLOAK_URL", "http://localhost:8080"))
    parser.add_argument("--auth-realm", default=os.environ.get("KEYCLOAK_SERVICE_REALM", "master"))
    parser.add_argument("--svc-client-id", default=os.environ.get("KEYCLOAK_SERVICE_CLIENT_ID", "automation-cli"))
    parser.add_argument("--svc-client-secret", default=os.environ.get("KEYCLOAK_SERVICE_CLIENT_SECRET"))
    parser.add_argument("--realm", default=os.environ.get("KEYCLOAK_REALM", "demo"))
    parser.add_argument("--users-path", default=os.environ.get("KEYCLOAK_USERS_PATH"),
                        help="Users endpoint path (default: /admin/realms/<realm>/users)")
    parser.add_argument("--org-id", default="")
    parser.add_argument("--email", action="append", default=[], dest="emails")
    parser.add_argument("--username", action="append", default=[], dest="usernames")
    parser.add_argument("--user-id", action="append", default=[], dest="user_ids")
    parser.add_argument("--limit", type=int, default=0, help="Maximum users returned (0 = unlimited)")
    parser.add_argument("--strict", action="store_true",
                        help="Fail on non-200 responses instead of treating them as no users")
    return parser


def main() -> None:
    """Command-line entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.svc_client_secret:
        parser.error("Missing service account secret")

    users_path = args.users_path or f"/admin/realms/{args.realm}/users"
    client = KeycloakClient(args.kc_url)
    client.configure_service_account(args.auth_realm, args.svc_client_id, args.svc_client_secret)
    finder = UserFinder(client, f"{client.base_url}{users_path}", strict_status=args.strict)

    criteria = FindUsersCriteria(
        org_id=args.org_id,
        emails=args.emails,
        usernames=args.usernames,
        user_ids=args.user_ids,
        query_limit=args.limit,
    )

    try:
        users = finder.find_users(criteria)
    except (KeycloakAPIError, requests.RequestException, ValueError) as e:
        print(f"[find-users] Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps([user.to_dict() for user in users], indent=2))


if __name__ == "__main__":
    main()
