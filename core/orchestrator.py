"""
Export Orchestrator — Pipeline coordination for the user export.

This module ties together all other modules (ClientCredentialsAuth,
ManagementClient, PartnerClient, EnrichmentResolver, flattener,
OutputManager) into a sequential 6-step workflow:

  Step 1: AUTHENTICATION
      Requests a client_credentials token for the Management API.

  Step 2: FETCH USERS
      Either pages through GET /api/v2/users with a search query built from
      the configured role ids for the user type, or (with --role) pages
      through GET /api/v2/roles/{id}/users and fetches full details per user.

  Step 3: RESOLVE ROLES
      Looks up each distinct role id once via GET /api/v2/roles/{id}.

  Step 4: RESOLVE ACADEMIC PARTNERS (fieldset v3 only)
      Authenticates against the partner service with its own credentials and
      resolves each distinct academic_partner_id via GraphQL. Skipped when no
      user carries a partner id.

  Step 5: FLATTEN
      Projects each user onto the configured CSV fieldset.

  Step 6: WRITE CSV
      Writes <timestamp>_<label>_users.csv into the dumps directory.

Every step runs only after the previous one completed. A fatal error
(authentication, user fetch, file write) aborts the run with success=False.
Role or partner lookups that miss only add warnings.

Configuration:
    All settings are loaded from environment variables (typically via .env file).
    Required: AUTH0_DOMAIN, AUTH0_BASE_URL, AUTH0_AUDIENCE,
    AUTH0_USER_ADMIN_CLIENT_ID, AUTH0_USER_ADMIN_CLIENT_SECRET.
    See config/settings.py for defaults.

Typical usage:
    orchestrator = ExportOrchestrator(env_file="./.env")
    if orchestrator.validate_config():
        results = orchestrator.run(user_type="guild")
        orchestrator.print_summary(results)
"""

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from .auth_client import ClientCredentialsAuth
from .enrichment import EnrichmentResolver
from .errors import ExportError
from .flattener import flatten_users, get_fieldset
from .management_client import ManagementClient
from .models import User, distinct_ids
from .output_manager import OutputManager
from .partner_client import PartnerClient
from .rate_limiter import RateLimiter

from config import ALL_USERS_LABEL, DEFAULT_SETTINGS, USER_TYPE_ROLE_VARS, USER_TYPES


def build_user_query(role_ids: List[str], connection: str) -> str:
    """Build the Management API search query for a set of role ids.

    Example:
        identities.connection:"model-m-users" AND
        (app_metadata.role_id:"rol_a" OR app_metadata.role_id:"rol_b")
    """
    role_clauses = " OR ".join(f'app_metadata.role_id:"{role_id}"' for role_id in role_ids)
    return f'identities.connection:"{connection}" AND ({role_clauses})'


def _banner(title: str):
    print(f"\n{'='*60}")
    print(title)
    print("="*60)


class ExportOrchestrator:
    """Orchestrates the user export pipeline.

    Attributes:
        domain: Auth0 tenant domain (e.g., "tenant.eu.auth0.com").
        token_url: Client-credentials token endpoint.
        audience: Management API audience.
        client_id / client_secret: Management API client credentials.
        partner_api_url: Partner service GraphQL endpoint.
        partner_token_url / partner_audience: Partner service token settings.
        partner_client_id / partner_client_secret: Partner service credentials.
        role_ids_by_type: User type label -> configured role ids.
        connection: Auth0 database connection exported users belong to.
        page_size: Users requested per page.
        requests_per_second: Throttle applied to every upstream request.
        fieldset_version: Exported CSV column set.
        debug: Whether to enable verbose output.
        output_manager: Writes timestamped CSV files and handles retention.
    """

    def __init__(self, env_file: str = "./.env"):
        """Initialize the orchestrator by loading configuration from environment.

        Args:
            env_file: Path to a .env file. If the file exists, it is loaded via
                      python-dotenv. Otherwise, falls back to system environment.
        """
        env_path = Path(env_file)
        if env_path.exists():
            load_dotenv(env_path)
            print(f"Loaded configuration from: {env_file}")
        else:
            print(f"Warning: {env_file} not found, using defaults/environment")

        # Management API (required)
        self.domain = os.getenv("AUTH0_DOMAIN", "")
        base_url = os.getenv("AUTH0_BASE_URL", "").rstrip("/")
        self.token_url = f"{base_url}/oauth/token" if base_url else ""
        audience = os.getenv("AUTH0_AUDIENCE", "").rstrip("/")
        self.audience = f"{audience}/api/v2/" if audience else ""
        self.client_id = os.getenv("AUTH0_USER_ADMIN_CLIENT_ID", "")
        self.client_secret = os.getenv("AUTH0_USER_ADMIN_CLIENT_SECRET", "")

        # Partner service (required for fieldset v3)
        self.partner_api_url = os.getenv("PARTNER_API_URL", "")
        self.partner_token_url = os.getenv("PARTNER_TOKEN_URL", "") or self.token_url
        self.partner_audience = os.getenv("PARTNER_AUDIENCE", "")
        self.partner_client_id = os.getenv("PARTNER_CLIENT_ID", "")
        self.partner_client_secret = os.getenv("PARTNER_CLIENT_SECRET", "")

        # Role ids per user type; unset variables are ignored
        self.role_ids_by_type = {
            user_type: [os.getenv(var) for var in env_vars if os.getenv(var)]
            for user_type, env_vars in USER_TYPE_ROLE_VARS.items()
        }

        # Numeric settings fall back to defaults; bad values are reported by validate_config()
        self._setting_errors = []
        self.connection = os.getenv("AUTH0_CONNECTION", DEFAULT_SETTINGS["AUTH0_CONNECTION"])
        self.page_size = self._numeric_setting("PAGE_SIZE", int)
        self.requests_per_second = self._numeric_setting("REQUESTS_PER_SECOND", float)
        self.request_timeout = self._numeric_setting("REQUEST_TIMEOUT", int)
        self.fieldset_version = self._numeric_setting("CSV_FIELDSET_VERSION", int)
        self.debug = os.getenv("DEBUG", str(DEFAULT_SETTINGS["DEBUG"])).lower() == "true"

        output_dir = os.getenv("OUTPUT_DIR", DEFAULT_SETTINGS["OUTPUT_DIR"])
        retention_days = self._numeric_setting("OUTPUT_RETENTION_DAYS", int)
        self.output_manager = OutputManager(output_dir, retention_days)

    def _numeric_setting(self, name: str, cast):
        default = DEFAULT_SETTINGS[name]
        raw = os.getenv(name, "").strip()
        if not raw:
            return default
        try:
            return cast(raw)
        except ValueError:
            self._setting_errors.append(f"{name} must be a number, got '{raw}'")
            return default

    @property
    def enrich_partners(self) -> bool:
        return "academic_partner_name" in get_fieldset(self.fieldset_version)

    def role_ids_for(self, user_type: Optional[str]) -> List[str]:
        """Role ids to query for a user type (None means every type)."""
        if user_type is None:
            return [rid for t in USER_TYPES for rid in self.role_ids_by_type[t]]
        return list(self.role_ids_by_type[user_type])

    def validate_config(self, user_type: Optional[str] = None, role_id: Optional[str] = None) -> bool:
        """Validate that all required configuration values are present.

        Returns:
            True if all required values are present, False otherwise.
            Prints specific error messages for each missing value.
        """
        errors = list(self._setting_errors)
        if not self.domain:
            errors.append("AUTH0_DOMAIN is required")
        if not self.token_url:
            errors.append("AUTH0_BASE_URL is required")
        if not self.audience:
            errors.append("AUTH0_AUDIENCE is required")
        if not self.client_id:
            errors.append("AUTH0_USER_ADMIN_CLIENT_ID is required")
        if not self.client_secret:
            errors.append("AUTH0_USER_ADMIN_CLIENT_SECRET is required")

        if user_type is not None and user_type not in USER_TYPES:
            errors.append(f"Unknown user type '{user_type}', expected one of {USER_TYPES}")
        elif role_id is None and not self.role_ids_for(user_type):
            label = user_type or ALL_USERS_LABEL
            errors.append(f"No role ids configured for user type '{label}' (ROLE_ID_* variables)")

        try:
            enrich_partners = self.enrich_partners
        except ValueError as e:
            errors.append(str(e))
            enrich_partners = False

        if enrich_partners:
            if not self.partner_api_url:
                errors.append("PARTNER_API_URL is required for CSV_FIELDSET_VERSION 3")
            if not self.partner_audience:
                errors.append("PARTNER_AUDIENCE is required for CSV_FIELDSET_VERSION 3")
            if not self.partner_client_id or not self.partner_client_secret:
                errors.append(
                    "PARTNER_CLIENT_ID and PARTNER_CLIENT_SECRET are required for CSV_FIELDSET_VERSION 3"
                )

        if self.page_size <= 0 or self.page_size > 100:
            errors.append(f"PAGE_SIZE must be between 1 and 100, got {self.page_size}")

        if errors:
            print("\nConfiguration Errors:")
            for err in errors:
                print(f"  - {err}")
            return False
        return True

    def _management_client(self) -> ManagementClient:
        auth = ClientCredentialsAuth(
            self.token_url,
            self.audience,
            self.client_id,
            self.client_secret,
            timeout=self.request_timeout,
            debug=self.debug,
        )
        return ManagementClient(
            self.domain,
            auth,
            RateLimiter(self.requests_per_second),
            timeout=self.request_timeout,
            debug=self.debug,
        )

    def _partner_client(self) -> PartnerClient:
        auth = ClientCredentialsAuth(
            self.partner_token_url,
            self.partner_audience,
            self.partner_client_id,
            self.partner_client_secret,
            timeout=self.request_timeout,
            debug=self.debug,
        )
        return PartnerClient(
            self.partner_api_url,
            auth,
            RateLimiter(self.requests_per_second),
            timeout=self.request_timeout,
            debug=self.debug,
        )

    def run(self, user_type: Optional[str] = None, role_id: Optional[str] = None) -> Dict[str, Any]:
        """Execute the full export pipeline.

        Args:
            user_type: "guild", "ap", or None for every user type.
            role_id: If set, export the users assigned to this role instead
                     of running the user-type search.

        Returns:
            A dict containing:
                - started_at/completed_at: ISO timestamps
                - user_type: The exported label (guild, ap, all, role_<id>)
                - success: True if the CSV file was written
                - summary: Counts of users, resolved roles/partners and rows
                - csv_path: Path of the written file (if success=True)
                - warnings: Skipped role members and unresolved role/partner ids
                - error/error_type: Failure description (if success=False)
        """
        label = f"role_{role_id}" if role_id else (user_type or ALL_USERS_LABEL)
        results = {
            "started_at": datetime.now(timezone.utc).isoformat(),
            "user_type": label,
            "config": {
                "domain": self.domain,
                "fieldset_version": self.fieldset_version,
                "page_size": self.page_size,
            },
            "success": False,
            "warnings": [],
        }
        fetch_warnings = []

        try:
            # Step 1: Authenticate with the Management API
            _banner("STEP 1: AUTHENTICATION")
            management = self._management_client()
            management.authenticate()
            print("  Authentication successful")

            # Step 2: Fetch users
            if role_id:
                users = self._fetch_role_users(management, role_id, fetch_warnings)
            else:
                users = self._fetch_users(management, user_type)

            # Step 3: Resolve role names
            _banner("STEP 3: RESOLVE ROLES")
            partner_client = self._partner_client() if self.enrich_partners else None
            resolver = EnrichmentResolver(management, partner_client, debug=self.debug)
            roles = resolver.resolve_roles_for(users)
            print(f"  Resolved {len(roles)} role(s)")

            # Step 4: Resolve academic partner names
            partners = {}
            if self.enrich_partners:
                _banner("STEP 4: RESOLVE ACADEMIC PARTNERS")
                partner_ids = distinct_ids(u.academic_partner_id for u in users)
                if partner_ids:
                    partner_client.authenticate()
                    partners = resolver.resolve_partners(partner_ids)
                    print(f"  Resolved {len(partners)} of {len(partner_ids)} academic partner(s)")
                else:
                    print("  No academic partner ids found, skipping")

            # Step 5: Flatten
            _banner("STEP 5: FLATTEN")
            rows, misses = flatten_users(users, roles, partners, self.fieldset_version)
            for miss in misses:
                print(f"  Warning: {miss}")
            results["warnings"] = fetch_warnings + resolver.warnings + misses
            print(f"  Flattened {len(rows)} row(s) using fieldset v{self.fieldset_version}")

            # Step 6: Write CSV
            _banner("STEP 6: WRITE CSV")
            csv_path = self.output_manager.write_csv(
                rows, label, fieldnames=get_fieldset(self.fieldset_version)
            )
            results["csv_path"] = csv_path
            print(f"  Saved export: {csv_path}")

            results["success"] = True
            results["summary"] = {
                "users": len(users),
                "roles": len(roles),
                "partners": len(partners),
                "rows": len(rows),
            }

        except ExportError as e:
            results["error"] = str(e)
            results["error_type"] = type(e).__name__
            print(f"\n  ERROR: {e}")
            if self.debug:
                import traceback
                traceback.print_exc()

        results["completed_at"] = datetime.now(timezone.utc).isoformat()
        return results

    def _fetch_users(self, management: ManagementClient, user_type: Optional[str]) -> List[User]:
        _banner("STEP 2: FETCH USERS")
        query = build_user_query(self.role_ids_for(user_type), self.connection)
        if self.debug:
            print(f"  Query: {query}")
        raw_users = management.search_users(query, per_page=self.page_size)
        print(f"  Fetched {len(raw_users)} user(s)")
        return [User.from_api(u) for u in raw_users]

    def _fetch_role_users(
        self, management: ManagementClient, role_id: str, warnings: List[str]
    ) -> List[User]:
        """Users-in-role listing plus one detail lookup per user.

        Members listed without a user_id are skipped and reported in warnings.
        """
        _banner("STEP 2: FETCH USERS IN ROLE")
        members = management.get_users_in_role(role_id, per_page=self.page_size)
        print(f"  Found {len(members)} user(s) in role {role_id}")

        users = []
        for member in members:
            user_id = member.get("user_id") if isinstance(member, dict) else None
            if not user_id:
                message = f"Role {role_id} member without user_id skipped: {member!r}"
                warnings.append(message)
                print(f"  Warning: {message}")
                continue
            users.append(User.from_api(management.get_user(user_id)))
        print(f"  Fetched details for {len(users)} user(s)")
        return users

    def print_summary(self, results: Dict):
        """Print a human-readable execution summary.

        Args:
            results: The dict returned by run().
        """
        _banner("EXPORT COMPLETE")
        print(f"Status: {'SUCCESS' if results.get('success') else 'FAILED'}")
        print(f"User type: {results.get('user_type', 'N/A')}")

        summary = results.get("summary", {})
        if summary:
            print(f"Users: {summary.get('users', 0)}")
            print(f"Roles: {summary.get('roles', 0)}")
            print(f"Academic partners: {summary.get('partners', 0)}")
            print(f"Rows: {summary.get('rows', 0)}")

        if results.get("csv_path"):
            print(f"File: {results['csv_path']}")

        warnings = results.get("warnings") or []
        if warnings:
            print(f"Warnings: {len(warnings)}")

        if results.get("error"):
            print(f"Error: {results['error']}")
