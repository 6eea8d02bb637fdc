"""
Management API Client — Handles all calls to the Auth0 Management API.

Endpoint reference (Auth0 Management API v2):
- GET /api/v2/users?q=...&search_engine=v3&include_totals=true&page=&per_page=
- GET /api/v2/users/{id}
- GET /api/v2/roles/{id}
- GET /api/v2/roles/{id}/users?include_totals=true&page=&per_page=

Every request passes through a RateLimiter. The Management API assigns
strict per-client rate limits, so calls are strictly sequential.

Pipeline context:
    Used in Step 1 (authentication), Step 2 (user fetch) and Step 3 (role
    name resolution) of the orchestrator pipeline.
"""

from urllib.parse import quote

import requests
from typing import Dict, Any, Optional, List

from .auth_client import ClientCredentialsAuth
from .errors import FetchError, LookupMissError
from .pagination import fetch_all_pages, DEFAULT_PAGE_SIZE
from .rate_limiter import RateLimiter


class ManagementClient:
    """Client for the Auth0 Management API using client_credentials auth."""

    def __init__(
        self,
        domain: str,
        auth_client: ClientCredentialsAuth,
        rate_limiter: Optional[RateLimiter] = None,
        timeout: int = 30,
        debug: bool = False,
    ):
        domain = domain.rstrip("/")
        if not domain.startswith("http"):
            domain = f"https://{domain}"
        self.base_url = f"{domain}/api/v2"
        self._auth = auth_client
        self._limiter = rate_limiter or RateLimiter(0)
        self.timeout = timeout
        self.debug = debug
        self._token = None
        self._session = requests.Session()

    def authenticate(self) -> str:
        """Acquire a token and set the Bearer header on the session.

        Raises:
            AuthenticationError: If the token request fails.
        """
        self._token = self._auth.get_token()
        self._session.headers.update({"Authorization": f"Bearer {self._token}"})

        if self.debug:
            print("  Management API session authenticated")

        return self._token

    def search_users(self, query: str, per_page: int = DEFAULT_PAGE_SIZE) -> List[Dict[str, Any]]:
        """Fetch every user matching a Lucene-syntax search query.

        GET /api/v2/users?q={query}&search_engine=v3&include_totals=true
        """

        def fetch_page(page: int, size: int) -> Dict[str, Any]:
            params = {
                "q": query,
                "search_engine": "v3",
                "include_totals": "true",
                "page": page,
                "per_page": size,
            }
            if self.debug:
                print(f"  Fetching users page {page}")
            return self._get("/users", params=params)

        users = fetch_all_pages(fetch_page, per_page)

        if self.debug:
            print(f"  Found {len(users)} users")

        return users

    def get_users_in_role(self, role_id: str, per_page: int = DEFAULT_PAGE_SIZE) -> List[Dict[str, Any]]:
        """Fetch every user assigned to a role.

        GET /api/v2/roles/{id}/users?include_totals=true
        Returns summary records only (user_id, email, name, picture).
        """

        def fetch_page(page: int, size: int) -> Dict[str, Any]:
            params = {"include_totals": "true", "page": page, "per_page": size}
            if self.debug:
                print(f"  Fetching users in role {role_id}, page {page}")
            return self._get(f"/roles/{quote(role_id, safe='')}/users", params=params)

        return fetch_all_pages(fetch_page, per_page)

    def get_user(self, user_id: str) -> Dict[str, Any]:
        """Get full user attributes.

        GET /api/v2/users/{id}
        """
        if self.debug:
            print(f"  Fetching user {user_id}")
        return self._get(f"/users/{quote(user_id, safe='')}")

    def get_role(self, role_id: str) -> Dict[str, Any]:
        """Get a role.

        GET /api/v2/roles/{id}
        Returns: {"id": "rol_abc", "name": "Guild admin", "description": "..."}

        Raises:
            LookupMissError: If the role does not exist (404).
        """
        if self.debug:
            print(f"  Fetching role {role_id}")
        return self._get(f"/roles/{quote(role_id, safe='')}")

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        self._ensure_auth()
        self._limiter.wait()
        url = f"{self.base_url}{path}"

        try:
            response = self._session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise FetchError(f"GET {url} failed: {e}") from e

        if response.status_code == 404:
            raise LookupMissError(f"GET {url} returned 404", status_code=404)

        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            raise FetchError(f"GET {url} failed: {e}", status_code=response.status_code) from e

        try:
            return response.json()
        except ValueError as e:
            raise FetchError(
                f"GET {url} returned invalid JSON: {e}", status_code=response.status_code
            ) from e

    def _ensure_auth(self):
        if not self._token:
            self.authenticate()

    @property
    def token(self) -> Optional[str]:
        return self._token
