"""
Partner API Client — GraphQL lookups against the academic partner service.

The partner service is a separate system from the identity API. It is
protected by its own Auth0 audience and accepts a token obtained with its
own client credentials.

Pipeline context:
    Used in Step 4 (partner resolution) of the orchestrator pipeline.
"""

import requests
from typing import Dict, Any, Optional

from .auth_client import ClientCredentialsAuth
from .errors import FetchError, LookupMissError
from .graphql_queries import ACADEMIC_PARTNER_QUERY
from .rate_limiter import RateLimiter


class PartnerClient:
    """Client for the academic partner GraphQL service.

    Attributes:
        api_url: Full URL of the GraphQL endpoint.
        debug: If True, print verbose request details.
    """

    def __init__(
        self,
        api_url: str,
        auth_client: ClientCredentialsAuth,
        rate_limiter: Optional[RateLimiter] = None,
        timeout: int = 30,
        debug: bool = False,
    ):
        self.api_url = api_url
        self._auth = auth_client
        self._limiter = rate_limiter or RateLimiter(0)
        self.timeout = timeout
        self.debug = debug
        self._token = None
        self._session = requests.Session()

    def authenticate(self) -> str:
        self._token = self._auth.get_token()
        self._session.headers.update({"Authorization": f"Bearer {self._token}"})

        if self.debug:
            print("  Partner service session authenticated")

        return self._token

    def execute_graphql(self, query: str, variables: Optional[Dict] = None) -> Dict[str, Any]:
        """Execute a GraphQL query and return the "data" portion of the response.

        Raises:
            FetchError: If the HTTP request fails or the response contains a
                        top-level GraphQL "errors" array.
        """
        if not self._token:
            self.authenticate()

        payload = {"query": query}
        if variables:
            payload["variables"] = variables

        self._limiter.wait()

        try:
            response = self._session.post(
                self.api_url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.HTTPError as e:
            raise FetchError(
                f"GraphQL request failed: {e}", status_code=response.status_code
            ) from e
        except requests.RequestException as e:
            raise FetchError(f"GraphQL request failed: {e}") from e

        try:
            result = response.json()
        except ValueError as e:
            raise FetchError(
                f"GraphQL response is not valid JSON: {e}", status_code=response.status_code
            ) from e

        if not isinstance(result, dict):
            raise FetchError(f"GraphQL response is not an object: {type(result).__name__}")

        if result.get("errors"):
            error_messages = [
                e.get("message", str(e)) if isinstance(e, dict) else str(e)
                for e in result["errors"]
            ]
            raise FetchError(f"GraphQL errors: {'; '.join(error_messages)}")

        return result.get("data") or {}

    def get_academic_partner(self, partner_id: str) -> Dict[str, Any]:
        """Resolve one academic partner.

        Returns:
            The partner record: {"id", "name", "shortName"}.

        Raises:
            LookupMissError: If the envelope reports errors or carries no data.
        """
        if self.debug:
            print(f"  Fetching academic partner {partner_id}")

        data = self.execute_graphql(ACADEMIC_PARTNER_QUERY, {"id": partner_id})
        envelope = data.get("academicPartner") or {}

        errors = envelope.get("errors")
        if errors:
            messages = [e.get("message", str(e)) if isinstance(e, dict) else str(e) for e in errors]
            raise LookupMissError(
                f"Academic partner {partner_id}: {'; '.join(messages)}",
                status_code=envelope.get("statusCode"),
            )

        partner = envelope.get("data")
        if not partner:
            raise LookupMissError(
                f"Academic partner {partner_id} not found",
                status_code=envelope.get("statusCode"),
            )

        return partner
