"""
Client Credentials Auth — Token acquisition for the identity API and the
partner service.

Both upstream services are protected by Auth0 and accept a bearer token from
the OAuth 2.0 client_credentials grant:

    POST {AUTH0_BASE_URL}/oauth/token
    Body: {"grant_type": "client_credentials", "client_id": "...",
           "client_secret": "...", "audience": "..."}
    Response: {"access_token": "eyJ...", "expires_in": 86400, "token_type": "Bearer"}

The two services use different audiences and different client credentials,
so each API client owns its own ClientCredentialsAuth instance.

Tokens are not cached: every get_token() call performs a fresh request. API
clients call it once per logical operation (see authenticate()).
"""

import requests
from typing import Optional

from .errors import AuthenticationError


class ClientCredentialsAuth:
    """Acquires access tokens via the client_credentials grant."""

    def __init__(
        self,
        token_url: str,
        audience: str,
        client_id: str,
        client_secret: str,
        timeout: int = 30,
        debug: bool = False,
    ):
        self.token_url = token_url
        self.audience = audience
        self.client_id = client_id
        self.client_secret = client_secret
        self.timeout = timeout
        self.debug = debug
        self._token = None

    def get_token(self) -> str:
        """Request a new access token.

        Raises:
            AuthenticationError: On a non-2xx response, a network failure, or
                                 a response without an access_token.
        """
        if self.debug:
            print(f"  Requesting token for audience: {self.audience}")

        payload = {
            "grant_type": "client_credentials",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "audience": self.audience,
        }

        try:
            response = requests.post(
                self.token_url,
                json=payload,
                headers={"content-type": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise AuthenticationError(
                f"Token request to {self.token_url} failed: {e}"
            ) from e
        except ValueError as e:
            raise AuthenticationError(
                f"Token endpoint returned invalid JSON: {e}"
            ) from e

        token = data.get("access_token")
        if not token:
            raise AuthenticationError(
                f"Token endpoint response has no access_token (audience: {self.audience})"
            )

        self._token = token

        if self.debug:
            print(f"  Token acquired, expires in {data.get('expires_in', 'unknown')}s")

        return self._token

    @property
    def token(self) -> Optional[str]:
        """The most recently issued token, or None if none was requested yet."""
        return self._token
