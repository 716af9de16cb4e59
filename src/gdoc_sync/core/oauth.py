"""OAuth2 access-token provider backed by a stored refresh token.

Only the refresh-token grant is implemented; obtaining the refresh token in
the first place (the browser consent flow) happens outside this package.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Protocol

import requests

from .errors import AuthenticationError

logger = logging.getLogger(__name__)

TOKEN_URL = "https://oauth2.googleapis.com/token"
SCOPES = (
    "https://www.googleapis.com/auth/documents",
    "https://www.googleapis.com/auth/drive.file",
)
# Refresh this many seconds before the reported expiry.
EXPIRY_BUFFER_SECONDS = 5 * 60


class TokenProvider(Protocol):
    def get_valid_token(self) -> str: ...


class OAuthTokenProvider:
    """Hand out access tokens, refreshing them when close to expiry.

    Args:
        client_id: OAuth client id.
        client_secret: OAuth client secret.
        refresh_token: Long-lived refresh token.
        token_url: Token endpoint, overridable for tests.
        clock: Returns the current time in seconds.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        refresh_token: str,
        token_url: str = TOKEN_URL,
        clock=time.time,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.refresh_token = refresh_token
        self.token_url = token_url
        self._clock = clock
        self._lock = threading.Lock()
        self._access_token: str | None = None
        self._expires_at: float = 0.0

    @classmethod
    def from_settings(cls, settings) -> OAuthTokenProvider:
        return cls(
            client_id=settings.client_id,
            client_secret=settings.client_secret,
            refresh_token=settings.refresh_token,
        )

    def is_expired(self) -> bool:
        if self._access_token is None:
            return True
        return self._clock() >= self._expires_at - EXPIRY_BUFFER_SECONDS

    def get_valid_token(self) -> str:
        """Return a cached token or refresh it.

        Raises:
            AuthenticationError: Credentials are missing or the refresh
                was refused.
        """
        with self._lock:
            if self._access_token is None or self.is_expired():
                self._access_token = self._refresh()
            return self._access_token

    def _refresh(self) -> str:
        if not (self.client_id and self.client_secret and self.refresh_token):
            raise AuthenticationError(
                "Google credentials are not configured "
                "(client id, client secret and refresh token are required)"
            )
        try:
            response = requests.post(
                self.token_url,
                data={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "refresh_token": self.refresh_token,
                    "grant_type": "refresh_token",
                },
                timeout=(10, 30),
            )
        except requests.RequestException as e:
            raise AuthenticationError(f"Token refresh failed: {e}") from e

        if not response.ok:
            raise AuthenticationError(
                f"Token refresh refused ({response.status_code}): "
                f"{response.text}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
            token = data["access_token"]
            expires_in = float(data.get("expires_in", 3600))
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise AuthenticationError(
                f"Malformed token response: {response.text}"
            ) from e
        self._expires_at = self._clock() + expires_in
        logger.info("Refreshed Google access token")
        return token
