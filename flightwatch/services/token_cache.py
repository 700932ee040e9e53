"""
Token Cache - OAuth 2.0 client-credentials bearer token for the Amadeus API
"""

import logging
import threading
import time
from typing import Callable, Optional

import requests

from flightwatch.core.exceptions import TokenError

logger = logging.getLogger(__name__)


class TokenCache:
    """
    Single {token, expiry} cell shared by every Amadeus call

    Features:
    - Token reused until it is within expiry_buffer seconds of expiring
    - invalidate() drops the token after a 401
    - A lock serializes refreshes so concurrent callers do not race on the cell
    """

    def __init__(
        self,
        token_url: str,
        client_id: str,
        client_secret: str,
        session: Optional[requests.Session] = None,
        expiry_buffer: int = 60,
        timeout: int = 10,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            token_url: OAuth2 token endpoint
            client_id: OAuth client ID
            client_secret: OAuth client secret
            session: HTTP session (a new one is created when omitted)
            expiry_buffer: Seconds before expiry at which the token counts as stale
            timeout: Token request timeout in seconds
            clock: Returns the current time in epoch seconds
        """
        self.token_url = token_url
        self.client_id = client_id
        self.client_secret = client_secret
        self.session = session or requests.Session()
        self.expiry_buffer = expiry_buffer
        self.timeout = timeout
        self._clock = clock
        self._access_token: Optional[str] = None
        self._expires_at: float = 0.0
        self._lock = threading.Lock()

    @property
    def expires_at(self) -> float:
        return self._expires_at

    def is_valid(self) -> bool:
        """Cached token exists and is not within the expiry buffer"""
        return bool(self._access_token) and self._clock() < self._expires_at - self.expiry_buffer

    def get_token(self, force_refresh: bool = False) -> str:
        """
        Get a bearer token, refreshing it when missing or about to expire

        Raises:
            TokenError: If the client-credentials grant fails
        """
        with self._lock:
            if not force_refresh and self.is_valid():
                return self._access_token

            token, expires_in = self._request_new_token()
            self._access_token = token
            self._expires_at = self._clock() + expires_in
            logger.info(f"Obtained new Amadeus access token, expires in {expires_in}s")
            return token

    def invalidate(self) -> None:
        """Forget the cached token so the next call performs a fresh grant"""
        with self._lock:
            self._access_token = None
            self._expires_at = 0.0

    def _request_new_token(self) -> tuple[str, int]:
        data = {
            "grant_type": "client_credentials",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        }
        headers = {"Content-Type": "application/x-www-form-urlencoded"}

        try:
            response = self.session.post(self.token_url, data=data, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            token_data = response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Failed to obtain Amadeus access token: {str(e)}")
            raise TokenError(f"Authentication failed: {str(e)}", provider="amadeus")
        except ValueError as e:
            raise TokenError(f"Token endpoint returned invalid JSON: {str(e)}", provider="amadeus")

        token = token_data.get("access_token")
        if not token:
            raise TokenError("Token endpoint did not return access_token", provider="amadeus")
        return token, int(token_data.get("expires_in", 1799))
