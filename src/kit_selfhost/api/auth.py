"""
Access Tokens
=============

Exchanges a long-lived Font Awesome API token for short-lived access tokens
and caches them per manager instance.
"""

import json
import logging
import time
from collections.abc import Callable

import requests
from pydantic import ValidationError as PydanticValidationError

from ..core.config import DEFAULT_API_BASE_URL
from ..core.exceptions import (
    InvalidConfigurationError,
    TokenEndpointHttpError,
    TokenEndpointMalformedResponseError,
    TokenEndpointTransportError,
)
from ..core.models import TokenResponse

logger = logging.getLogger(__name__)

# Seconds before expiry at which a cached access token is already treated as expired
EXPIRY_SKEW_SECONDS = 5


class AccessTokenManager:
    """
    Obtains and caches bearer access tokens for one API token.

    Each instance owns its cache, so managers for different API tokens can
    coexist in one process.
    """

    def __init__(
        self,
        api_token: str,
        api_base_url: str = DEFAULT_API_BASE_URL,
        session: requests.Session | None = None,
        timeout_seconds: int = 10,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the access token manager.

        Args:
            api_token: Long-lived API token from the Font Awesome account
            api_base_url: API base URL; the token endpoint is <base>/token
            session: HTTP session to send requests with
            timeout_seconds: Token endpoint request timeout
            clock: Source of the current Unix time

        Raises:
            InvalidConfigurationError: If the API token is empty
        """
        if not isinstance(api_token, str) or api_token == "":
            raise InvalidConfigurationError("API token is invalid or missing")

        self._api_token = api_token
        self.api_base_url = api_base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout_seconds = timeout_seconds
        self._clock = clock

        self._access_token: str | None = None
        self._expires_at: float | None = None

    @property
    def token_endpoint_url(self) -> str:
        return f"{self.api_base_url}/token"

    @property
    def access_token_expiration_time(self) -> float | None:
        """Unix time at which the cached access token expires, if one is cached."""
        return self._expires_at

    def has_valid_access_token(self) -> bool:
        if self._access_token is None or self._expires_at is None:
            return False
        return self._clock() < self._expires_at - EXPIRY_SKEW_SECONDS

    def get_access_token(self) -> str:
        """Return the cached access token, refreshing it first when expired."""
        if self.has_valid_access_token():
            return self._access_token

        logger.debug("Access token missing or expired, requesting a new one")
        return self.request_access_token()

    def request_access_token(self) -> str:
        """
        Request a new access token from the token endpoint and cache it.

        The cache keeps the previous token until the new response validates.

        Raises:
            TokenEndpointTransportError: If the request cannot be sent
            TokenEndpointHttpError: If the endpoint answers with a non-200 status
            TokenEndpointMalformedResponseError: If the body lacks access_token or expires_in
        """
        try:
            response = self.session.post(
                self.token_endpoint_url,
                data="",
                headers={"authorization": f"Bearer {self._api_token}"},
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as e:
            raise TokenEndpointTransportError(str(e)) from e

        if response.status_code != 200:
            raise TokenEndpointHttpError(response.status_code, response.text)

        try:
            token_response = TokenResponse.model_validate(json.loads(response.text))
        except (ValueError, PydanticValidationError) as e:
            raise TokenEndpointMalformedResponseError(response.text) from e

        expires_at = self._clock() + token_response.expires_in
        self._access_token, self._expires_at = token_response.access_token, expires_at

        logger.info(f"Obtained access token valid for {token_response.expires_in}s")
        return self._access_token

    def __repr__(self) -> str:
        return f"AccessTokenManager(api_base_url='{self.api_base_url}', api_token='***')"
