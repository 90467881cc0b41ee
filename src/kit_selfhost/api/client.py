"""
API Query Client
================

Sends GraphQL queries and mutations to the Font Awesome API and classifies
the responses.
"""

import json
import logging
from collections.abc import Mapping
from typing import Any

import requests

from ..core.config import DEFAULT_API_BASE_URL
from ..core.exceptions import (
    ApiError,
    HttpStatusError,
    InvalidArgumentError,
    JsonParseError,
    TransportError,
    UnauthorizedError,
    UnexpectedShapeError,
)
from .auth import AccessTokenManager

logger = logging.getLogger(__name__)


def is_authorization_error(decoded_body: Any) -> bool:
    """True if the decoded body has an error whose message is exactly "unauthorized"."""
    if not isinstance(decoded_body, Mapping):
        return False

    errors = decoded_body.get("errors")
    if not isinstance(errors, list):
        return False

    return any(
        isinstance(error, Mapping) and error.get("message") == "unauthorized" for error in errors
    )


def has_any_error(decoded_body: Any) -> bool:
    """
    True if the decoded body is not an object, or has a non-empty errors array.

    An unauthorized response is also an error here, so check
    is_authorization_error() first.
    """
    if not isinstance(decoded_body, Mapping):
        return True

    errors = decoded_body.get("errors")
    if not isinstance(errors, list):
        return False

    return len(errors) > 0


class QueryClient:
    """GraphQL client for the Font Awesome API."""

    def __init__(
        self,
        api_base_url: str = DEFAULT_API_BASE_URL,
        session: requests.Session | None = None,
        timeout_seconds: int = 10,
    ):
        if not isinstance(api_base_url, str) or api_base_url == "":
            raise InvalidArgumentError("api_base_url must be a non-empty string")

        self.api_base_url = api_base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout_seconds = timeout_seconds

    def query(
        self,
        body: Mapping[str, Any],
        token_provider: AccessTokenManager | None,
        ignore_auth: bool = False,
        timeout_seconds: int | None = None,
    ) -> requests.Response:
        """
        POST a GraphQL document to the API.

        Args:
            body: Mapping with a non-empty "query" string and optional "variables"
            token_provider: Supplies the bearer access token
            ignore_auth: Send the request without an authorization header
            timeout_seconds: Overrides the client's default timeout

        Returns:
            The raw HTTP response; callers classify it

        Raises:
            InvalidArgumentError: If the query is missing or empty
            TransportError: If the request cannot be sent
            TokenEndpointError: If an access token cannot be obtained
        """
        if (
            not isinstance(body, Mapping)
            or not isinstance(body.get("query"), str)
            or body["query"] == ""
        ):
            raise InvalidArgumentError("query body must have a non-empty 'query' string")

        payload: dict[str, Any] = {"query": body["query"]}
        if "variables" in body:
            payload["variables"] = body["variables"]

        headers = {"Content-Type": "application/json"}

        if not ignore_auth:
            if token_provider is None:
                raise InvalidArgumentError("a token provider is required for authenticated queries")
            headers["authorization"] = f"Bearer {token_provider.get_access_token()}"

        try:
            return self.session.post(
                self.api_base_url,
                data=json.dumps(payload),
                headers=headers,
                timeout=timeout_seconds or self.timeout_seconds,
            )
        except requests.RequestException as e:
            raise TransportError(str(e)) from e

    def execute(
        self,
        body: Mapping[str, Any],
        token_provider: AccessTokenManager | None,
        ignore_auth: bool = False,
        timeout_seconds: int | None = None,
    ) -> dict[str, Any]:
        """
        Run a query and return its decoded "data" object.

        Raises:
            HttpStatusError: If the HTTP status is not 200
            JsonParseError: If the body is not valid JSON
            UnauthorizedError: If the API token lacks permission
            ApiError: If the response carries any other GraphQL error
            UnexpectedShapeError: If the response has no "data" object
        """
        response = self.query(body, token_provider, ignore_auth, timeout_seconds)
        decoded_body = self.decode_response(response)

        data = decoded_body.get("data")
        if not isinstance(data, Mapping):
            raise UnexpectedShapeError("missing data object", decoded_body)

        return dict(data)

    @staticmethod
    def decode_response(response: requests.Response) -> dict[str, Any]:
        """Apply the status, JSON and GraphQL error checks to a response."""
        if response.status_code != 200:
            logger.warning(f"API server responded with HTTP status {response.status_code}")
            raise HttpStatusError(response.status_code, response.text)

        try:
            decoded_body = json.loads(response.text)
        except ValueError as e:
            raise JsonParseError(response.text) from e

        if is_authorization_error(decoded_body):
            raise UnauthorizedError(decoded_body)

        if has_any_error(decoded_body):
            raise ApiError(decoded_body)

        return decoded_body
