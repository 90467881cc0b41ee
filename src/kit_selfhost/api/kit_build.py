"""
Kit Builds
==========

A kit build is one packaging of a kit into a downloadable zip. The API
server creates it in some initial status and, when it reaches READY, reports
the URL of the zip. Builds never leave READY or FAILED once reached.

Polling cadence is left to the caller: poll() is a single request.
"""

import json
import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..core.exceptions import InvalidArgumentError, UnexpectedShapeError
from ..core.models import BuildStatus, KitBuildPayload, KitMetadata, KitQueryPayload
from .auth import AccessTokenManager
from .client import QueryClient

logger = logging.getLogger(__name__)


def _graphql_string(value: str) -> str:
    # JSON string escaping is valid GraphQL string literal syntax
    return json.dumps(value)


CREATE_KIT_DOWNLOAD_MUTATION = """
mutation {{
  createKitDownload(buildType: WEB, kitToken: {kit_token}) {{
    buildId
    status
    url
  }}
}}
"""

GET_KIT_DOWNLOAD_QUERY = """
query {{
  getKitDownload(buildId: {build_id}, buildType: WEB, kitToken: {kit_token}) {{
    buildId
    status
    url
  }}
}}
"""

KIT_METADATA_QUERY = """
query {{
  me {{
    kit(token: {kit_token}) {{
      token
      licenseSelected
      release {{
        version
        familyStyles {{
          family
          style
          prefix
        }}
      }}
    }}
  }}
}}
"""


def _require_kit_token(kit_token: Any) -> None:
    if not isinstance(kit_token, str) or kit_token == "":
        raise InvalidArgumentError("kit_token must be a non-empty string")


def _decode_build_payload(data: dict[str, Any], field: str) -> KitBuildPayload:
    payload = data.get(field)
    if not isinstance(payload, dict):
        raise UnexpectedShapeError(f"missing {field}", data)

    try:
        return KitBuildPayload.model_validate(payload)
    except PydanticValidationError as e:
        raise UnexpectedShapeError(f"invalid {field}: {e.errors()[0]['msg']}", data) from e


class KitBuild:
    """One requested build of a kit, identified by its build id."""

    def __init__(self, kit_token: str, build_id: str, status: BuildStatus | str, url: str | None):
        _require_kit_token(kit_token)

        if not isinstance(build_id, str) or build_id == "":
            raise InvalidArgumentError("build_id must be a non-empty string")

        try:
            status = BuildStatus(status)
        except ValueError as e:
            raise InvalidArgumentError(f"Invalid status: {status}") from e

        if (url is not None) != (status is BuildStatus.READY):
            raise InvalidArgumentError(
                f"url must be set exactly when status is READY (got {status.value})"
            )

        self._kit_token = kit_token
        self._build_id = build_id
        self._status = status
        self._url = url

    @property
    def kit_token(self) -> str:
        return self._kit_token

    @property
    def build_id(self) -> str:
        return self._build_id

    @property
    def status(self) -> BuildStatus:
        return self._status

    @property
    def url(self) -> str | None:
        """Download URL of the zip; only set once the build is READY."""
        return self._url

    def is_ready(self) -> bool:
        return self._status is BuildStatus.READY

    def is_failed(self) -> bool:
        return self._status is BuildStatus.FAILED

    def is_pending(self) -> bool:
        return self._status is BuildStatus.PENDING

    def is_terminal(self) -> bool:
        return self._status.is_terminal

    @classmethod
    def create(
        cls, query_client: QueryClient, token_provider: AccessTokenManager, kit_token: str
    ) -> "KitBuild":
        """
        Ask the API server to build a kit.

        Raises:
            InvalidArgumentError: If kit_token is empty
            ApiRequestError / ApiResponseError: Per the query client's classification
        """
        _require_kit_token(kit_token)

        query = CREATE_KIT_DOWNLOAD_MUTATION.format(kit_token=_graphql_string(kit_token))
        data = query_client.execute({"query": query}, token_provider)
        payload = _decode_build_payload(data, "createKitDownload")

        logger.info(f"Created kit build {payload.build_id} with status {payload.status.value}")
        return cls(kit_token, payload.build_id, payload.status, payload.url)

    def poll(self, query_client: QueryClient, token_provider: AccessTokenManager) -> bool:
        """
        Refresh the build status from the API server.

        Terminal builds are not queried again.

        Returns:
            True if the build is READY
        """
        if self.is_terminal():
            return self.is_ready()

        query = GET_KIT_DOWNLOAD_QUERY.format(
            build_id=_graphql_string(self._build_id),
            kit_token=_graphql_string(self._kit_token),
        )
        data = query_client.execute({"query": query}, token_provider)
        payload = _decode_build_payload(data, "getKitDownload")

        if payload.build_id != self._build_id:
            raise UnexpectedShapeError(
                f"build id {payload.build_id} does not match {self._build_id}", data
            )

        if payload.status is not self._status:
            logger.info(
                f"Kit build {self._build_id}: {self._status.value} -> {payload.status.value}"
            )

        self._status = payload.status
        self._url = payload.url
        return self.is_ready()

    def to_dict(self) -> dict[str, Any]:
        return {
            "kit_token": self._kit_token,
            "build_id": self._build_id,
            "status": self._status.value,
            "url": self._url,
        }

    def __repr__(self) -> str:
        return f"KitBuild(build_id='{self._build_id}', status={self._status.value})"


def create_kit_build(
    query_client: QueryClient, token_provider: AccessTokenManager, kit_token: str
) -> KitBuild:
    """Create a new kit build; see KitBuild.create."""
    return KitBuild.create(query_client, token_provider, kit_token)


def fetch_kit_metadata(
    query_client: QueryClient, token_provider: AccessTokenManager, kit_token: str
) -> KitMetadata:
    """
    Fetch a kit's token, license, release version and family styles.

    Raises:
        InvalidArgumentError: If kit_token is empty
        UnexpectedShapeError: If the response lacks any of the selected fields
    """
    _require_kit_token(kit_token)

    query = KIT_METADATA_QUERY.format(kit_token=_graphql_string(kit_token))
    data = query_client.execute({"query": query}, token_provider)

    me = data.get("me")
    kit = me.get("kit") if isinstance(me, dict) else None
    if not isinstance(kit, dict):
        raise UnexpectedShapeError("missing me.kit", data)

    try:
        payload = KitQueryPayload.model_validate(kit)
    except PydanticValidationError as e:
        raise UnexpectedShapeError(f"invalid kit: {e.errors()[0]['msg']}", data) from e

    return KitMetadata.from_query_payload(payload)
