"""Pydantic models for type-safe data structures."""

from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, model_validator
from pydantic import ValidationError as PydanticValidationError

from .exceptions import FamilyStylesMetadataMissingError, KitMetadataIncompleteError


class BuildStatus(str, Enum):
    """Kit build states reported by the API server."""

    PENDING = "PENDING"
    READY = "READY"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self is not BuildStatus.PENDING


class TokenResponse(BaseModel):
    """Body returned by the API token endpoint."""

    access_token: StrictStr
    expires_in: StrictInt


class KitBuildPayload(BaseModel):
    """The createKitDownload / getKitDownload selection set."""

    model_config = ConfigDict(populate_by_name=True)

    build_id: StrictStr = Field(..., alias="buildId", min_length=1)
    status: BuildStatus
    # Required key, nullable value
    url: StrictStr | None

    @model_validator(mode="after")
    def url_matches_status(self) -> "KitBuildPayload":
        if self.status is BuildStatus.READY and not self.url:
            raise ValueError("a READY build must carry a download url")
        if self.status is not BuildStatus.READY and self.url is not None:
            raise ValueError(f"a {self.status.value} build must not carry a download url")
        return self


class FamilyStyleRecord(BaseModel):
    """A family style as selected from the API."""

    family: StrictStr = Field(..., min_length=1)
    style: StrictStr = Field(..., min_length=1)
    prefix: StrictStr = Field(..., min_length=1)


class KitRelease(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    version: StrictStr = Field(..., min_length=1)
    family_styles: list[FamilyStyleRecord] = Field(..., alias="familyStyles")


class KitQueryPayload(BaseModel):
    """The `me { kit(token) { ... } }` selection set."""

    model_config = ConfigDict(populate_by_name=True)

    token: StrictStr = Field(..., min_length=1)
    license_selected: StrictStr = Field(..., alias="licenseSelected", min_length=1)
    release: KitRelease


class KitMetadata(BaseModel):
    """Kit-level metadata folded into the self-hosted kit.json."""

    token: str = Field(..., min_length=1)
    license: str = Field(..., min_length=1)
    version: str = Field(..., min_length=1)
    family_styles: list[FamilyStyleRecord] = Field(default_factory=list)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "KitMetadata":
        """Validate a flat mapping with token, license, version and family_styles keys."""
        if isinstance(data, KitMetadata):
            return data

        if not isinstance(data, Mapping):
            raise KitMetadataIncompleteError(["token", "license", "version"])

        missing = [
            key
            for key in ("token", "license", "version")
            if not isinstance(data.get(key), str) or data.get(key) == ""
        ]
        if missing:
            raise KitMetadataIncompleteError(missing)

        records = data.get("family_styles")
        if not isinstance(records, list):
            raise FamilyStylesMetadataMissingError("family_styles must be a list")

        family_styles = []
        for index, record in enumerate(records):
            try:
                family_styles.append(FamilyStyleRecord.model_validate(record))
            except PydanticValidationError as e:
                raise FamilyStylesMetadataMissingError(
                    f"invalid family style at index {index}"
                ) from e

        return cls(
            token=data["token"],
            license=data["license"],
            version=data["version"],
            family_styles=family_styles,
        )

    @classmethod
    def from_query_payload(cls, payload: KitQueryPayload) -> "KitMetadata":
        return cls(
            token=payload.token,
            license=payload.license_selected,
            version=payload.release.version,
            family_styles=payload.release.family_styles,
        )

    def family_style_records(self) -> list[dict[str, str]]:
        return [record.model_dump() for record in self.family_styles]


class SelfHostingResult(BaseModel):
    """Result of a download-and-prepare run."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    success: bool = Field(..., description="Whether the kit was published")
    path: Path | None = Field(None, description="Published self-hosting directory")
    skipped: bool = Field(False, description="Existing output was reused without fetching")
    processing_time_ms: float = Field(0.0, ge=0.0, description="Wall time in milliseconds")
    error_kind: str | None = Field(None, description="Kind tag of the failure, if any")
    errors: list[str] = Field(default_factory=list, description="Error messages if any")
    error_details: Any | None = Field(None, description="Diagnostic payload of the failure")

    @classmethod
    def failure(cls, error, processing_time_ms: float = 0.0) -> "SelfHostingResult":
        return cls(
            success=False,
            processing_time_ms=processing_time_ms,
            error_kind=error.kind,
            errors=[error.message],
            error_details=error.details,
        )
