"""Core components for kit self-hosting."""

from .config import KitSettings
from .exceptions import (
    ApiRequestError,
    ApiResponseError,
    ArchiveError,
    DownloadError,
    KitError,
    MetadataError,
    StorageError,
    TokenEndpointError,
    ValidationError,
)
from .models import BuildStatus, KitMetadata, SelfHostingResult

__all__ = [
    "ApiRequestError",
    "ApiResponseError",
    "ArchiveError",
    "BuildStatus",
    "DownloadError",
    "KitError",
    "KitMetadata",
    "KitSettings",
    "MetadataError",
    "SelfHostingResult",
    "StorageError",
    "TokenEndpointError",
    "ValidationError",
]
