"""Custom exceptions for the kit self-hosting system."""

from typing import Any


class KitError(Exception):
    """Base exception for all kit self-hosting errors."""

    kind = "kit_error"

    def __init__(self, message: str, details: Any | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging and result reporting."""
        return {"kind": self.kind, "message": self.message, "details": self.details}


class ConfigurationError(KitError):
    """Exception raised for configuration errors."""

    kind = "configuration_error"


class ValidationError(KitError):
    """Exception raised for input validation errors."""

    kind = "validation_error"


class ApiRequestError(KitError):
    """Exception raised when a request to the API server cannot be completed."""

    kind = "api_request_error"


class ApiResponseError(KitError):
    """Exception raised when the API server responds with something unusable."""

    kind = "api_response_error"


class TokenEndpointError(KitError):
    """Exception raised when an access token cannot be obtained."""

    kind = "token_endpoint_error"


class DownloadError(KitError):
    """Exception raised while fetching a kit archive."""

    kind = "download_error"


class StorageError(KitError):
    """Exception raised for filesystem operation errors."""

    kind = "storage_error"


class ArchiveError(KitError):
    """Exception raised while reading a kit archive."""

    kind = "archive_error"


class MetadataError(KitError):
    """Exception raised for unusable icon or kit metadata."""

    kind = "metadata_error"


# Configuration
class InvalidConfigurationError(ConfigurationError):
    """Exception raised when a required setting is missing or empty."""

    kind = "invalid_configuration"


class ConfigFileNotFoundError(ConfigurationError):
    """Exception raised when configuration file is not found."""

    kind = "config_file_not_found"

    def __init__(self, config_path: str):
        super().__init__(f"Configuration file not found: {config_path}")


class EmptyConfigFileError(ConfigurationError):
    """Exception raised when configuration file is empty."""

    kind = "empty_config_file"

    def __init__(self, config_path: str):
        super().__init__(f"Empty configuration file: {config_path}")


class InvalidYamlError(ConfigurationError):
    """Exception raised for invalid YAML content."""

    kind = "invalid_yaml"

    def __init__(self, config_path: str, error: str):
        super().__init__(f"Invalid YAML in {config_path}: {error}")


class ConfigLoadError(ConfigurationError):
    """Exception raised when configuration loading fails."""

    kind = "config_load_error"

    def __init__(self, error: str):
        super().__init__(f"Failed to load configuration: {error}")


class InvalidArgumentError(ValidationError):
    """Exception raised when an operation receives an unusable argument."""

    kind = "invalid_argument"


# Token endpoint
class TokenEndpointTransportError(TokenEndpointError):
    """Exception raised when the token endpoint cannot be reached."""

    kind = "token_endpoint_transport_error"

    def __init__(self, error: str):
        super().__init__(f"Request to the API token endpoint failed: {error}")


class TokenEndpointHttpError(TokenEndpointError):
    """Exception raised when the token endpoint answers with a non-200 status."""

    kind = "token_endpoint_http_error"

    def __init__(self, status_code: int, body: str | None = None):
        super().__init__(
            f"Unexpected HTTP status from API token endpoint: {status_code}",
            {"status_code": status_code, "body": body},
        )


class TokenEndpointMalformedResponseError(TokenEndpointError):
    """Exception raised when the token endpoint response lacks a usable token."""

    kind = "token_endpoint_malformed_response"

    def __init__(self, body: str | None = None):
        super().__init__("API token endpoint response was invalid", {"body": body})


# Query endpoint
class TransportError(ApiRequestError):
    """Exception raised when the query endpoint cannot be reached."""

    kind = "transport_error"

    def __init__(self, error: str):
        super().__init__(f"Request to the API server failed: {error}")


class HttpStatusError(ApiResponseError):
    """Exception raised when the API server answers with a non-200 status."""

    kind = "http_status_error"

    def __init__(self, status_code: int, body: str | None = None):
        super().__init__(
            f"The API server responded with HTTP status {status_code}",
            {"status_code": status_code, "body": body},
        )


class JsonParseError(ApiResponseError):
    """Exception raised when the API response body is not JSON."""

    kind = "json_parse_error"

    def __init__(self, body: str | None = None):
        super().__init__("The API server response could not be parsed as JSON", {"body": body})


class UnauthorizedError(ApiResponseError):
    """Exception raised when the API token is not authorized for a query."""

    kind = "unauthorized"

    def __init__(self, body: Any | None = None):
        super().__init__("This API token is not authorized for the requested operation", body)


class ApiError(ApiResponseError):
    """Exception raised when the API response carries GraphQL errors."""

    kind = "api_error"

    def __init__(self, body: Any | None = None):
        super().__init__("An error occurred while querying the API", body)


class UnexpectedShapeError(ApiResponseError):
    """Exception raised when a successful response lacks the expected data."""

    kind = "unexpected_shape"

    def __init__(self, reason: str, body: Any | None = None):
        super().__init__(f"The API response did not contain the expected data: {reason}", body)


# Archive download
class BuildNotReadyError(DownloadError):
    """Exception raised when fetching a build that is not READY."""

    kind = "not_ready"

    def __init__(self, build_id: str, status: str):
        super().__init__(
            f"Kit build {build_id} is not ready (status: {status})",
            {"build_id": build_id, "status": status},
        )


class TempDirCreationError(DownloadError):
    """Exception raised when the download temp directory cannot be created."""

    kind = "temp_dir_creation_error"

    def __init__(self, path: str, error: str):
        super().__init__(f"Could not create temporary directory {path}: {error}", {"path": path})


class TempDirNotWritableError(DownloadError):
    """Exception raised when the download temp directory is not writable."""

    kind = "temp_dir_not_writable"

    def __init__(self, path: str):
        super().__init__(f"Temporary directory is not writable: {path}", {"path": path})


class DownloadTransportError(DownloadError):
    """Exception raised when the archive request fails."""

    kind = "download_transport_error"

    def __init__(self, url: str, error: str):
        super().__init__(f"Failed to download kit archive from {url}: {error}", {"url": url})


class DownloadHttpStatusError(DownloadError):
    """Exception raised when the archive request answers with a non-200 status."""

    kind = "download_http_status_error"

    def __init__(self, url: str, status_code: int):
        super().__init__(
            f"Kit archive download returned HTTP status {status_code}",
            {"url": url, "status_code": status_code},
        )


class DownloadedArchiveInvalidError(DownloadError):
    """Exception raised when the downloaded archive is missing or empty."""

    kind = "downloaded_archive_invalid"

    def __init__(self, path: str):
        super().__init__(f"Downloaded kit archive is missing or empty: {path}", {"path": path})


# Filesystem
class PathIsNotADirectoryError(StorageError):
    """Exception raised when a directory path is occupied by something else."""

    kind = "path_is_not_a_directory"

    def __init__(self, path: str):
        super().__init__(f"Path exists but is not a directory: {path}", {"path": path})


class NoExistingAncestorError(StorageError):
    """Exception raised when no ancestor of a directory path exists."""

    kind = "no_existing_ancestor"

    def __init__(self, path: str):
        super().__init__(f"No existing ancestor directory found for: {path}", {"path": path})


class DirectoryCreationError(StorageError):
    """Exception raised when a directory cannot be created."""

    kind = "directory_creation_error"

    def __init__(self, path: str, error: str):
        super().__init__(f"Failed to create directory {path}: {error}", {"path": path})


class DirMoveError(StorageError):
    """Exception raised when a directory cannot be moved into place."""

    kind = "dir_move_error"

    def __init__(self, source: str, target: str, error: str):
        super().__init__(
            f"Failed to move {source} to {target}: {error}",
            {"source": source, "target": target},
        )


class InvalidTempDirError(StorageError):
    """Exception raised when the working directory is not a readable directory."""

    kind = "invalid_temp_dir"

    def __init__(self, path: str):
        super().__init__(f"Not a readable directory: {path}", {"path": path})


class FileWriteError(StorageError):
    """Exception raised when an output file cannot be written."""

    kind = "file_write_error"

    def __init__(self, path: str, error: str):
        super().__init__(f"Failed to write {path}: {error}", {"path": path})


# Archive contents
class ArchiveUnreadableError(ArchiveError):
    """Exception raised when the kit archive is missing or cannot be opened."""

    kind = "archive_unreadable"

    def __init__(self, path: str, error: str | None = None):
        message = f"Kit archive is missing or unreadable: {path}"
        if error:
            message = f"{message} ({error})"
        super().__init__(message, {"path": path})


class ArchiveExtractionError(ArchiveError):
    """Exception raised when an archive entry cannot be extracted."""

    kind = "archive_extraction_error"

    def __init__(self, entry: str, error: str):
        super().__init__(f"Failed to extract archive entry {entry}: {error}", {"entry": entry})


# Metadata
class MetadataUnreadableError(MetadataError):
    """Exception raised when the icon metadata file cannot be read."""

    kind = "metadata_unreadable"

    def __init__(self, path: str, error: str | None = None):
        message = f"Icon metadata is missing or unreadable: {path}"
        if error:
            message = f"{message} ({error})"
        super().__init__(message, {"path": path})


class MetadataParseError(MetadataError):
    """Exception raised when the icon metadata is not in the expected form."""

    kind = "metadata_parse_error"

    def __init__(self, reason: str):
        super().__init__(f"Icon metadata could not be parsed: {reason}")


class KitMetadataIncompleteError(MetadataError):
    """Exception raised when kit metadata lacks token, license or version."""

    kind = "kit_metadata_incomplete"

    def __init__(self, missing: list[str]):
        super().__init__(
            f"Kit metadata is missing required fields: {', '.join(missing)}", {"missing": missing}
        )


class FamilyStylesMetadataMissingError(MetadataError):
    """Exception raised when the family styles list is absent or malformed."""

    kind = "family_styles_metadata_missing"

    def __init__(self, reason: str):
        super().__init__(f"Family styles metadata is missing or malformed: {reason}")
