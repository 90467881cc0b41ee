"""Configuration management for the kit self-hosting system."""

from pathlib import Path

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import (
    ConfigFileNotFoundError,
    ConfigLoadError,
    ConfigurationError,
    EmptyConfigFileError,
    InvalidYamlError,
)

DEFAULT_API_BASE_URL = "https://api.fontawesome.com"


class KitSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FONTAWESOME_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
    """Font Awesome API and self-hosting configuration."""

    # API access
    api_base_url: str = Field(DEFAULT_API_BASE_URL, description="Font Awesome API base URL")
    api_token: str | None = Field(None, description="Long-lived API token", repr=False)
    query_timeout_seconds: int = Field(10, ge=1, description="GraphQL query timeout")
    verify_ssl: bool = Field(True, description="Verify TLS certificates")
    user_agent: str = Field("kit-selfhost/0.1.0", description="HTTP User-Agent header")

    # Archive download
    download_timeout_seconds: int = Field(30, ge=1, description="Kit archive download timeout")
    chunk_size: int = Field(8192, ge=1024, description="Download chunk size in bytes")
    temp_dir: Path | None = Field(None, description="Root for download temp directories")
    keep_temp_dirs: bool = Field(False, description="Keep temp directories of failed runs")

    # Output
    destination_base_dir: Path = Field(Path("./uploads"), description="Self-hosting base directory")

    # Polling policy (used by the CLI; the library only exposes single-shot polls)
    poll_interval_seconds: float = Field(2.0, gt=0.0, description="Delay between build polls")
    max_polls: int = Field(30, ge=1, description="Maximum number of build polls")

    log_level: str = Field("INFO", description="Log level")

    @field_validator("api_base_url")
    @classmethod
    def validate_api_base_url(cls, v):
        """Validate API base URL format."""
        if not v.startswith(("https://", "http://")):
            raise ValueError("API base URL must start with https:// or http://")
        return v.rstrip("/")

    @field_validator("api_token")
    @classmethod
    def validate_api_token(cls, v):
        """Normalize blank tokens to None."""
        if v is None or len(v.strip()) == 0:
            return None
        return v.strip()

    def __repr__(self) -> str:
        """Custom repr that masks the API token."""
        return (
            f"KitSettings(api_base_url='{self.api_base_url}', "
            f"destination_base_dir='{self.destination_base_dir}', api_token='***')"
        )

    def to_safe_dict(self) -> dict:
        """Export configuration with sensitive fields masked."""
        config_dict = self.model_dump()
        if config_dict.get("api_token"):
            config_dict["api_token"] = "***MASKED***"
        return config_dict

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> "KitSettings":
        """Load configuration from YAML file."""
        return load_config_from_yaml(config_path, cls)

    @classmethod
    def from_env_and_yaml(
        cls, yaml_path: str | Path | None = None, env_file: str = ".env"
    ) -> "KitSettings":
        """Load configuration from environment variables and optionally override with YAML."""
        if yaml_path and Path(yaml_path).exists():
            return cls.from_yaml(yaml_path)
        return cls(_env_file=env_file if Path(env_file).exists() else None)


def load_config_from_yaml(config_path: str | Path, config_class: type) -> BaseSettings:
    """Load configuration from YAML file."""
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigFileNotFoundError(str(config_path))

    try:
        with open(config_path) as f:
            config_data = yaml.safe_load(f)

        if config_data is None:
            raise EmptyConfigFileError(str(config_path))

        # Environment variables still apply; only the .env file is skipped
        return config_class(_env_file=None, **config_data)

    except yaml.YAMLError as e:
        raise InvalidYamlError(str(config_path), str(e)) from e
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigLoadError(str(e)) from e
