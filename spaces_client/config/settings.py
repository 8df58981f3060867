"""
Client configuration using Pydantic settings.

Configuration is loaded from environment variables (or a .env file) with
sensible defaults. Mock mode swaps the boto3 store for an in-memory one so
the client can be exercised without Spaces credentials.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.models import SpacesConfig


class Settings(BaseSettings):
    """
    Settings loaded from environment variables.

    Variable names are the field names upper-cased, e.g. SPACES_BUCKET.
    """

    # Spaces
    spaces_endpoint: str = Field(
        default="nyc3.digitaloceanspaces.com",
        description="Spaces endpoint host, without scheme"
    )
    spaces_bucket: str = Field(
        default="",
        description="Bucket (Space) name"
    )
    spaces_access_key_id: Optional[str] = Field(
        default=None,
        description="Spaces access key. Falls back to the boto3 credential chain when unset."
    )
    spaces_secret_access_key: Optional[str] = Field(
        default=None,
        description="Spaces secret key"
    )
    spaces_region: Optional[str] = Field(
        default=None,
        description="Signing region. Derived from the endpoint (nyc3, fra1, ...) when unset."
    )
    spaces_mock_mode: bool = Field(
        default=False,
        description="Use an in-memory object store instead of Spaces"
    )

    # CDN
    digitalocean_api_token: Optional[str] = Field(
        default=None,
        description="DigitalOcean API token. Required for CDN cache purges."
    )
    spaces_cdn_endpoint_id: Optional[str] = Field(
        default=None,
        description="CDN endpoint id. Looked up from the bucket name when unset."
    )
    spaces_custom_cdn_host: Optional[str] = Field(
        default=None,
        description="Custom CDN hostname used in returned URLs"
    )
    cdn_api_base_url: str = Field(
        default="https://api.digitalocean.com/v2",
        description="DigitalOcean API base URL"
    )
    cdn_api_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for CDN API requests"
    )

    # Upload retries
    backoff_max_attempts: int = Field(
        default=10,
        description="Attempts before an upload with exponential backoff gives up"
    )
    backoff_starting_delay: float = Field(
        default=0.1,
        description="Delay in seconds before the first retry"
    )
    backoff_time_multiple: float = Field(
        default=2.0,
        description="Factor the delay grows by after each failure"
    )
    backoff_max_delay: Optional[float] = Field(
        default=None,
        description="Upper bound for a single delay in seconds. Unbounded when unset."
    )

    # Downloads
    download_chunk_size: int = Field(
        default=1024 * 1024,
        description="Bytes read from the remote body per write"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def validate_required_fields(self) -> list[str]:
        """
        Return the environment variables that still need a value.

        Access keys are not listed: without them boto3 uses its own
        credential chain.
        """
        missing = []

        if not self.spaces_bucket:
            missing.append("SPACES_BUCKET")
        if not self.spaces_endpoint:
            missing.append("SPACES_ENDPOINT")

        return missing

    def to_spaces_config(self) -> SpacesConfig:
        return SpacesConfig(
            endpoint=self.spaces_endpoint,
            bucket=self.spaces_bucket,
            access_key_id=self.spaces_access_key_id,
            secret_access_key=self.spaces_secret_access_key,
            digitalocean_api_token=self.digitalocean_api_token,
            cdn_endpoint_id=self.spaces_cdn_endpoint_id,
            custom_cdn_host=self.spaces_custom_cdn_host,
            region=self.spaces_region,
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are read once per process. Tests can call
    get_settings.cache_clear() to pick up a changed environment.
    """
    return Settings()
