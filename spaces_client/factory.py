"""
Wiring for SpacesClient.

Builds the object store, CDN gateway and retry policy from Settings so
callers can get a working client from environment variables alone.
"""

import logging
from typing import Optional

import httpx

from .config.settings import Settings, get_settings
from .core.client import SpacesClient
from .core.errors import ConfigurationError
from .core.retry import ExponentialBackoff
from .infrastructure.cdn.client import DigitalOceanCDNClient
from .infrastructure.storage.client import create_object_store

logger = logging.getLogger(__name__)


def create_spaces_client(
    settings: Optional[Settings] = None,
    mock_mode: Optional[bool] = None,
    cdn_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> SpacesClient:
    """
    Create a configured SpacesClient.

    Args:
        settings: Settings to use; read from the environment when omitted
        mock_mode: Overrides settings.spaces_mock_mode
        cdn_transport: httpx transport for the CDN API client

    Returns:
        SpacesClient for the configured bucket

    Raises:
        ConfigurationError: If SPACES_BUCKET or SPACES_ENDPOINT is unset

    The CDN gateway is only created when an API token is configured.
    Without one, purges fail with ConfigurationError.
    """
    settings = settings or get_settings()

    missing = settings.validate_required_fields()
    if missing:
        raise ConfigurationError(f"Missing required settings: {', '.join(missing)}")

    if mock_mode is None:
        mock_mode = settings.spaces_mock_mode

    config = settings.to_spaces_config()
    object_store = create_object_store(config, mock_mode=mock_mode)

    cdn = None
    if config.digitalocean_api_token:
        cdn = DigitalOceanCDNClient(
            api_token=config.digitalocean_api_token,
            base_url=settings.cdn_api_base_url,
            timeout=settings.cdn_api_timeout,
            transport=cdn_transport,
        )

    retry_policy = ExponentialBackoff(
        max_attempts=settings.backoff_max_attempts,
        starting_delay=settings.backoff_starting_delay,
        time_multiple=settings.backoff_time_multiple,
        max_delay=settings.backoff_max_delay,
    )

    logger.info(
        "Created Spaces client",
        extra={
            "bucket": config.bucket,
            "mock_mode": mock_mode,
            "cdn_enabled": cdn is not None,
        },
    )

    return SpacesClient(
        config,
        object_store,
        cdn=cdn,
        retry_policy=retry_policy,
        download_chunk_size=settings.download_chunk_size,
    )
