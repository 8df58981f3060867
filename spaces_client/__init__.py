"""
spaces-client - async client for DigitalOcean Spaces and its CDN.

This package contains:
- core: the client and its decision logic, free of SDK imports
- infrastructure: boto3 and DigitalOcean API gateways
- config: settings from environment variables, logging setup
"""

from .core import (
    CDNEndpointNotFoundError,
    CannedACL,
    ConfigurationError,
    CustomACL,
    FileListing,
    SortOrder,
    SpacesClient,
    SpacesConfig,
    SpacesError,
    UploadOptions,
)
from .factory import create_spaces_client

__version__ = "0.1.0"

__all__ = [
    "CDNEndpointNotFoundError",
    "CannedACL",
    "ConfigurationError",
    "CustomACL",
    "FileListing",
    "SortOrder",
    "SpacesClient",
    "SpacesConfig",
    "SpacesError",
    "UploadOptions",
    "create_spaces_client",
]
