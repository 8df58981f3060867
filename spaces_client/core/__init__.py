"""
Core client logic for Spaces.

This package doesn't import boto3 or httpx. The client talks to its
collaborators through the protocols in core.gateways.
"""

from .client import SpacesClient
from .errors import CDNEndpointNotFoundError, ConfigurationError, SpacesError
from .models import (
    CannedACL,
    CustomACL,
    FileListing,
    SortOrder,
    SpacesConfig,
    UploadOptions,
)
from .retry import ExponentialBackoff, NoRetry

__all__ = [
    "CDNEndpointNotFoundError",
    "CannedACL",
    "ConfigurationError",
    "CustomACL",
    "ExponentialBackoff",
    "FileListing",
    "NoRetry",
    "SortOrder",
    "SpacesClient",
    "SpacesConfig",
    "SpacesError",
    "UploadOptions",
]
