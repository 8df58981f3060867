"""
Errors raised by the client itself.

Gateway failures (botocore ClientError, httpx errors) and local I/O errors
are not wrapped. They reach the caller as the SDK raised them.
"""


class SpacesError(Exception):
    """Base class for errors raised by spaces_client."""
    pass


class ConfigurationError(SpacesError):
    """Raised when an operation needs a credential or setting that is missing."""
    pass


class CDNEndpointNotFoundError(SpacesError):
    """Raised when no CDN endpoint fronts the configured bucket."""

    def __init__(self, bucket: str) -> None:
        super().__init__(f"No CDN endpoint found for bucket: {bucket}")
        self.bucket = bucket
