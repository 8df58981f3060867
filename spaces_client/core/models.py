"""
Value types shared by the client and its gateways.

Nothing here talks to the network. These are the shapes that flow between
SpacesClient and the object store / CDN collaborators.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union


DEFAULT_CDN_HOST = "cdn.digitaloceanspaces"


class CannedACL(str, Enum):
    """Canned ACLs understood by Spaces (S3 subset)."""
    PRIVATE = "private"
    PUBLIC_READ = "public-read"
    PUBLIC_READ_WRITE = "public-read-write"
    AUTHENTICATED_READ = "authenticated-read"
    BUCKET_OWNER_READ = "bucket-owner-read"
    BUCKET_OWNER_FULL_CONTROL = "bucket-owner-full-control"


@dataclass(frozen=True)
class CustomACL:
    """An ACL string we don't model, passed to the gateway as-is."""
    value: str

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("Custom ACL value cannot be empty")


Permission = Union[CannedACL, CustomACL, str]


def resolve_acl(permission: Permission) -> str:
    """
    Map a permission to the ACL string sent with the request.

    'public' is shorthand for public-read. Any other plain string is passed
    through literally, so existing gateway ACL names keep working.
    """
    if isinstance(permission, CannedACL):
        return permission.value
    if isinstance(permission, CustomACL):
        return permission.value
    if permission == "public":
        return CannedACL.PUBLIC_READ.value
    return permission


class SortOrder(str, Enum):
    """Sort direction for file listings, by last-modified date."""
    ASC = "ASC"
    DESC = "DESC"


@dataclass(frozen=True)
class FileListing:
    """One entry of a file listing: where the file is and when it changed."""
    locator: str  # CDN URL, or the raw key when listing with path_only
    last_modified: datetime


@dataclass
class UploadOptions:
    """
    Per-call upload behaviour.

    extra_args are forwarded verbatim to the put-object call (Metadata,
    CacheControl, ContentDisposition, ...). They win over the ACL and
    ContentType the client computes.
    """
    exponential_backoff: bool = False
    purge_cache: bool = False
    extra_args: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SpacesConfig:
    """
    Configuration for one bucket.

    endpoint is a bare host such as "nyc3.digitaloceanspaces.com". Public
    URLs are built as https://{bucket}.{endpoint}/{key}.
    """
    endpoint: str
    bucket: str
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    digitalocean_api_token: Optional[str] = None
    cdn_endpoint_id: Optional[str] = None  # seeds the resolved-id cache
    custom_cdn_host: Optional[str] = None
    region: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.endpoint:
            raise ValueError("endpoint is required")
        if not self.bucket:
            raise ValueError("bucket is required")

    @property
    def endpoint_url(self) -> str:
        """Endpoint as a URL for the S3 SDK."""
        if "://" in self.endpoint:
            return self.endpoint
        return f"https://{self.endpoint}"

    @property
    def region_name(self) -> str:
        """
        Region for request signing.

        Spaces endpoints start with the region slug (nyc3, fra1, ...), so we
        fall back to that when no region is configured.
        """
        if self.region:
            return self.region
        host = self.endpoint.split("://", 1)[-1]
        return host.split(".", 1)[0]
