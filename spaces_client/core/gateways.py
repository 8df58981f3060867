"""
Interfaces for the collaborators SpacesClient composes.

Implemented by the boto3 store, the in-memory store and test doubles.
Records are passed in the S3 wire shape (Key, LastModified, Grants, ...).
"""

from typing import Any, Awaitable, BinaryIO, Callable, Iterator, Protocol, TypeVar

T = TypeVar("T")


class ObjectBody(Protocol):
    """Readable remote object body (botocore's StreamingBody fits)."""

    def iter_chunks(self, chunk_size: int = 1024) -> Iterator[bytes]:
        ...

    def close(self) -> None:
        ...


class ObjectStore(Protocol):
    """Object operations against a single bucket."""

    async def generate_presigned_url(self, key: str, expires_in: int) -> str:
        """Sign a GET URL for the key."""
        ...

    async def get_object_acl(self, key: str) -> dict[str, Any]:
        """Return the ACL response, including its Grants list."""
        ...

    async def put_object(
        self,
        key: str,
        body: BinaryIO,
        extra_args: dict[str, Any],
    ) -> None:
        """Stream body to key. extra_args carry ACL, ContentType and friends."""
        ...

    async def list_objects(self, prefix: str) -> dict[str, Any]:
        """Return one page of the prefix listing (Contents, IsTruncated, ...)."""
        ...

    async def delete_objects(self, objects: list[dict[str, str]]) -> dict[str, Any]:
        """Delete [{"Key": ...}, ...] in one batch."""
        ...

    async def copy_object(
        self,
        source_key: str,
        destination_key: str,
        acl: str,
    ) -> dict[str, Any]:
        """Server-side copy within the bucket."""
        ...

    async def get_object(self, key: str) -> ObjectBody:
        """Open the object for reading."""
        ...


class CDNEndpointRecord(Protocol):
    id: str
    origin: str


class CDNGateway(Protocol):
    """CDN management operations."""

    async def list_endpoints(self) -> list[CDNEndpointRecord]:
        ...

    async def purge_cache(self, endpoint_id: str, files: list[str]) -> None:
        ...

    async def close(self) -> None:
        ...


class RetryPolicy(Protocol):
    """Runs an async operation, retrying on failure as it sees fit."""

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        ...
