"""
SpacesClient: the operations callers actually use.

The client owns the decision logic (ACL mapping, purge-after-upload,
retry wrapping, sorting, ACL-preserving copy, cleanup on failed download)
and leaves every network call to its collaborators:

- ObjectStore: bucket operations (boto3 in production)
- CDNGateway: CDN endpoint lookup and cache purge (DigitalOcean API)
- RetryPolicy: exponential backoff for uploads (tenacity)

Errors from those collaborators are not translated. A failed put surfaces
as the botocore error, a failed purge as the httpx error.
"""

import asyncio
import logging
import mimetypes
import os
from contextlib import closing
from pathlib import Path
from typing import Any, Optional, Union
from urllib.parse import urlsplit, urlunsplit

from .errors import CDNEndpointNotFoundError, ConfigurationError
from .gateways import CDNGateway, ObjectStore, RetryPolicy
from .listing import sort_files_by_date
from .models import (
    DEFAULT_CDN_HOST,
    CannedACL,
    FileListing,
    Permission,
    SortOrder,
    SpacesConfig,
    UploadOptions,
    resolve_acl,
)
from .retry import ExponentialBackoff

logger = logging.getLogger(__name__)

DEFAULT_PRESIGNED_EXPIRY_SECONDS = 900
DEFAULT_DOWNLOAD_CHUNK_SIZE = 1024 * 1024

ALL_USERS_GROUP = "AllUsers"

PathLike = Union[str, "os.PathLike[str]"]


def _grants_public_read(grants: list[dict[str, Any]]) -> bool:
    """True if any grant gives READ to the AllUsers group."""
    for grant in grants:
        grantee_uri = (grant.get("Grantee") or {}).get("URI") or ""
        if ALL_USERS_GROUP in grantee_uri and grant.get("Permission") == "READ":
            return True
    return False


class SpacesClient:
    """
    Client for one Spaces bucket and the CDN endpoint in front of it.

    The CDN endpoint id is looked up once and then reused for the lifetime
    of the instance. It is never re-checked against the bucket.
    """

    def __init__(
        self,
        config: SpacesConfig,
        object_store: ObjectStore,
        cdn: Optional[CDNGateway] = None,
        retry_policy: Optional[RetryPolicy] = None,
        download_chunk_size: int = DEFAULT_DOWNLOAD_CHUNK_SIZE,
    ) -> None:
        self._config = config
        self._store = object_store
        self._cdn = cdn
        self._retry_policy = retry_policy or ExponentialBackoff()
        self._download_chunk_size = download_chunk_size

        self._cdn_endpoint_id: Optional[str] = config.cdn_endpoint_id
        self._cdn_lookup_lock = asyncio.Lock()

    @property
    def config(self) -> SpacesConfig:
        return self._config

    @property
    def bucket(self) -> str:
        return self._config.bucket

    # -----------------------------------------------------------------------
    # URLs
    # -----------------------------------------------------------------------

    def get_url(self, path: str) -> str:
        """Public URL of a key. No escaping is applied to path."""
        return f"https://{self._config.bucket}.{self._config.endpoint}/{path}"

    def get_cdn_url(self, path: str) -> str:
        """Public URL with the host swapped for the CDN host."""
        parts = urlsplit(self.get_url(path))
        cdn_host = self._config.custom_cdn_host or DEFAULT_CDN_HOST
        return urlunsplit(parts._replace(netloc=cdn_host))

    async def get_presigned_url(
        self,
        path: str,
        expires_in: int = DEFAULT_PRESIGNED_EXPIRY_SECONDS,
    ) -> str:
        """Time-limited GET URL for a key, signed by the object store."""
        return await self._store.generate_presigned_url(path, expires_in)

    # -----------------------------------------------------------------------
    # ACLs
    # -----------------------------------------------------------------------

    async def is_file_public(self, file_path: str) -> bool:
        """Whether anyone (the AllUsers group) may read the object."""
        acl = await self._store.get_object_acl(file_path)
        return _grants_public_read(acl.get("Grants", []))

    # -----------------------------------------------------------------------
    # CDN
    # -----------------------------------------------------------------------

    async def get_cdn_endpoint_id(self) -> str:
        """
        Id of the CDN endpoint whose origin is this bucket.

        Concurrent first calls share one lookup: the lock is taken only
        while the id is unknown, and re-checked once held.
        """
        if not self._config.digitalocean_api_token:
            raise ConfigurationError("No API Token configured")

        if self._cdn_endpoint_id:
            return self._cdn_endpoint_id

        async with self._cdn_lookup_lock:
            if self._cdn_endpoint_id:
                return self._cdn_endpoint_id

            cdn = self._require_cdn()
            endpoints = await cdn.list_endpoints()
            for endpoint in endpoints:
                endpoint_bucket = endpoint.origin.split(".")[0]
                if endpoint_bucket == self._config.bucket:
                    self._cdn_endpoint_id = endpoint.id
                    break
            else:
                raise CDNEndpointNotFoundError(self._config.bucket)

        logger.info(
            "Resolved CDN endpoint",
            extra={"bucket": self._config.bucket, "cdn_endpoint_id": self._cdn_endpoint_id},
        )
        return self._cdn_endpoint_id

    async def purge_cache(self, paths: list[str]) -> None:
        """Purge the given keys from the bucket's CDN cache."""
        cdn_endpoint_id = await self.get_cdn_endpoint_id()
        await self._require_cdn().purge_cache(cdn_endpoint_id, paths)
        logger.info(
            "Purged CDN cache",
            extra={"cdn_endpoint_id": cdn_endpoint_id, "paths": paths},
        )

    def _require_cdn(self) -> CDNGateway:
        if self._cdn is None:
            raise ConfigurationError("No CDN gateway configured")
        return self._cdn

    # -----------------------------------------------------------------------
    # Upload
    # -----------------------------------------------------------------------

    async def upload_file(
        self,
        upload_file_path: PathLike,
        destination_path: str,
        permission: Permission = CannedACL.PRIVATE,
        options: Optional[UploadOptions] = None,
    ) -> str:
        """
        Upload a local file and return its CDN URL.

        With purge_cache the key is purged from the CDN right after the put.
        A purge failure fails the call even though the object is already
        written. With exponential_backoff the put and the purge are retried
        together as one unit.
        """
        options = options or UploadOptions()
        acl = resolve_acl(permission)

        async def make_upload() -> str:
            extra_args: dict[str, Any] = {"ACL": acl}
            content_type, _ = mimetypes.guess_type(os.fspath(upload_file_path))
            if content_type:
                extra_args["ContentType"] = content_type
            extra_args.update(options.extra_args)

            with open(upload_file_path, "rb") as body:
                await self._store.put_object(destination_path, body, extra_args)

            logger.info(
                "Uploaded file",
                extra={
                    "bucket": self._config.bucket,
                    "key": destination_path,
                    "acl": acl,
                    "content_type": extra_args.get("ContentType"),
                },
            )

            if options.purge_cache:
                try:
                    await self.purge_cache([destination_path])
                except Exception as e:
                    logger.warning(
                        "Cache purge failed after upload; object is already written",
                        extra={"key": destination_path, "error": str(e)},
                    )
                    raise

            return self.get_cdn_url(destination_path)

        if options.exponential_backoff:
            return await self._retry_policy.run(make_upload)

        return await make_upload()

    # -----------------------------------------------------------------------
    # Listing
    # -----------------------------------------------------------------------

    async def list_path_objects(self, path: str) -> list[dict[str, Any]]:
        """
        Raw object records under a prefix.

        Only the first page the gateway returns (up to 1000 keys on S3) is
        read. Truncation is logged, not followed.
        """
        response = await self._store.list_objects(path)
        if response.get("IsTruncated"):
            logger.warning(
                "Listing truncated; only the first page is returned",
                extra={"prefix": path, "key_count": response.get("KeyCount")},
            )
        return list(response.get("Contents", []))

    async def list_path_files(
        self,
        path: str,
        sort_by_date: Union[SortOrder, str, None] = SortOrder.ASC,
        path_only: bool = False,
    ) -> list[FileListing]:
        """
        Files under a prefix, sorted by last-modified date.

        Args:
            path: Prefix to list
            sort_by_date: SortOrder.DESC for newest first; anything else is ascending
            path_only: Return keys instead of CDN URLs
        """
        objects = await self.list_path_objects(path)
        files = [
            FileListing(
                locator=obj["Key"] if path_only else self.get_cdn_url(obj["Key"]),
                last_modified=obj["LastModified"],
            )
            for obj in objects
        ]
        return sort_files_by_date(files, sort_by_date)

    # -----------------------------------------------------------------------
    # Delete
    # -----------------------------------------------------------------------

    async def delete_objects(self, objects: list[dict[str, Any]]) -> dict[str, Any]:
        """
        Delete objects in a single batch.

        objects only need a "Key" entry, so listing records can be passed
        straight through. The gateway enforces its own batch-size limit.
        An empty batch is answered locally.
        """
        keys = [{"Key": obj["Key"]} for obj in objects]
        if not keys:
            return {"Deleted": []}

        response = await self._store.delete_objects(keys)
        logger.info(
            "Deleted objects",
            extra={"bucket": self._config.bucket, "count": len(keys)},
        )
        return response

    async def delete_paths(self, paths: list[str]) -> dict[str, Any]:
        """Delete the given keys in one batch."""
        return await self.delete_objects([{"Key": path} for path in paths])

    async def delete_file(self, path: str) -> dict[str, Any]:
        """Delete a single key."""
        return await self.delete_objects([{"Key": path}])

    async def delete_folder(self, folder_path: str) -> dict[str, Any]:
        """Delete everything listed under a prefix (first page only)."""
        objects = await self.list_path_objects(folder_path)
        return await self.delete_objects(objects)

    # -----------------------------------------------------------------------
    # Copy
    # -----------------------------------------------------------------------

    async def copy_file(self, source_path: str, destination_path: str) -> dict[str, Any]:
        """
        Copy an object within the bucket, keeping it public or private.

        The ACL is read before the copy is issued. If the source ACL changes
        in between, the copy gets the old visibility.
        """
        is_source_public = await self.is_file_public(source_path)
        acl = CannedACL.PUBLIC_READ if is_source_public else CannedACL.PRIVATE

        response = await self._store.copy_object(source_path, destination_path, acl.value)
        logger.info(
            "Copied object",
            extra={"source": source_path, "destination": destination_path, "acl": acl.value},
        )
        return response

    # -----------------------------------------------------------------------
    # Download
    # -----------------------------------------------------------------------

    async def download_file(
        self,
        file_path_to_read: str,
        file_path_to_save: PathLike,
        create_dir_if_not_exists: bool = True,
    ) -> Path:
        """
        Download an object to a local file and return the local path.

        The path is returned only after the local file is flushed and
        closed. On any failure the partial file is removed and the original
        error re-raised.
        """
        destination = Path(file_path_to_save)
        if create_dir_if_not_exists:
            destination.parent.mkdir(parents=True, exist_ok=True)

        size_bytes = 0
        try:
            with open(destination, "wb") as handle:
                body = await self._store.get_object(file_path_to_read)
                with closing(body):
                    chunks = body.iter_chunks(self._download_chunk_size)
                    while True:
                        # socket reads happen off the event loop
                        chunk = await asyncio.to_thread(next, chunks, None)
                        if chunk is None:
                            break
                        handle.write(chunk)
                        size_bytes += len(chunk)
        except BaseException as e:
            destination.unlink(missing_ok=True)
            logger.error(
                "Download failed; removed partial file",
                extra={"key": file_path_to_read, "path": str(destination), "error": str(e)},
            )
            raise

        logger.debug(
            "Downloaded file",
            extra={"key": file_path_to_read, "path": str(destination), "size_bytes": size_bytes},
        )
        return destination

    # -----------------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------------

    async def close(self) -> None:
        if self._cdn is not None:
            await self._cdn.close()

    async def __aenter__(self) -> "SpacesClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
