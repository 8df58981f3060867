"""
Object store gateways for DigitalOcean Spaces.

Spaces speaks the S3 API, so production traffic goes through boto3. The
in-memory store returns the same S3 response shapes and error codes, for
local development without credentials.

boto3 is synchronous, so S3ObjectStore runs each call in a worker thread
with asyncio.to_thread and the event loop stays free.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, BinaryIO, Iterator, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from ...core.models import CannedACL, SpacesConfig

logger = logging.getLogger(__name__)

ALL_USERS_URI = "http://acs.amazonaws.com/groups/global/AllUsers"
MAX_KEYS_PER_PAGE = 1000


class S3ObjectStore:
    """
    Spaces bucket accessed through boto3.

    Errors from botocore are logged and re-raised untouched; callers get
    the ClientError with its original error code.
    """

    def __init__(self, config: SpacesConfig) -> None:
        self._config = config

        # Spaces wants v4 signatures and bucket-in-host addressing
        boto_config = Config(
            signature_version="s3v4",
            s3={"addressing_style": "virtual"},
        )

        client_kwargs: dict[str, Any] = {
            "endpoint_url": config.endpoint_url,
            "region_name": config.region_name,
            "config": boto_config,
        }
        # Without explicit keys boto3 falls back to its credential chain
        if config.access_key_id:
            client_kwargs["aws_access_key_id"] = config.access_key_id
        if config.secret_access_key:
            client_kwargs["aws_secret_access_key"] = config.secret_access_key

        self._s3_client = boto3.client("s3", **client_kwargs)

        logger.info(
            "Initialized Spaces storage client",
            extra={"bucket": config.bucket, "endpoint": config.endpoint_url},
        )

    @property
    def bucket(self) -> str:
        return self._config.bucket

    async def generate_presigned_url(self, key: str, expires_in: int) -> str:
        try:
            return await asyncio.to_thread(
                self._s3_client.generate_presigned_url,
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=expires_in,
            )
        except Exception as e:
            logger.error(
                "Failed to generate presigned URL",
                extra={"key": key, "error": str(e)},
            )
            raise

    async def get_object_acl(self, key: str) -> dict[str, Any]:
        try:
            return await asyncio.to_thread(
                self._s3_client.get_object_acl, Bucket=self.bucket, Key=key
            )
        except Exception as e:
            logger.error("Failed to read object ACL", extra={"key": key, "error": str(e)})
            raise

    async def put_object(
        self,
        key: str,
        body: BinaryIO,
        extra_args: dict[str, Any],
    ) -> None:
        """
        Upload a file object.

        upload_fileobj switches to multipart for large bodies. extra_args
        must be keys boto3 accepts for uploads (ACL, ContentType, Metadata,
        CacheControl, ...); anything else is rejected by boto3.
        """
        try:
            await asyncio.to_thread(
                self._s3_client.upload_fileobj,
                body,
                self.bucket,
                key,
                ExtraArgs=extra_args,
            )
        except Exception as e:
            logger.error("Failed to upload object", extra={"key": key, "error": str(e)})
            raise

    async def list_objects(self, prefix: str) -> dict[str, Any]:
        try:
            return await asyncio.to_thread(
                self._s3_client.list_objects_v2, Bucket=self.bucket, Prefix=prefix
            )
        except Exception as e:
            logger.error("Failed to list objects", extra={"prefix": prefix, "error": str(e)})
            raise

    async def delete_objects(self, objects: list[dict[str, str]]) -> dict[str, Any]:
        try:
            return await asyncio.to_thread(
                self._s3_client.delete_objects,
                Bucket=self.bucket,
                Delete={"Objects": objects},
            )
        except Exception as e:
            logger.error(
                "Failed to delete objects",
                extra={"count": len(objects), "error": str(e)},
            )
            raise

    async def copy_object(
        self,
        source_key: str,
        destination_key: str,
        acl: str,
    ) -> dict[str, Any]:
        try:
            return await asyncio.to_thread(
                self._s3_client.copy_object,
                Bucket=self.bucket,
                CopySource={"Bucket": self.bucket, "Key": source_key},
                Key=destination_key,
                ACL=acl,
            )
        except Exception as e:
            logger.error(
                "Failed to copy object",
                extra={"source": source_key, "destination": destination_key, "error": str(e)},
            )
            raise

    async def get_object(self, key: str):
        """Open an object; the returned StreamingBody must be closed by the caller."""
        try:
            response = await asyncio.to_thread(
                self._s3_client.get_object, Bucket=self.bucket, Key=key
            )
        except Exception as e:
            logger.error("Failed to get object", extra={"key": key, "error": str(e)})
            raise
        return response["Body"]


# ---------------------------------------------------------------------------
# In-memory store for local development
# ---------------------------------------------------------------------------

def _client_error(code: str, message: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


@dataclass
class StoredObject:
    data: bytes
    acl: str = CannedACL.PRIVATE.value
    content_type: Optional[str] = None
    metadata: dict[str, str] = field(default_factory=dict)
    last_modified: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class InMemoryBody:
    """Object body served from memory, shaped like botocore's StreamingBody."""

    def __init__(self, data: bytes) -> None:
        self._data = data
        self.closed = False

    def iter_chunks(self, chunk_size: int = 1024) -> Iterator[bytes]:
        for offset in range(0, len(self._data), chunk_size):
            yield self._data[offset:offset + chunk_size]

    def read(self) -> bytes:
        return self._data

    def close(self) -> None:
        self.closed = True


class InMemoryObjectStore:
    """
    Bucket kept in a dict.

    Missing keys raise the same ClientError codes S3 uses (NoSuchKey), and
    an empty batch delete is rejected the way S3 rejects it (MalformedXML).
    Not suitable for production.
    """

    def __init__(self, bucket: str = "local") -> None:
        self.bucket = bucket
        self.objects: dict[str, StoredObject] = {}
        logger.info("Initialized in-memory object store", extra={"bucket": bucket})

    def _get(self, key: str, operation: str) -> StoredObject:
        if key not in self.objects:
            raise _client_error("NoSuchKey", "The specified key does not exist.", operation)
        return self.objects[key]

    async def generate_presigned_url(self, key: str, expires_in: int) -> str:
        return f"mock://{self.bucket}/{key}?X-Amz-Expires={expires_in}"

    async def get_object_acl(self, key: str) -> dict[str, Any]:
        stored = self._get(key, "GetObjectAcl")
        owner = {"ID": "mock-owner", "Type": "CanonicalUser"}
        grants = [{"Grantee": owner, "Permission": "FULL_CONTROL"}]
        if stored.acl in (CannedACL.PUBLIC_READ.value, CannedACL.PUBLIC_READ_WRITE.value):
            grants.append({
                "Grantee": {"Type": "Group", "URI": ALL_USERS_URI},
                "Permission": "READ",
            })
        return {"Owner": {"ID": "mock-owner"}, "Grants": grants}

    async def put_object(
        self,
        key: str,
        body: BinaryIO,
        extra_args: dict[str, Any],
    ) -> None:
        self.objects[key] = StoredObject(
            data=body.read(),
            acl=extra_args.get("ACL", CannedACL.PRIVATE.value),
            content_type=extra_args.get("ContentType"),
            metadata=dict(extra_args.get("Metadata", {})),
        )
        logger.debug("Stored object in memory", extra={"key": key})

    async def list_objects(self, prefix: str) -> dict[str, Any]:
        keys = sorted(key for key in self.objects if key.startswith(prefix))
        page = keys[:MAX_KEYS_PER_PAGE]
        response: dict[str, Any] = {
            "Name": self.bucket,
            "Prefix": prefix,
            "KeyCount": len(page),
            "MaxKeys": MAX_KEYS_PER_PAGE,
            "IsTruncated": len(keys) > MAX_KEYS_PER_PAGE,
        }
        # S3 leaves Contents out entirely for an empty listing
        if page:
            response["Contents"] = [
                {
                    "Key": key,
                    "Size": len(self.objects[key].data),
                    "LastModified": self.objects[key].last_modified,
                }
                for key in page
            ]
        return response

    async def delete_objects(self, objects: list[dict[str, str]]) -> dict[str, Any]:
        if not objects:
            raise _client_error(
                "MalformedXML",
                "The XML you provided was not well-formed.",
                "DeleteObjects",
            )
        deleted = []
        for obj in objects:
            self.objects.pop(obj["Key"], None)
            deleted.append({"Key": obj["Key"]})
        return {"Deleted": deleted}

    async def copy_object(
        self,
        source_key: str,
        destination_key: str,
        acl: str,
    ) -> dict[str, Any]:
        source = self._get(source_key, "CopyObject")
        copied = StoredObject(
            data=source.data,
            acl=acl,
            content_type=source.content_type,
            metadata=dict(source.metadata),
        )
        self.objects[destination_key] = copied
        return {"CopyObjectResult": {"LastModified": copied.last_modified}}

    async def get_object(self, key: str) -> InMemoryBody:
        return InMemoryBody(self._get(key, "GetObject").data)

    def seed_object(
        self,
        key: str,
        data: bytes = b"",
        acl: str = CannedACL.PRIVATE.value,
        last_modified: Optional[datetime] = None,
    ) -> StoredObject:
        """Test helper to place an object directly in the store."""
        stored = StoredObject(data=data, acl=acl)
        if last_modified is not None:
            stored.last_modified = last_modified
        self.objects[key] = stored
        return stored

    def set_acl(self, key: str, acl: str) -> None:
        """Test helper to change an object's ACL in place."""
        self._get(key, "PutObjectAcl").acl = acl


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_object_store(
    config: Optional[SpacesConfig] = None,
    mock_mode: bool = False,
):
    """
    Create the object store for a bucket.

    Args:
        config: Bucket configuration (required unless mock_mode)
        mock_mode: If True, return an in-memory store

    Returns:
        S3ObjectStore or InMemoryObjectStore
    """
    if mock_mode:
        return InMemoryObjectStore(bucket=config.bucket if config else "local")

    if config is None:
        raise ValueError("config is required when not in mock mode")

    return S3ObjectStore(config)
