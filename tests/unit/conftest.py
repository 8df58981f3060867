"""Shared fixtures and test doubles for the client tests."""

import asyncio
from datetime import datetime, timezone

import pytest

from spaces_client.core.client import SpacesClient
from spaces_client.core.models import SpacesConfig
from spaces_client.core.retry import ExponentialBackoff
from spaces_client.infrastructure.cdn.client import CDNEndpoint
from spaces_client.infrastructure.storage.client import InMemoryObjectStore


BUCKET = "my-bucket"
ENDPOINT = "nyc3.digitaloceanspaces.com"


class FakeCDN:
    """In-memory CDNGateway that records calls."""

    def __init__(self, endpoints=None, purge_failures: int = 0) -> None:
        self.endpoints = endpoints if endpoints is not None else [
            CDNEndpoint(id="other-id", origin="other-bucket.nyc3.digitaloceanspaces.com"),
            CDNEndpoint(id="cdn-123", origin=f"{BUCKET}.nyc3.digitaloceanspaces.com"),
        ]
        self.list_calls = 0
        self.purges: list[tuple[str, list[str]]] = []
        self.purge_failures = purge_failures
        self.closed = False

    async def list_endpoints(self):
        self.list_calls += 1
        # Yield so concurrent callers get a chance to interleave
        await asyncio.sleep(0)
        return self.endpoints

    async def purge_cache(self, endpoint_id: str, files: list[str]) -> None:
        if self.purge_failures > 0:
            self.purge_failures -= 1
            raise RuntimeError("purge failed")
        self.purges.append((endpoint_id, files))

    async def close(self) -> None:
        self.closed = True


async def no_sleep(seconds: float) -> None:
    return None


def make_config(**overrides) -> SpacesConfig:
    values = {
        "endpoint": ENDPOINT,
        "bucket": BUCKET,
        "digitalocean_api_token": "do-token",
    }
    values.update(overrides)
    return SpacesConfig(**values)


def at(minute: int) -> datetime:
    """Timestamp helper: 2024-01-01 12:{minute} UTC."""
    return datetime(2024, 1, 1, 12, minute, tzinfo=timezone.utc)


@pytest.fixture
def store() -> InMemoryObjectStore:
    return InMemoryObjectStore(bucket=BUCKET)


@pytest.fixture
def cdn() -> FakeCDN:
    return FakeCDN()


@pytest.fixture
def client(store, cdn) -> SpacesClient:
    return SpacesClient(
        make_config(),
        store,
        cdn=cdn,
        retry_policy=ExponentialBackoff(max_attempts=3, sleep=no_sleep),
    )
