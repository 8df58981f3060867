"""
DigitalOcean CDN management API client.

Only the two calls the storage client needs: list the account's CDN
endpoints, and purge cached files from one of them. Both use bearer-token
auth. HTTP errors are logged and re-raised as httpx raised them.
"""

import logging
from datetime import datetime
from typing import Any, Optional

import httpx
from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://api.digitalocean.com/v2"
DEFAULT_TIMEOUT_SECONDS = 30.0
ENDPOINTS_PER_PAGE = 200


class CDNEndpoint(BaseModel):
    """A CDN endpoint as returned by GET /v2/cdn/endpoints."""

    model_config = ConfigDict(extra="ignore")

    id: str
    origin: str
    endpoint: Optional[str] = None
    ttl: Optional[int] = None
    custom_domain: Optional[str] = None
    created_at: Optional[datetime] = None


class DigitalOceanCDNClient:
    """
    Thin async wrapper over the CDN endpoints API.

    The underlying httpx.AsyncClient is created on first use and closed by
    close(). Pass transport to route requests somewhere other than the
    network (httpx.MockTransport in tests).
    """

    def __init__(
        self,
        api_token: str,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not api_token:
            raise ValueError("API token is required")
        self._api_token = api_token
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                headers={"Authorization": f"Bearer {self._api_token}"},
                transport=self._transport,
            )
        return self._client

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        client = self._get_client()
        try:
            response = await client.request(method, path, **kwargs)
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            logger.error(
                "CDN API returned error status",
                extra={
                    "method": method,
                    "path": path,
                    "status": e.response.status_code,
                    "response": e.response.text,
                },
            )
            raise
        except httpx.RequestError as e:
            logger.error(
                "CDN API request failed",
                extra={"method": method, "path": path, "error": str(e)},
            )
            raise

    async def list_endpoints(self) -> list[CDNEndpoint]:
        """
        CDN endpoints on the account.

        One page of up to ENDPOINTS_PER_PAGE endpoints is read, which
        covers the per-account endpoint limit.
        """
        response = await self._request(
            "GET",
            "/cdn/endpoints",
            params={"per_page": ENDPOINTS_PER_PAGE},
        )
        endpoints = [
            CDNEndpoint.model_validate(item)
            for item in response.json().get("endpoints", [])
        ]
        logger.debug("Listed CDN endpoints", extra={"count": len(endpoints)})
        return endpoints

    async def purge_cache(self, endpoint_id: str, files: list[str]) -> None:
        """Purge cached copies of files (paths relative to the origin)."""
        await self._request(
            "DELETE",
            f"/cdn/endpoints/{endpoint_id}/cache",
            json={"files": files},
        )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
