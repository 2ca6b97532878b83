import asyncio
import logging

import aiohttp

from storefront.config import settings
from storefront.errors import ServiceUnavailable

logger = logging.getLogger(__name__)


class StorefrontApiClient:
    """Thin aiohttp wrapper around the storefront backend (`/api`)."""

    service_name = "storefront"

    def __init__(self, base_url: str | None = None, token: str | None = None, timeout: float | None = None):
        self.base_url = (base_url or settings.STOREFRONT_API_BASE).rstrip("/")
        self.token = token
        self.timeout = aiohttp.ClientTimeout(total=settings.SERVICE_TIMEOUT_SECONDS if timeout is None else timeout)

    def _url(self, endpoint: str) -> str:
        # endpoint examples: "products", "/recommendations/cart"
        if endpoint.startswith("/"):
            endpoint = endpoint[1:]
        return f"{self.base_url}/{endpoint}"

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(self, method: str, endpoint: str, payload: dict | None = None):
        url = self._url(endpoint)
        try:
            async with aiohttp.ClientSession(timeout=self.timeout, headers=self._headers()) as session:
                async with session.request(method, url, json=payload) as resp:
                    if resp.status >= 400:
                        text = await resp.text()
                        logger.error(f"{self.service_name} {method} {endpoint} error {resp.status}: {text[:200]}")
                        raise self._unavailable(f"HTTP {resp.status}", resp.status)
                    return await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise self._unavailable(f"{method} {endpoint} failed: {e}") from e

    def _unavailable(self, message: str, status: int | None = None) -> ServiceUnavailable:
        return ServiceUnavailable(self.service_name, message, status)

    async def get(self, endpoint: str):
        return await self._request("GET", endpoint)

    async def post(self, endpoint: str, payload: dict):
        return await self._request("POST", endpoint, payload)
