import logging
from typing import Any

from storefront.errors import ServiceUnavailable
from storefront.http_client import StorefrontApiClient

logger = logging.getLogger(__name__)


class AuthClient(StorefrontApiClient):
    """Checks a bearer token against the auth backend before we trust a login payload."""

    service_name = "auth"

    async def me(self) -> dict[str, Any]:
        # the backend answers with the account profile for the bearer token
        data = await self.get("auth/me-mini")
        if not isinstance(data, dict):
            raise ServiceUnavailable(self.service_name, "unexpected profile payload")
        return data
