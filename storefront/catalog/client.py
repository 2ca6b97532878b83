import logging

from pydantic import ValidationError

from storefront.catalog.models import Product
from storefront.errors import CatalogUnavailable
from storefront.http_client import StorefrontApiClient

logger = logging.getLogger(__name__)


def parse_products(data) -> list[Product]:
    """Skip malformed rows instead of failing the whole listing."""
    if not isinstance(data, list):
        return []
    products = []
    for row in data:
        try:
            products.append(Product.model_validate(row))
        except ValidationError as e:
            logger.warning(f"Skipping malformed product row: {e.error_count()} errors")
    return products


class CatalogClient(StorefrontApiClient):
    service_name = "catalog"

    def _unavailable(self, message: str, status: int | None = None) -> CatalogUnavailable:
        return CatalogUnavailable(message, status)

    async def list_all(self) -> list[Product]:
        data = await self.get("products")
        if not isinstance(data, list):
            raise CatalogUnavailable("unexpected product listing payload")
        return parse_products(data)
