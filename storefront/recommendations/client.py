from urllib.parse import quote

from storefront.catalog.client import parse_products
from storefront.catalog.models import Product
from storefront.http_client import StorefrontApiClient


class RecommendationClient(StorefrontApiClient):
    """
    Ranked lists from the recommendation service. Every endpoint may return an
    empty list; a body that is not a list is read as empty.
    """

    service_name = "recommendations"

    async def by_cart(self, sorted_external_ids: list[str]) -> list[Product]:
        data = await self.post("recommendations/cart", {"cartItems": list(sorted_external_ids)})
        return parse_products(data)

    async def by_product(self, external_id: str) -> list[Product]:
        data = await self.get(f"recommendations/product/{quote(external_id, safe='')}")
        return parse_products(data)

    async def by_visitor(self, visitor_key: str) -> list[Product]:
        data = await self.get(f"recommendations/visitor/{quote(visitor_key, safe='')}")
        return parse_products(data)
