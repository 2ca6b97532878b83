import logging

from storefront.catalog.client import CatalogClient
from storefront.catalog.grouping import CatalogGrouper, GroupedView
from storefront.catalog.models import Product

logger = logging.getLogger(__name__)


class ShelfService:
    """
    Catalog listing for the storefront home page. Unlike recommendations there is
    no fallback for a missing catalog, so CatalogUnavailable propagates to the caller
    (which shows a retry affordance).
    """

    def __init__(self, catalog: CatalogClient, grouper: CatalogGrouper | None = None):
        self.catalog = catalog
        self.grouper = grouper or CatalogGrouper()

    async def load_catalog(self) -> list[Product]:
        try:
            return await self.catalog.list_all()
        except Exception as e:
            logger.error(f"Products fetch error: {e}")
            raise

    async def shelves(self, visitor_key: str, category: str | None = None, query: str | None = None) -> GroupedView:
        catalog = await self.load_catalog()
        view = self.grouper.search(catalog, query or "", visitor_key, category)
        logger.info(f"Built {type(view).__name__} view for {visitor_key} ({len(catalog)} products in catalog)")
        return view

    async def categories(self) -> list[str]:
        catalog = await self.load_catalog()
        seen = []
        for p in catalog:
            if p.category and p.category not in seen:
                seen.append(p.category)
        return seen
