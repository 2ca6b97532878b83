import logging
from dataclasses import dataclass, field
from typing import Iterable, Literal, Union

from storefront.catalog.models import Product
from storefront.config import settings
from storefront.personalization.shuffle import permute

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Grouped:
    """Category -> shelf, in first-seen category order."""

    shelves: dict[str, list[Product]] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not any(self.shelves.values())


@dataclass(frozen=True)
class FlatResults:
    products: list[Product] = field(default_factory=list)
    tier: Literal["exact", "fuzzy"] = "exact"

    def is_empty(self) -> bool:
        return not self.products


GroupedView = Union[Grouped, FlatResults]


def group_by_category(products: Iterable[Product]) -> dict[str, list[Product]]:
    grouped: dict[str, list[Product]] = {}
    for product in products:
        grouped.setdefault(product.category, []).append(product)
    return grouped


class CatalogGrouper:
    def __init__(
        self,
        page_size: int | None = None,
        fuzzy_prefix_length: int | None = None,
        fuzzy_limit: int | None = None,
    ):
        self.page_size = settings.SHELF_PAGE_SIZE if page_size is None else page_size
        self.fuzzy_prefix_length = settings.FUZZY_PREFIX_LENGTH if fuzzy_prefix_length is None else fuzzy_prefix_length
        self.fuzzy_limit = settings.FUZZY_RESULT_LIMIT if fuzzy_limit is None else fuzzy_limit

    def build_view(self, catalog: list[Product], visitor_key: str, category: str | None = None) -> Grouped:
        """
        Group the catalog into per-category shelves, shuffled per visitor and
        truncated to the page size. Each group is sorted by (name, id) first so the
        shelf does not depend on the order the catalog service returned. Shuffling
        happens before truncation, so two visitors may see different members of
        a large category.
        """
        products = catalog
        if category:
            products = [p for p in catalog if p.category == category]

        shelves = {}
        for name, group in group_by_category(products).items():
            ordered = sorted(group, key=lambda p: (p.name, p.id))
            shelves[name] = permute(ordered, f"{visitor_key}{name}")[: self.page_size]
        return Grouped(shelves=shelves)

    def search(
        self,
        catalog: list[Product],
        query: str,
        visitor_key: str,
        category: str | None = None,
    ) -> GroupedView:
        q = (query or "").strip().lower()
        if not q:
            return self.build_view(catalog, visitor_key, category)

        products = catalog
        if category:
            products = [p for p in catalog if p.category == category]

        exact = self.exact_matches(products, q)
        if exact:
            return FlatResults(products=exact, tier="exact")

        fuzzy = self.fuzzy_matches(products, q)
        logger.debug(f"No exact match for {q!r}, fuzzy tier found {len(fuzzy)}")
        return FlatResults(products=fuzzy, tier="fuzzy")

    @staticmethod
    def exact_matches(products: list[Product], q: str) -> list[Product]:
        return [
            p for p in products
            if q in p.name.lower() or q in p.brand.lower() or q in p.category.lower()
        ]

    def fuzzy_matches(self, products: list[Product], q: str) -> list[Product]:
        prefix = q[: self.fuzzy_prefix_length]
        matches = []
        for p in products:
            if len(matches) >= self.fuzzy_limit:
                break
            words = p.name.lower().split()
            if any(word in q or word.startswith(prefix) for word in words):
                matches.append(p)
        return matches
