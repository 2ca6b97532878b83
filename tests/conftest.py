"""Shared fakes for the catalog and recommendation services."""

import asyncio

import pytest

from storefront.catalog.models import Product
from storefront.errors import CatalogUnavailable, ServiceUnavailable


def make_product(pid, name="", category="misc", brand="acme", external_id=None, price=10.0):
    return Product(
        id=pid,
        external_id=external_id or f"ext-{pid}",
        name=name or f"Item {pid}",
        brand=brand,
        category=category,
        price=price,
    )


class FakeRecommendationService:
    """
    Records every call. `cart`, `product`, `visitor` map request keys to results;
    a value that is an Exception is raised instead. `gates` hold a call until the
    matching asyncio.Event is set.
    """

    def __init__(self, cart=None, product=None, visitor=None):
        self.cart = cart or {}
        self.product = product or {}
        self.visitor = visitor or {}
        self.gates: dict = {}
        self.calls: list[tuple] = []

    async def _answer(self, kind, key, table):
        self.calls.append((kind, key))
        gate = self.gates.get((kind, key))
        if gate is not None:
            await gate.wait()
        value = table.get(key, [])
        if isinstance(value, Exception):
            raise value
        return list(value)

    async def by_cart(self, sorted_external_ids):
        return await self._answer("cart", tuple(sorted_external_ids), self.cart)

    async def by_product(self, external_id):
        return await self._answer("product", external_id, self.product)

    async def by_visitor(self, visitor_key):
        return await self._answer("visitor", visitor_key, self.visitor)


class FakeCatalog:
    def __init__(self, products=None, error: Exception | None = None):
        self.products = list(products or [])
        self.error = error
        self.calls = 0

    async def list_all(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.products)


async def wait_for_call(service: FakeRecommendationService, count: int = 1):
    while len(service.calls) < count:
        await asyncio.sleep(0)


@pytest.fixture
def unavailable():
    return ServiceUnavailable("recommendations", "HTTP 502", 502)


@pytest.fixture
def catalog_down():
    return CatalogUnavailable("connection refused")
