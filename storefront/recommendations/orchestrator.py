import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum

from storefront.catalog.client import CatalogClient
from storefront.catalog.models import Product
from storefront.config import settings
from storefront.recommendations.cache import SessionResultCache, fingerprint
from storefront.recommendations.client import RecommendationClient

logger = logging.getLogger(__name__)


class Tier(str, Enum):
    CART = "cart"
    PRODUCT = "product"
    VISITOR = "visitor"
    EMPTY = "empty"


class CancellationToken:
    """Advisory flag: the in-flight call keeps running, its result is dropped."""

    def __init__(self):
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


@dataclass
class RecommendationContext:
    visitor_key: str | None = None
    cart_external_ids: list[str] = field(default_factory=list)
    focus_product_external_id: str | None = None
    focus_product_id: str | None = None
    token: CancellationToken = field(default_factory=CancellationToken)

    def sorted_cart_ids(self) -> list[str]:
        return sorted({i for i in self.cart_external_ids if i})

    def inputs(self) -> tuple:
        """What the result depends on; two contexts with equal inputs want the same answer."""
        return (
            self.visitor_key,
            tuple(self.sorted_cart_ids()),
            self.focus_product_external_id,
            self.focus_product_id,
        )

    @property
    def has_focus(self) -> bool:
        return bool(self.focus_product_external_id or self.focus_product_id)


@dataclass(frozen=True)
class RecommendationResult:
    tier: Tier
    products: list[Product] = field(default_factory=list)
    discarded: bool = False

    @classmethod
    def empty(cls) -> "RecommendationResult":
        return cls(Tier.EMPTY, [])

    @classmethod
    def stale(cls) -> "RecommendationResult":
        return cls(Tier.EMPTY, [], discarded=True)


class RecommendationOrchestrator:
    """
    Fallback chain over the recommendation sources:
        cart -> product (-> rest of catalog) -> visitor -> empty
    First non-empty tier wins. Service failures are logged and fall through.
    """

    def __init__(
        self,
        recommendations: RecommendationClient,
        cache: SessionResultCache,
        catalog: CatalogClient | None = None,
        cart_namespace: str | None = None,
    ):
        self.recommendations = recommendations
        self.cache = cache
        self.catalog = catalog
        self.cart_namespace = settings.CART_CACHE_NAMESPACE if cart_namespace is None else cart_namespace

    async def fetch_for(self, ctx: RecommendationContext) -> RecommendationResult:
        if ctx.token.cancelled:
            return RecommendationResult.stale()

        if ctx.sorted_cart_ids():
            products = await self._cart_tier(ctx)
            if ctx.token.cancelled:
                return RecommendationResult.stale()
            if products:
                return RecommendationResult(Tier.CART, products)

        if ctx.has_focus:
            products = await self._product_tier(ctx)
            if ctx.token.cancelled:
                return RecommendationResult.stale()
            if products:
                return RecommendationResult(Tier.PRODUCT, products)

        if ctx.visitor_key:
            products = await self._visitor_tier(ctx)
            if ctx.token.cancelled:
                return RecommendationResult.stale()
            if products:
                return RecommendationResult(Tier.VISITOR, products)

        return RecommendationResult.empty()

    async def _cart_tier(self, ctx: RecommendationContext) -> list[Product]:
        sorted_ids = ctx.sorted_cart_ids()
        key = fingerprint(sorted_ids, self.cart_namespace)

        cached = await self.cache.get(key)
        if cached is not None:
            logger.debug(f"Cart recommendations cache hit: {key}")
            return cached

        try:
            recs = await self.recommendations.by_cart(sorted_ids)
        except Exception as e:
            logger.error(f"Cart recommendations failed: {e}")
            return []

        if ctx.token.cancelled:
            logger.debug(f"Dropping cart recommendations for superseded request {key}")
            return []

        await self.cache.set(key, recs)
        return recs

    async def _product_tier(self, ctx: RecommendationContext) -> list[Product]:
        recs: list[Product] = []
        if ctx.focus_product_external_id:
            try:
                recs = await self.recommendations.by_product(ctx.focus_product_external_id)
            except Exception as e:
                logger.error(f"Product recommendations failed for {ctx.focus_product_external_id}: {e}")
                recs = []

        if recs or ctx.token.cancelled:
            return recs

        return await self._other_catalog_items(ctx)

    async def _other_catalog_items(self, ctx: RecommendationContext) -> list[Product]:
        if self.catalog is None:
            return []
        try:
            products = await self.catalog.list_all()
        except Exception as e:
            logger.error(f"Catalog fallback for product recommendations failed: {e}")
            return []

        def is_focus(p: Product) -> bool:
            if ctx.focus_product_id and p.id == ctx.focus_product_id:
                return True
            return bool(ctx.focus_product_external_id) and p.external_id == ctx.focus_product_external_id

        return [p for p in products if not is_focus(p)]

    async def _visitor_tier(self, ctx: RecommendationContext) -> list[Product]:
        try:
            return await self.recommendations.by_visitor(ctx.visitor_key)
        except Exception as e:
            logger.error(f"Visitor recommendations failed: {e}")
            return []


class RecommendationFeed:
    """
    The recommendation state of one consuming surface (cart page, product page,
    landing page). Only the latest request may update `products`/`tier`; a
    request superseded before it settles is discarded.
    """

    def __init__(self, orchestrator: RecommendationOrchestrator, name: str = "default"):
        self.orchestrator = orchestrator
        self.name = name
        self.products: list[Product] = []
        self.tier: Tier = Tier.EMPTY
        self.version = 0
        self._current: RecommendationContext | None = None
        self._pending: asyncio.Future | None = None

    @property
    def loading(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def cancel(self) -> None:
        if self._current is not None:
            self._current.token.cancel()

    async def refresh(
        self,
        visitor_key: str | None,
        cart_external_ids: list[str] | tuple = (),
        focus_product_external_id: str | None = None,
        focus_product_id: str | None = None,
    ) -> RecommendationResult:
        ctx = RecommendationContext(
            visitor_key=visitor_key,
            cart_external_ids=list(cart_external_ids),
            focus_product_external_id=focus_product_external_id,
            focus_product_id=focus_product_id,
        )

        current = self._current
        if current is not None and self.loading and not current.token.cancelled and current.inputs() == ctx.inputs():
            # same inputs already in flight: share that answer, the owner applies it
            return await asyncio.shield(self._pending)

        if current is not None:
            current.token.cancel()

        self._current = ctx
        pending = asyncio.ensure_future(self.orchestrator.fetch_for(ctx))
        self._pending = pending
        result = await pending

        if ctx.token.cancelled or self._current is not ctx:
            logger.debug(f"[{self.name}] discarding superseded recommendation result")
            return RecommendationResult.stale()

        self.products = result.products
        self.tier = result.tier
        self.version += 1
        return result
