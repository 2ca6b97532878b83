import logging
import time

from cachetools import TTLCache
from pymongo import AsyncMongoClient

from storefront.catalog.client import CatalogClient
from storefront.config import settings
from storefront.recommendations.cache import SessionResultCache
from storefront.recommendations.client import RecommendationClient
from storefront.recommendations.orchestrator import RecommendationFeed, RecommendationOrchestrator
from storefront.visitor.identity import StableIdentityResolver
from storefront.visitor.store import MemoryRegion, MongoRegion, VisitorStore

logger = logging.getLogger(__name__)


def mongo_collection():
    client = AsyncMongoClient(settings.MONGO_URI)
    return client[settings.MONGO_DB]["visitor_store"]


def _touch(cache: TTLCache, key, factory):
    value = cache.get(key)
    if value is None:
        value = factory()
    # re-inserting restarts the idle timer
    cache[key] = value
    return value


class SessionRegistry:
    """
    In-process owner of every browser's Visitor Store and recommendation feeds.

    profile_id -> persistent region (Mongo when configured, memory otherwise)
    session_id -> session region + one RecommendationFeed per surface

    In-memory entries expire after sitting idle (SESSION_IDLE_SECONDS for
    sessions and feeds, PROFILE_IDLE_SECONDS for memory-backed profiles), and
    each table holds at most MAX_TRACKED_SESSIONS entries.
    """

    def __init__(
        self,
        persistent_collection=None,
        recommendation_client_factory=RecommendationClient,
        catalog_client_factory=CatalogClient,
        session_ttl: float | None = None,
        profile_ttl: float | None = None,
        maxsize: int | None = None,
        timer=time.monotonic,
    ):
        self.persistent_collection = persistent_collection
        self.recommendation_client_factory = recommendation_client_factory
        self.catalog_client_factory = catalog_client_factory

        session_ttl = settings.SESSION_IDLE_SECONDS if session_ttl is None else session_ttl
        profile_ttl = settings.PROFILE_IDLE_SECONDS if profile_ttl is None else profile_ttl
        maxsize = settings.MAX_TRACKED_SESSIONS if maxsize is None else maxsize

        self._persistent: TTLCache = TTLCache(maxsize=maxsize, ttl=profile_ttl, timer=timer)
        self._sessions: TTLCache = TTLCache(maxsize=maxsize, ttl=session_ttl, timer=timer)
        self._feeds: TTLCache = TTLCache(maxsize=maxsize, ttl=session_ttl, timer=timer)

    @classmethod
    def from_settings(cls) -> "SessionRegistry":
        if settings.MONGO_URI:
            logger.info(f"Persisting visitor data in MongoDB ({settings.MONGO_DB}.visitor_store)")
            return cls(persistent_collection=mongo_collection())
        return cls()

    def store_for(self, profile_id: str, session_id: str) -> VisitorStore:
        if self.persistent_collection is not None:
            persistent = MongoRegion(self.persistent_collection, profile_id)
        else:
            persistent = _touch(self._persistent, profile_id, MemoryRegion)
        session = _touch(self._sessions, session_id, MemoryRegion)
        return VisitorStore(persistent=persistent, session=session)

    def resolver_for(self, profile_id: str, session_id: str) -> StableIdentityResolver:
        return StableIdentityResolver(self.store_for(profile_id, session_id))

    def feed_for(self, profile_id: str, session_id: str, surface: str, token: str | None = None) -> RecommendationFeed:
        store = self.store_for(profile_id, session_id)
        orchestrator = RecommendationOrchestrator(
            recommendations=self.recommendation_client_factory(token=token),
            cache=SessionResultCache(store.session),
            catalog=self.catalog_client_factory(token=token),
        )
        feed = _touch(
            self._feeds,
            (session_id, surface),
            lambda: RecommendationFeed(orchestrator, name=f"{session_id}/{surface}"),
        )
        # credentials may have changed since the feed was created
        feed.orchestrator = orchestrator
        return feed

    def expire(self) -> None:
        for cache in (self._persistent, self._sessions, self._feeds):
            cache.expire()

    def tracked(self) -> tuple[int, int, int]:
        """(profiles, sessions, feeds) currently held in memory."""
        self.expire()
        return len(self._persistent), len(self._sessions), len(self._feeds)

    async def end_session(self, session_id: str) -> None:
        for key in [k for k in list(self._feeds.keys()) if k[0] == session_id]:
            self._feeds.pop(key).cancel()
        region = self._sessions.pop(session_id, None)
        if region is not None:
            await region.clear()
