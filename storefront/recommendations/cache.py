import logging
from datetime import datetime, timezone
from typing import Iterable

from pydantic import BaseModel, Field, ValidationError

from storefront.catalog.models import Product
from storefront.visitor.store import KeyValueRegion

logger = logging.getLogger(__name__)

FINGERPRINT_DELIMITER = "_"


def fingerprint(ids: Iterable[str | None], namespace: str = "") -> str:
    """
    Order-invariant key for a set of content ids.

    Normalization: drop empty ids, dedupe, sort, join with "_", then prefix with
    "<namespace>-" when a namespace is given.
        fingerprint(["p3", "p1"], "cart-recs") -> "cart-recs-p1_p3"
    """
    normalized = sorted({str(i) for i in ids if i})
    joined = FINGERPRINT_DELIMITER.join(normalized)
    return f"{namespace}-{joined}" if namespace else joined


class CacheEntry(BaseModel):
    key: str
    value: list[Product]
    written_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class SessionResultCache:
    """
    Recommendation responses keyed by fingerprint, stored in the visitor's
    session region. Last write wins; entries live as long as the session.
    """

    def __init__(self, region: KeyValueRegion):
        self.region = region

    async def get(self, key: str) -> list[Product] | None:
        raw = await self.region.get(key)
        if raw is None:
            return None
        try:
            entry = CacheEntry.model_validate_json(raw)
        except ValidationError as e:
            logger.debug(f"Cache entry {key} unreadable, treating as miss: {e.error_count()} errors")
            return None
        return entry.value

    async def set(self, key: str, value: list[Product]) -> None:
        entry = CacheEntry(key=key, value=list(value))
        await self.region.set(key, entry.model_dump_json(by_alias=True))
