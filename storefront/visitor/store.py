import logging
from dataclasses import dataclass, field
from typing import Protocol

logger = logging.getLogger(__name__)


class KeyValueRegion(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def remove(self, key: str) -> None: ...

    async def clear(self) -> None: ...


class MemoryRegion:
    """Dict-backed region. Used for session data and as the persistent region when no Mongo is configured."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    async def clear(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)


class MongoRegion:
    """
    Persistent region stored in a MongoDB collection, one document per key:
      {_id: "<owner>:<key>", owner, key, value}
    `owner` is the browser profile id, so regions of different profiles never mix.
    `collection` is an async collection (pymongo AsyncMongoClient).
    """

    def __init__(self, collection, owner: str):
        self.collection = collection
        self.owner = owner

    def _doc_id(self, key: str) -> str:
        return f"{self.owner}:{key}"

    async def get(self, key: str) -> str | None:
        doc = await self.collection.find_one({"_id": self._doc_id(key)})
        if not doc:
            return None
        return doc.get("value")

    async def set(self, key: str, value: str) -> None:
        await self.collection.update_one(
            {"_id": self._doc_id(key)},
            {"$set": {"owner": self.owner, "key": key, "value": str(value)}},
            upsert=True,
        )

    async def remove(self, key: str) -> None:
        await self.collection.delete_one({"_id": self._doc_id(key)})

    async def clear(self) -> None:
        result = await self.collection.delete_many({"owner": self.owner})
        logger.info(f"Cleared persistent region for {self.owner} ({getattr(result, 'deleted_count', 0)} keys)")


@dataclass
class VisitorStore:
    """
    Per-browser storage handle with two durability classes:
      - persistent: survives restarts (guest id, login profile)
      - session: dropped when the browsing session ends (recommendation cache, UI flags)
    """

    persistent: KeyValueRegion = field(default_factory=MemoryRegion)
    session: KeyValueRegion = field(default_factory=MemoryRegion)
