import json
import logging
import uuid
from typing import Any

from storefront.config import settings
from storefront.visitor.store import VisitorStore

logger = logging.getLogger(__name__)

PROFILE_KEY = "userInfo"
TOKEN_KEY = "token"
GUEST_KEY = "guestId"

# most stable first; a present field masks everything below it
_ACCOUNT_ID_FIELDS = ("_id", "id", "email")


class StableIdentityResolver:
    def __init__(self, store: VisitorStore, token_prefix_length: int | None = None):
        self.store = store
        self.token_prefix_length = settings.TOKEN_PREFIX_LENGTH if token_prefix_length is None else token_prefix_length

    async def resolve(self) -> str:
        """
        Return the visitor key: account identity when logged in, otherwise the
        persisted guest id (created on first call). Never raises on bad stored data.
        """
        key = await self._authenticated_key()
        if key:
            return key
        return await self._guest_key()

    async def profile(self) -> dict[str, Any] | None:
        raw = await self.store.persistent.get(PROFILE_KEY)
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning(f"Ignoring unreadable stored profile: {e}")
            return None
        if not isinstance(data, dict):
            logger.warning("Ignoring stored profile: expected an object, got %s", type(data).__name__)
            return None
        return data

    async def is_authenticated(self) -> bool:
        return await self._authenticated_key() is not None

    async def token(self) -> str | None:
        data = await self.profile()
        token = (data or {}).get("token") or await self.store.persistent.get(TOKEN_KEY)
        return str(token) if token else None

    async def remember_profile(self, profile: dict[str, Any]) -> str:
        """Store the login payload the way the login view does, return the resulting key."""
        await self.store.persistent.set(PROFILE_KEY, json.dumps(profile))
        if profile.get("token"):
            await self.store.persistent.set(TOKEN_KEY, str(profile["token"]))
        return await self.resolve()

    async def forget_profile(self) -> None:
        await self.store.persistent.remove(PROFILE_KEY)
        await self.store.persistent.remove(TOKEN_KEY)

    async def clear_guest(self) -> None:
        await self.store.persistent.remove(GUEST_KEY)

    async def _authenticated_key(self) -> str | None:
        data = await self.profile()
        if data is None:
            return None

        for field_name in _ACCOUNT_ID_FIELDS:
            value = data.get(field_name)
            if value:
                return str(value)

        token = data.get("token")
        if token:
            return str(token)[: self.token_prefix_length]

        logger.warning("Stored profile has no usable identifier, using guest identity")
        return None

    async def _guest_key(self) -> str:
        existing = await self.store.persistent.get(GUEST_KEY)
        if existing:
            return existing

        guest_id = f"guest_{uuid.uuid4().hex}"
        await self.store.persistent.set(GUEST_KEY, guest_id)
        logger.info(f"Issued new guest id {guest_id}")
        return guest_id
