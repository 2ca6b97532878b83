import uuid
from dataclasses import dataclass

from fastapi import Depends, Request, Response

from storefront.catalog.client import CatalogClient
from storefront.services.session_registry import SessionRegistry
from storefront.services.shelf_service import ShelfService
from storefront.visitor.auth_client import AuthClient
from storefront.visitor.identity import StableIdentityResolver

PROFILE_COOKIE = "sf_profile"
SESSION_COOKIE = "sf_session"
PROFILE_COOKIE_MAX_AGE = 60 * 60 * 24 * 365

registry = SessionRegistry.from_settings()


def get_registry() -> SessionRegistry:
    return registry


def get_auth_client():
    """Factory for a token-bound AuthClient."""
    return AuthClient


@dataclass
class Visitor:
    profile_id: str
    session_id: str
    resolver: StableIdentityResolver
    key: str
    token: str | None = None


async def get_visitor(request: Request, response: Response, sessions: SessionRegistry = Depends(get_registry)) -> Visitor:
    """Browser profile + browsing session from cookies, issuing whichever is missing."""
    profile_id = request.cookies.get(PROFILE_COOKIE)
    if not profile_id:
        profile_id = uuid.uuid4().hex
        response.set_cookie(PROFILE_COOKIE, profile_id, max_age=PROFILE_COOKIE_MAX_AGE, httponly=True, samesite="lax")

    session_id = request.cookies.get(SESSION_COOKIE)
    if not session_id:
        session_id = uuid.uuid4().hex
        # no max_age: dropped with the browsing session
        response.set_cookie(SESSION_COOKIE, session_id, httponly=True, samesite="lax")

    resolver = sessions.resolver_for(profile_id, session_id)
    return Visitor(profile_id, session_id, resolver, key=await resolver.resolve(), token=await resolver.token())


def get_shelf_service(visitor: Visitor = Depends(get_visitor)) -> ShelfService:
    return ShelfService(CatalogClient(token=visitor.token))
