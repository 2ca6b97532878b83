import logging
from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from storefront.api.deps import Visitor, get_auth_client, get_registry, get_visitor
from storefront.errors import ServiceUnavailable
from storefront.services.session_registry import SessionRegistry

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/")
async def current_visitor(visitor: Visitor = Depends(get_visitor)):
    return {"visitor_key": visitor.key, "authenticated": await visitor.resolver.is_authenticated()}


@router.post("/login")
async def login(
    payload: dict[str, Any] = Body(...),
    visitor: Visitor = Depends(get_visitor),
    auth_client_factory=Depends(get_auth_client),
):
    """
    Record a login. Only the bearer `token` of the posted payload is used: the
    account profile (and so the visitor key) comes from the auth backend for
    that token, never from identifiers the client posts itself.
    """
    token = payload.get("token")
    if not token or not isinstance(token, str):
        return JSONResponse({"error": "token is required"}, status_code=400)

    try:
        account = await auth_client_factory(token=token).me()
    except ServiceUnavailable as e:
        logger.warning(f"Rejected login for profile {visitor.profile_id}: {e}")
        return JSONResponse({"error": "Invalid or expired token."}, status_code=401)

    key = await visitor.resolver.remember_profile({**account, "token": token})
    return {"visitor_key": key, "authenticated": await visitor.resolver.is_authenticated()}


@router.post("/logout")
async def logout(visitor: Visitor = Depends(get_visitor)):
    await visitor.resolver.forget_profile()
    return {"visitor_key": await visitor.resolver.resolve(), "authenticated": False}


@router.post("/session/end")
async def end_session(visitor: Visitor = Depends(get_visitor), registry: SessionRegistry = Depends(get_registry)):
    await registry.end_session(visitor.session_id)
    return {"ended": visitor.session_id}
