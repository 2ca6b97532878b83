from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from storefront.api.deps import Visitor, get_registry, get_visitor
from storefront.services.session_registry import SessionRegistry

router = APIRouter()


class RecommendationRequest(BaseModel):
    cart_external_ids: list[str] = Field(default_factory=list)
    focus_product_external_id: str | None = None
    focus_product_id: str | None = None


@router.post("/{surface}")
async def recommend(
    surface: str,
    body: RecommendationRequest,
    visitor: Visitor = Depends(get_visitor),
    registry: SessionRegistry = Depends(get_registry),
):
    """
    Recommendations for one surface (e.g. "cart", "product", "home"). A newer
    request for the same surface supersedes this one; a superseded request
    answers with `discarded: true` and no products.
    """
    feed = registry.feed_for(visitor.profile_id, visitor.session_id, surface, token=visitor.token)
    result = await feed.refresh(
        visitor.key,
        cart_external_ids=body.cart_external_ids,
        focus_product_external_id=body.focus_product_external_id,
        focus_product_id=body.focus_product_id,
    )
    return {
        "tier": result.tier.value,
        "products": [p.model_dump(mode="json", by_alias=True) for p in result.products],
        "discarded": result.discarded,
    }
