from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from storefront.api.deps import Visitor, get_shelf_service, get_visitor
from storefront.catalog.grouping import FlatResults, Grouped, GroupedView
from storefront.errors import CatalogUnavailable
from storefront.services.shelf_service import ShelfService

router = APIRouter()


def _dump(products) -> list[dict]:
    return [p.model_dump(mode="json", by_alias=True) for p in products]


def serialize_view(view: GroupedView) -> dict:
    if isinstance(view, FlatResults):
        return {"kind": "flat", "tier": view.tier, "empty": view.is_empty(), "products": _dump(view.products)}
    if isinstance(view, Grouped):
        return {
            "kind": "grouped",
            "empty": view.is_empty(),
            "shelves": {name: _dump(items) for name, items in view.shelves.items()},
        }
    raise TypeError(f"Unknown view type {type(view).__name__}")


def _catalog_error(e: CatalogUnavailable) -> JSONResponse:
    return JSONResponse({"error": "Failed to load products.", "retryable": e.retryable}, status_code=503)


@router.get("/")
async def list_shelves(
    category: str | None = None,
    q: str | None = None,
    visitor: Visitor = Depends(get_visitor),
    shelf_service: ShelfService = Depends(get_shelf_service),
):
    try:
        view = await shelf_service.shelves(visitor.key, category=category, query=q)
    except CatalogUnavailable as e:
        return _catalog_error(e)
    return serialize_view(view)


@router.get("/categories")
async def list_categories(shelf_service: ShelfService = Depends(get_shelf_service)):
    try:
        return {"categories": await shelf_service.categories()}
    except CatalogUnavailable as e:
        return _catalog_error(e)
