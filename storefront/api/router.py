from fastapi import APIRouter
from storefront.api.routes import health, recommendations, shelves, visitor

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["Health"])
api_router.include_router(visitor.router, prefix="/visitor", tags=["Visitor"])
api_router.include_router(shelves.router, prefix="/shelves", tags=["Shelves"])
api_router.include_router(recommendations.router, prefix="/recommendations", tags=["Recommendations"])
