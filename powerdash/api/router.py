from fastapi import APIRouter

from powerdash.api.routes import health, inventory, reports

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health.router)
api_router.include_router(reports.router, tags=["reports"])
api_router.include_router(inventory.router)
