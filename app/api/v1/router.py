from fastapi import APIRouter

from app.api.v1.endpoints import performance, deals, health

router = APIRouter(prefix="/api/v1")

router.include_router(performance.router)
router.include_router(deals.router)
router.include_router(health.router)
