"""API v1 router: all JSON endpoints under /api/v1 prefix."""

from fastapi import APIRouter

from .alerts.routes import router as alerts_router
from .analysis.routes import router as analysis_router
from .jobs.routes import router as jobs_router

api_v1_router = APIRouter(prefix="/api/v1", tags=["api-v1"])

api_v1_router.include_router(analysis_router)
api_v1_router.include_router(jobs_router)
api_v1_router.include_router(alerts_router)
