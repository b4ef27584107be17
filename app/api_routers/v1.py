from fastapi import APIRouter

from app.features.scan.routes.scan import router as scan_router
from app.features.reports.routes.reports import router as reports_router


api_router = APIRouter()

# Register all feature routes
api_router.include_router(scan_router)
api_router.include_router(reports_router)
