from fastapi import APIRouter
from .reports import router as reports_router
from .standups import router as standups_router

api_router = APIRouter()

# Include all sub-routers
api_router.include_router(standups_router, prefix="/standups", tags=["standups"])
api_router.include_router(reports_router, prefix="/reports", tags=["reports"])
