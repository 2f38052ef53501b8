# lifejournal/routes/__init__.py
from fastapi import APIRouter
from .calendar import router as calendar_router
from .coach import router as coach_router
from .credentials import router as credentials_router
from .timeline import router as timeline_router

router = APIRouter()
router.include_router(credentials_router)
router.include_router(timeline_router)
router.include_router(calendar_router)
router.include_router(coach_router)
