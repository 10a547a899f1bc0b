# turtle_backend/api/routes/__init__.py
from fastapi import APIRouter

from .status import router as status_router
from .paths import router as paths_router
from .stations import router as stations_router

router = APIRouter(prefix="/api/v1")

router.include_router(status_router)
router.include_router(paths_router)
router.include_router(stations_router)
