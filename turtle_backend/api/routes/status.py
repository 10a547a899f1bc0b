# turtle_backend/api/routes/status.py
"""
Status routes.
"""
from fastapi import APIRouter

from ..deps import get_sessions
from ...models import StatusResponse
from ...services.status_service import get_status_service

router = APIRouter(tags=["status"])


@router.get("/status", response_model=StatusResponse)
def status():
    """Connected sessions with their pose and mission progress."""
    return get_status_service(get_sessions())


@router.get("/health")
def health():
    return {"ok": True}
