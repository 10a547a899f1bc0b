# turtle_backend/api/routes/paths.py
"""
Recorded path routes.
"""
from typing import List

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..deps import get_store
from ...models import PathCreate, PathRecord, SaveResponse
from ...services.path_service import get_path_service, list_paths_service, save_path_service
from ...store.path_store import PathStoreError


router = APIRouter(tags=["paths"])


@router.post("/paths", response_model=SaveResponse, status_code=201)
def save_path(body: PathCreate):
    """Store a named path with its points and stations."""
    try:
        return save_path_service(get_store(), body)
    except PathStoreError:
        return JSONResponse(status_code=500, content={"error": "Failed to save path"})


@router.get("/paths", response_model=List[PathRecord])
def list_paths():
    """All stored paths, newest first."""
    try:
        return list_paths_service(get_store())
    except PathStoreError:
        return JSONResponse(status_code=500, content={"error": "Failed to fetch paths"})


@router.get("/paths/{path_id}", response_model=PathRecord)
def get_path(path_id: str):
    try:
        rec = get_path_service(get_store(), path_id)
    except PathStoreError:
        return JSONResponse(status_code=500, content={"error": "Failed to fetch path"})
    if rec is None:
        return JSONResponse(status_code=404, content={"error": "path not found"})
    return rec
