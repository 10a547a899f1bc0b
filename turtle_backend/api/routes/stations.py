# turtle_backend/api/routes/stations.py
"""
Standalone station routes.
"""
from typing import List

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..deps import get_store
from ...models import SaveResponse, StationCreate, StationRecord
from ...services.station_service import list_stations_service, save_station_service
from ...store.path_store import PathStoreError

router = APIRouter(tags=["stations"])


@router.post("/stations", response_model=SaveResponse, status_code=201)
def save_station(body: StationCreate):
    try:
        return save_station_service(get_store(), body)
    except PathStoreError:
        return JSONResponse(status_code=500, content={"error": "Failed to save station"})


@router.get("/stations", response_model=List[StationRecord])
def list_stations():
    try:
        return list_stations_service(get_store())
    except PathStoreError:
        return JSONResponse(status_code=500, content={"error": "Failed to fetch stations"})
