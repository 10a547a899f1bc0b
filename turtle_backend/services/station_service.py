from __future__ import annotations

from typing import List

from ..models import SaveResponse, StationCreate, StationRecord
from ..store.path_store import PathStore


def save_station_service(store: PathStore, body: StationCreate) -> SaveResponse:
    station_id = store.save_station(body)
    return SaveResponse(id=station_id, message="Station saved successfully")


def list_stations_service(store: PathStore) -> List[StationRecord]:
    return store.list_stations()
