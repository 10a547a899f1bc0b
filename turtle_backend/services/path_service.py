from __future__ import annotations

from typing import List, Optional

import numpy as np

from ..models import PathCreate, PathRecord, SaveResponse
from ..store.path_store import PathStore


def path_length(record: PathRecord) -> float:
    """Polyline length of the recorded points (world units)."""
    if len(record.points) < 2:
        return 0.0
    xy = np.array([[p.x, p.y] for p in record.points], dtype=float)
    seg = np.diff(xy, axis=0)
    return float(np.hypot(seg[:, 0], seg[:, 1]).sum())


def save_path_service(store: PathStore, body: PathCreate) -> SaveResponse:
    """Raises PathStoreError; the route turns that into a 500."""
    path_id = store.save_path(body)
    return SaveResponse(id=path_id, message="Path saved successfully")


def list_paths_service(store: PathStore) -> List[PathRecord]:
    out = store.list_paths()
    for rec in out:
        rec.length = path_length(rec)
    return out


def get_path_service(store: PathStore, path_id: str) -> Optional[PathRecord]:
    rec = store.get_path(path_id)
    if rec is not None:
        rec.length = path_length(rec)
    return rec
