"""
Pydantic models for standalone named stations.
"""
from __future__ import annotations

from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class StationCreate(BaseModel):
    """Body for POST /api/v1/stations."""
    model_config = ConfigDict(allow_inf_nan=False)

    name: str = Field(min_length=1)
    x: float
    y: float


class StationRecord(StationCreate):
    id: str
    created_at: datetime
