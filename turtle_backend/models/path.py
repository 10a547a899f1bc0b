"""
Pydantic models for recorded paths.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PathPoint(BaseModel):
    """A single recorded sample of the turtle pose."""
    model_config = ConfigDict(allow_inf_nan=False)

    x: float
    y: float
    theta: float = 0.0
    timestamp: datetime = Field(default_factory=_utcnow)


class PathStation(BaseModel):
    """
    A labeled point on a path. Older clients send the third coordinate as z
    (always 0 in the 2D scene); newer ones send theta.
    """
    model_config = ConfigDict(allow_inf_nan=False)

    x: float
    y: float
    theta: Optional[float] = None
    z: Optional[float] = None


class PathCreate(BaseModel):
    """Body for POST /api/v1/paths."""
    name: str = Field(min_length=1)
    points: List[PathPoint] = Field(default_factory=list)
    stations: List[PathStation] = Field(default_factory=list)


class PathRecord(PathCreate):
    """
    A stored path:
    - created_at: insertion time (listing is newest first)
    - length: polyline length of the recorded points (world units)
    """
    id: str
    created_at: datetime
    length: float = 0.0


class SaveResponse(BaseModel):
    id: str
    message: str
