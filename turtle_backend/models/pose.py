"""
Pydantic models for pose and session status responses.
"""
from __future__ import annotations

from typing import List, Optional
from pydantic import BaseModel


class PoseOut(BaseModel):
    """Current pose of one turtle plus its last velocity command."""
    x: float
    y: float
    theta: float
    v: float = 0.0
    w: float = 0.0


class MissionStatus(BaseModel):
    """
    Mission progress for a session:
    - state: idle / running / completed / stopped
    - cursor: index of the waypoint currently targeted
    - waypoint_count: total waypoints in traversal order
    """
    state: str
    direction: str
    cursor: int
    waypoint_count: int
    ticks: int


class SessionStatus(BaseModel):
    session: str
    pose: PoseOut
    recording: bool
    mission: Optional[MissionStatus] = None


class StatusResponse(BaseModel):
    sessions: List[SessionStatus]
