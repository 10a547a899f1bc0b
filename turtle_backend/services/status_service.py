from __future__ import annotations

from typing import List

from ..core.session import SessionManager
from ..models import SessionStatus, StatusResponse


def get_status_service(sessions: SessionManager) -> StatusResponse:
    items: List[SessionStatus] = [SessionStatus(**s) for s in sessions.status()]
    return StatusResponse(sessions=items)
