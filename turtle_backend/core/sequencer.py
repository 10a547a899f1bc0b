# turtle_backend/core/sequencer.py
from __future__ import annotations

import math
from enum import Enum
from typing import Optional, Sequence, Tuple

from .. import config as C
from .pose import Pose

Point = Tuple[float, float]


class Direction(str, Enum):
    FORWARD = "forward"
    REVERSE = "reverse"


class WaypointSequencer:
    """
    Ordered, immutable list of 2D waypoints plus a traversal direction.

    The cursor is NOT stored here; callers pass it in and get the next value
    back, so every method is a pure function of its arguments.
    """

    def __init__(self, points: Sequence[Sequence[float]], direction: Direction = Direction.FORWARD):
        pts = [(float(p[0]), float(p[1])) for p in points]
        if Direction(direction) is Direction.REVERSE:
            pts.reverse()
        self.direction = Direction(direction)
        self._points: Tuple[Point, ...] = tuple(pts)

    def __len__(self) -> int:
        return len(self._points)

    @property
    def points(self) -> Tuple[Point, ...]:
        """Waypoints in traversal order."""
        return self._points

    def current_target(self, cursor: int) -> Optional[Point]:
        """Point at cursor, or None once the list is exhausted."""
        if cursor < 0 or cursor >= len(self._points):
            return None
        return self._points[cursor]

    def is_exhausted(self, cursor: int) -> bool:
        return cursor >= len(self._points)

    def advance_if_arrived(self, pose: Pose, cursor: int, tolerance: float = C.ARRIVAL_TOLERANCE) -> int:
        target = self.current_target(cursor)
        if target is None:
            return cursor
        if math.hypot(target[0] - pose.x, target[1] - pose.y) < tolerance:
            return cursor + 1
        return cursor
