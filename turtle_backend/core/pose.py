# turtle_backend/core/pose.py
from __future__ import annotations

import math
from dataclasses import dataclass, asdict
from typing import Any, Dict

from .. import config as C
from ..utils.math import clip, wrap_pi


@dataclass(frozen=True)
class Pose:
    x: float
    y: float
    theta: float
    v: float = 0.0
    w: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class PoseModel:
    """
    Kinematic state of one simulated turtle.

    Position is kept inside the square arena [ARENA_MIN, ARENA_MAX]^2 and the
    heading inside (-pi, pi]. Both are enforced after every update, so a
    command that would leave the arena simply saturates at the wall.
    """

    def __init__(self):
        self.x: float = 0.0
        self.y: float = 0.0
        self.theta: float = 0.0
        # last applied velocity command (what the UI shows as v/w)
        self.v: float = 0.0
        self.w: float = 0.0

    # ----------------- COMMANDS -----------------
    def apply_manual_velocity(self, linear: float, angular: float):
        """One discrete teleop step; no time scaling."""
        self._step(linear, angular)
        self.v, self.w = linear, angular

    def apply_velocity(self, linear: float, angular: float, dt: float):
        """Integrate a (linear, angular) command over dt seconds."""
        self._step(linear * dt, angular * dt)
        self.v, self.w = linear, angular

    def teleport(self, x: float, y: float, theta: float):
        self.x, self.y, self.theta = x, y, theta
        self.v = self.w = 0.0
        self._enforce_bounds()

    def halt(self):
        self.v = self.w = 0.0

    def reset(self):
        self.teleport(0.0, 0.0, 0.0)

    # ----------------- QUERIES -----------------
    def snapshot(self) -> Pose:
        return Pose(x=self.x, y=self.y, theta=self.theta, v=self.v, w=self.w)

    def distance_to(self, x: float, y: float) -> float:
        return math.hypot(x - self.x, y - self.y)

    # ----------------- INTERNALS -----------------
    def _step(self, ds: float, dtheta: float):
        self.x += ds * math.cos(self.theta)
        self.y += ds * math.sin(self.theta)
        self.theta += dtheta
        self._enforce_bounds()

    def _enforce_bounds(self):
        self.x = clip(self.x, C.ARENA_MIN, C.ARENA_MAX)
        self.y = clip(self.y, C.ARENA_MIN, C.ARENA_MAX)
        self.theta = wrap_pi(self.theta)
