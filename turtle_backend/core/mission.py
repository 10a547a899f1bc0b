# turtle_backend/core/mission.py
"""
Closed-loop waypoint follower for one simulated turtle.

A MissionController owns a repeating ticker (an asyncio task). Every tick:

  1. exhausted waypoint list  -> COMPLETED (velocity zeroed, ticker cancelled)
  2. target within tolerance  -> advance cursor, no motion this tick
  3. otherwise steer:
       |heading error| > HEADING_TOLERANCE -> rotate in place
       else                                -> drive, still correcting heading
  4. integrate the command into the pose, broadcast it

stop() cancels the ticker before returning, so no tick body can run after a
caller has observed the stop.
"""
from __future__ import annotations

import asyncio
import logging
import math
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

from .. import config as C
from ..utils.math import sign, wrap_pi
from .pose import Pose, PoseModel
from .sequencer import Point, WaypointSequencer

logger = logging.getLogger(__name__)

EmitFn = Callable[[str, Dict[str, Any]], None]


class MissionState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    STOPPED = "stopped"


def compute_command(pose: Pose, target: Point) -> Tuple[float, float]:
    """
    Steering policy: returns (linear, angular) for a target that has not been
    reached yet. Rotate in place while the heading error is large, then drive
    with linear speed capped by both MAX_LINEAR and the remaining distance.
    """
    dx = target[0] - pose.x
    dy = target[1] - pose.y
    distance = math.hypot(dx, dy)
    heading_error = wrap_pi(math.atan2(dy, dx) - pose.theta)

    angular = sign(heading_error) * min(abs(heading_error), C.MAX_ANGULAR)
    if abs(heading_error) > C.HEADING_TOLERANCE:
        return 0.0, angular
    return min(C.MAX_LINEAR, distance), angular


class MissionController:
    def __init__(
        self,
        pose: PoseModel,
        sequencer: WaypointSequencer,
        emit: EmitFn,
        on_finished: Optional[Callable[["MissionController"], None]] = None,
        period: float = C.MISSION_TICK_PERIOD,
        dt: float = C.MISSION_DT,
        tolerance: float = C.ARRIVAL_TOLERANCE,
        max_ticks: int = C.MAX_MISSION_TICKS,
    ):
        self.pose = pose
        self.sequencer = sequencer
        self._emit = emit
        self._on_finished = on_finished
        self.period = period
        self.dt = dt
        self.tolerance = tolerance
        self.max_ticks = max_ticks

        self.state: MissionState = MissionState.IDLE
        self.cursor: int = 0
        self.ticks: int = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self.state is MissionState.RUNNING

    @property
    def active(self) -> bool:
        """True while there is still a waypoint to reach."""
        return self.running and 0 <= self.cursor < len(self.sequencer)

    # ----------------- LIFECYCLE -----------------
    def start(self, arm_ticker: bool = True):
        """IDLE -> RUNNING. With arm_ticker=False the caller drives tick() itself."""
        if self.state is not MissionState.IDLE:
            logger.warning("[mission] start ignored in state %s", self.state.value)
            return
        self.state = MissionState.RUNNING
        self.cursor = 0
        self.ticks = 0
        logger.info(
            "[mission] started: %d waypoints, direction=%s",
            len(self.sequencer), self.sequencer.direction.value,
        )
        self._emit(
            "missionStarted",
            {
                "waypoints": [[x, y] for (x, y) in self.sequencer.points],
                "direction": self.sequencer.direction.value,
            },
        )
        if arm_ticker:
            self._task = asyncio.get_running_loop().create_task(self._run())

    def stop(self, reason: str = "requested"):
        """RUNNING -> STOPPED. No-op in any other state."""
        if not self.running:
            return
        self._finish(MissionState.STOPPED, reason)

    # ----------------- TICK -----------------
    def tick(self):
        if not self.running:
            return
        self.ticks += 1

        if self.sequencer.is_exhausted(self.cursor):
            self._finish(MissionState.COMPLETED)
            return
        if self.ticks > self.max_ticks:
            logger.warning(
                "[mission] tick limit %d reached at waypoint %d/%d",
                self.max_ticks, self.cursor, len(self.sequencer),
            )
            self._finish(MissionState.STOPPED, "tick_limit")
            return

        pose = self.pose.snapshot()
        nxt = self.sequencer.advance_if_arrived(pose, self.cursor, self.tolerance)
        if nxt != self.cursor:
            logger.debug("[mission] reached waypoint %d at (%.3f, %.3f)", self.cursor, pose.x, pose.y)
            self.cursor = nxt
            return

        target = self.sequencer.current_target(self.cursor)
        linear, angular = compute_command(pose, target)
        self.pose.apply_velocity(linear, angular, self.dt)
        self._emit("pose", self.pose.snapshot().to_dict())

    async def _run(self):
        while self.running:
            await asyncio.sleep(self.period)
            try:
                self.tick()
            except Exception:
                logger.exception("[mission] tick failed; halting agent")
                self._finish(MissionState.STOPPED, "error")

    # ----------------- INTERNALS -----------------
    def _finish(self, state: MissionState, reason: Optional[str] = None):
        self.state = state
        task, self._task = self._task, None
        if task is not None and task is not asyncio.current_task():
            task.cancel()

        self.pose.halt()
        self._emit("pose", self.pose.snapshot().to_dict())
        if state is MissionState.COMPLETED:
            logger.info("[mission] complete after %d ticks", self.ticks)
            self._emit("missionComplete", {})
        else:
            logger.info("[mission] stopped (%s) at waypoint %d/%d", reason, self.cursor, len(self.sequencer))
            self._emit("missionStopped", {"reason": reason})

        if self._on_finished is not None:
            self._on_finished(self)
