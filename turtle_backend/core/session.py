# turtle_backend/core/session.py
"""
Per-connection sessions and the broadcast hub.

Each WebSocket connection gets one Session: its own PoseModel, at most one
MissionController and a PathRecorder. The SessionManager keeps one ordered
outbound queue per client; every broadcast is enqueued synchronously, so the
order of pose updates on the wire is the order in which they were produced.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Dict, List, Optional, Sequence, Tuple

from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from .. import config as C
from ..models.commands import (
    AddStation,
    ManualControl,
    StartMission,
    StartPathMission,
    StartRecording,
    StopMission,
    StopRecording,
    Teleport,
    parse_command,
)
from ..models.path import PathCreate
from ..store.path_store import PathStore, PathStoreError
from ..utils.math import clip
from .mission import MissionController
from .pose import PoseModel
from .recorder import PathRecorder
from .sequencer import Direction, WaypointSequencer

logger = logging.getLogger(__name__)


class Session:
    def __init__(self, session_id: str, manager: "SessionManager"):
        self.id = session_id
        self._manager = manager
        self.pose = PoseModel()
        self.recorder = PathRecorder()
        self.mission: Optional[MissionController] = None
        self.closed = False

    @property
    def is_mission_running(self) -> bool:
        return self.mission is not None and self.mission.running

    # ----------------- OUTBOUND -----------------
    def _emit(self, event: str, payload: Dict[str, Any]):
        """Broadcast a session event to every connected client."""
        if event == "pose":
            self.recorder.on_pose(self.pose.snapshot())
        msg = {"type": event, "session": self.id}
        msg.update(payload)
        self._manager.broadcast(msg)

    def _broadcast_pose(self):
        self._emit("pose", self.pose.snapshot().to_dict())

    def notify(self, msg: Dict[str, Any]):
        """Send a message to this session's own client only."""
        self._manager.send(self.id, msg)

    def notify_error(self, message: str):
        self.notify({"type": "error", "message": message})

    # ----------------- COMMAND DISPATCH -----------------
    async def handle(self, raw: str):
        """Validate and apply one inbound frame. Never raises on bad input."""
        try:
            cmd = parse_command(raw)
        except ValidationError as e:
            logger.warning("[session %s] rejected command: %s", self.id, e.errors(include_url=False))
            self.notify_error("Malformed command")
            return

        if isinstance(cmd, ManualControl):
            self.manual_control(cmd.linear, cmd.angular)
        elif isinstance(cmd, StartMission):
            self.start_mission(cmd.waypoints, Direction(cmd.direction))
        elif isinstance(cmd, StartPathMission):
            await self.start_path_mission(cmd.path_id, cmd.station)
        elif isinstance(cmd, StopMission):
            self.stop_mission()
        elif isinstance(cmd, Teleport):
            self.teleport(cmd.x, cmd.y, cmd.theta)
        elif isinstance(cmd, StartRecording):
            self.start_recording()
        elif isinstance(cmd, AddStation):
            self.add_station()
        elif isinstance(cmd, StopRecording):
            await self.stop_recording(cmd.name)

    # ----------------- MANUAL -----------------
    def manual_control(self, linear: float, angular: float) -> bool:
        if self.is_mission_running:
            logger.debug("[session %s] manual control ignored: mission running", self.id)
            return False
        self.pose.apply_manual_velocity(linear, angular)
        self._broadcast_pose()
        return True

    def teleport(self, x: float, y: float, theta: float):
        """Direct pose set; a running mission simply steers from the new pose."""
        self.pose.teleport(x, y, theta)
        self._broadcast_pose()

    # ----------------- MISSION -----------------
    def start_mission(
        self,
        waypoints: Sequence[Sequence[float]],
        direction: Direction = Direction.FORWARD,
        arm_ticker: bool = True,
    ) -> bool:
        if self.is_mission_running:
            logger.info("[session %s] start ignored: mission already running", self.id)
            return False
        if not waypoints:
            logger.warning("[session %s] start rejected: empty waypoint list", self.id)
            self.notify_error("Mission needs at least one waypoint")
            return False

        self.mission = MissionController(
            self.pose,
            WaypointSequencer(waypoints, direction),
            emit=self._emit,
            on_finished=self._on_mission_finished,
            period=C.MISSION_TICK_PERIOD,
            dt=C.MISSION_DT,
            tolerance=C.ARRIVAL_TOLERANCE,
            max_ticks=C.MAX_MISSION_TICKS,
        )
        self.mission.start(arm_ticker=arm_ticker)
        return True

    async def start_path_mission(self, path_id: str, station: str = "start") -> bool:
        """Run a stored path; selecting the 'end' station traverses it in reverse."""
        if self.is_mission_running:
            logger.info("[session %s] start ignored: mission already running", self.id)
            return False
        store = self._manager.store
        if store is None:
            self.notify_error("Path store unavailable")
            return False
        try:
            record = await run_in_threadpool(store.get_path, path_id)
        except PathStoreError:
            logger.exception("[session %s] failed to load path %s", self.id, path_id)
            self.notify_error("Failed to load path")
            return False
        if record is None:
            self.notify_error(f"Unknown path {path_id}")
            return False

        waypoints = [
            (clip(p.x, C.ARENA_MIN, C.ARENA_MAX), clip(p.y, C.ARENA_MIN, C.ARENA_MAX))
            for p in record.points
        ]
        direction = Direction.REVERSE if station == "end" else Direction.FORWARD
        return self.start_mission(waypoints, direction)

    def stop_mission(self, reason: str = "requested"):
        if self.mission is not None:
            self.mission.stop(reason)

    def _on_mission_finished(self, mission: MissionController):
        if self.mission is mission:
            self.mission = None

    # ----------------- RECORDING -----------------
    def start_recording(self):
        self.recorder.start(self.pose.snapshot())
        self.notify({"type": "recordingStarted"})

    def add_station(self):
        st = self.recorder.add_station(self.pose.snapshot())
        if st is None:
            self.notify_error("Not recording")
            return
        self.notify({"type": "stationAdded", "station": st})

    async def stop_recording(self, name: Optional[str] = None) -> Optional[str]:
        result = self.recorder.finish(self.pose.snapshot())
        if result is None:
            self.notify({"type": "recordingDiscarded"})
            return None
        store = self._manager.store
        if store is None:
            self.notify_error("Failed to save path")
            return None

        name = (name or "").strip()
        try:
            if not name:
                count = await run_in_threadpool(store.count_paths)
                name = f"Path {count + 1}"
            path = PathCreate(name=name, points=result["points"], stations=result["stations"])
            path_id = await run_in_threadpool(store.save_path, path)
        except PathStoreError:
            logger.exception("[session %s] failed to save recorded path", self.id)
            self.notify_error("Failed to save path")
            return None

        self.notify({"type": "pathSaved", "id": path_id, "name": name})
        return path_id

    # ----------------- TEARDOWN -----------------
    def close(self):
        """Disconnect: implicit stop, drop recording, release the pose."""
        if self.closed:
            return
        self.stop_mission("disconnect")
        self.recorder.discard()
        self.closed = True

    def status(self) -> Dict[str, Any]:
        mission = None
        if self.mission is not None:
            m = self.mission
            mission = {
                "state": m.state.value,
                "direction": m.sequencer.direction.value,
                "cursor": m.cursor,
                "waypoint_count": len(m.sequencer),
                "ticks": m.ticks,
            }
        return {
            "session": self.id,
            "pose": self.pose.snapshot().to_dict(),
            "recording": self.recorder.recording,
            "mission": mission,
        }


class SessionManager:
    """Owns every live Session, keyed by connection id, and fans out messages."""

    def __init__(self, store: Optional[PathStore] = None, queue_max: int = C.CLIENT_QUEUE_MAX):
        self.store = store
        self.sessions: Dict[str, Session] = {}
        self._queues: Dict[str, asyncio.Queue] = {}
        self._queue_max = queue_max

    def connect(self) -> Tuple[Session, asyncio.Queue]:
        session_id = uuid.uuid4().hex[:8]
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._queue_max)
        session = Session(session_id, self)
        self.sessions[session_id] = session
        self._queues[session_id] = queue

        self.send(session_id, {"type": "session", "session": session_id})
        # let the newcomer draw the turtles that are already out there
        for other in self.sessions.values():
            if other is not session:
                self.send(session_id, {"type": "pose", "session": other.id, **other.pose.snapshot().to_dict()})
        session._broadcast_pose()
        logger.info("[ws] client connected: %s (%d total)", session_id, len(self.sessions))
        return session, queue

    def disconnect(self, session_id: str):
        session = self.sessions.pop(session_id, None)
        if session is not None:
            session.close()
        self._queues.pop(session_id, None)
        if session is not None:
            self.broadcast({"type": "disconnected", "session": session_id})
        logger.info("[ws] client disconnected: %s (%d left)", session_id, len(self.sessions))

    def get(self, session_id: str) -> Optional[Session]:
        return self.sessions.get(session_id)

    def broadcast(self, msg: Dict[str, Any]):
        for session_id in list(self._queues):
            self.send(session_id, msg)

    def send(self, session_id: str, msg: Dict[str, Any]):
        queue = self._queues.get(session_id)
        if queue is None:
            return
        if queue.full():
            # slow client: drop its oldest message, keep the rest in order
            queue.get_nowait()
            logger.warning("[ws] outbound queue full for %s; dropped oldest message", session_id)
        queue.put_nowait(msg)

    def status(self) -> List[Dict[str, Any]]:
        return [s.status() for s in self.sessions.values()]

    def shutdown(self):
        for session_id in list(self.sessions):
            self.disconnect(session_id)
