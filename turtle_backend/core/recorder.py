# turtle_backend/core/recorder.py
from __future__ import annotations

import math
import time
from typing import Any, Dict, List, Optional

from .. import config as C
from .pose import Pose


def filter_path_points(points: List[Dict[str, Any]], min_dist: float = C.RECORD_MIN_SPACING) -> List[Dict[str, Any]]:
    """Keep the first point and every point at least min_dist away from the last kept one."""
    if not points:
        return []
    kept = [points[0]]
    for p in points[1:]:
        last = kept[-1]
        if math.hypot(p["x"] - last["x"], p["y"] - last["y"]) >= min_dist:
            kept.append(p)
    return kept


class PathRecorder:
    """
    Collects the trajectory of one turtle between start() and finish().

    Stations are [start, *intermediates, end]; the end station is the pose at
    finish() time.
    """

    def __init__(self):
        self.recording: bool = False
        self.points: List[Dict[str, Any]] = []
        self.stations: List[Dict[str, float]] = []

    def start(self, pose: Pose):
        self.recording = True
        self.points = [self._point(pose)]
        self.stations = [self._station(pose)]

    def on_pose(self, pose: Pose):
        if self.recording:
            self.points.append(self._point(pose))

    def add_station(self, pose: Pose) -> Optional[Dict[str, float]]:
        if not self.recording:
            return None
        st = self._station(pose)
        self.stations.append(st)
        return st

    def finish(self, pose: Pose) -> Optional[Dict[str, Any]]:
        """
        Stop recording. Returns {"points", "stations"} ready to be stored, or
        None when the turtle never moved (fewer than two raw samples).
        """
        if not self.recording:
            return None
        raw, stations = self.points, self.stations + [self._station(pose)]
        self.discard()
        if len(raw) < 2:
            return None
        return {"points": filter_path_points(raw), "stations": stations}

    def discard(self):
        self.recording = False
        self.points = []
        self.stations = []

    @staticmethod
    def _point(pose: Pose) -> Dict[str, Any]:
        return {"x": pose.x, "y": pose.y, "theta": pose.theta, "timestamp": time.time()}

    @staticmethod
    def _station(pose: Pose) -> Dict[str, float]:
        return {"x": pose.x, "y": pose.y, "theta": pose.theta}
