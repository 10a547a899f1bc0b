"""
Tests for Session and SessionManager.
"""
import asyncio
import json
import math

import pytest

from turtle_backend.core.mission import MissionState
from turtle_backend.core.sequencer import Direction
from turtle_backend.models.path import PathCreate

from conftest import drain


def types(msgs):
    return [m["type"] for m in msgs]


class TestConnect:
    def test_connect_pushes_id_and_origin_pose(self, manager):
        session, queue = manager.connect()
        msgs = drain(queue)
        assert msgs[0] == {"type": "session", "session": session.id}
        assert msgs[1] == {"type": "pose", "session": session.id, "x": 0.0, "y": 0.0, "theta": 0.0, "v": 0.0, "w": 0.0}

    def test_newcomer_sees_existing_turtles(self, manager):
        first, q1 = manager.connect()
        first.teleport(3.0, 4.0, 0.0)
        second, q2 = manager.connect()
        msgs = drain(q2)
        others = [m for m in msgs if m["type"] == "pose" and m["session"] == first.id]
        assert others and (others[0]["x"], others[0]["y"]) == (3.0, 4.0)

    def test_pose_updates_reach_every_client(self, manager):
        a, qa = manager.connect()
        b, qb = manager.connect()
        drain(qa), drain(qb)
        a.manual_control(1.0, 0.0)
        for q in (qa, qb):
            msgs = drain(q)
            assert msgs == [{"type": "pose", "session": a.id, "x": 1.0, "y": 0.0, "theta": 0.0, "v": 1.0, "w": 0.0}]

    def test_sessions_are_independent(self, manager):
        a, _ = manager.connect()
        b, _ = manager.connect()
        a.manual_control(2.0, 0.0)
        assert b.pose.snapshot().x == 0.0


class TestManualAndMission:
    def test_manual_control_ignored_while_mission_runs(self, manager):
        session, queue = manager.connect()
        assert session.start_mission([[5, 0]], arm_ticker=False)
        before = session.pose.snapshot()
        drain(queue)
        assert session.manual_control(1.0, 0.5) is False
        assert session.pose.snapshot() == before
        assert drain(queue) == []

    def test_teleport_passes_through_while_mission_runs(self, manager):
        session, queue = manager.connect()
        session.start_mission([[5, 0]], arm_ticker=False)
        drain(queue)
        session.teleport(1.0, 1.0, 0.0)
        p = session.pose.snapshot()
        assert (p.x, p.y) == (1.0, 1.0)
        assert drain(queue)[-1]["x"] == 1.0
        # the controller keeps steering from the new pose
        assert session.is_mission_running
        mission = session.mission
        while mission.running:
            mission.tick()
        final = session.pose.snapshot()
        assert math.hypot(final.x - 5.0, final.y) < 0.1

    def test_stop_without_mission_is_noop(self, manager):
        session, queue = manager.connect()
        drain(queue)
        before = session.pose.snapshot()
        session.stop_mission()
        assert session.pose.snapshot() == before
        assert drain(queue) == []

    def test_start_while_running_keeps_existing_mission(self, manager):
        session, _ = manager.connect()
        session.start_mission([[5, 0]], arm_ticker=False)
        first = session.mission
        assert session.start_mission([[0, 5]], arm_ticker=False) is False
        assert session.mission is first
        assert first.sequencer.points == ((5.0, 0.0),)

    def test_empty_waypoints_rejected(self, manager):
        session, queue = manager.connect()
        drain(queue)
        assert session.start_mission([], arm_ticker=False) is False
        assert session.mission is None
        assert types(drain(queue)) == ["error"]

    def test_mission_released_after_completion(self, manager):
        session, queue = manager.connect()
        session.start_mission([[0.5, 0]], arm_ticker=False)
        mission = session.mission
        while mission.running:
            mission.tick()
        assert session.mission is None
        assert session.manual_control(0.1, 0.0) is True
        assert "missionComplete" in types(drain(queue))

    def test_stop_request_broadcasts_stopped(self, manager):
        session, queue = manager.connect()
        session.start_mission([[5, 0]], Direction.FORWARD, arm_ticker=False)
        session.mission.tick()
        drain(queue)
        session.stop_mission()
        msgs = drain(queue)
        assert msgs[-1] == {"type": "missionStopped", "session": session.id, "reason": "requested"}
        assert session.pose.snapshot().v == 0.0
        assert not session.is_mission_running

    def test_disconnect_stops_mission(self, manager):
        a, _ = manager.connect()
        b, qb = manager.connect()
        a.start_mission([[5, 0]], arm_ticker=False)
        mission = a.mission
        drain(qb)
        manager.disconnect(a.id)
        assert mission.state is MissionState.STOPPED
        msgs = drain(qb)
        assert {"type": "missionStopped", "session": a.id, "reason": "disconnect"} in msgs
        assert msgs[-1] == {"type": "disconnected", "session": a.id}
        assert manager.get(a.id) is None

    def test_disconnect_twice_is_safe(self, manager):
        a, _ = manager.connect()
        manager.disconnect(a.id)
        manager.disconnect(a.id)
        assert manager.sessions == {}


class TestHandle:
    @pytest.mark.asyncio
    async def test_manual_control_frame(self, manager):
        session, queue = manager.connect()
        drain(queue)
        await session.handle(json.dumps({"type": "manualControl", "linear": 1, "angular": 0}))
        assert session.pose.snapshot().x == 1.0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "frame",
        [
            "not json",
            json.dumps({"type": "manualControl", "linear": "fast", "angular": 0}),
            json.dumps({"type": "startMission", "waypoints": []}),
            json.dumps({"type": "startMission", "waypoints": [[1]]}),
            json.dumps({"type": "startMission", "waypoints": [[1, 2]], "direction": "sideways"}),
            json.dumps({"type": "fly"}),
        ],
    )
    async def test_malformed_frames_rejected(self, manager, frame):
        session, queue = manager.connect()
        drain(queue)
        await session.handle(frame)
        assert session.mission is None
        assert session.pose.snapshot().x == 0.0
        assert drain(queue) == [{"type": "error", "message": "Malformed command"}]

    @pytest.mark.asyncio
    async def test_start_and_stop_frames(self, manager, fast_ticks):
        session, queue = manager.connect()
        await session.handle(json.dumps({"type": "startMission", "waypoints": [[5, 0]], "direction": "reverse"}))
        assert session.is_mission_running
        await asyncio.sleep(0.01)
        await session.handle(json.dumps({"type": "stopMission"}))
        assert not session.is_mission_running
        assert types(drain(queue)).count("missionStopped") == 1


class TestRecording:
    @pytest.mark.asyncio
    async def test_record_and_save(self, manager, store):
        session, queue = manager.connect()
        session.start_recording()
        for _ in range(4):
            session.manual_control(0.5, 0.0)
        session.add_station()
        session.manual_control(0.0, 1.0)
        path_id = await session.stop_recording(None)

        assert path_id is not None
        saved = store.get_path(path_id)
        assert saved.name == "Path 1"
        assert [p.x for p in saved.points] == pytest.approx([0.0, 0.5, 1.0, 1.5, 2.0])
        assert len(saved.stations) == 3
        assert (saved.stations[0].x, saved.stations[-1].x) == (0.0, 2.0)
        assert saved.stations[-1].theta == pytest.approx(1.0)
        msgs = drain(queue)
        assert {"type": "pathSaved", "id": path_id, "name": "Path 1"} in msgs

    @pytest.mark.asyncio
    async def test_close_points_filtered(self, manager, store):
        session, _ = manager.connect()
        session.start_recording()
        for _ in range(10):
            session.manual_control(0.05, 0.0)
        path_id = await session.stop_recording("short hops")
        saved = store.get_path(path_id)
        assert saved.name == "short hops"
        xs = [p.x for p in saved.points]
        assert all(b - a >= 0.2 - 1e-9 for a, b in zip(xs, xs[1:]))

    @pytest.mark.asyncio
    async def test_recording_without_motion_discarded(self, manager, store):
        session, queue = manager.connect()
        session.start_recording()
        drain(queue)
        assert await session.stop_recording("nothing") is None
        assert drain(queue) == [{"type": "recordingDiscarded"}]
        assert store.count_paths() == 0

    def test_add_station_requires_recording(self, manager):
        session, queue = manager.connect()
        drain(queue)
        session.add_station()
        assert drain(queue) == [{"type": "error", "message": "Not recording"}]

    @pytest.mark.asyncio
    async def test_save_failure_notifies_client(self, manager, store):
        session, queue = manager.connect()
        session.start_recording()
        session.manual_control(1.0, 0.0)
        store.close()
        drain(queue)
        assert await session.stop_recording("x") is None
        assert drain(queue) == [{"type": "error", "message": "Failed to save path"}]
        # pose untouched by the persistence failure
        assert session.pose.snapshot().x == 1.0


class TestPathMission:
    @pytest.mark.asyncio
    async def test_end_station_runs_in_reverse(self, manager, store, fast_ticks):
        path_id = store.save_path(
            PathCreate(name="line", points=[{"x": 0, "y": 0}, {"x": 1, "y": 0}, {"x": 2, "y": 0}])
        )
        session, _ = manager.connect()
        assert await session.start_path_mission(path_id, "end")
        assert session.mission.sequencer.direction is Direction.REVERSE
        assert session.mission.sequencer.points == ((2.0, 0.0), (1.0, 0.0), (0.0, 0.0))
        session.stop_mission()

    @pytest.mark.asyncio
    async def test_points_clamped_to_arena(self, manager, store, fast_ticks):
        path_id = store.save_path(PathCreate(name="wide", points=[{"x": 14, "y": -12}]))
        session, _ = manager.connect()
        assert await session.start_path_mission(path_id, "start")
        assert session.mission.sequencer.points == ((10.0, -10.0),)
        session.stop_mission()

    @pytest.mark.asyncio
    async def test_unknown_path(self, manager):
        session, queue = manager.connect()
        drain(queue)
        assert await session.start_path_mission("nope", "start") is False
        assert drain(queue) == [{"type": "error", "message": "Unknown path nope"}]
