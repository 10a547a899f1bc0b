from .pose import PoseOut, MissionStatus, SessionStatus, StatusResponse
from .path import PathPoint, PathStation, PathCreate, PathRecord, SaveResponse
from .station import StationCreate, StationRecord
from .commands import (
    Command, ManualControl, StartMission, StartPathMission, StopMission,
    Teleport, StartRecording, AddStation, StopRecording, parse_command,
)
