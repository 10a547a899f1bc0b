from .pose import Pose, PoseModel
from .sequencer import Direction, WaypointSequencer
from .mission import MissionController, MissionState, compute_command
from .recorder import PathRecorder, filter_path_points
from .session import Session, SessionManager
from .state import SharedState
