"""
Inbound WebSocket commands.

Every frame is a JSON object with a "type" tag; the tag selects the model.
Numbers must be finite; anything that fails validation is rejected at the
socket boundary and never reaches the session.
"""
from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Tuple, Union
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class _Command(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False, populate_by_name=True)


class ManualControl(_Command):
    type: Literal["manualControl"]
    linear: float
    angular: float


class StartMission(_Command):
    type: Literal["startMission"]
    waypoints: List[Tuple[float, float]] = Field(min_length=1)
    direction: Literal["forward", "reverse"] = "forward"


class StartPathMission(_Command):
    """Run a stored path, starting from its 'start' or 'end' station."""
    type: Literal["startPathMission"]
    path_id: str = Field(alias="pathId", min_length=1)
    station: Literal["start", "end"] = "start"


class StopMission(_Command):
    type: Literal["stopMission"]


class Teleport(_Command):
    type: Literal["teleport"]
    x: float
    y: float
    theta: float = 0.0


class StartRecording(_Command):
    type: Literal["startRecording"]


class AddStation(_Command):
    type: Literal["addStation"]


class StopRecording(_Command):
    type: Literal["stopRecording"]
    name: Optional[str] = None


Command = Annotated[
    Union[
        ManualControl,
        StartMission,
        StartPathMission,
        StopMission,
        Teleport,
        StartRecording,
        AddStation,
        StopRecording,
    ],
    Field(discriminator="type"),
]

_command_adapter: TypeAdapter = TypeAdapter(Command)


def parse_command(raw: str) -> Command:
    """Validate one JSON text frame. Raises pydantic.ValidationError."""
    return _command_adapter.validate_json(raw)
