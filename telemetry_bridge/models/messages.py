from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Pose(BaseModel):
    """Planar robot pose derived from the base pose of a RobotStateTimeStamped."""

    model_config = ConfigDict(frozen=True)

    x: float = Field(..., description="Position x in the map frame (meters).")
    y: float = Field(..., description="Position y in the map frame (meters).")
    theta: float = Field(..., description="Yaw (radians) computed from the orientation quaternion.")


class OperationState(BaseModel):
    """Operation mode/status of the dual-arm controller."""

    model_config = ConfigDict(frozen=True)

    op_mode: int = Field(..., ge=0, description="Operation mode bitfield.")
    op_status: int = Field(..., ge=0, description="Operation status code.")


DecodedState = Union[Pose, OperationState]


class BroadcastMessage(BaseModel):
    """Outbound push message from bridge -> browser subscribers."""

    type: str = Field(..., description="Broadcast tag of the feed, e.g. 'robotstate-update'.")
    data: DecodedState


class Vector2(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float = 0.0
    y: float = 0.0


class VelocitySetpoint(BaseModel):
    """
    Velocity re-asserted on every command tick.

    Frozen: a new setpoint always replaces the previous one as a whole.
    """

    model_config = ConfigDict(frozen=True)

    linear: Vector2 = Field(default_factory=Vector2, description="Planar linear velocity (m/s).")
    angular: float = Field(default=0.0, description="Yaw rate (rad/s).")

    @classmethod
    def zero(cls) -> "VelocitySetpoint":
        return cls()


Direction = Literal["forward", "backward", "left", "right", "rotate_left", "rotate_right"]


class MovementRequest(BaseModel):
    """Inbound movement request from the dashboard."""

    speed: float = Field(..., ge=0, le=100, description="Speed in percent (0-100).")
    direction: Direction

    def to_setpoint(self) -> VelocitySetpoint:
        speed = self.speed / 100
        if self.direction == "forward":
            return VelocitySetpoint(linear=Vector2(x=speed))
        if self.direction == "backward":
            return VelocitySetpoint(linear=Vector2(x=-speed))
        if self.direction == "left":
            return VelocitySetpoint(linear=Vector2(y=speed))
        if self.direction == "right":
            return VelocitySetpoint(linear=Vector2(y=-speed))
        if self.direction == "rotate_left":
            return VelocitySetpoint(angular=speed)
        return VelocitySetpoint(angular=-speed)


class CommandRequest(BaseModel):
    """Start/stop request for the command stream."""

    command: Literal["Start", "Stop", "E-STOP"]


class RobotCommandRequest(BaseModel):
    """One-shot task command forwarded to the robot's RobotCommand RPC."""

    cmd_mode: int = Field(..., description="Task command mode.")
    arg: str = Field(default="", description="Free-form string argument.")
    arg_n: List[int] = Field(default_factory=list, description="Integer arguments (padded to 3).")
    arg_f: List[float] = Field(default_factory=list, description="Float arguments (padded to 3).")

    @field_validator("arg_n", "arg_f")
    @classmethod
    def pad_to_three(cls, value):
        if len(value) > 3:
            raise ValueError("at most 3 arguments are supported")
        return list(value) + [0] * (3 - len(value))


class SchemaDocument(BaseModel):
    """Documentation payload served at /docs for quick reference."""

    websocket_endpoints: Dict[str, str]
    http_endpoints: Dict[str, str]
    push_messages: Dict[str, Dict[str, Any]]
    request_schemas: Dict[str, Dict[str, Any]]
    examples: Dict[str, Any] = Field(default_factory=dict)
    notes: List[str] = []


class FeedStatus(BaseModel):
    state: str
    latest: Optional[DecodedState] = None
