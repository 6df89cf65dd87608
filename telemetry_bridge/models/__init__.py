"""Pydantic models for bridge push messages, HTTP bodies and command state."""

from .messages import (
    BroadcastMessage,
    CommandRequest,
    DecodedState,
    FeedStatus,
    MovementRequest,
    OperationState,
    Pose,
    RobotCommandRequest,
    SchemaDocument,
    Vector2,
    VelocitySetpoint,
)

__all__ = [
    "BroadcastMessage",
    "CommandRequest",
    "DecodedState",
    "FeedStatus",
    "MovementRequest",
    "OperationState",
    "Pose",
    "RobotCommandRequest",
    "SchemaDocument",
    "Vector2",
    "VelocitySetpoint",
]
