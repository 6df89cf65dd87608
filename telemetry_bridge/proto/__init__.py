"""Protobuf message types for the robot's dtproto gRPC services."""

from .dtproto import (
    OPERATION_STATE_TYPE_URL,
    ROBOT_STATE_TYPE_URL,
    ControlCmd,
    Empty,
    Header,
    OperationState,
    OperationStateTimeStamped,
    RobotCommand,
    RobotCommandTimeStamped,
    RobotStateTimeStamped,
    StateResponse,
)

__all__ = [
    "OPERATION_STATE_TYPE_URL",
    "ROBOT_STATE_TYPE_URL",
    "ControlCmd",
    "Empty",
    "Header",
    "OperationState",
    "OperationStateTimeStamped",
    "RobotCommand",
    "RobotCommandTimeStamped",
    "RobotStateTimeStamped",
    "StateResponse",
]
