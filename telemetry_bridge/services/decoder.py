import math
from typing import Callable, Dict, Mapping, Optional

from google.protobuf.message import DecodeError as ProtobufDecodeError

from telemetry_bridge.errors import DecodeError
from telemetry_bridge.models import DecodedState, OperationState, Pose
from telemetry_bridge.proto import (
    OPERATION_STATE_TYPE_URL,
    ROBOT_STATE_TYPE_URL,
    OperationStateTimeStamped,
    RobotStateTimeStamped,
)

DecodeFunction = Callable[[bytes], Optional[DecodedState]]


def quaternion_to_yaw(x: float, y: float, z: float, w: float) -> float:
    return math.atan2(2 * (w * z + x * y), 1 - 2 * (y * y + z * z))


def decode_robot_state(payload: bytes) -> Optional[Pose]:
    """Decode a RobotStateTimeStamped payload into a planar pose, None if it carries no state."""
    message = RobotStateTimeStamped.FromString(payload)
    if not message.HasField("state"):
        return None
    position = message.state.base_pose.position
    orientation = message.state.base_pose.orientation
    return Pose(
        x=position.x,
        y=position.y,
        theta=quaternion_to_yaw(orientation.x, orientation.y, orientation.z, orientation.w),
    )


def decode_operation_state(payload: bytes) -> Optional[OperationState]:
    message = OperationStateTimeStamped.FromString(payload)
    if not message.HasField("state"):
        return None
    return OperationState(op_mode=message.state.op_mode, op_status=message.state.op_status)


class PayloadDecoder:
    """Registry mapping an Any type identifier to its decode function."""

    def __init__(self, decoders: Optional[Mapping[str, DecodeFunction]] = None):
        self._decoders: Dict[str, DecodeFunction] = dict(decoders or {})

    @classmethod
    def default(cls) -> "PayloadDecoder":
        return cls(
            {
                ROBOT_STATE_TYPE_URL: decode_robot_state,
                OPERATION_STATE_TYPE_URL: decode_operation_state,
            }
        )

    def register(self, type_url: str, decode: DecodeFunction) -> None:
        if not type_url:
            raise ValueError("type_url must be provided")
        self._decoders[type_url] = decode

    def knows(self, type_url: str) -> bool:
        return type_url in self._decoders

    def decode(self, type_url: str, payload: bytes) -> Optional[DecodedState]:
        """
        Return the typed value for ``payload``.

        Unregistered identifiers yield None. Any failure inside the registered
        decode function, malformed bytes included, is raised as DecodeError.
        """
        decode = self._decoders.get(type_url)
        if decode is None:
            return None
        try:
            return decode(payload)
        except DecodeError:
            raise
        except ProtobufDecodeError as exc:
            raise DecodeError(type_url, str(exc)) from exc
        except Exception as exc:
            raise DecodeError(type_url, f"{type(exc).__name__}: {exc}") from exc
