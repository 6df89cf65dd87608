from dataclasses import dataclass
from typing import List

from telemetry_bridge.config import BridgeSettings
from telemetry_bridge.proto import OPERATION_STATE_TYPE_URL, ROBOT_STATE_TYPE_URL
from telemetry_bridge.services.decoder import DecodeFunction, decode_operation_state, decode_robot_state


@dataclass(frozen=True)
class FeedDescriptor:
    """Static configuration of one inbound telemetry feed."""

    name: str
    target: str
    expected_type: str
    decode: DecodeFunction
    broadcast_tag: str
    broadcast_interval: float = 0.1
    log_interval: float = 1.0


def default_feeds(settings: BridgeSettings) -> List[FeedDescriptor]:
    return [
        FeedDescriptor(
            name="robotstate",
            target=settings.target(settings.robot_state_port),
            expected_type=ROBOT_STATE_TYPE_URL,
            decode=decode_robot_state,
            broadcast_tag="robotstate-update",
            broadcast_interval=settings.broadcast_interval,
            log_interval=settings.log_interval,
        ),
        FeedDescriptor(
            name="opstate",
            target=settings.target(settings.opstate_port),
            expected_type=OPERATION_STATE_TYPE_URL,
            decode=decode_operation_state,
            broadcast_tag="opstate-update",
            broadcast_interval=settings.broadcast_interval,
            log_interval=settings.log_interval,
        ),
    ]
