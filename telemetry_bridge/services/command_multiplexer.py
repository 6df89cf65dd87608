import logging
import math
import time
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Optional, Protocol, Tuple

from telemetry_bridge.models import Vector2, VelocitySetpoint
from telemetry_bridge.proto import RobotCommandTimeStamped
from telemetry_bridge.services.scheduler import Scheduler, Timer

logger = logging.getLogger(__name__)

COMMAND_PERIOD = 0.05
COMMAND_VALIDITY = 1
COMMAND_FRAME_ID = "base_link"


class CommandStream(Protocol):
    def write(self, message: Any) -> None: ...

    def close(self) -> None: ...


FailureCallback = Callable[[BaseException], None]
CommandStreamConnector = Callable[[FailureCallback], CommandStream]


def stamp_header(header, now: float, frame_id: str) -> None:
    seconds = math.floor(now)
    header.stamp.sec = seconds
    header.stamp.nanosec = int((now - seconds) * 1e9)
    header.frame_id = frame_id


def build_command_message(setpoint: VelocitySetpoint, now: float, frame_id: str = COMMAND_FRAME_ID):
    """Nav command re-asserting ``setpoint``, valid until one second after ``now``."""
    seconds = math.floor(now)
    message = RobotCommandTimeStamped()
    stamp_header(message.header, now, frame_id)
    target = message.command.nav.se2_target_vel
    target.vel.linear.x = setpoint.linear.x
    target.vel.linear.y = setpoint.linear.y
    target.vel.angular = setpoint.angular
    target.end_time.seconds = seconds + COMMAND_VALIDITY
    target.end_time.nanos = 0
    return message


@dataclass
class CommandSession:
    stream: CommandStream
    timer: Timer
    generation: int


class CommandMultiplexer:
    """
    Owns the velocity setpoint and the client-streaming command RPC.

    While a session is live the setpoint is written to the stream every
    ``period`` seconds. Stopping the session zeroes the setpoint.
    """

    def __init__(
        self,
        connector: CommandStreamConnector,
        scheduler: Scheduler,
        period: float = COMMAND_PERIOD,
        clock: Callable[[], float] = time.time,
    ):
        self.setpoint = VelocitySetpoint.zero()
        self.session: Optional[CommandSession] = None
        self._connector = connector
        self._scheduler = scheduler
        self._period = period
        self._clock = clock
        self._generation = 0

    @property
    def running(self) -> bool:
        return self.session is not None

    def set_velocity(self, linear: Tuple[float, float], angular: float) -> None:
        x, y = linear
        self.setpoint = VelocitySetpoint(linear=Vector2(x=x, y=y), angular=angular)

    def start(self) -> None:
        if self.session is not None:
            logger.info("Command stream already exists")
            return
        self._generation += 1
        generation = self._generation
        try:
            stream = self._connector(partial(self._on_stream_failure, generation))
        except Exception:
            logger.exception("Error creating command stream")
            self.stop()
            return
        timer = self._scheduler.call_every(self._period, partial(self._tick, generation))
        self.session = CommandSession(stream=stream, timer=timer, generation=generation)
        logger.info("Command streaming started")

    def stop(self) -> None:
        session, self.session = self.session, None
        self.setpoint = VelocitySetpoint.zero()
        if session is None:
            return
        session.timer.cancel()
        session.stream.close()
        logger.info("Command streaming stopped")

    def _tick(self, generation: int) -> None:
        session = self.session
        if session is None or session.generation != generation:
            return
        message = build_command_message(self.setpoint, self._clock())
        try:
            session.stream.write(message)
        except Exception as exc:
            logger.error("Command write failed, stopping command stream: %s", exc)
            self.stop()

    def _on_stream_failure(self, generation: int, error: BaseException) -> None:
        if self.session is None or self.session.generation != generation:
            return
        logger.error("Command stream error: %s", error)
        self.stop()
