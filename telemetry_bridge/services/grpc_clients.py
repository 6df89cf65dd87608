import asyncio
import logging
import time
from typing import Any, Dict, Optional

import grpc
from google.protobuf.json_format import MessageToDict

from telemetry_bridge.errors import CommandWriteError, StreamConnectionError
from telemetry_bridge.models import RobotCommandRequest
from telemetry_bridge.proto import Empty, RobotCommandTimeStamped, StateResponse
from telemetry_bridge.services.command_multiplexer import FailureCallback, stamp_header

logger = logging.getLogger(__name__)

PUBLISH_STATE_METHOD = "/dtproto.dtService/PublishState"
ROBOT_COMMAND_METHOD = "/dtproto.dtService/RobotCommand"
SUBSCRIBE_ROBOT_COMMAND_METHOD = "/dtproto.quadruped.Nav/SubscribeRobotCommand"


class _LazyChannel:
    """Insecure aio channel created on first use, inside the running loop."""

    def __init__(self, target: str):
        self.target = target
        self._channel: Optional[grpc.aio.Channel] = None

    @property
    def channel(self) -> grpc.aio.Channel:
        if self._channel is None:
            self._channel = grpc.aio.insecure_channel(self.target)
        return self._channel

    async def close(self) -> None:
        if self._channel is not None:
            channel, self._channel = self._channel, None
            await channel.close()


class StateFeedConnector(_LazyChannel):
    """Opens the PublishState server-streaming call of one feed."""

    def __call__(self):
        publish_state = self.channel.unary_stream(
            PUBLISH_STATE_METHOD,
            request_serializer=Empty.SerializeToString,
            response_deserializer=StateResponse.FromString,
        )
        return publish_state(Empty())


class GrpcCommandStream:
    """
    Client-streaming SubscribeRobotCommand call.

    ``write`` never waits: it parks the message in a one-slot buffer that a
    writer task drains, so a slow transport only ever sees the newest command.
    """

    def __init__(self, channel: grpc.aio.Channel, on_failure: FailureCallback):
        subscribe = channel.stream_unary(
            SUBSCRIBE_ROBOT_COMMAND_METHOD,
            request_serializer=RobotCommandTimeStamped.SerializeToString,
            response_deserializer=Empty.FromString,
        )
        self._call = subscribe()
        self._on_failure = on_failure
        self._pending: asyncio.Queue = asyncio.Queue(maxsize=1)
        self._closed = False
        self._writer = asyncio.ensure_future(self._drain())

    def write(self, message) -> None:
        if self._closed:
            raise CommandWriteError("command stream is closed")
        if self._writer.done():
            raise CommandWriteError("command stream writer has exited")
        if self._pending.full():
            self._pending.get_nowait()
        self._pending.put_nowait(message)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        while not self._pending.empty():
            self._pending.get_nowait()
        self._pending.put_nowait(None)

    async def _drain(self) -> None:
        try:
            while True:
                message = await self._pending.get()
                if message is None:
                    await self._call.done_writing()
                    break
                await self._call.write(message)
            await self._call
        except asyncio.CancelledError:
            raise
        except (grpc.aio.AioRpcError, grpc.aio.UsageError, asyncio.InvalidStateError) as exc:
            if not self._closed:
                self._on_failure(StreamConnectionError(str(exc)))
            else:
                logger.debug("Command stream closed with %s", exc)


class CommandStreamConnector(_LazyChannel):
    def __call__(self, on_failure: FailureCallback) -> GrpcCommandStream:
        return GrpcCommandStream(self.channel, on_failure)


class TaskCommandClient(_LazyChannel):
    """Unary RobotCommand RPC used for one-shot task commands."""

    async def send(self, request: RobotCommandRequest, timeout: float = 5.0) -> Dict[str, Any]:
        message = RobotCommandTimeStamped()
        stamp_header(message.header, time.time(), "robot_command")
        message.command.cmd.cmd_mode = request.cmd_mode
        message.command.cmd.arg = request.arg
        message.command.cmd.arg_n.extend(request.arg_n)
        message.command.cmd.arg_f.extend(request.arg_f)

        robot_command = self.channel.unary_unary(
            ROBOT_COMMAND_METHOD,
            request_serializer=RobotCommandTimeStamped.SerializeToString,
            response_deserializer=Empty.FromString,
        )
        response = await robot_command(message, timeout=timeout)
        return MessageToDict(response, preserving_proto_field_name=True)
