import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Optional, Protocol

from telemetry_bridge.errors import BridgeError, DecodeError, StreamConnectionError, StreamEnded
from telemetry_bridge.feeds import FeedDescriptor
from telemetry_bridge.models import BroadcastMessage, DecodedState
from telemetry_bridge.services.decoder import PayloadDecoder
from telemetry_bridge.services.registry import SubscriberRegistry
from telemetry_bridge.services.scheduler import Scheduler, Timer

logger = logging.getLogger(__name__)

RECONNECT_DELAY = 5.0


class StateStream(Protocol):
    def __aiter__(self) -> AsyncIterator[Any]: ...

    def cancel(self) -> bool: ...


StreamConnector = Callable[[], StateStream]


class SessionState(str, enum.Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    STREAMING = "streaming"
    RECONNECTING = "reconnecting"


@dataclass
class StreamSession:
    connection: Optional[StateStream] = None
    state: SessionState = SessionState.IDLE
    last_broadcast: float = float("-inf")
    last_log: float = float("-inf")
    generation: int = 0


class StreamSupervisor:
    """
    Keeps one server-streaming feed alive and fans its decoded state out.

    Every connection is tagged with the session generation it was opened
    under; events arriving for an older generation are ignored.
    """

    def __init__(
        self,
        feed: FeedDescriptor,
        connector: StreamConnector,
        registry: SubscriberRegistry,
        scheduler: Scheduler,
        decoder: Optional[PayloadDecoder] = None,
        reconnect_delay: float = RECONNECT_DELAY,
    ):
        self.feed = feed
        self.session = StreamSession()
        self.latest: Optional[DecodedState] = None
        self._connector = connector
        self._registry = registry
        self._scheduler = scheduler
        self._decoder = decoder or PayloadDecoder({feed.expected_type: feed.decode})
        self._reconnect_delay = reconnect_delay
        self._reconnect_timer: Optional[Timer] = None
        self._task: Optional[asyncio.Future] = None

    @property
    def state(self) -> SessionState:
        return self.session.state

    def start(self) -> None:
        if self.session.state in (SessionState.CONNECTING, SessionState.STREAMING):
            logger.info("%s stream already exists", self.feed.name)
            return
        self._cancel_reconnect()
        self.session.generation += 1
        generation = self.session.generation
        self.session.state = SessionState.CONNECTING
        try:
            connection = self._connector()
        except Exception as exc:
            self._handle_failure(generation, StreamConnectionError(f"could not open stream: {exc}"))
            return
        self.session.connection = connection
        self._task = asyncio.ensure_future(self._consume(generation, connection))
        logger.info("%s streaming started (%s)", self.feed.name, self.feed.target)

    def stop(self) -> None:
        self._cancel_reconnect()
        self.session.generation += 1
        self._discard_connection()
        if self._task is not None:
            self._task.cancel()
            self._task = None
        self.session.state = SessionState.IDLE

    async def _consume(self, generation: int, connection: StateStream) -> None:
        try:
            async for response in connection:
                if generation != self.session.generation:
                    return
                self._on_response(response)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self._handle_failure(generation, StreamConnectionError(str(exc)))
        else:
            self._handle_failure(generation, StreamEnded(f"{self.feed.name} stream ended"))

    def _on_response(self, response: Any) -> None:
        if self.session.state is SessionState.CONNECTING:
            self.session.state = SessionState.STREAMING
        envelope = getattr(response, "state", None)
        if envelope is None or envelope.type_url != self.feed.expected_type:
            return
        try:
            decoded = self._decoder.decode(envelope.type_url, envelope.value)
        except DecodeError as exc:
            logger.error("Failed to decode %s message: %s", self.feed.name, exc)
            return
        if decoded is None:
            return
        self.latest = decoded

        now = self._scheduler.time()
        if now - self.session.last_broadcast >= self.feed.broadcast_interval:
            self._registry.broadcast(BroadcastMessage(type=self.feed.broadcast_tag, data=decoded))
            self.session.last_broadcast = now
        if now - self.session.last_log >= self.feed.log_interval:
            logger.info("Received and decoded %s: %s", self.feed.name, decoded.model_dump())
            self.session.last_log = now

    def _handle_failure(self, generation: int, error: BridgeError) -> None:
        if generation != self.session.generation:
            return
        if isinstance(error, StreamEnded):
            logger.info("%s; reconnecting in %.1fs", error, self._reconnect_delay)
        else:
            logger.error("%s stream error: %s; reconnecting in %.1fs", self.feed.name, error, self._reconnect_delay)
        self.session.state = SessionState.RECONNECTING
        self.session.generation += 1
        self._discard_connection()
        self._task = None
        self._reconnect_timer = self._scheduler.call_later(self._reconnect_delay, self._reconnect)

    def _reconnect(self) -> None:
        self._reconnect_timer = None
        if self.session.state is SessionState.RECONNECTING:
            self.start()

    def _cancel_reconnect(self) -> None:
        if self._reconnect_timer is not None:
            self._reconnect_timer.cancel()
            self._reconnect_timer = None

    def _discard_connection(self) -> None:
        connection, self.session.connection = self.session.connection, None
        if connection is not None:
            connection.cancel()
