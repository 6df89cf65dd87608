import asyncio
import heapq
import itertools

import pytest
import pytest_asyncio
from google.protobuf import any_pb2

from telemetry_bridge.bridge import Bridge
from telemetry_bridge.config import BridgeSettings
from telemetry_bridge.feeds import default_feeds
from telemetry_bridge.proto import StateResponse
from telemetry_bridge.services.command_multiplexer import CommandMultiplexer
from telemetry_bridge.services.registry import SubscriberRegistry
from telemetry_bridge.services.stream_supervisor import StreamSupervisor


class FakeTimer:
    def __init__(self, deadline, callback, period=None):
        self.deadline = deadline
        self.callback = callback
        self.period = period
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Virtual clock; ``advance`` runs due timers in deadline order."""

    def __init__(self):
        self.now = 0.0
        self._timers = []
        self._order = itertools.count()

    def time(self):
        return self.now

    def call_later(self, delay, callback):
        return self._push(FakeTimer(self.now + delay, callback))

    def call_every(self, period, callback):
        return self._push(FakeTimer(self.now + period, callback, period))

    def _push(self, timer):
        heapq.heappush(self._timers, (timer.deadline, next(self._order), timer))
        return timer

    @property
    def pending(self):
        return [timer for _, _, timer in self._timers if not timer.cancelled]

    def advance(self, seconds):
        target = self.now + seconds
        while self._timers and self._timers[0][0] <= target + 1e-9:
            deadline, _, timer = heapq.heappop(self._timers)
            if timer.cancelled:
                continue
            self.now = deadline
            if timer.period is not None:
                timer.deadline = deadline + timer.period
                self._push(timer)
            timer.callback()
        self.now = target


class FakeSubscriber:
    def __init__(self, open_=True, fail_with=None):
        self.open = open_
        self.fail_with = fail_with
        self.sent = []

    def is_open(self):
        return self.open

    def send(self, message):
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(message)


_END = object()


class FakeStateStream:
    """Async-iterable stand-in for a server-streaming call."""

    def __init__(self):
        self._queue = asyncio.Queue()
        self.cancelled = False

    def push(self, response):
        self._queue.put_nowait(response)

    def fail(self, error):
        self._queue.put_nowait(error)

    def end(self):
        self._queue.put_nowait(_END)

    def cancel(self):
        self.cancelled = True
        return True

    def __aiter__(self):
        return self

    async def __anext__(self):
        item = await self._queue.get()
        if item is _END:
            raise StopAsyncIteration
        if isinstance(item, BaseException):
            raise item
        return item


class FakeStreamConnector:
    def __init__(self):
        self.streams = []
        self.fail_next = None

    def __call__(self):
        if self.fail_next is not None:
            error, self.fail_next = self.fail_next, None
            raise error
        stream = FakeStateStream()
        self.streams.append(stream)
        return stream

    @property
    def current(self):
        return self.streams[-1]


class FakeCommandStream:
    def __init__(self, on_failure):
        self.on_failure = on_failure
        self.messages = []
        self.closed = False
        self.fail_writes = None

    def write(self, message):
        if self.fail_writes is not None:
            raise self.fail_writes
        self.messages.append(message)

    def close(self):
        self.closed = True


class FakeCommandConnector:
    def __init__(self):
        self.streams = []

    def __call__(self, on_failure):
        stream = FakeCommandStream(on_failure)
        self.streams.append(stream)
        return stream

    @property
    def current(self):
        return self.streams[-1]


def envelope(message, type_url=None):
    """Wrap ``message`` in a StateResponse the way the robot publishes it."""
    response = StateResponse()
    if type_url is None:
        response.state.Pack(message)
    else:
        response.state.CopyFrom(any_pb2.Any(type_url=type_url, value=message.SerializeToString()))
    return response


async def drain(rounds=10):
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def stream_connector():
    return FakeStreamConnector()


@pytest.fixture
def command_connector():
    return FakeCommandConnector()


class FakeTaskClient:
    def __init__(self, error=None):
        self.requests = []
        self.error = error

    async def send(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return {}


@pytest_asyncio.fixture
async def bridge(stream_connector, command_connector, scheduler):
    registry = SubscriberRegistry()
    supervisors = [
        StreamSupervisor(feed, stream_connector, registry, scheduler)
        for feed in default_feeds(BridgeSettings())
    ]
    multiplexer = CommandMultiplexer(command_connector, scheduler)
    bridge = Bridge(registry, supervisors, multiplexer, task_client=FakeTaskClient())
    yield bridge
    await bridge.shutdown()
