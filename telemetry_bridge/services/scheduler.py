from typing import Callable, Optional, Protocol

from tornado.ioloop import IOLoop, PeriodicCallback


class Timer(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def time(self) -> float: ...

    def call_later(self, delay: float, callback: Callable[[], None]) -> Timer: ...

    def call_every(self, period: float, callback: Callable[[], None]) -> Timer: ...


class _Timeout:
    def __init__(self, io_loop: IOLoop, handle):
        self._io_loop = io_loop
        self._handle = handle

    def cancel(self) -> None:
        self._io_loop.remove_timeout(self._handle)


class _Periodic:
    def __init__(self, callback: PeriodicCallback):
        self._callback = callback

    def cancel(self) -> None:
        self._callback.stop()


class IOLoopScheduler:
    """Timers and clock of the Tornado IOLoop that runs every bridge component."""

    def __init__(self, io_loop: Optional[IOLoop] = None):
        self._io_loop = io_loop

    @property
    def io_loop(self) -> IOLoop:
        return self._io_loop or IOLoop.current()

    def time(self) -> float:
        return self.io_loop.time()

    def call_later(self, delay: float, callback: Callable[[], None]) -> Timer:
        io_loop = self.io_loop
        return _Timeout(io_loop, io_loop.call_later(delay, callback))

    def call_every(self, period: float, callback: Callable[[], None]) -> Timer:
        periodic = PeriodicCallback(callback, period * 1000)
        periodic.start()
        return _Periodic(periodic)
