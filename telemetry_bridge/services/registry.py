import logging
from typing import Protocol, Set

from tornado.iostream import StreamClosedError
from tornado.websocket import WebSocketClosedError

from telemetry_bridge.models import BroadcastMessage

logger = logging.getLogger(__name__)


class Subscriber(Protocol):
    def is_open(self) -> bool: ...

    def send(self, message: str) -> None: ...


class SubscriberRegistry:
    """Connected push endpoints; broadcasts go to every member that is still open."""

    def __init__(self):
        self._subscribers: Set[Subscriber] = set()

    def __len__(self) -> int:
        return len(self._subscribers)

    def __contains__(self, subscriber) -> bool:
        return subscriber in self._subscribers

    def add(self, subscriber: Subscriber) -> None:
        self._subscribers.add(subscriber)
        logger.info("Subscriber connected (%d total)", len(self._subscribers))

    def remove(self, subscriber: Subscriber) -> None:
        if subscriber in self._subscribers:
            self._subscribers.discard(subscriber)
            logger.info("Subscriber disconnected (%d total)", len(self._subscribers))

    def broadcast(self, message: BroadcastMessage) -> int:
        """Send ``message`` to all open subscribers and return how many were reached."""
        payload = message.model_dump_json()
        delivered = 0
        for subscriber in list(self._subscribers):
            if not subscriber.is_open():
                continue
            try:
                subscriber.send(payload)
            except (WebSocketClosedError, StreamClosedError):
                self._subscribers.discard(subscriber)
            except Exception:
                logger.warning("Failed to push %s to a subscriber", message.type, exc_info=True)
            else:
                delivered += 1
        return delivered
