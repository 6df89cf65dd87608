import logging

import tornado.websocket

from telemetry_bridge.bridge import Bridge

logger = logging.getLogger(__name__)


class TelemetryWebSocketHandler(tornado.websocket.WebSocketHandler):
    """Push endpoint for dashboards; every open connection is a broadcast subscriber."""

    def initialize(self, bridge: Bridge):
        self.bridge = bridge

    def check_origin(self, origin: str) -> bool:
        # Allow cross-origin WebSocket connections (lock down in production).
        return True

    def open(self):
        self.bridge.registry.add(self)
        for message in self.bridge.snapshot():
            self.send(message.model_dump_json())

    def on_message(self, message):
        # Subscribers are receive-only.
        pass

    def on_close(self):
        self.bridge.registry.remove(self)

    def is_open(self) -> bool:
        return self.ws_connection is not None and not self.ws_connection.is_closing()

    def send(self, message: str) -> None:
        future = self.write_message(message)
        future.add_done_callback(self._log_send_failure)

    @staticmethod
    def _log_send_failure(future) -> None:
        if not future.cancelled() and future.exception() is not None:
            logger.debug("Push to subscriber failed: %s", future.exception())
