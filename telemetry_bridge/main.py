import logging
import os
from typing import Optional

import tornado.ioloop
import tornado.web

from telemetry_bridge.bridge import Bridge
from telemetry_bridge.config import BridgeSettings
from telemetry_bridge.handlers import (
    CommandHandler,
    DocsHandler,
    HealthHandler,
    MovementHandler,
    RobotCommandHandler,
    TelemetryWebSocketHandler,
)


def make_app(bridge: Bridge) -> tornado.web.Application:
    context = dict(bridge=bridge)
    return tornado.web.Application(
        [
            (r"/health", HealthHandler, context),
            (r"/docs", DocsHandler),
            (r"/ws", TelemetryWebSocketHandler, context),
            (r"/api/movement", MovementHandler, context),
            (r"/api/command", CommandHandler, context),
            (r"/api/sendRobotCommand", RobotCommandHandler, context),
        ]
    )


def setup_logger(name):
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger


def main(settings: Optional[BridgeSettings] = None) -> None:
    logger = setup_logger("telemetry_bridge")
    logger.info(f"Started bridge process {os.getpid()}")
    settings = settings or BridgeSettings.from_env()
    logger.info(f"Settings: {settings.model_dump()}")

    bridge = Bridge.from_settings(settings)
    app = make_app(bridge)
    app.listen(port=settings.port, address=settings.address)
    logger.info(f"Tornado running on http://{settings.address}:{settings.port} (Press Ctrl+C to quit)")

    io_loop = tornado.ioloop.IOLoop.current()
    io_loop.add_callback(bridge.start)
    try:
        io_loop.start()
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
        io_loop.run_sync(bridge.shutdown)


if __name__ == "__main__":
    main()
