from .api_handlers import CommandHandler, HealthHandler, MovementHandler, RobotCommandHandler
from .docs_handler import DocsHandler
from .telemetry_ws_handler import TelemetryWebSocketHandler

__all__ = [
    "CommandHandler",
    "DocsHandler",
    "HealthHandler",
    "MovementHandler",
    "RobotCommandHandler",
    "TelemetryWebSocketHandler",
]
