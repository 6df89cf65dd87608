import json
import logging
from typing import Any, Dict, Optional, Type, TypeVar

import grpc
import tornado.web
from pydantic import BaseModel, ValidationError

from telemetry_bridge.bridge import Bridge
from telemetry_bridge.models import CommandRequest, MovementRequest, RobotCommandRequest

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class JsonHandler(tornado.web.RequestHandler):
    """JSON request/response helpers with permissive CORS."""

    def set_default_headers(self):
        self.set_header("Content-Type", "application/json")
        self.set_header("Access-Control-Allow-Origin", "*")
        self.set_header("Access-Control-Allow-Headers", "Content-Type")
        self.set_header("Access-Control-Allow-Methods", "GET, POST, OPTIONS")

    def options(self, *args):
        self.set_status(204)
        self.finish()

    def parse_body(self, model: Type[ModelT]) -> Optional[ModelT]:
        try:
            payload = json.loads(self.request.body or b"{}")
            return model.model_validate(payload)
        except (json.JSONDecodeError, ValidationError) as exc:
            self.fail(400, str(exc))
            return None

    def fail(self, status: int, error: str) -> None:
        self.set_status(status)
        self.finish({"success": False, "error": error})


class BridgeHandler(JsonHandler):
    def initialize(self, bridge: Bridge):
        self.bridge = bridge


class HealthHandler(BridgeHandler):
    def get(self):
        feeds: Dict[str, Any] = {
            name: status.model_dump(mode="json") for name, status in self.bridge.feed_statuses().items()
        }
        self.write(
            {
                "status": "ok",
                "feeds": feeds,
                "subscribers": len(self.bridge.registry),
                "command_streaming": self.bridge.multiplexer.running,
            }
        )


class MovementHandler(BridgeHandler):
    def post(self):
        movement = self.parse_body(MovementRequest)
        if movement is None:
            return
        setpoint = movement.to_setpoint()
        self.bridge.multiplexer.set_velocity((setpoint.linear.x, setpoint.linear.y), setpoint.angular)
        self.write({"success": True})


class CommandHandler(BridgeHandler):
    def post(self):
        request = self.parse_body(CommandRequest)
        if request is None:
            return
        if request.command == "Start":
            self.bridge.multiplexer.start()
        else:
            self.bridge.multiplexer.stop()
        self.write({"success": True})


class RobotCommandHandler(BridgeHandler):
    async def post(self):
        request = self.parse_body(RobotCommandRequest)
        if request is None:
            return
        try:
            response = await self.bridge.task_client.send(request)
        except grpc.aio.AioRpcError as exc:
            logger.error("Error sending RobotCommand: %s", exc.details())
            self.fail(500, exc.details() or exc.code().name)
            return
        self.write({"success": True, "response": response})
