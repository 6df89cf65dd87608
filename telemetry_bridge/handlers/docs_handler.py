from telemetry_bridge.handlers.api_handlers import JsonHandler
from telemetry_bridge.models import (
    BroadcastMessage,
    CommandRequest,
    MovementRequest,
    RobotCommandRequest,
    SchemaDocument,
)


class DocsHandler(JsonHandler):
    def get(self):
        schema = SchemaDocument(
            websocket_endpoints={"telemetry": "/ws"},
            http_endpoints={
                "movement": "POST /api/movement",
                "command": "POST /api/command",
                "robot_command": "POST /api/sendRobotCommand",
                "health": "GET /health",
            },
            push_messages={
                "BroadcastMessage": BroadcastMessage.model_json_schema(),
            },
            request_schemas={
                "MovementRequest": MovementRequest.model_json_schema(),
                "CommandRequest": CommandRequest.model_json_schema(),
                "RobotCommandRequest": RobotCommandRequest.model_json_schema(),
            },
            examples={
                "robotstate-update": {"type": "robotstate-update", "data": {"x": 1.0, "y": 2.0, "theta": 0.0}},
                "opstate-update": {"type": "opstate-update", "data": {"op_mode": 16, "op_status": 1}},
                "movement": {"speed": 50, "direction": "forward"},
                "robot_command": {"cmd_mode": 3, "arg": "home", "arg_n": [1], "arg_f": [0.5]},
            },
            notes=[
                "All WebSocket messages are JSON.",
                "Each feed is broadcast at most once per broadcast interval (100 ms by default); "
                "only the latest value in a window is delivered.",
                "On connect, subscribers receive the latest known value of every feed.",
                "The command stream re-sends the current velocity every 50 ms while started; "
                "Stop and E-STOP reset the velocity to zero.",
            ],
        )
        self.write(schema.model_dump(mode="json"))
