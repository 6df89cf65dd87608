import os
from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field, model_validator

# seconds fields that the environment supplies in milliseconds
MILLISECOND_FIELDS = {
    "broadcast_interval": "BROADCAST_INTERVAL_MS",
    "log_interval": "LOG_INTERVAL_MS",
    "reconnect_delay": "RECONNECT_DELAY_MS",
    "command_period": "COMMAND_PERIOD_MS",
}


class BridgeSettings(BaseModel):
    """Process settings, read from the environment by ``from_env``."""

    port: int = Field(default=3001, gt=0, lt=65536)
    address: str = "0.0.0.0"
    grpc_server_host: str = "192.168.10.9"
    robot_state_port: int = Field(default=50053, gt=0, lt=65536)
    opstate_port: int = Field(default=50060, gt=0, lt=65536)
    nav_command_port: int = Field(default=50056, gt=0, lt=65536)
    task_command_port: int = Field(default=50052, gt=0, lt=65536)
    broadcast_interval: float = Field(default=0.1, ge=0, description="Seconds between broadcasts per feed.")
    log_interval: float = Field(default=1.0, ge=0, description="Seconds between diagnostic records per feed.")
    reconnect_delay: float = Field(default=5.0, gt=0, description="Seconds before a failed feed reconnects.")
    command_period: float = Field(default=0.05, gt=0, description="Seconds between command writes.")

    @model_validator(mode="before")
    @classmethod
    def _convert_milliseconds(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        values = dict(data)
        for key in MILLISECOND_FIELDS:
            raw = values.pop(f"{key}_ms", None)
            if raw is None:
                continue
            try:
                values[key] = float(raw) / 1000
            except (TypeError, ValueError):
                raise ValueError(f"{key}_ms must be a number of milliseconds, got {raw!r}")
        return values

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "BridgeSettings":
        env = os.environ if environ is None else environ
        values = {
            "port": env.get("PORT"),
            "address": env.get("ADDRESS"),
            "grpc_server_host": env.get("GRPC_SERVER_HOST"),
            "robot_state_port": env.get("GRPC_ROBOT_STATE_SERVER_PORT"),
            "opstate_port": env.get("GRPC_OPSTATE_SERVER_PORT"),
            "nav_command_port": env.get("GRPC_NAV_COMMAND_SERVER_PORT"),
            "task_command_port": env.get("GRPC_TASK_COMMAND_SERVER_PORT"),
        }
        for key, variable in MILLISECOND_FIELDS.items():
            values[f"{key}_ms"] = env.get(variable)
        return cls.model_validate({key: value for key, value in values.items() if value is not None})

    def target(self, port: int) -> str:
        return f"{self.grpc_server_host}:{port}"
