import logging
from typing import Dict, List, Optional

from telemetry_bridge.config import BridgeSettings
from telemetry_bridge.feeds import default_feeds
from telemetry_bridge.models import BroadcastMessage, FeedStatus
from telemetry_bridge.services.command_multiplexer import CommandMultiplexer
from telemetry_bridge.services.grpc_clients import CommandStreamConnector, StateFeedConnector, TaskCommandClient
from telemetry_bridge.services.registry import SubscriberRegistry
from telemetry_bridge.services.scheduler import IOLoopScheduler
from telemetry_bridge.services.stream_supervisor import StreamSupervisor

logger = logging.getLogger(__name__)


class Bridge:
    """Owns every long-lived component; handlers receive it by reference."""

    def __init__(
        self,
        registry: SubscriberRegistry,
        supervisors: List[StreamSupervisor],
        multiplexer: CommandMultiplexer,
        task_client=None,
        channels: Optional[list] = None,
    ):
        self.registry = registry
        self.supervisors = {supervisor.feed.name: supervisor for supervisor in supervisors}
        self.multiplexer = multiplexer
        self.task_client = task_client
        self._channels = channels or []

    @classmethod
    def from_settings(cls, settings: BridgeSettings) -> "Bridge":
        scheduler = IOLoopScheduler()
        registry = SubscriberRegistry()
        supervisors = []
        channels = []
        for feed in default_feeds(settings):
            connector = StateFeedConnector(feed.target)
            channels.append(connector)
            supervisors.append(
                StreamSupervisor(
                    feed,
                    connector,
                    registry,
                    scheduler,
                    reconnect_delay=settings.reconnect_delay,
                )
            )
        command_connector = CommandStreamConnector(settings.target(settings.nav_command_port))
        task_client = TaskCommandClient(settings.target(settings.task_command_port))
        channels.extend([command_connector, task_client])
        multiplexer = CommandMultiplexer(command_connector, scheduler, period=settings.command_period)
        return cls(registry, supervisors, multiplexer, task_client=task_client, channels=channels)

    def start(self) -> None:
        for supervisor in self.supervisors.values():
            supervisor.start()

    async def shutdown(self) -> None:
        self.multiplexer.stop()
        for supervisor in self.supervisors.values():
            supervisor.stop()
        for channel in self._channels:
            await channel.close()
        logger.info("Bridge shut down")

    def snapshot(self) -> List[BroadcastMessage]:
        """Latest decoded value of every feed that has produced one."""
        return [
            BroadcastMessage(type=supervisor.feed.broadcast_tag, data=supervisor.latest)
            for supervisor in self.supervisors.values()
            if supervisor.latest is not None
        ]

    def feed_statuses(self) -> Dict[str, FeedStatus]:
        return {
            name: FeedStatus(state=supervisor.state.value, latest=supervisor.latest)
            for name, supervisor in self.supervisors.items()
        }
