import json

from tornado.websocket import WebSocketClosedError

from telemetry_bridge.conftest import FakeSubscriber
from telemetry_bridge.models import BroadcastMessage, OperationState, Pose
from telemetry_bridge.services.registry import SubscriberRegistry


def pose_update():
    return BroadcastMessage(type="robotstate-update", data=Pose(x=1, y=2, theta=0))


def test_broadcast_reaches_open_subscribers_only():
    registry = SubscriberRegistry()
    live, closed = FakeSubscriber(), FakeSubscriber(open_=False)
    registry.add(live)
    registry.add(closed)

    delivered = registry.broadcast(pose_update())

    assert delivered == 1
    assert json.loads(live.sent[0]) == {"type": "robotstate-update", "data": {"x": 1.0, "y": 2.0, "theta": 0.0}}
    assert closed.sent == []


def test_failing_subscriber_does_not_block_others():
    registry = SubscriberRegistry()
    broken = FakeSubscriber(fail_with=RuntimeError("socket gone"))
    gone = FakeSubscriber(fail_with=WebSocketClosedError())
    healthy = FakeSubscriber()
    for subscriber in (broken, gone, healthy):
        registry.add(subscriber)

    delivered = registry.broadcast(BroadcastMessage(type="opstate-update", data=OperationState(op_mode=1, op_status=2)))

    assert delivered == 1
    assert json.loads(healthy.sent[0])["data"] == {"op_mode": 1, "op_status": 2}
    assert gone not in registry
    assert broken in registry


def test_membership_change_during_broadcast_uses_snapshot():
    registry = SubscriberRegistry()
    late = FakeSubscriber()

    class JoiningSubscriber(FakeSubscriber):
        def send(self, message):
            super().send(message)
            registry.add(late)
            registry.remove(self)

    joining = JoiningSubscriber()
    registry.add(joining)

    registry.broadcast(pose_update())

    assert len(joining.sent) == 1
    assert late.sent == []
    assert late in registry and joining not in registry


def test_remove_unknown_subscriber_is_noop():
    registry = SubscriberRegistry()
    registry.remove(FakeSubscriber())
    assert len(registry) == 0
