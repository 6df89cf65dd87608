"""
dtproto message types used on the robot's gRPC interfaces.

The robot side publishes its schema as .proto files; only the handful of
messages the bridge reads or writes are declared here. They are registered in
the default descriptor pool at import time, which gives the same classes
protoc would generate (``FromString``, ``SerializeToString``, ``Any.Pack``).
"""

from google.protobuf import any_pb2  # noqa: F401  (registers google/protobuf/any.proto)
from google.protobuf import descriptor_pb2, descriptor_pool, empty_pb2, message_factory
from google.protobuf import timestamp_pb2  # noqa: F401  (registers google/protobuf/timestamp.proto)

TYPE_URL_PREFIX = "type.googleapis.com/"

_F = descriptor_pb2.FieldDescriptorProto


def _field(name, number, field_type, type_name=None, repeated=False):
    field = _F(
        name=name,
        number=number,
        type=field_type,
        label=_F.LABEL_REPEATED if repeated else _F.LABEL_OPTIONAL,
    )
    if type_name:
        field.type_name = type_name
    return field


def _double(name, number):
    return _field(name, number, _F.TYPE_DOUBLE)


def _nested(name, number, type_name):
    return _field(name, number, _F.TYPE_MESSAGE, type_name)


def _message(name, *fields):
    return descriptor_pb2.DescriptorProto(name=name, field=list(fields))


_ROBOT_MSGS = descriptor_pb2.FileDescriptorProto(
    name="dtproto/robot_msgs.proto",
    package="dtproto.robot_msgs",
    syntax="proto3",
    dependency=["google/protobuf/timestamp.proto"],
    message_type=[
        _message("Time", _field("sec", 1, _F.TYPE_INT32), _field("nanosec", 2, _F.TYPE_UINT32)),
        _message(
            "Header",
            _nested("stamp", 1, ".dtproto.robot_msgs.Time"),
            _field("frame_id", 2, _F.TYPE_STRING),
        ),
        _message("Point", _double("x", 1), _double("y", 2), _double("z", 3)),
        _message("Quaternion", _double("x", 1), _double("y", 2), _double("z", 3), _double("w", 4)),
        _message(
            "Pose",
            _nested("position", 1, ".dtproto.robot_msgs.Point"),
            _nested("orientation", 2, ".dtproto.robot_msgs.Quaternion"),
        ),
        _message("RobotState", _nested("base_pose", 1, ".dtproto.robot_msgs.Pose")),
        _message(
            "RobotStateTimeStamped",
            _nested("header", 1, ".dtproto.robot_msgs.Header"),
            _nested("state", 2, ".dtproto.robot_msgs.RobotState"),
        ),
        _message("Vector2", _double("x", 1), _double("y", 2)),
        _message(
            "SE2Velocity",
            _nested("linear", 1, ".dtproto.robot_msgs.Vector2"),
            _double("angular", 2),
        ),
        _message(
            "SE2VelocityCommand",
            _nested("vel", 1, ".dtproto.robot_msgs.SE2Velocity"),
            _nested("end_time", 2, ".google.protobuf.Timestamp"),
        ),
        _message("NavCommand", _nested("se2_target_vel", 1, ".dtproto.robot_msgs.SE2VelocityCommand")),
        _message(
            "ControlCmd",
            _field("cmd_mode", 1, _F.TYPE_INT32),
            _field("arg", 2, _F.TYPE_STRING),
            _field("arg_n", 3, _F.TYPE_INT32, repeated=True),
            _field("arg_f", 4, _F.TYPE_DOUBLE, repeated=True),
        ),
        _message(
            "RobotCommand",
            _nested("nav", 1, ".dtproto.robot_msgs.NavCommand"),
            _nested("cmd", 2, ".dtproto.robot_msgs.ControlCmd"),
        ),
        _message(
            "RobotCommandTimeStamped",
            _nested("header", 1, ".dtproto.robot_msgs.Header"),
            _nested("command", 2, ".dtproto.robot_msgs.RobotCommand"),
        ),
    ],
)

_DUALARM = descriptor_pb2.FileDescriptorProto(
    name="dtproto/dualarm.proto",
    package="dtproto.dualarm",
    syntax="proto3",
    dependency=["dtproto/robot_msgs.proto"],
    message_type=[
        _message(
            "OperationState",
            _field("op_mode", 1, _F.TYPE_UINT32),
            _field("op_status", 2, _F.TYPE_UINT32),
        ),
        _message(
            "OperationStateTimeStamped",
            _nested("header", 1, ".dtproto.robot_msgs.Header"),
            _nested("state", 2, ".dtproto.dualarm.OperationState"),
        ),
    ],
)

_SERVICE = descriptor_pb2.FileDescriptorProto(
    name="dtproto/service.proto",
    package="dtproto",
    syntax="proto3",
    dependency=["google/protobuf/any.proto"],
    message_type=[_message("StateResponse", _nested("state", 1, ".google.protobuf.Any"))],
)

_pool = descriptor_pool.Default()
for _file in (_ROBOT_MSGS, _DUALARM, _SERVICE):
    _pool.AddSerializedFile(_file.SerializeToString())


def _message_class(full_name):
    return message_factory.GetMessageClass(_pool.FindMessageTypeByName(full_name))


Time = _message_class("dtproto.robot_msgs.Time")
Header = _message_class("dtproto.robot_msgs.Header")
Point = _message_class("dtproto.robot_msgs.Point")
Quaternion = _message_class("dtproto.robot_msgs.Quaternion")
Pose = _message_class("dtproto.robot_msgs.Pose")
RobotState = _message_class("dtproto.robot_msgs.RobotState")
RobotStateTimeStamped = _message_class("dtproto.robot_msgs.RobotStateTimeStamped")
Vector2 = _message_class("dtproto.robot_msgs.Vector2")
SE2Velocity = _message_class("dtproto.robot_msgs.SE2Velocity")
SE2VelocityCommand = _message_class("dtproto.robot_msgs.SE2VelocityCommand")
NavCommand = _message_class("dtproto.robot_msgs.NavCommand")
ControlCmd = _message_class("dtproto.robot_msgs.ControlCmd")
RobotCommand = _message_class("dtproto.robot_msgs.RobotCommand")
RobotCommandTimeStamped = _message_class("dtproto.robot_msgs.RobotCommandTimeStamped")
OperationState = _message_class("dtproto.dualarm.OperationState")
OperationStateTimeStamped = _message_class("dtproto.dualarm.OperationStateTimeStamped")
StateResponse = _message_class("dtproto.StateResponse")
Empty = empty_pb2.Empty

ROBOT_STATE_TYPE_URL = TYPE_URL_PREFIX + RobotStateTimeStamped.DESCRIPTOR.full_name
OPERATION_STATE_TYPE_URL = TYPE_URL_PREFIX + OperationStateTimeStamped.DESCRIPTOR.full_name
