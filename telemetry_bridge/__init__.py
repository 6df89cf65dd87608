"""
Robot telemetry bridge.

This service is responsible for:
- Consuming the robot's server-streaming gRPC state feeds and decoding their Any payloads.
- Broadcasting the latest robot pose and operation state to browser WebSocket clients at a bounded rate.
- Keeping a client-streaming command RPC alive that re-sends the current velocity setpoint.

The HTTP/WebSocket server is implemented with Tornado.
"""
