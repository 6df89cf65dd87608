class BridgeError(Exception):
    """Base class for failures contained inside the bridge."""


class StreamConnectionError(BridgeError):
    """Transport-level failure on an inbound feed or the outbound command stream."""


class StreamEnded(BridgeError):
    """The server closed an inbound feed gracefully."""


class DecodeError(BridgeError):
    """Payload bytes could not be decoded for a registered type identifier."""

    def __init__(self, type_url: str, reason: str):
        super().__init__(f"failed to decode {type_url}: {reason}")
        self.type_url = type_url
        self.reason = reason


class CommandWriteError(BridgeError):
    """A write to the outbound command stream was rejected."""
