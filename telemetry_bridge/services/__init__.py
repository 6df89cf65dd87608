"""Telemetry feed supervision, payload decoding, fan-out and command streaming."""
