"""Async client for the adb daemon: server lifecycle, shell and device queries."""

from __future__ import annotations

from adb_bridge.client import DEFAULT_PORT, AdbClient, ClientConfig
from adb_bridge.errors import (
    AdbBridgeError,
    AdbCommandError,
    ConfigError,
    DeviceNotConnectedError,
    InvalidDeviceIdError,
    PropertyNotFoundError,
    RebootError,
    RunnerError,
)
from adb_bridge.parsing import DeviceOs, ProbeOutcome

__all__ = [
    "DEFAULT_PORT",
    "AdbBridgeError",
    "AdbClient",
    "AdbCommandError",
    "ClientConfig",
    "ConfigError",
    "DeviceNotConnectedError",
    "DeviceOs",
    "InvalidDeviceIdError",
    "ProbeOutcome",
    "PropertyNotFoundError",
    "RebootError",
    "RunnerError",
]
