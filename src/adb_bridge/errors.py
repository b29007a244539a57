"""Failure taxonomy for adb bridge operations."""

from __future__ import annotations

from typing import Any, Optional, Sequence

# Substrings adb prints when the daemon has no usable device to talk to.
_NO_DEVICE_MARKERS = (
    "no devices/emulators found",
    "no devices found",
    "device not found",
    "device offline",
    "device unauthorized",
)


class AdbBridgeError(RuntimeError):
    """Base class for everything this package raises on purpose."""


class RunnerError(AdbBridgeError):
    """Raised when the process runner reports a failed invocation."""

    def __init__(self, args: Sequence[str], error: Any) -> None:
        self.args_list = list(args)
        self.error = error
        super().__init__(f"adb {' '.join(self.args_list)} failed: {error}")


class DeviceNotConnectedError(RunnerError):
    """The daemon answered, but no device is attached (or it is offline)."""


class InvalidDeviceIdError(AdbBridgeError):
    def __init__(self, raw: Optional[str] = None) -> None:
        self.raw = raw
        super().__init__("invalid device id")


class PropertyNotFoundError(AdbBridgeError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"unknown property: {name}")


class RebootError(AdbBridgeError):
    pass


class ConfigError(AdbBridgeError):
    pass


class AdbCommandError(AdbBridgeError):
    """Raised by the default runner when the adb client exits non-zero."""

    def __init__(self, args: Sequence[str], returncode: int, stdout: str, stderr: str) -> None:
        self.args_list = list(args)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(
            f"adb command failed (rc={returncode}): {' '.join(self.args_list)}\n"
            f"stdout: {stdout}\n"
            f"stderr: {stderr}"
        )


def is_no_device_error(error: Any) -> bool:
    # AdbCommandError embeds stderr in its message.
    text = str(error).lower()
    return any(marker in text for marker in _NO_DEVICE_MARKERS)


def wrap_runner_error(args: Sequence[str], error: Any) -> RunnerError:
    if is_no_device_error(error):
        exc: RunnerError = DeviceNotConnectedError(args, error)
    else:
        exc = RunnerError(args, error)
    if isinstance(error, BaseException):
        exc.__cause__ = error
    return exc
