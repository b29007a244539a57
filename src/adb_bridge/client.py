"""adb client bound to one daemon port.

Every daemon-directed command goes through :meth:`AdbClient.exec_port`, which
prepends ``-P <port>``. Device-side commands go through :meth:`AdbClient.shell`
and are interpreted by the parsers in :mod:`adb_bridge.parsing`.

Notes
-----
* The process runner and the log function are injected so tests never spawn
  adb; see :mod:`adb_bridge.runner` for the runner contract.
* There is no retry, timeout or cancellation here. Wrap calls in
  ``asyncio.wait_for`` if you need a deadline.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Sequence

from adb_bridge import parsing
from adb_bridge.errors import (
    DeviceNotConnectedError,
    PropertyNotFoundError,
    RebootError,
    wrap_runner_error,
)
from adb_bridge.parsing import DeviceOs
from adb_bridge.runner import Runner, RunnerCallback, run_adb

logger = logging.getLogger(__name__)

DEFAULT_PORT = 5037
DEVICE_NAME_PROP = "ro.product.device"
CHANNEL_INI = "/etc/system-image/channel.ini"
REBOOT_STATES = ("bootloader", "recovery")


@dataclass(frozen=True)
class ClientConfig:
    runner: Runner
    log: Callable[[str], Any]
    port: Any = DEFAULT_PORT


def _resolve_config(options: Any) -> ClientConfig:
    if not isinstance(options, Mapping):
        options = {}
    return ClientConfig(
        # A null option counts as absent.
        runner=options.get("exec") or run_adb,
        log=options.get("log") or logger.info,
        port=options.get("port") or DEFAULT_PORT,
    )


class AdbClient:
    """Async adb client; one instance talks to one daemon port."""

    def __init__(self, options: Optional[Mapping[str, Any]] = None) -> None:
        self._config = _resolve_config(options)

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def runner(self) -> Runner:
        return self._config.runner

    @property
    def log(self) -> Callable[[str], Any]:
        return self._config.log

    @property
    def port(self) -> Any:
        return self._config.port

    # ------------------------------- Execution -------------------------------

    def exec(self, args: Sequence[str], callback: RunnerCallback) -> Any:
        return self._config.runner(args, callback)

    async def _invoke(self, args: list[str]) -> Optional[str]:
        loop = asyncio.get_running_loop()
        fut: asyncio.Future[Optional[str]] = loop.create_future()

        def _settle(error: Any, stdout: Optional[str]) -> None:
            if fut.done():
                return
            if error:
                fut.set_exception(wrap_runner_error(args, error))
            else:
                fut.set_result(stdout)

        def callback(error: Any = None, stdout: Optional[str] = None) -> None:
            loop.call_soon_threadsafe(_settle, error, stdout)

        self.exec(args, callback)
        return await fut

    async def exec_port(self, extra_args: Sequence[str] = ()) -> Optional[str]:
        """Run ``adb -P <port> *extra_args`` and return captured stdout."""

        args = ["-P", str(self.port), *extra_args]
        logger.debug("adb %s", " ".join(args))
        return await self._invoke(args)

    async def shell(self, args: Sequence[str]) -> Optional[str]:
        return await self.exec_port(["shell", *args])

    # ------------------------------- Lifecycle -------------------------------

    async def start_server(self) -> None:
        self.log("killing all running adb servers")
        await self.exec_port(["kill-server"])
        self.log(f"starting adb server on port {self.port}")
        await self.exec_port(["start-server"])

    async def kill_server(self) -> None:
        self.log("killing all running adb servers")
        await self.exec_port(["kill-server"])

    async def reboot(self, state: Optional[str] = None) -> None:
        """Reboot the device, optionally into ``bootloader`` or ``recovery``."""

        if state is not None and state not in REBOOT_STATES:
            raise ValueError(f"unsupported reboot state: {state!r}")
        self.log(f"rebooting to {state or 'system'}")
        stdout = await self.exec_port(["reboot"] + ([state] if state else []))
        if stdout and "failed" in stdout.lower():
            raise RebootError(f"reboot failed: {stdout.strip()}")

    async def wait_for_device(self, interval_s: float = 2.0) -> None:
        """Block until the device answers a shell command.

        A missing device is expected while waiting, so ``DeviceNotConnectedError``
        only means "poll again". Any other runner failure propagates.
        """

        while True:
            try:
                if await self.has_access():
                    return
            except DeviceNotConnectedError:
                logger.debug("no device on port %s yet", self.port)
            await asyncio.sleep(interval_s)

    # ----------------------------- Introspection -----------------------------

    async def get_serialno(self) -> str:
        return parsing.parse_serialno(await self.exec_port(["get-serialno"]))

    async def get_state(self) -> str:
        return (await self.exec_port(["get-state"]) or "").strip()

    async def get_version(self) -> Optional[str]:
        return parsing.parse_version(await self.exec_port(["version"]))

    async def get_prop(self, name: str) -> str:
        value = (await self.shell(["getprop", name]) or "").strip()
        if not value:
            raise PropertyNotFoundError(name)
        return value

    async def get_device_name(self) -> str:
        """Device codename from getprop, falling back to ``default.prop``."""

        name = (await self.shell(["getprop", DEVICE_NAME_PROP]) or "").strip()
        if name:
            return name
        props = parsing.parse_prop_file(await self.shell(["cat", "default.prop"]))
        name = props.get(DEVICE_NAME_PROP, "")
        if not name:
            raise PropertyNotFoundError(DEVICE_NAME_PROP)
        return name

    async def get_os(self) -> DeviceOs:
        return parsing.parse_os(await self.shell(["cat", CHANNEL_INI]))

    async def has_access(self) -> bool:
        return parsing.parse_access(await self.shell(["echo", "."]))
