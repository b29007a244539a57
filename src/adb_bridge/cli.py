from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence

from adb_bridge.client import REBOOT_STATES, AdbClient
from adb_bridge.config import client_options, load_settings
from adb_bridge.errors import AdbBridgeError

logger = logging.getLogger(__name__)

_LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def _json_dumps(obj: Any) -> str:
    return json.dumps(obj, indent=2, ensure_ascii=False)


def _commands(args: argparse.Namespace) -> Dict[str, Callable[[AdbClient], Awaitable[Any]]]:
    return {
        "start-server": lambda c: c.start_server(),
        "kill-server": lambda c: c.kill_server(),
        "serialno": lambda c: c.get_serialno(),
        "device-name": lambda c: c.get_device_name(),
        "os": lambda c: c.get_os(),
        "access": lambda c: c.has_access(),
        "state": lambda c: c.get_state(),
        "version": lambda c: c.get_version(),
        "getprop": lambda c: c.get_prop(args.name),
        "reboot": lambda c: c.reboot(args.state),
        "wait": lambda c: c.wait_for_device(interval_s=args.interval_s),
        "shell": lambda c: c.shell(args.shell_args),
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="adb-bridge", description="Query and control a device through the adb daemon."
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="adb daemon port (default: 5037 or $ADB_BRIDGE_PORT)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML/JSON config file with port/adb_path/log_level",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO or $ADB_BRIDGE_LOG_LEVEL)",
    )

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("start-server", help="Kill any running daemon and start a fresh one")
    sub.add_parser("kill-server", help="Kill the daemon")
    sub.add_parser("serialno", help="Print the device serial number")
    sub.add_parser("device-name", help="Print the device codename")
    sub.add_parser("os", help="Print ubuntutouch or android")
    sub.add_parser("access", help="Print whether the device answers shell commands")
    sub.add_parser("state", help="Print the device state (device, recovery, ...)")
    sub.add_parser("version", help="Print the adb client version")
    getprop = sub.add_parser("getprop", help="Print a device property")
    getprop.add_argument("name")
    reboot = sub.add_parser("reboot", help="Reboot the device")
    reboot.add_argument("state", nargs="?", choices=REBOOT_STATES, default=None)
    wait = sub.add_parser("wait", help="Block until the device answers shell commands")
    wait.add_argument("--interval_s", type=float, default=2.0)
    shell = sub.add_parser("shell", help="Run a command on the device")
    shell.add_argument("shell_args", nargs=argparse.REMAINDER)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(
            args.config,
            overrides={"port": args.port, "log_level": args.log_level},
        )
    except (AdbBridgeError, OSError, ValueError) as e:
        parser.error(str(e))

    logging.basicConfig(level=settings.get("log_level", "INFO"), format=_LOG_FORMAT)

    client = AdbClient(client_options(settings))
    try:
        result = asyncio.run(_commands(args)[args.command](client))
    except AdbBridgeError as e:
        logger.error("%s", e)
        return 1

    if result is None:
        return 0
    if isinstance(result, str):
        print(result)
    else:
        print(_json_dumps(result))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
