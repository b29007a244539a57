"""Pure parsers that turn adb output into typed values.

Nothing in here spawns processes; every function takes the text the runner
reported (which may be ``None`` when the command printed nothing).
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Dict, Optional

from adb_bridge.errors import InvalidDeviceIdError

_SERIAL_RE = re.compile(r"^[0-9A-Za-z]{8,}$")
_VERSION_RE = re.compile(r"Android Debug Bridge version\s+(\S+)")


class _Identifier(str, Enum):
    """String enum that renders as its bare value in str() and f-strings."""

    def __str__(self) -> str:
        return str(self.value)

    def __format__(self, format_spec: str) -> str:
        return format(str(self.value), format_spec)


class ProbeOutcome(_Identifier):
    """Result of reading a sentinel command whose *absence* of output is meaningful."""

    PRESENT = "present"
    ABSENT = "absent"


class DeviceOs(_Identifier):
    UBUNTU_TOUCH = "ubuntutouch"
    ANDROID = "android"


def probe_outcome(stdout: Optional[str]) -> ProbeOutcome:
    if stdout:
        return ProbeOutcome.PRESENT
    return ProbeOutcome.ABSENT


def parse_serialno(stdout: Optional[str]) -> str:
    serial = (stdout or "").rstrip()
    # `adb get-serialno` prints "unknown" when nothing is attached.
    if not _SERIAL_RE.match(serial) or serial == "unknown":
        raise InvalidDeviceIdError(stdout)
    return serial


def parse_os(stdout: Optional[str]) -> DeviceOs:
    if probe_outcome(stdout) is ProbeOutcome.PRESENT:
        return DeviceOs.UBUNTU_TOUCH
    return DeviceOs.ANDROID


def parse_access(stdout: Optional[str]) -> bool:
    return stdout == "."


def parse_prop_file(text: Optional[str]) -> Dict[str, str]:
    """Parse a ``build.prop``/``default.prop`` style ``key=value`` listing."""

    props: Dict[str, str] = {}
    for raw_line in (text or "").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        if key:
            props[key] = value.strip()
    return props


def parse_version(stdout: Optional[str]) -> Optional[str]:
    text = (stdout or "").strip()
    if not text:
        return None
    m = _VERSION_RE.search(text)
    if m:
        return m.group(1)
    return text.splitlines()[0].strip()
