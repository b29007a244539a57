"""Config file and environment loading for the adb client.

Precedence (highest first): explicit overrides, environment, config file,
built-in defaults. The file may be YAML or JSON; its top level must be an
object matching ``schemas/client_config.schema.json``.
"""

from __future__ import annotations

import functools
import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from jsonschema import Draft202012Validator

from adb_bridge.errors import ConfigError
from adb_bridge.runner import ADB_PATH_ENV, make_runner

SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "client_config.schema.json"

PORT_ENV = "ADB_BRIDGE_PORT"
LOG_LEVEL_ENV = "ADB_BRIDGE_LOG_LEVEL"


_LOADERS = {
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
    ".json": json.loads,
}


def read_config_file(path: Path) -> Dict[str, Any]:
    """Read a client config file. An empty file is an empty config."""

    loader = _LOADERS.get(path.suffix.lower())
    if loader is None:
        raise ValueError(f"{path}: config files must be .yaml, .yml or .json")
    text = path.read_text(encoding="utf-8")
    data = loader(text) if text.strip() else None
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping of options, got {type(data).__name__}")
    return data


@functools.lru_cache(maxsize=1)
def _validator() -> Draft202012Validator:
    return Draft202012Validator(json.loads(SCHEMA_PATH.read_text(encoding="utf-8")))


def validate_config(options: Mapping[str, Any], *, source: str) -> None:
    problems = []
    for err in _validator().iter_errors(dict(options)):
        option = err.path[0] if err.path else "<config>"
        problems.append(f"{source}: {option}: {err.message}")
    if problems:
        raise ConfigError("\n".join(sorted(problems)))


def _from_env(env: Mapping[str, str]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    if env.get(PORT_ENV):
        raw = env[PORT_ENV]
        try:
            out["port"] = int(raw)
        except ValueError as e:
            raise ConfigError(f"{PORT_ENV} must be an integer, got {raw!r}") from e
    if env.get(ADB_PATH_ENV):
        out["adb_path"] = env[ADB_PATH_ENV]
    if env.get(LOG_LEVEL_ENV):
        out["log_level"] = env[LOG_LEVEL_ENV].upper()
    return out


def load_settings(
    path: Optional[Path] = None,
    *,
    env: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Merge file, environment and overrides into one validated settings dict."""

    settings: Dict[str, Any] = {}
    if path is not None:
        data = read_config_file(path)
        validate_config(data, source=str(path))
        settings.update(data)

    from_env = _from_env(os.environ if env is None else env)
    validate_config(from_env, source="environment")
    settings.update(from_env)

    extra = {k: v for k, v in (overrides or {}).items() if v is not None}
    validate_config(extra, source="overrides")
    settings.update(extra)
    return settings


def client_options(settings: Mapping[str, Any]) -> Dict[str, Any]:
    """Translate settings into the options mapping ``AdbClient`` accepts."""

    options: Dict[str, Any] = {}
    if "port" in settings:
        options["port"] = settings["port"]
    if "adb_path" in settings:
        options["exec"] = make_runner(settings["adb_path"])
    return options
