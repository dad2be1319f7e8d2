from __future__ import annotations

import json
import sys
from pathlib import Path

import yaml

try:
    import tomllib as toml
except ImportError:
    import tomli as toml

# Keys the CLI reads from a config file, with the value types it accepts.
CONFIG_KEYS: dict[str, tuple[type, ...]] = {
    "posts": (str,),
    "output": (str,),
    "host": (str,),
    "port": (int,),
    "port_attempts": (int,),
    "dev": (bool,),
    "serve": (bool,),
    "clean": (bool,),
}
PARSERS = {
    ".toml": ("TOML", toml.loads, toml.TOMLDecodeError),
    ".yml": ("YAML", yaml.safe_load, yaml.YAMLError),
    ".yaml": ("YAML", yaml.safe_load, yaml.YAMLError),
    ".json": ("JSON", json.loads, json.JSONDecodeError),
}


def _fail(message: str) -> None:
    print(message, file=sys.stderr)
    sys.exit(1)


def validate_config(data: dict, path: Path) -> dict:
    """Check known keys against their types; unknown keys are reported and dropped."""
    config = {}
    for key, value in data.items():
        expected = CONFIG_KEYS.get(key)
        if expected is None:
            print(f"Ignoring unknown config key {key!r} in {path}", file=sys.stderr)
            continue
        # bool is an int subclass, so a port of `true` has to be refused explicitly
        if not isinstance(value, expected) or (bool not in expected and isinstance(value, bool)):
            names = " or ".join(t.__name__ for t in expected)
            _fail(f"Config key {key!r} in {path} must be {names}, got {value!r}")
        config[key] = value
    return config


def load_config(path: Path) -> dict:
    if not path.exists():
        return {}
    label, loads, error = PARSERS.get(path.suffix.lower(), PARSERS[".json"])
    try:
        data = loads(path.read_text(encoding="utf-8"))
    except error as exc:
        _fail(f"Invalid {label} in config file {path}: {exc}")
    if data is None and label == "YAML":
        return {}
    if not isinstance(data, dict):
        _fail(f"{label} config must be a mapping: {path}")
    return validate_config(data, path)
