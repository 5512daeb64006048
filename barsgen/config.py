"""Pattern configuration and JSON config file loading."""

import json
import os
import socket
from dataclasses import dataclass, field, fields
from pathlib import Path

DEFAULT_DURATION = "60"
DEFAULT_FRAMERATE = "30000/1001"
DEFAULT_PROFILE = "h264"
DEFAULT_SIZE = "1920x1080"


def short_hostname() -> str:
    """Hostname up to the first dot."""
    return socket.gethostname().split(".")[0]


def default_ffmpeg() -> str:
    return os.environ.get("BARSGEN_FFMPEG", "ffmpeg")


@dataclass
class PatternConfig:
    """Everything needed to build one ffmpeg invocation."""

    output_format: str | None = None
    output_target: str | None = None
    duration: str = DEFAULT_DURATION
    framerate: str = DEFAULT_FRAMERATE
    header: str = field(default_factory=short_hostname)
    logo: Path | None = None
    profile: str = DEFAULT_PROFILE
    size: str = DEFAULT_SIZE
    fontfile: Path | None = None
    beep_frequency: float = 1000.0
    beep_length: float = 0.1
    realtime: bool = False
    overwrite: bool = True
    loglevel: str = "info"
    ffmpeg: str = field(default_factory=default_ffmpeg)


@dataclass
class ConfigFile:
    """Parsed contents of a JSON config file."""

    values: dict
    profiles: dict = field(default_factory=dict)


# JSON type expected for each PatternConfig field
_FIELD_TYPES = {
    "output_format": str,
    "output_target": str,
    "duration": str,
    "framerate": str,
    "header": str,
    "logo": Path,
    "profile": str,
    "size": str,
    "fontfile": Path,
    "beep_frequency": float,
    "beep_length": float,
    "realtime": bool,
    "overwrite": bool,
    "loglevel": str,
    "ffmpeg": str,
}
_NULLABLE_FIELDS = {"output_format", "output_target", "logo", "fontfile"}
# Allow `"duration": 30` and `"framerate": 25` in JSON
_NUMERIC_STR_FIELDS = {"duration", "framerate"}
_TYPE_NAMES = {str: "a string", Path: "a path string", float: "a number", bool: "true or false"}


def check_values(data: dict) -> dict:
    """Check JSON values against the PatternConfig field types.

    Returns the values converted to their field types; raises ValueError
    naming the first key with the wrong type.
    """
    values = {}
    for key, value in data.items():
        kind = _FIELD_TYPES[key]
        if value is None and key in _NULLABLE_FIELDS:
            values[key] = None
            continue

        is_number = isinstance(value, (int, float)) and not isinstance(value, bool)
        if kind is Path and isinstance(value, str):
            value = Path(value)
        elif kind is float and is_number:
            value = float(value)
        elif key in _NUMERIC_STR_FIELDS and is_number:
            value = str(value)

        if not isinstance(value, kind):
            raise ValueError(
                f"'{key}' must be {_TYPE_NAMES[kind]}, got {type(value).__name__}"
            )
        values[key] = value
    return values


def load_config(path: str | Path) -> ConfigFile:
    """Load and validate a JSON config file.

    Top-level keys must be ``PatternConfig`` field names, plus an optional
    ``profiles`` object describing extra encoding profiles.
    """
    path = Path(path)
    data = json.loads(path.read_text())

    if not isinstance(data, dict):
        raise ValueError(f"Config {path} must contain a JSON object")

    profiles = data.pop("profiles", {})
    if not isinstance(profiles, dict):
        raise ValueError("Config 'profiles' must be an object")

    known = {f.name for f in fields(PatternConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(unknown)}")

    return ConfigFile(values=check_values(data), profiles=profiles)


def make_config(base: dict | None = None, **overrides) -> PatternConfig:
    """Build a PatternConfig from config-file values and explicit overrides.

    Overrides whose value is None are ignored so unset CLI flags do not mask
    config-file values.
    """
    values = dict(base or {})
    values.update({k: v for k, v in overrides.items() if v is not None})
    return PatternConfig(**values)
