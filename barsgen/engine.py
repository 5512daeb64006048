"""Orchestrator — validates a PatternConfig and runs ffmpeg."""

from dataclasses import dataclass, field
from typing import Callable

from barsgen import ffutil
from barsgen.config import PatternConfig
from barsgen.layout import compute_geometry, parse_size
from barsgen.models import EncodingProfile
from barsgen.profiles import get_profile
from barsgen.timecode import parse_rate


class MissingFileError(FileNotFoundError):
    """Raised when a file referenced by the configuration does not exist."""

    def __init__(self, kind: str, path) -> None:
        super().__init__(f"{kind} file not found: {path}")
        self.kind = kind
        self.path = path

    def __str__(self) -> str:
        return self.args[0]


@dataclass
class EngineResult:
    command: list[str] = field(default_factory=list)
    returncode: int = 0


def prepare(
    config: PatternConfig,
    extra_profiles: dict[str, EncodingProfile] | None = None,
) -> list[str]:
    """Validate *config* and return the ffmpeg argv without running it."""
    if config.logo is not None and not config.logo.is_file():
        raise MissingFileError("Logo", config.logo)
    if config.fontfile is not None and not config.fontfile.is_file():
        raise MissingFileError("Font", config.fontfile)

    parse_rate(config.framerate)
    width, height = parse_size(config.size)
    if not 0 < config.beep_length < 1:
        raise ValueError(f"beep_length must be between 0 and 1 second, got {config.beep_length}")

    profile = get_profile(config.profile, extra_profiles)
    geometry = compute_geometry(width, height)
    return ffutil.build_command(config, profile, geometry)


def generate(
    config: PatternConfig,
    extra_profiles: dict[str, EncodingProfile] | None = None,
    on_command: Callable[[list[str]], None] | None = None,
) -> EngineResult:
    """Build the command and run ffmpeg to completion.

    *on_command* is called with the argv just before ffmpeg starts.

    ffmpeg's exit code is reported as-is; rendering errors are ffmpeg's to
    describe on its own stderr.
    """
    cmd = prepare(config, extra_profiles)
    ffutil.check_ffmpeg(config.ffmpeg)
    if on_command:
        on_command(cmd)
    returncode = ffutil.run(cmd)
    return EngineResult(command=cmd, returncode=returncode)
