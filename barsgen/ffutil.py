"""FFmpeg subprocess helpers."""

import re
import shutil
import subprocess

from barsgen.config import PatternConfig
from barsgen.filtergraph import build_filter_complex
from barsgen.models import EncodingProfile, Geometry


class FFmpegNotFoundError(RuntimeError):
    pass


_DURATION_RE = re.compile(r"^(\d+(\.\d+)?|(\d+:)?\d{1,2}:\d{2}(\.\d+)?)$")


def check_ffmpeg(binary: str = "ffmpeg") -> None:
    """Raise FFmpegNotFoundError if *binary* is not on PATH."""
    if shutil.which(binary) is None:
        raise FFmpegNotFoundError(f"{binary} not found on PATH")


def validate_duration(duration: str) -> str:
    """Accept seconds (``90``, ``1.5``) or ``[HH:]MM:SS[.ms]``."""
    if not _DURATION_RE.match(duration.strip()):
        raise ValueError(f"Invalid duration {duration!r}")
    return duration.strip()


def is_unlimited(duration: str) -> bool:
    """A duration of zero means run until interrupted."""
    return all(ch in "0:." for ch in duration)


def build_command(
    config: PatternConfig, profile: EncodingProfile, geometry: Geometry
) -> list[str]:
    """Assemble the full ffmpeg argv for one test pattern render."""
    if not config.output_format or not config.output_target:
        raise ValueError("Output format and target are required")

    has_logo = config.logo is not None
    filter_complex = build_filter_complex(config, geometry, has_logo=has_logo)

    cmd = [
        config.ffmpeg,
        "-hide_banner",
        "-loglevel", config.loglevel,
    ]
    if config.overwrite:
        cmd.append("-y")
    if has_logo:
        cmd += ["-i", str(config.logo)]

    cmd += [
        "-filter_complex", filter_complex,
        "-map", "[vout]",
        "-map", "[aout]",
    ]
    cmd += profile.args

    duration = validate_duration(config.duration)
    if not is_unlimited(duration):
        cmd += ["-t", duration]

    cmd += ["-f", config.output_format, config.output_target]
    return cmd


def spawn(cmd: list[str]) -> subprocess.Popen:
    """Start ffmpeg; its stdout/stderr go straight to ours."""
    return subprocess.Popen(cmd, stdin=subprocess.DEVNULL)


def run(cmd: list[str]) -> int:
    """Run ffmpeg to completion and return its exit code.

    Ctrl-C stops ffmpeg cleanly so file outputs get their trailer written.
    """
    proc = spawn(cmd)
    try:
        return proc.wait()
    except KeyboardInterrupt:
        proc.terminate()
        return proc.wait()


def exit_status(returncode: int) -> int:
    """Shell-style exit status: a child killed by signal N reports 128 + N."""
    if returncode < 0:
        return 128 - returncode
    return returncode
