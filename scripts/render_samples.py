#!/usr/bin/env python3
"""Render a short test pattern sample for every built-in encoding profile.

Useful for eyeballing layout changes and checking that the local ffmpeg
build has every encoder the profiles need:

  scripts/render_samples.py [OUTPUT_DIR] [SECONDS]
"""

import sys
from pathlib import Path

from barsgen.config import PatternConfig
from barsgen.engine import generate
from barsgen.profiles import BUILTIN_PROFILES

# Container per profile
CONTAINERS = {
    "h264": ("mp4", ".mp4"),
    "h264-lowlatency": ("mpegts", ".ts"),
    "hevc": ("mp4", ".mp4"),
    "mpeg2": ("mpegts", ".ts"),
    "prores": ("mov", ".mov"),
    "ffv1": ("matroska", ".mkv"),
}


def render_samples(output_dir: Path, seconds: str = "5") -> int:
    output_dir.mkdir(parents=True, exist_ok=True)
    failures = 0
    for name in BUILTIN_PROFILES:
        fmt, ext = CONTAINERS.get(name, ("matroska", ".mkv"))
        target = output_dir / f"bars_{name}{ext}"
        config = PatternConfig(
            output_format=fmt,
            output_target=str(target),
            duration=seconds,
            header=f"barsgen sample: {name}",
            profile=name,
            loglevel="error",
        )
        result = generate(config)
        if result.returncode == 0:
            print(f"Generated: {target}")
        else:
            failures += 1
            print(f"Failed ({result.returncode}): {target}", file=sys.stderr)
    return 1 if failures else 0


if __name__ == "__main__":
    out = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("samples")
    secs = sys.argv[2] if len(sys.argv) > 2 else "5"
    sys.exit(render_samples(out, secs))
