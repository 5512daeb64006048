"""Encoding profiles — named sets of ffmpeg output options."""

import sys

from barsgen.models import EncodingProfile


class ProfileNotFoundError(KeyError):
    """Raised when an encoding profile name is not defined."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


_AAC = ["-c:a", "aac", "-b:a", "192k", "-ar", "48000"]
_PCM = ["-c:a", "pcm_s24le", "-ar", "48000"]

BUILTIN_PROFILES: dict[str, EncodingProfile] = {
    p.name: p
    for p in (
        EncodingProfile(
            name="h264",
            description="H.264 8-bit 4:2:0, 6 Mb/s CBR-ish, AAC",
            video=[
                "-c:v", "libx264", "-preset", "veryfast",
                "-pix_fmt", "yuv420p",
                "-b:v", "6M", "-maxrate", "6M", "-bufsize", "12M",
                "-g", "60",
            ],
            audio=_AAC,
        ),
        EncodingProfile(
            name="h264-lowlatency",
            description="H.264 zerolatency for live streaming, AAC",
            video=[
                "-c:v", "libx264", "-preset", "ultrafast", "-tune", "zerolatency",
                "-pix_fmt", "yuv420p",
                "-b:v", "3M", "-maxrate", "3M", "-bufsize", "3M",
                "-g", "30",
            ],
            audio=_AAC,
        ),
        EncodingProfile(
            name="hevc",
            description="HEVC 8-bit 4:2:0, CRF 23, AAC",
            video=[
                "-c:v", "libx265", "-preset", "medium", "-crf", "23",
                "-pix_fmt", "yuv420p", "-tag:v", "hvc1",
            ],
            audio=_AAC,
        ),
        EncodingProfile(
            name="mpeg2",
            description="MPEG-2 4:2:0 15 Mb/s, MP2 audio",
            video=[
                "-c:v", "mpeg2video", "-pix_fmt", "yuv420p",
                "-b:v", "15M", "-maxrate", "15M", "-bufsize", "9781248",
                "-g", "15", "-bf", "2",
            ],
            audio=["-c:a", "mp2", "-b:a", "384k", "-ar", "48000"],
        ),
        EncodingProfile(
            name="prores",
            description="ProRes 422 HQ 10-bit, PCM 24-bit",
            video=[
                "-c:v", "prores_ks", "-profile:v", "3",
                "-pix_fmt", "yuv422p10le", "-vendor", "apl0",
            ],
            audio=_PCM,
        ),
        EncodingProfile(
            name="ffv1",
            description="FFV1 version 3 lossless 10-bit 4:2:2, PCM 24-bit",
            video=[
                "-c:v", "ffv1", "-level", "3", "-g", "1",
                "-slicecrc", "1", "-slices", "16",
                "-pix_fmt", "yuv422p10le",
            ],
            audio=_PCM,
        ),
    )
}


def load_profiles(data: dict) -> dict[str, EncodingProfile]:
    """Build profiles from a ``{"name": {"video": [...], "audio": [...]}}`` map."""
    profiles: dict[str, EncodingProfile] = {}
    for name, spec in data.items():
        if not isinstance(spec, dict):
            raise ValueError(f"Profile {name!r} must be an object")
        video = spec.get("video", [])
        audio = spec.get("audio", [])
        if not all(isinstance(a, str) for a in [*video, *audio]):
            raise ValueError(f"Profile {name!r}: options must be lists of strings")
        profiles[name] = EncodingProfile(
            name=name,
            description=spec.get("description", ""),
            video=list(video),
            audio=list(audio),
        )
    return profiles


def all_profiles(
    extra: dict[str, EncodingProfile] | None = None,
) -> dict[str, EncodingProfile]:
    """Built-in profiles, overridden or extended by *extra*."""
    return {**BUILTIN_PROFILES, **(extra or {})}


def get_profile(
    name: str, extra: dict[str, EncodingProfile] | None = None
) -> EncodingProfile:
    profiles = all_profiles(extra)
    if name not in profiles:
        raise ProfileNotFoundError(
            f"Unknown profile {name!r} (available: {', '.join(sorted(profiles))})"
        )
    return profiles[name]


def format_profiles(extra: dict[str, EncodingProfile] | None = None) -> str:
    profiles = all_profiles(extra)
    width = max(len(name) for name in profiles)
    lines = ["Available encoding profiles:"]
    for name in sorted(profiles):
        lines.append(f"  {name:<{width}}  {profiles[name].description}")
    return "\n".join(lines)


def main(extra: dict[str, EncodingProfile] | None = None) -> int:
    """List encoding profiles (the ``barsgen-profiles`` command)."""
    print(format_profiles(extra))
    sys.stdout.flush()
    return 0
