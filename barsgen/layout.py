"""Layout geometry for the test pattern overlays."""

import re

from barsgen.models import Geometry

_SIZE_RE = re.compile(r"^(\d+)x(\d+)$")


def parse_size(size: str) -> tuple[int, int]:
    """Parse ``"WxH"`` into positive, even (width, height)."""
    m = _SIZE_RE.match(size.strip().lower())
    if not m:
        raise ValueError(f"Invalid size {size!r}: expected WIDTHxHEIGHT")
    width, height = int(m.group(1)), int(m.group(2))
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid size {size!r}: dimensions must be positive")
    if width % 2 or height % 2:
        raise ValueError(f"Invalid size {size!r}: dimensions must be even")
    return width, height


def compute_geometry(width: int, height: int) -> Geometry:
    """Derive every overlay position from the frame size.

    The header runs across the top of the frame; the info box (clock,
    timecode, shuttle track and flash square) sits in the centre.
    """
    margin = round(height * 0.04)

    header_h = round(height * 0.09)
    header_pad = header_h // 8

    box_w = width // 2
    box_h = height // 4
    box_x = (width - box_w) // 2
    box_y = (height - box_h) // 2

    shuttle_h = max(2, box_h // 10)
    shuttle_w = max(4, width // 120)

    flash_size = box_h // 5

    return Geometry(
        width=width,
        height=height,
        margin=margin,
        header_x=margin,
        header_y=margin,
        header_w=width - 2 * margin,
        header_h=header_h,
        header_pad=header_pad,
        header_font=round(header_h * 0.6),
        logo_h=header_h - 2 * header_pad,
        box_x=box_x,
        box_y=box_y,
        box_w=box_w,
        box_h=box_h,
        clock_font=box_h // 6,
        timecode_font=box_h // 4,
        track_x=box_x + margin,
        track_y=box_y + box_h - margin // 2 - shuttle_h,
        track_w=box_w - 2 * margin,
        shuttle_w=shuttle_w,
        shuttle_h=shuttle_h,
        flash_x=box_x + box_w - margin // 2 - flash_size,
        flash_y=box_y + margin // 2,
        flash_size=flash_size,
    )


def shuttle_x_expr(geometry: Geometry) -> str:
    """ffmpeg expression for the shuttle's left edge at time ``t``.

    A triangle wave: the shuttle sweeps left to right during even seconds
    and back during odd seconds, so its position encodes the fraction of
    the current second.
    """
    travel = geometry.track_w - geometry.shuttle_w
    frac = "(t-trunc(t))"
    wave = f"if(mod(trunc(t),2),1-{frac},{frac})"
    return f"{geometry.track_x}+{travel}*{wave}"
