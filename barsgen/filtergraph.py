"""Filtergraph construction for the test pattern.

ffmpeg parses a filtergraph at two levels: first the graph description
(filters split on ``,`` ``;`` and pad labels), then each filter's option
string (split on ``:``). Values that may contain special characters are
escaped for the option level first, then for the graph level.
"""

from barsgen.config import PatternConfig
from barsgen.layout import shuttle_x_expr
from barsgen.models import Geometry
from barsgen.timecode import start_timecode

AUDIO_SAMPLE_RATE = 48000

CLOCK_FORMAT = "%Y-%m-%d %T"


def escape_value(text: str) -> str:
    """Escape a single filter option value."""
    for ch in ("\\", "'", ":"):
        text = text.replace(ch, "\\" + ch)
    return text


def escape_graph(text: str) -> str:
    """Escape a filter's argument string for the graph description."""
    for ch in ("\\", "'", "[", "]", ",", ";"):
        text = text.replace(ch, "\\" + ch)
    return text


def escape_text(text) -> str:
    """Escape a filter option value for both parsing levels."""
    return escape_graph(escape_value(str(text)))


def beep_condition(config: PatternConfig) -> str:
    """True during the first ``beep_length`` seconds of every second.

    Shared by the audio gate and the visual flash so both land on the
    same frames.
    """
    return f"lt(mod(t,1),{config.beep_length})"


def _filter(name: str, **options) -> str:
    """Render ``name=k=v:k=v`` with every value escaped."""
    if not options:
        return name
    return name + "=" + ":".join(f"{k}={escape_text(v)}" for k, v in options.items())


def _font_options(config: PatternConfig) -> dict:
    if config.fontfile:
        return {"fontfile": str(config.fontfile)}
    return {}


def _video_chain(config: PatternConfig, g: Geometry) -> list[str]:
    """Overlay filters applied in order on top of the bars."""
    font = _font_options(config)
    chain = [
        # Header
        _filter(
            "drawbox",
            x=g.header_x, y=g.header_y, w=g.header_w, h=g.header_h,
            color="black@0.8", t="fill",
        ),
        _filter(
            "drawtext",
            **font,
            expansion="none",
            text=config.header,
            fontsize=g.header_font,
            fontcolor="white",
            x=g.header_x + g.header_pad,
            y=f"{g.header_y}+({g.header_h}-text_h)/2",
        ),
        # Info box: clock, timecode, shuttle track
        _filter(
            "drawbox",
            x=g.box_x, y=g.box_y, w=g.box_w, h=g.box_h,
            color="black@0.8", t="fill",
        ),
        _filter(
            "drawtext",
            **font,
            text=f"%{{localtime:{CLOCK_FORMAT}}}",
            fontsize=g.clock_font,
            fontcolor="white",
            x="(w-text_w)/2",
            y=g.box_y + g.box_h // 10,
        ),
        _filter(
            "drawtext",
            **font,
            timecode=start_timecode(config.framerate),
            rate=config.framerate,
            tc24hmax=1,
            fontsize=g.timecode_font,
            fontcolor="white",
            x="(w-text_w)/2",
            y=g.box_y + g.box_h * 2 // 5,
        ),
        _filter(
            "drawbox",
            x=g.track_x, y=g.track_y, w=g.track_w, h=g.shuttle_h,
            color="gray@0.6", t="fill",
        ),
        # Flash square, lit while the beep sounds
        _filter(
            "drawbox",
            x=g.flash_x, y=g.flash_y, w=g.flash_size, h=g.flash_size,
            color="white", t="fill",
            enable=beep_condition(config),
        ),
    ]
    return chain


def _beep_expr(config: PatternConfig) -> str:
    tone = f"0.5*sin(2*PI*{config.beep_frequency}*t)"
    return f"if({beep_condition(config)},{tone},0)"


def build_filter_complex(
    config: PatternConfig, geometry: Geometry, has_logo: bool = False
) -> str:
    """Return the ``-filter_complex`` graph producing ``[vout]`` and ``[aout]``.

    When *has_logo* is set the logo is expected as input ``0:v``. It is the
    only ``-i`` input; the bars, shuttle and audio are sources inside the
    graph and take no input index.
    """
    g = geometry
    rate = config.framerate
    parts: list[str] = []

    parts.append(
        _filter("smptehdbars", size=f"{g.width}x{g.height}", rate=rate) + "[bars]"
    )
    parts.append(
        _filter("color", c="white", size=f"{g.shuttle_w}x{g.shuttle_h}", rate=rate)
        + "[shuttle]"
    )
    parts.append("[bars]" + ",".join(_video_chain(config, g)) + "[base]")

    video_out = "[video]" if config.realtime else "[vout]"
    shuttle_out = "[shuttled]" if has_logo else video_out
    parts.append(
        "[base][shuttle]"
        + _filter("overlay", x=shuttle_x_expr(g), y=g.track_y, eval="frame")
        + shuttle_out
    )

    if has_logo:
        parts.append("[0:v]" + _filter("scale", w=-2, h=g.logo_h) + "[logo]")
        parts.append(
            "[shuttled][logo]"
            + _filter(
                "overlay",
                x=f"{g.header_x + g.header_w - g.header_pad}-overlay_w",
                y=g.header_y + g.header_pad,
                eof_action="repeat",
            )
            + video_out
        )

    if config.realtime:
        parts.append("[video]realtime[vout]")

    beep = _beep_expr(config)
    audio = _filter(
        "aevalsrc",
        exprs=f"{beep}|{beep}",
        s=AUDIO_SAMPLE_RATE,
    )
    audio_tail = ",arealtime" if config.realtime else ""
    parts.append(audio + audio_tail + "[aout]")

    return ";".join(parts)

