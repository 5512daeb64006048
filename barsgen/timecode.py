"""Frame-rate parsing and timecode formatting."""

import re
from fractions import Fraction

DROP_FRAME_SEPARATOR = ";"
NON_DROP_FRAME_SEPARATOR = ":"

_INTEGER_RE = re.compile(r"^\d+$")
_DECIMAL_RE = re.compile(r"^\d+(\.\d+)?$")
_RATIO_RE = re.compile(r"^(\d+)/(\d+)$")

# Decimal spellings of the 1000/1001 family
_NTSC_RATES = {
    "23.976": Fraction(24000, 1001),
    "23.98": Fraction(24000, 1001),
    "29.97": Fraction(30000, 1001),
    "47.952": Fraction(48000, 1001),
    "59.94": Fraction(60000, 1001),
}


def is_integer_rate(rate: str) -> bool:
    """True when *rate* is written as a whole integer, e.g. ``"25"``."""
    return bool(_INTEGER_RE.match(rate.strip()))


def parse_rate(rate: str) -> Fraction:
    """Parse an integer, decimal or ``num/den`` frame rate.

    Raises ValueError for anything ffmpeg would not take as a positive rate.
    """
    text = rate.strip()
    if text in _NTSC_RATES:
        value = _NTSC_RATES[text]
    elif m := _RATIO_RE.match(text):
        num, den = int(m.group(1)), int(m.group(2))
        if den == 0:
            raise ValueError(f"Invalid framerate {rate!r}: zero denominator")
        value = Fraction(num, den)
    elif _DECIMAL_RE.match(text):
        value = Fraction(text)
    else:
        raise ValueError(f"Invalid framerate {rate!r}")

    if value <= 0:
        raise ValueError(f"Invalid framerate {rate!r}: must be positive")
    return value


def timecode_separator(rate: str) -> str:
    """Separator placed before the frame field of the timecode.

    Drop-frame (``;``) is the default; a whole-integer framerate string
    switches to non-drop-frame (``:``).
    """
    if is_integer_rate(rate):
        return NON_DROP_FRAME_SEPARATOR
    return DROP_FRAME_SEPARATOR


def start_timecode(rate: str) -> str:
    return f"00:00:00{timecode_separator(rate)}00"
