"""Shared data types used across barsgen."""

from dataclasses import dataclass, field


@dataclass
class Geometry:
    """Pixel layout of the test pattern for one frame size."""

    width: int
    height: int
    margin: int

    header_x: int
    header_y: int
    header_w: int
    header_h: int
    header_pad: int
    header_font: int
    logo_h: int

    box_x: int
    box_y: int
    box_w: int
    box_h: int
    clock_font: int
    timecode_font: int

    track_x: int
    track_y: int
    track_w: int
    shuttle_w: int
    shuttle_h: int

    flash_x: int
    flash_y: int
    flash_size: int


@dataclass
class EncodingProfile:
    """A named set of ffmpeg output options."""

    name: str
    description: str
    video: list[str] = field(default_factory=list)
    audio: list[str] = field(default_factory=list)

    @property
    def args(self) -> list[str]:
        return [*self.video, *self.audio]
