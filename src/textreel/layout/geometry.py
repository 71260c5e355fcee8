"""
Crop-and-fit geometry for the vertical output canvas.

Maps an arbitrary source resolution onto the fixed 9:16 target by
selecting the largest centred sub-rectangle with the target's shape.
Both the ffmpeg renderer and the preview compositor call `compute_crop`,
so rounding goes through `round_half_away` everywhere.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from textreel.exceptions import InvalidDimensionsError


@dataclass(frozen=True)
class Frame:
    width: int
    height: int


@dataclass(frozen=True)
class CropRect:
    x: int
    y: int
    width: int
    height: int

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.x, self.y, self.width, self.height)


TARGET_WIDTH = 1080
TARGET_HEIGHT = 1920
TARGET = Frame(TARGET_WIDTH, TARGET_HEIGHT)


def round_half_away(value: float) -> int:
    """Round to the nearest integer, ties away from zero (2.5 -> 3, -2.5 -> -3)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _require_positive(frame: Frame, label: str) -> None:
    if frame.width <= 0 or frame.height <= 0:
        raise InvalidDimensionsError(
            f"Invalid {label} dimensions: {frame.width}x{frame.height}"
        )


def compute_crop(source: Frame, target: Frame = TARGET) -> CropRect:
    _require_positive(source, "source")
    _require_positive(target, "target")

    # Exact shape comparison; float ratios misorder equal aspects.
    if source.width * target.height > target.width * source.height:
        crop_h = source.height
        crop_w = max(1, round_half_away(source.height * target.width / target.height))
        x = round_half_away((source.width - crop_w) / 2)
        y = 0
    else:
        crop_w = source.width
        crop_h = max(1, round_half_away(source.width * target.height / target.width))
        x = 0
        y = round_half_away((source.height - crop_h) / 2)

    return CropRect(x=x, y=y, width=crop_w, height=crop_h)
