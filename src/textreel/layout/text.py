"""
Greedy word wrapping and text-box geometry.

The measure function is injected so the same algorithm runs against a
server-side width estimate or real font metrics from the preview.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from textreel.layout.geometry import round_half_away

Measure = Callable[[str], float]


@dataclass(frozen=True)
class TextBlock:
    source_text: str
    max_line_width: float
    line_height: float
    lines: tuple[str, ...]
    # Indices of lines wider than max_line_width (a single unsplittable word).
    overflowing: tuple[int, ...] = ()


@dataclass(frozen=True)
class TextBoxLayout:
    x: float
    y: float
    width: float
    height: float
    text_x: float
    line_ys: tuple[float, ...]

    def pixel_rect(self) -> tuple[int, int, int, int]:
        return (
            round_half_away(self.x),
            round_half_away(self.y),
            round_half_away(self.width),
            round_half_away(self.height),
        )


def wrap_text(text: str, measure: Measure, max_width: float) -> list[str]:
    words = text.split()
    if not words:
        return [""]

    lines: list[str] = []
    current = words[0]
    for word in words[1:]:
        candidate = f"{current} {word}"
        if measure(candidate) < max_width:
            current = candidate
        else:
            lines.append(current)
            current = word
    lines.append(current)
    return lines


def layout_text(
    text: str,
    measure: Measure,
    *,
    max_width: float,
    line_height: float,
) -> TextBlock:
    lines = wrap_text(text, measure, max_width)
    overflowing = tuple(
        i for i, line in enumerate(lines) if line and measure(line) >= max_width
    )
    return TextBlock(
        source_text=text,
        max_line_width=max_width,
        line_height=line_height,
        lines=tuple(lines),
        overflowing=overflowing,
    )


def compute_text_box_layout(
    lines: Sequence[str],
    line_height: float,
    padding_vertical: float,
    anchor_y: float,
    box_width: float,
) -> TextBoxLayout:
    count = max(len(lines), 1)
    height = count * line_height + 2 * padding_vertical
    top = anchor_y - height / 2
    first = top + padding_vertical + line_height / 2
    return TextBoxLayout(
        x=0.0,
        y=top,
        width=float(box_width),
        height=height,
        text_x=box_width / 2,
        line_ys=tuple(first + i * line_height for i in range(count)),
    )
