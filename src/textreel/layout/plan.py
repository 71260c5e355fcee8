"""
Overlay plan shared by the ffmpeg renderer and the preview compositor.

A plan bundles the crop rectangle, the wrapped text and the box geometry
for one source frame and one style. The ffmpeg side turns it into filter
arguments; the preview side consumes `to_instructions()` as explicit
drawing steps.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from textreel.layout.geometry import TARGET, CropRect, Frame, compute_crop, round_half_away
from textreel.layout.text import Measure, TextBlock, TextBoxLayout, compute_text_box_layout, layout_text

if TYPE_CHECKING:
    from textreel.styles.base import OverlayStyle


@dataclass(frozen=True)
class OverlayPlan:
    source: Frame
    target: Frame
    style: OverlayStyle
    crop: CropRect
    font_size: int
    text: TextBlock
    box: TextBoxLayout

    def to_instructions(self) -> dict[str, Any]:
        box_x, box_y, box_w, box_h = self.box.pixel_rect()
        return {
            "style": self.style.name,
            "source": {"width": self.source.width, "height": self.source.height},
            "source_rect": {
                "x": self.crop.x,
                "y": self.crop.y,
                "width": self.crop.width,
                "height": self.crop.height,
            },
            "dest_rect": {"x": 0, "y": 0, "width": self.target.width, "height": self.target.height},
            "box_rect": {"x": box_x, "y": box_y, "width": box_w, "height": box_h},
            "box_color": self.style.box_color,
            "box_opacity": self.style.box_opacity,
            "text_color": self.style.text_color,
            "font_size": self.font_size,
            "bold": self.style.bold,
            "align": "center",
            "baseline": "middle",
            "lines": [
                {
                    "text": line,
                    "x": round_half_away(self.box.text_x),
                    "y": round_half_away(y),
                }
                for line, y in zip(self.text.lines, self.box.line_ys)
            ],
            "overflowing_lines": list(self.text.overflowing),
        }


def build_overlay_plan(
    source: Frame,
    text: str,
    style: OverlayStyle,
    measure: Measure,
    *,
    target: Frame = TARGET,
) -> OverlayPlan:
    crop = compute_crop(source, target)
    line_height = style.resolve_line_height(target)
    block = layout_text(
        text,
        measure,
        max_width=style.text_width(target),
        line_height=line_height,
    )
    box = compute_text_box_layout(
        block.lines,
        line_height,
        style.padding,
        style.anchor_y(target),
        target.width,
    )
    return OverlayPlan(
        source=source,
        target=target,
        style=style,
        crop=crop,
        font_size=style.resolve_font_size(target),
        text=block,
        box=box,
    )
