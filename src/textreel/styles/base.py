from __future__ import annotations

from dataclasses import dataclass

from textreel.layout.geometry import Frame


@dataclass(frozen=True)
class OverlayStyle:
    name: str
    anchor_fraction: float
    font_size: int | None = None
    line_height_ratio: float = 1.5
    padding: int = 40
    text_color: str = "white"
    box_color: str = "black"
    box_opacity: float = 0.5
    bold: bool = True
    font_name: str = "Arial"

    def resolve_font_size(self, target: Frame) -> int:
        # None means responsive to the canvas width.
        if self.font_size is not None:
            return self.font_size
        return target.width // 20

    def resolve_line_height(self, target: Frame) -> int:
        return int(self.resolve_font_size(target) * self.line_height_ratio)

    def text_width(self, target: Frame) -> int:
        return target.width - self.padding * 2

    def anchor_y(self, target: Frame) -> float:
        return target.height * self.anchor_fraction
