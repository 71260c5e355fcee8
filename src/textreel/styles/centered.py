from .base import OverlayStyle

CENTERED = OverlayStyle(
    "centered",
    0.5,
    font_size=72,
    line_height_ratio=1.5,
    padding=32,
    text_color="white",
    box_color="black",
    box_opacity=0.5,
    bold=False,
)
