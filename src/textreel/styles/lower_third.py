from .base import OverlayStyle

LOWER_THIRD = OverlayStyle(
    "lower_third",
    0.7,
    font_size=None,
    line_height_ratio=1.5,
    padding=40,
    text_color="white",
    box_color="black",
    box_opacity=0.5,
    bold=True,
)
