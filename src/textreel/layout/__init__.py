from .geometry import TARGET, CropRect, Frame, compute_crop, round_half_away
from .plan import OverlayPlan, build_overlay_plan
from .text import TextBlock, TextBoxLayout, compute_text_box_layout, layout_text, wrap_text

__all__ = [
    "TARGET",
    "CropRect",
    "Frame",
    "OverlayPlan",
    "TextBlock",
    "TextBoxLayout",
    "build_overlay_plan",
    "compute_crop",
    "compute_text_box_layout",
    "layout_text",
    "round_half_away",
    "wrap_text",
]
