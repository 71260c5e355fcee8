from __future__ import annotations

from textreel.exceptions import ConfigurationError

from .base import OverlayStyle
from .centered import CENTERED
from .lower_third import LOWER_THIRD

STYLES: dict[str, OverlayStyle] = {
    "lower-third": LOWER_THIRD,
    "lower_third": LOWER_THIRD,
    "default": LOWER_THIRD,
    "centered": CENTERED,
    "center": CENTERED,
}


def list_styles() -> list[str]:
    return sorted({style.name for style in STYLES.values()})


def get_style(name: str | None) -> OverlayStyle:
    if name is None:
        return LOWER_THIRD
    key = name.strip().lower()
    if key not in STYLES:
        valid = ", ".join(sorted(STYLES))
        raise ConfigurationError(f"Unknown style '{name}'. Use one of: {valid}.")
    return STYLES[key]


__all__ = ["CENTERED", "LOWER_THIRD", "OverlayStyle", "STYLES", "get_style", "list_styles"]
