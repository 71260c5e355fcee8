from __future__ import annotations

from pathlib import Path

from PIL import ImageFont

from textreel.exceptions import ConfigurationError
from textreel.layout.text import Measure

# Average glyph advance as a fraction of the font size.
DEFAULT_GLYPH_RATIO = 0.6


def estimate_measure(font_size: int, glyph_ratio: float = DEFAULT_GLYPH_RATIO) -> Measure:
    def measure(text: str) -> float:
        return len(text) * font_size * glyph_ratio

    return measure


def pillow_measure(font: ImageFont.FreeTypeFont | ImageFont.ImageFont) -> Measure:
    def measure(text: str) -> float:
        return float(font.getlength(text))

    return measure


def load_font(font_path: str | None, font_size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """
    Load the overlay font at `font_size`.

    Falls back to Pillow's bundled scalable font when no path is configured.
    A configured path that cannot be read is a configuration error.
    """
    if not font_path:
        return ImageFont.load_default(size=font_size)
    path = Path(font_path).expanduser()
    if not path.exists():
        raise ConfigurationError(f"Font file not found: {path}")
    try:
        return ImageFont.truetype(str(path), font_size)
    except OSError as exc:
        raise ConfigurationError(f"Unable to load font {path}: {exc}") from exc


def server_measure(font_path: str | None, font_size: int) -> Measure:
    """Real metrics when a font file is configured, else the glyph-width estimate."""
    if font_path:
        return pillow_measure(load_font(font_path, font_size))
    return estimate_measure(font_size)
