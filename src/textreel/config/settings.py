from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Runtime configuration for TextReel.

    All settings are loaded from environment variables with the
    `TEXTREEL_` prefix and optional `.env` support.
    """

    model_config = SettingsConfigDict(
        env_prefix="TEXTREEL_",
        env_file=".env",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Runtime
    # ------------------------------------------------------------------
    workdir: str = Field(
        default=".textreel",
        description="Root directory for per-run workspaces.",
    )
    output_dir: str = Field(
        default=".textreel/published",
        description="Directory that receives published renders.",
    )

    # ------------------------------------------------------------------
    # Overlay
    # ------------------------------------------------------------------
    style: str = Field(
        default="lower-third",
        description="Overlay style (lower-third, centered).",
    )
    font_path: str | None = Field(
        default=None,
        description="TrueType font used for metrics and drawing. Defaults to Pillow's font / ffmpeg's Arial.",
    )
    max_text_chars: int = Field(
        default=100,
        description="Maximum overlay text length after whitespace normalization.",
    )

    # ------------------------------------------------------------------
    # Source download
    # ------------------------------------------------------------------
    download_timeout: float = Field(
        default=60.0,
        description="Timeout in seconds for downloading the source video.",
    )

    # ------------------------------------------------------------------
    # Preview
    # ------------------------------------------------------------------
    preview_interval: float = Field(
        default=0.5,
        description="Seconds between preview loop ticks.",
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR).",
    )

    def to_public_dict(self) -> dict:
        """Settings suitable for logging, run manifests, or CLI display."""
        return {
            "workdir": self.workdir,
            "output_dir": self.output_dir,
            "style": self.style,
            "font_path": self.font_path,
            "max_text_chars": self.max_text_chars,
            "download_timeout": self.download_timeout,
            "preview_interval": self.preview_interval,
            "log_level": self.log_level,
        }
