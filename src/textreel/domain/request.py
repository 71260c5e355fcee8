from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlparse

from textreel.exceptions import InvalidRequestError


def normalize_text(text: str) -> str:
    return " ".join(text.split()).strip()


@dataclass(frozen=True)
class OverlayRequest:
    text: str
    video_url: str

    @classmethod
    def create(cls, text: str | None, video_url: str | None, *, max_chars: int) -> "OverlayRequest":
        cleaned = normalize_text(text or "")
        url = (video_url or "").strip()
        if not cleaned or not url:
            raise InvalidRequestError("Text and video URL are required")
        if len(cleaned) > max_chars:
            raise InvalidRequestError(
                f"Overlay text is {len(cleaned)} characters; the limit is {max_chars}."
            )
        parsed = urlparse(url)
        if parsed.scheme in {"http", "https"} and not parsed.path.lower().endswith(".mp4"):
            raise InvalidRequestError("Video URL must point to an .mp4 file")
        return cls(text=cleaned, video_url=url)
