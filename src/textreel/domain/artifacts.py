from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class SourceArtifact:
    path: Path
    url: str
    downloaded: bool = False
    width: int | None = None
    height: int | None = None
    duration_seconds: float | None = None


@dataclass(frozen=True)
class VideoArtifact:
    path: Path
    format: str = "mp4"
    line_count: int | None = None
    overflowing_lines: tuple[int, ...] = ()


@dataclass(frozen=True)
class PreviewArtifact:
    path: Path
    seconds: float
    format: str = "png"


@dataclass(frozen=True)
class PublishedVideo:
    url: str
    pathname: str
    content_type: str
    size: int

    def to_response(self) -> dict:
        return {
            "url": self.url,
            "pathname": self.pathname,
            "contentType": self.content_type,
            "size": self.size,
        }


@dataclass
class Artifacts:
    source: Optional[SourceArtifact] = None
    video: Optional[VideoArtifact] = None
    preview: Optional[PreviewArtifact] = None
    published: Optional[PublishedVideo] = None
