from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from textreel.domain.artifacts import PublishedVideo, SourceArtifact, VideoArtifact

if TYPE_CHECKING:
    from PIL import Image

    from textreel.domain.job import Job
    from textreel.styles.base import OverlayStyle


class FetchService(Protocol):
    def fetch(self, job: Job) -> SourceArtifact: ...


class ComposeService(Protocol):
    def render(self, job: Job, *, style: OverlayStyle) -> VideoArtifact: ...


class StorageService(Protocol):
    def put(self, path: Path) -> PublishedVideo: ...


class FrameSampler(Protocol):
    def sample(self, seconds: float) -> Image.Image: ...
