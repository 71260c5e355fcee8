"""
Publishing of rendered videos.

Stands in for a blob store: renders are copied under `output_dir` with a
timestamped pathname and described with the same fields a blob upload
returns (url, pathname, contentType, size).
"""

from __future__ import annotations

import mimetypes
import shutil
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Callable

from textreel.domain.artifacts import PublishedVideo
from textreel.exceptions import TextReelError
from textreel.utils.logging import get_logger

log = get_logger(__name__)


def _epoch_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class StorageService:
    root: Path
    prefix: str = "videos"
    suffix: str = "overlay-vertical"
    clock: Callable[[], int] = field(default=_epoch_ms)

    def pathname_for(self, path: Path, stamp: int, attempt: int = 0) -> str:
        counter = f"-{attempt}" if attempt else ""
        return f"{self.prefix}/{stamp}-{self.suffix}{counter}{path.suffix or '.mp4'}"

    def _open_unique(self, path: Path) -> tuple[str, Path, BinaryIO]:
        stamp = self.clock()
        root = self.root.expanduser().resolve()
        attempt = 0
        while True:
            pathname = self.pathname_for(path, stamp, attempt)
            dest = root / pathname
            dest.parent.mkdir(parents=True, exist_ok=True)
            try:
                return pathname, dest, dest.open("xb")
            except FileExistsError:
                attempt += 1

    def put(self, path: Path) -> PublishedVideo:
        if not path.is_file():
            raise TextReelError(f"Nothing to publish; {path} does not exist.")

        try:
            pathname, dest, out = self._open_unique(path)
            with out, path.open("rb") as src:
                shutil.copyfileobj(src, out)
        except OSError as exc:
            raise TextReelError(f"Failed to publish {path}: {exc}") from exc

        content_type = mimetypes.guess_type(dest.name)[0] or "application/octet-stream"
        published = PublishedVideo(
            url=dest.as_uri(),
            pathname=pathname,
            content_type=content_type,
            size=dest.stat().st_size,
        )
        log.info("Published %s (%d bytes)", published.url, published.size)
        return published
