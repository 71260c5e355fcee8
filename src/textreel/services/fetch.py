"""
Source acquisition for TextReel.

Remote `http(s)` URLs are streamed into the run workspace; local paths
and `file://` URLs are used in place.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote, urlparse

import httpx

from textreel.domain.artifacts import SourceArtifact
from textreel.domain.job import Job
from textreel.exceptions import FetchError
from textreel.utils.logging import get_logger

log = get_logger(__name__)

CHUNK_SIZE = 1 << 20


def _local_path(url: str) -> Path | None:
    parsed = urlparse(url)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    if len(parsed.scheme) <= 1:
        # Bare paths, including Windows drive letters.
        return Path(url).expanduser()
    return None


@dataclass
class FetchService:
    client: httpx.Client | None = None

    def fetch(self, job: Job) -> SourceArtifact:
        url = job.request.video_url
        local = _local_path(url)
        if local is not None:
            return self._use_local(url, local)

        parsed = urlparse(url)
        if parsed.scheme not in {"http", "https"}:
            raise FetchError(f"Failed to fetch video: unsupported URL scheme '{parsed.scheme}'.")
        return self._download(url, job.workspace.source_mp4, timeout=job.settings.download_timeout)

    def _use_local(self, url: str, path: Path) -> SourceArtifact:
        resolved = path.resolve()
        if not resolved.is_file():
            raise FetchError(f"Failed to fetch video: file not found: {resolved}")
        log.info("Using local source video %s", resolved)
        return SourceArtifact(path=resolved, url=url, downloaded=False)

    def _download(self, url: str, dest: Path, *, timeout: float) -> SourceArtifact:
        log.info("Downloading source video %s -> %s", url, dest)
        client = self.client or httpx.Client(follow_redirects=True, timeout=timeout)
        try:
            with client.stream("GET", url) as response:
                response.raise_for_status()
                with dest.open("wb") as fh:
                    for chunk in response.iter_bytes(CHUNK_SIZE):
                        fh.write(chunk)
        except httpx.HTTPStatusError as exc:
            raise FetchError(
                f"Failed to fetch video: HTTP {exc.response.status_code} from {url}"
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"Failed to fetch video: {exc}") from exc
        finally:
            if self.client is None:
                client.close()

        if not dest.exists() or dest.stat().st_size == 0:
            raise FetchError(f"Failed to fetch video: empty response from {url}")
        log.debug("Downloaded %d bytes", dest.stat().st_size)
        return SourceArtifact(path=dest, url=url, downloaded=True)
