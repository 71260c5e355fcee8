"""
Pipeline orchestration for TextReel.

The pipeline executes a single overlay render:

1) Fetch the source video
2) Compose the vertical video with the text overlay
3) Publish the result

Responsibilities:
- Coordinate service execution order
- Preserve explicit state via Artifacts
- Always leave a run.json behind, including for failed runs

Does NOT:
- Implement geometry or text layout (layout/)
- Own filesystem paths (Workspace does)
"""

from __future__ import annotations

from pathlib import Path

from textreel.domain.artifacts import Artifacts
from textreel.domain.contracts import ComposeService, FetchService, StorageService
from textreel.domain.job import Job
from textreel.services.compose import ComposeService as FfmpegComposeService
from textreel.services.fetch import FetchService as HttpFetchService
from textreel.services.storage import StorageService as LocalStorageService
from textreel.styles import LOWER_THIRD
from textreel.styles.base import OverlayStyle
from textreel.utils.logging import get_logger
from textreel.utils.manifest import write_run_manifest
from textreel.utils.timing import StepTimer, utc_now

log = get_logger(__name__)


class Pipeline:
    """
    Orchestrates the TextReel render steps using composable services.

    Notes:
    - Storage is created per-run from settings unless injected.
    - Other services are injected or defaulted for testability.
    """

    def __init__(
        self,
        *,
        fetch: FetchService | None = None,
        compose: ComposeService | None = None,
        storage: StorageService | None = None,
        style: OverlayStyle | None = None,
    ) -> None:
        self.fetch = fetch or HttpFetchService()
        self.compose = compose or FfmpegComposeService()
        self.storage = storage
        self.style = style or LOWER_THIRD

    def run(self, job: Job) -> Job:
        timer = StepTimer(clock=utc_now)
        clock = timer.clock
        started_at = clock()
        error: str | None = None

        job.artifacts = Artifacts()

        try:
            with timer.step("fetch_source"):
                job.artifacts.source = self.fetch.fetch(job)

            with timer.step("compose_video"):
                job.artifacts.video = self.compose.render(job, style=self.style)

            with timer.step("publish"):
                storage = self.storage or LocalStorageService(root=Path(job.settings.output_dir))
                job.artifacts.published = storage.put(job.artifacts.video.path)

            return job
        except Exception as exc:
            error = str(exc)
            raise
        finally:
            finished_at = clock()
            try:
                write_run_manifest(
                    job=job,
                    steps=timer.steps,
                    started_at=started_at,
                    finished_at=finished_at,
                    style=self.style,
                    error=error,
                )
            except OSError as exc:
                log.warning("Could not write run manifest: %s", exc)
