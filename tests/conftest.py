from __future__ import annotations

import inspect
from pathlib import Path

import pytest
import typer.testing

from textreel.config.settings import Settings
from textreel.domain.job import Job
from textreel.domain.request import OverlayRequest
from textreel.domain.workspace import Workspace


def _patch_clirunner() -> None:
    if "mix_stderr" in inspect.signature(typer.testing.CliRunner).parameters:
        return

    class PatchedCliRunner(typer.testing.CliRunner):
        def __init__(self, *args, **kwargs):  # noqa: ANN002, ANN003
            kwargs.pop("mix_stderr", None)
            super().__init__(*args, **kwargs)

    typer.testing.CliRunner = PatchedCliRunner


_patch_clirunner()


@pytest.fixture
def make_job(tmp_path: Path):
    def factory(
        text: str = "The quick brown fox jumps",
        video_url: str = "https://example.com/clip.mp4",
        run_id: str = "run1",
    ) -> Job:
        settings = Settings()
        settings.workdir = str(tmp_path / ".textreel")
        settings.output_dir = str(tmp_path / "published")
        settings.font_path = None
        workspace = Workspace.create(settings.workdir, run_id=run_id)
        return Job(
            settings=settings,
            workspace=workspace,
            request=OverlayRequest(text=text, video_url=video_url),
        )

    return factory
