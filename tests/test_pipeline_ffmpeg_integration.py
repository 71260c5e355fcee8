from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest
from PIL import Image

from textreel.pipeline import Pipeline
from textreel.services.fetch import FetchService
from textreel.services.preview import PreviewService
from textreel.styles import LOWER_THIRD
from textreel.utils import ffmpeg


def _require_ffmpeg() -> None:
    if shutil.which("ffmpeg") is None or shutil.which("ffprobe") is None:
        pytest.skip("ffmpeg/ffprobe not available")
    proc = subprocess.run(["ffmpeg", "-hide_banner", "-h", "filter=drawtext"], capture_output=True, text=True)
    if "y_align" not in proc.stdout:
        pytest.skip("ffmpeg built without drawtext, or older than 6.1")


def _run_ffmpeg(cmd: list[str]) -> None:
    proc = subprocess.run(cmd, capture_output=True, text=True)
    if proc.returncode != 0:
        raise RuntimeError(
            "ffmpeg failed.\n"
            f"STDOUT:\n{proc.stdout}\n\n"
            f"STDERR:\n{proc.stderr}"
        )


def _generate_landscape(path: Path) -> None:
    _run_ffmpeg(
        [
            "ffmpeg",
            "-y",
            "-hide_banner",
            "-loglevel",
            "error",
            "-f",
            "lavfi",
            "-i",
            "testsrc=s=1920x1080:d=1:r=30",
            "-f",
            "lavfi",
            "-i",
            "sine=frequency=1000:duration=1",
            "-shortest",
            "-pix_fmt",
            "yuv420p",
            "-c:a",
            "aac",
            str(path),
        ]
    )


@pytest.mark.integration
def test_pipeline_end_to_end_ffmpeg(tmp_path: Path, make_job) -> None:
    _require_ffmpeg()

    source = tmp_path / "landscape.mp4"
    _generate_landscape(source)
    job = make_job(text="Ferry service resumes after the storm: it's 'back'", video_url=str(source))

    job = Pipeline(style=LOWER_THIRD).run(job)

    video = job.artifacts.video
    assert video is not None
    info = ffmpeg.probe_media(video.path)
    assert info is not None
    assert (info["width"], info["height"]) == (1080, 1920)
    assert info["audio_present"] is True

    source_artifact = job.artifacts.source
    assert source_artifact is not None
    assert (source_artifact.width, source_artifact.height) == (1920, 1080)

    published = job.artifacts.published
    assert published is not None
    assert published.size == video.path.stat().st_size
    assert job.workspace.run_manifest.exists()


@pytest.mark.integration
def test_preview_from_real_frame(tmp_path: Path, make_job) -> None:
    _require_ffmpeg()

    source = tmp_path / "landscape.mp4"
    _generate_landscape(source)
    job = make_job(video_url=str(source))

    job.artifacts.source = FetchService().fetch(job)
    artifact = PreviewService().render_still(job, style=LOWER_THIRD, seconds=0.5)

    with Image.open(artifact.path) as img:
        assert img.size == (1080, 1920)
