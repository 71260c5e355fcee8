"""
Video composition service for TextReel.

This module renders the final vertical MP4:
- crop the source to 9:16 and scale it to 1080x1920
- fill a translucent box behind the overlay text
- burn in each wrapped line of text

Responsibilities:
- Probe the source resolution
- Build the overlay plan with server-side text metrics
- Invoke ffmpeg and persist output to the Workspace

Does NOT:
- Download the source (services/fetch.py)
- Decide geometry or wrapping rules (layout/)
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from textreel.domain.artifacts import VideoArtifact
from textreel.exceptions import RenderError, TextReelError
from textreel.layout.geometry import TARGET
from textreel.layout.metrics import server_measure
from textreel.layout.plan import OverlayPlan, build_overlay_plan
from textreel.styles.base import OverlayStyle
from textreel.utils import ffmpeg
from textreel.utils.logging import get_logger

if TYPE_CHECKING:
    from textreel.domain.job import Job

log = get_logger(__name__)


def write_line_files(job: Job, plan: OverlayPlan) -> list[str]:
    paths: list[str] = []
    for index, line in enumerate(plan.text.lines):
        path = job.workspace.line_file(index)
        # drawtext renders a trailing newline as an extra blank line.
        path.write_text(line, encoding="utf-8")
        paths.append(str(path))
    return paths


@dataclass
class ComposeService:
    """
    ffmpeg-based overlay renderer.

    Notes:
    - Uses `job.settings.font_path` for both metrics and drawing when set;
      otherwise wraps with the glyph-width estimate and lets fontconfig pick Arial.
    """

    def render(self, job: Job, *, style: OverlayStyle) -> VideoArtifact:
        ffmpeg.ensure_ffmpeg()

        source = job.artifacts.source
        if source is None:
            raise TextReelError("No source video; fetch must run before compose.")

        frame, duration = ffmpeg.probe_frame(source.path)
        job.artifacts.source = replace(
            source,
            width=frame.width,
            height=frame.height,
            duration_seconds=duration,
        )
        log.info("Source %s is %dx%d", source.path, frame.width, frame.height)

        font_path = job.settings.font_path
        font_size = style.resolve_font_size(TARGET)
        measure = server_measure(font_path, font_size)
        plan = build_overlay_plan(frame, job.request.text, style, measure)
        job.plan_instructions = plan.to_instructions()

        for index in plan.text.overflowing:
            log.warning(
                "Line %d (%r) is wider than the text area and will overflow.",
                index,
                plan.text.lines[index],
            )

        line_files = write_line_files(job, plan)
        out = job.workspace.output_mp4
        cmd = ffmpeg.build_overlay_cmd(
            str(source.path),
            str(out),
            plan,
            line_files,
            font_path=font_path,
        )

        log.info("Rendering video -> %s", out)
        cmd_str = " ".join(cmd)
        log.debug("ffmpeg cmd: %s", cmd_str)

        stderr_path = job.workspace.ffmpeg_stderr
        job.ffmpeg_cmd = cmd_str
        job.ffmpeg_stderr_path = str(stderr_path)

        ffmpeg.run_ffmpeg(cmd, stderr_path=stderr_path)

        if not out.exists() or out.stat().st_size == 0:
            raise RenderError(f"ffmpeg produced no output: {out}")

        return VideoArtifact(
            path=out,
            format="mp4",
            line_count=len(plan.text.lines),
            overflowing_lines=plan.text.overflowing,
        )
