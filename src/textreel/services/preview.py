"""
Preview rendering for TextReel.

Composites the overlay onto sampled source frames with Pillow, using the
same overlay plan and text metrics as the ffmpeg renderer; Pillow only
draws the glyphs.

Responsibilities:
- Sample frames from the source (ffmpeg single-frame extraction)
- Draw crop, box and text from the plan's drawing instructions
- Run a cancellable repeating preview loop

Does NOT:
- Encode video (services/compose.py)
"""

from __future__ import annotations

import asyncio
import contextlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from PIL import Image, ImageColor, ImageDraw

from textreel.domain.artifacts import PreviewArtifact
from textreel.domain.contracts import FrameSampler
from textreel.exceptions import TextReelError
from textreel.layout.geometry import TARGET, Frame
from textreel.layout.metrics import load_font, server_measure
from textreel.layout.plan import OverlayPlan, build_overlay_plan
from textreel.styles.base import OverlayStyle
from textreel.utils import ffmpeg
from textreel.utils.logging import get_logger

if TYPE_CHECKING:
    from textreel.domain.job import Job

log = get_logger(__name__)


@dataclass(frozen=True)
class PreviewFrame:
    index: int
    seconds: float
    image: Image.Image
    plan: OverlayPlan


@dataclass
class FfmpegFrameSampler:
    video: Path
    scratch: Path

    def sample(self, seconds: float) -> Image.Image:
        # ffmpeg exits 0 without writing past the last frame.
        self.scratch.unlink(missing_ok=True)
        cmd = ffmpeg.build_extract_frame_cmd(self.video, self.scratch, seconds=seconds)
        ffmpeg.run_ffmpeg(cmd)
        if not self.scratch.exists():
            raise TextReelError(f"No frame extracted at {seconds:.3f}s from {self.video}")
        with Image.open(self.scratch) as img:
            img.load()
            return img.convert("RGB")


class PreviewCompositor:
    def __init__(
        self,
        text: str,
        style: OverlayStyle,
        *,
        font_path: str | None = None,
        target: Frame = TARGET,
    ) -> None:
        self.text = text
        self.style = style
        self.target = target
        font_size = style.resolve_font_size(target)
        # Wrap with the render's metrics so both sides break lines identically.
        self.measure = server_measure(font_path, font_size)
        self.font = load_font(font_path, font_size)

    def plan_for(self, image: Image.Image) -> OverlayPlan:
        width, height = image.size
        return build_overlay_plan(
            Frame(width, height),
            self.text,
            self.style,
            self.measure,
            target=self.target,
        )

    def compose(self, image: Image.Image) -> tuple[Image.Image, OverlayPlan]:
        plan = self.plan_for(image)
        ins = plan.to_instructions()

        src = ins["source_rect"]
        canvas = (
            image.convert("RGB")
            .crop((src["x"], src["y"], src["x"] + src["width"], src["y"] + src["height"]))
            .resize((self.target.width, self.target.height), Image.Resampling.BICUBIC)
            .convert("RGBA")
        )

        box = ins["box_rect"]
        r, g, b = ImageColor.getrgb(self.style.box_color)[:3]
        alpha = int(round(255 * self.style.box_opacity))
        shade = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        ImageDraw.Draw(shade).rectangle(
            (box["x"], box["y"], box["x"] + box["width"] - 1, box["y"] + box["height"] - 1),
            fill=(r, g, b, alpha),
        )
        canvas = Image.alpha_composite(canvas, shade)

        draw = ImageDraw.Draw(canvas)
        stroke = 1 if self.style.bold else 0
        for line in ins["lines"]:
            if not line["text"]:
                continue
            draw.text(
                (line["x"], line["y"]),
                line["text"],
                font=self.font,
                fill=self.style.text_color,
                anchor="mm",
                stroke_width=stroke,
                stroke_fill=self.style.text_color,
            )
        return canvas.convert("RGB"), plan


@dataclass
class PreviewLoop:
    """
    Repeating preview task.

    Each tick advances the playhead by `interval`, re-samples the frame,
    re-runs the layout and hands the composited frame to `on_frame`.
    The loop ends at `duration` (when known), after `max_ticks`, or on `stop()`.
    """

    sampler: FrameSampler
    compositor: PreviewCompositor
    on_frame: Callable[[PreviewFrame], None]
    interval: float = 0.5
    start_at: float = 0.0
    duration: float | None = None
    ticks: int = field(default=0, init=False)
    _task: asyncio.Task | None = field(default=None, init=False, repr=False)

    def render_tick(self, seconds: float) -> PreviewFrame:
        image = self.sampler.sample(seconds)
        composed, plan = self.compositor.compose(image)
        return PreviewFrame(index=self.ticks, seconds=seconds, image=composed, plan=plan)

    async def run(self, max_ticks: int | None = None) -> int:
        playhead = self.start_at
        while max_ticks is None or self.ticks < max_ticks:
            if self.duration is not None and playhead >= self.duration:
                break
            frame = await asyncio.to_thread(self.render_tick, playhead)
            self.on_frame(frame)
            self.ticks += 1
            playhead += self.interval
            await asyncio.sleep(self.interval)
        return self.ticks

    def start(self, max_ticks: int | None = None) -> asyncio.Task:
        if self._task is not None and not self._task.done():
            raise TextReelError("Preview loop is already running.")
        self._task = asyncio.get_running_loop().create_task(self.run(max_ticks))
        return self._task

    async def stop(self) -> None:
        task = self._task
        self._task = None
        if task is None or task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()


@dataclass
class PreviewService:
    sampler_factory: Callable[[Job], FrameSampler] | None = None

    def _sampler(self, job: Job) -> FrameSampler:
        if self.sampler_factory is not None:
            return self.sampler_factory(job)
        source = job.artifacts.source
        if source is None:
            raise TextReelError("No source video; fetch must run before preview.")
        ffmpeg.ensure_ffmpeg()
        return FfmpegFrameSampler(video=source.path, scratch=job.workspace.frame_png)

    def _compositor(self, job: Job, style: OverlayStyle) -> PreviewCompositor:
        return PreviewCompositor(job.request.text, style, font_path=job.settings.font_path)

    def render_still(self, job: Job, *, style: OverlayStyle, seconds: float = 0.0) -> PreviewArtifact:
        sampler = self._sampler(job)
        compositor = self._compositor(job, style)
        image, plan = compositor.compose(sampler.sample(seconds))
        job.plan_instructions = plan.to_instructions()

        out = job.workspace.preview_png
        image.save(out)
        log.info("Preview frame at %.3fs -> %s", seconds, out)
        artifact = PreviewArtifact(path=out, seconds=seconds)
        job.artifacts.preview = artifact
        return artifact

    def watch(
        self,
        job: Job,
        *,
        style: OverlayStyle,
        frames: int,
        interval: float,
        start_at: float = 0.0,
        duration: float | None = None,
    ) -> list[PreviewArtifact]:
        written: list[PreviewArtifact] = []

        def save(frame: PreviewFrame) -> None:
            out = job.workspace.path(f"previews/frame_{frame.index:03d}.png")
            frame.image.save(out)
            job.plan_instructions = frame.plan.to_instructions()
            written.append(PreviewArtifact(path=out, seconds=frame.seconds))
            log.debug("Preview tick %d at %.3fs -> %s", frame.index, frame.seconds, out)

        loop = PreviewLoop(
            sampler=self._sampler(job),
            compositor=self._compositor(job, style),
            on_frame=save,
            interval=interval,
            start_at=start_at,
            duration=duration,
        )
        asyncio.run(loop.run(max_ticks=frames))
        if written:
            job.artifacts.preview = written[-1]
        log.info("Wrote %d preview frames", len(written))
        return written
