from __future__ import annotations

import json
import shutil
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING, Sequence

from textreel.exceptions import InvalidDimensionsError, RenderError, TextReelError
from textreel.layout.geometry import Frame
from textreel.utils.checks import require_binary

if TYPE_CHECKING:
    from textreel.layout.plan import OverlayPlan


def ensure_ffmpeg() -> None:
    require_binary("ffmpeg")


def ensure_ffprobe() -> None:
    require_binary("ffprobe")


def _escape_filter_value(value: str) -> str:
    return (
        value.replace("\\", r"\\")
        .replace(":", r"\:")
        .replace(",", r"\,")
        .replace("'", r"\'")
    )


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}"


def build_crop_filters(plan: OverlayPlan) -> list[str]:
    crop = plan.crop
    return [
        f"crop={crop.width}:{crop.height}:{crop.x}:{crop.y}",
        f"scale={plan.target.width}:{plan.target.height}",
        "setsar=1",
    ]


def build_box_filter(plan: OverlayPlan) -> str:
    x, y, w, h = plan.box.pixel_rect()
    color = f"{plan.style.box_color}@{plan.style.box_opacity}"
    return f"drawbox=x={x}:y={y}:w={w}:h={h}:color={color}:t=fill"


def build_drawtext_filter(
    plan: OverlayPlan,
    line_file: str,
    line_y: float,
    *,
    font_path: str | None = None,
) -> str:
    if font_path:
        font = f"fontfile={_escape_filter_value(font_path)}"
    else:
        pattern = plan.style.font_name
        if plan.style.bold:
            pattern += ":style=Bold"
        font = f"font={_escape_filter_value(pattern)}"
    return (
        "drawtext="
        f"{font}:"
        f"textfile={_escape_filter_value(line_file)}:"
        "expansion=none:"
        f"fontsize={plan.font_size}:"
        f"fontcolor={plan.style.text_color}:"
        f"x={_format_number(plan.box.text_x)}-text_w/2:"
        # Baseline from font metrics, not per-line ink, to match Pillow's "mm" anchor.
        "y_align=baseline:"
        f"y={_format_number(line_y)}+(font_a-abs(font_d))/2"
    )


def build_overlay_filters(
    plan: OverlayPlan,
    line_files: Sequence[str],
    *,
    font_path: str | None = None,
) -> list[str]:
    if len(line_files) != len(plan.text.lines):
        raise TextReelError(
            f"Expected {len(plan.text.lines)} line files, got {len(line_files)}."
        )
    filters = build_crop_filters(plan)
    filters.append(build_box_filter(plan))
    for line, line_file, line_y in zip(plan.text.lines, line_files, plan.box.line_ys):
        if not line:
            continue
        filters.append(build_drawtext_filter(plan, line_file, line_y, font_path=font_path))
    return filters


def build_overlay_cmd(
    source: str,
    out: str,
    plan: OverlayPlan,
    line_files: Sequence[str],
    *,
    font_path: str | None = None,
) -> list[str]:
    filters = build_overlay_filters(plan, line_files, font_path=font_path)
    return [
        "ffmpeg",
        "-y",
        "-hide_banner",
        "-loglevel",
        "error",
        "-i",
        source,
        "-vf",
        ",".join(filters),
        "-c:v",
        "libx264",
        "-preset",
        "medium",
        "-crf",
        "20",
        "-pix_fmt",
        "yuv420p",
        "-c:a",
        "copy",
        "-movflags",
        "+faststart",
        out,
    ]


def build_extract_frame_cmd(video: str | Path, out: str | Path, *, seconds: float) -> list[str]:
    return [
        "ffmpeg",
        "-y",
        "-hide_banner",
        "-loglevel",
        "error",
        "-ss",
        f"{seconds:.3f}",
        "-i",
        str(video),
        "-frames:v",
        "1",
        str(out),
    ]


def run_ffmpeg(cmd: list[str], *, stderr_path: Path | None = None) -> subprocess.CompletedProcess[str]:
    proc = subprocess.run(cmd, capture_output=True, text=True)
    if stderr_path is not None:
        stderr_path.write_text(proc.stderr or "", encoding="utf-8")
    if proc.returncode != 0:
        raise RenderError(
            "ffmpeg failed.\n"
            f"STDOUT:\n{proc.stdout}\n\n"
            f"STDERR:\n{proc.stderr}"
        )
    return proc


def _parse_fps(rate: str | None) -> float | None:
    if not rate or rate == "0/0":
        return None
    try:
        num, den = rate.split("/")
        return float(num) / float(den)
    except (ValueError, ZeroDivisionError):
        return None


def probe_media(path: str | Path) -> dict | None:
    ffprobe = shutil.which("ffprobe")
    if not ffprobe:
        return None
    proc = subprocess.run(
        [
            ffprobe,
            "-v",
            "error",
            "-show_format",
            "-show_streams",
            "-of",
            "json",
            str(path),
        ],
        capture_output=True,
        text=True,
    )
    if proc.returncode != 0:
        return None
    try:
        data = json.loads(proc.stdout)
    except json.JSONDecodeError:
        return None

    duration = None
    raw_duration = data.get("format", {}).get("duration")
    try:
        duration = float(raw_duration) if raw_duration else None
    except (TypeError, ValueError):
        duration = None

    width = height = fps = None
    vcodec = None
    audio_present = False
    for stream in data.get("streams", []):
        if stream.get("codec_type") == "video" and width is None:
            width = stream.get("width")
            height = stream.get("height")
            vcodec = stream.get("codec_name")
            fps = _parse_fps(stream.get("avg_frame_rate") or stream.get("r_frame_rate"))
        if stream.get("codec_type") == "audio":
            audio_present = True

    return {
        "duration_seconds": duration,
        "width": width,
        "height": height,
        "fps": fps,
        "video_codec": vcodec,
        "audio_present": audio_present,
    }


def probe_frame(path: str | Path) -> tuple[Frame, float | None]:
    """Return the first video stream's resolution and the container duration."""
    ensure_ffprobe()
    info = probe_media(path)
    if info is None:
        raise TextReelError(f"ffprobe could not read {path}.")
    width = info.get("width")
    height = info.get("height")
    if not isinstance(width, int) or not isinstance(height, int):
        raise InvalidDimensionsError(f"No video stream with dimensions in {path}.")
    return Frame(width, height), info.get("duration_seconds")
