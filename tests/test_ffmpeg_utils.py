from __future__ import annotations

import json
from types import SimpleNamespace

import pytest

from textreel.exceptions import InvalidDimensionsError, RenderError, TextReelError
from textreel.layout.geometry import Frame
from textreel.layout.metrics import estimate_measure
from textreel.layout.plan import build_overlay_plan
from textreel.styles import LOWER_THIRD
from textreel.utils import ffmpeg


def _plan(text: str = "The quick brown fox jumps", source: Frame = Frame(1920, 1080)):
    return build_overlay_plan(source, text, LOWER_THIRD, estimate_measure(54))


def test_overlay_filters_crop_scale_box_then_text() -> None:
    plan = _plan()
    filters = ffmpeg.build_overlay_filters(plan, ["/run/tmp/line_00.txt"])

    assert filters[0] == "crop=608:1080:656:0"
    assert filters[1] == "scale=1080:1920"
    assert filters[2] == "setsar=1"
    assert filters[3] == "drawbox=x=0:y=1264:w=1080:h=161:color=black@0.5:t=fill"
    assert len(filters) == 5

    text = filters[4]
    assert text.startswith("drawtext=")
    assert "textfile=/run/tmp/line_00.txt" in text
    assert "expansion=none" in text
    assert "fontsize=54" in text
    assert "fontcolor=white" in text
    assert "x=540-text_w/2" in text
    assert "y_align=baseline" in text
    assert "y=1344+(font_a-abs(font_d))/2" in text


def test_drawtext_uses_bold_fontconfig_pattern_without_font_file() -> None:
    filters = ffmpeg.build_overlay_filters(_plan(), ["line.txt"])
    assert r"font=Arial\:style=Bold" in filters[-1]
    assert "fontfile=" not in filters[-1]


def test_drawtext_prefers_font_file() -> None:
    filters = ffmpeg.build_overlay_filters(_plan(), ["line.txt"], font_path="/fonts/Inter Bold.ttf")
    assert "fontfile=/fonts/Inter Bold.ttf" in filters[-1]
    assert "font=Arial" not in filters[-1]


def test_filter_paths_are_escaped() -> None:
    filters = ffmpeg.build_overlay_filters(_plan(), ["/tmp/a:b,c'd/line_00.txt"])
    assert r"textfile=/tmp/a\:b\,c\'d/line_00.txt" in filters[-1]


def test_one_drawtext_per_wrapped_line() -> None:
    plan = _plan(" ".join(["aaaa"] * 12))
    files = [f"line_{i:02d}.txt" for i in range(len(plan.text.lines))]
    filters = ffmpeg.build_overlay_filters(plan, files)
    drawtext = [f for f in filters if f.startswith("drawtext=")]
    assert len(drawtext) == 2
    assert "y=1303.50+(font_a-abs(font_d))/2" in drawtext[0]
    assert "y=1384.50+(font_a-abs(font_d))/2" in drawtext[1]


def test_line_baselines_ignore_per_line_ink_height() -> None:
    plan = _plan("noon jumps " * 8)
    files = [f"line_{i:02d}.txt" for i in range(len(plan.text.lines))]
    drawtext = [f for f in ffmpeg.build_overlay_filters(plan, files) if f.startswith("drawtext=")]

    assert len(drawtext) > 1
    for text, line_y in zip(drawtext, plan.box.line_ys):
        assert "text_h" not in text
        assert text.endswith(f"y={ffmpeg._format_number(line_y)}+(font_a-abs(font_d))/2")  # noqa: SLF001


def test_empty_text_draws_box_only() -> None:
    plan = _plan("")
    filters = ffmpeg.build_overlay_filters(plan, ["line_00.txt"])
    assert any(f.startswith("drawbox=") for f in filters)
    assert not any(f.startswith("drawtext=") for f in filters)


def test_line_file_count_must_match_plan() -> None:
    with pytest.raises(TextReelError):
        ffmpeg.build_overlay_filters(_plan(), [])


def test_overlay_cmd_copies_audio_and_ends_with_output() -> None:
    cmd = ffmpeg.build_overlay_cmd("in.mp4", "out.mp4", _plan(), ["line_00.txt"])
    assert cmd[0] == "ffmpeg"
    assert cmd[cmd.index("-i") + 1] == "in.mp4"
    assert cmd[cmd.index("-c:a") + 1] == "copy"
    assert cmd[cmd.index("-c:v") + 1] == "libx264"
    vf = cmd[cmd.index("-vf") + 1]
    assert vf.startswith("crop=608:1080:656:0,scale=1080:1920")
    assert cmd[-1] == "out.mp4"


def test_extract_frame_cmd() -> None:
    cmd = ffmpeg.build_extract_frame_cmd("in.mp4", "frame.png", seconds=1.25)
    assert cmd[cmd.index("-ss") + 1] == "1.250"
    assert cmd[cmd.index("-frames:v") + 1] == "1"
    assert cmd[-1] == "frame.png"


def test_run_ffmpeg_raises_render_error(monkeypatch, tmp_path) -> None:
    def fake_run(cmd, capture_output, text):  # noqa: ANN001
        return SimpleNamespace(returncode=1, stdout="", stderr="No such filter: 'drawtext'")

    monkeypatch.setattr(ffmpeg.subprocess, "run", fake_run)
    stderr_path = tmp_path / "ffmpeg.stderr.txt"

    with pytest.raises(RenderError) as excinfo:
        ffmpeg.run_ffmpeg(["ffmpeg"], stderr_path=stderr_path)

    assert "No such filter" in excinfo.value.message
    assert stderr_path.read_text(encoding="utf-8") == "No such filter: 'drawtext'"


def _fake_ffprobe(monkeypatch, payload: dict, returncode: int = 0) -> None:
    def fake_run(cmd, capture_output, text):  # noqa: ANN001
        return SimpleNamespace(returncode=returncode, stdout=json.dumps(payload), stderr="")

    monkeypatch.setattr(ffmpeg.shutil, "which", lambda name: f"/usr/bin/{name}")
    monkeypatch.setattr(ffmpeg.subprocess, "run", fake_run)


def test_probe_media_reads_first_video_stream(monkeypatch) -> None:
    _fake_ffprobe(
        monkeypatch,
        {
            "format": {"duration": "3.500"},
            "streams": [
                {"codec_type": "audio", "codec_name": "aac"},
                {"codec_type": "video", "codec_name": "h264", "width": 1920, "height": 1080,
                 "avg_frame_rate": "30000/1001"},
            ],
        },
    )
    info = ffmpeg.probe_media("clip.mp4")
    assert info["width"] == 1920
    assert info["height"] == 1080
    assert info["duration_seconds"] == 3.5
    assert info["audio_present"] is True
    assert info["fps"] == pytest.approx(29.97, rel=1e-3)


def test_probe_frame_returns_frame_and_duration(monkeypatch) -> None:
    _fake_ffprobe(
        monkeypatch,
        {"format": {"duration": "2.0"}, "streams": [{"codec_type": "video", "width": 720, "height": 1280}]},
    )
    frame, duration = ffmpeg.probe_frame("clip.mp4")
    assert frame == Frame(720, 1280)
    assert duration == 2.0


def test_probe_frame_without_video_stream(monkeypatch) -> None:
    _fake_ffprobe(monkeypatch, {"format": {}, "streams": [{"codec_type": "audio"}]})
    with pytest.raises(InvalidDimensionsError):
        ffmpeg.probe_frame("audio.m4a")


def test_probe_frame_unreadable_file(monkeypatch) -> None:
    _fake_ffprobe(monkeypatch, {}, returncode=1)
    with pytest.raises(TextReelError):
        ffmpeg.probe_frame("broken.mp4")
