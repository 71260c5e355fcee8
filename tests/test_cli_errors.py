from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from textreel.cli.main import app
from textreel.exceptions import ConfigurationError, DependencyMissingError, FetchError


def test_cli_reports_config_error(monkeypatch, tmp_path: Path) -> None:
    import textreel.cli.main as cli_main

    def fake_run_pipeline(*_args, **_kwargs):  # noqa: ANN001
        raise ConfigurationError("bad config value")

    monkeypatch.setattr(cli_main, "_run_render_pipeline", fake_run_pipeline)

    runner = CliRunner(mix_stderr=False)
    result = runner.invoke(
        app,
        [
            "render",
            "--text",
            "Hello",
            "--video-url",
            "https://example.com/clip.mp4",
            "--workdir",
            str(tmp_path / ".textreel"),
        ],
    )

    assert result.exit_code == 2
    assert "Configuration error: bad config value" in result.stderr


def test_cli_reports_missing_text(tmp_path: Path) -> None:
    runner = CliRunner(mix_stderr=False)
    result = runner.invoke(
        app,
        [
            "render",
            "--text",
            "   ",
            "--video-url",
            "https://example.com/clip.mp4",
            "--workdir",
            str(tmp_path / ".textreel"),
        ],
    )

    assert result.exit_code == 4
    assert "Input error: Text and video URL are required" in result.stderr


def test_cli_reports_fetch_error(monkeypatch, tmp_path: Path) -> None:
    import textreel.cli.main as cli_main

    def fake_run_pipeline(*_args, **_kwargs):  # noqa: ANN001
        raise FetchError("Failed to fetch video: HTTP 404 from https://example.com/clip.mp4")

    monkeypatch.setattr(cli_main, "_run_render_pipeline", fake_run_pipeline)

    runner = CliRunner(mix_stderr=False)
    result = runner.invoke(
        app,
        ["render", "--text", "Hello", "--video-url", "https://example.com/clip.mp4"],
    )

    assert result.exit_code == 1
    assert "Runtime error: Failed to fetch video: HTTP 404" in result.stderr


def test_cli_reports_dependency_error(monkeypatch) -> None:
    import textreel.cli.main as cli_main

    def fake_run_doctor(_settings):  # noqa: ANN001
        raise DependencyMissingError("ffmpeg missing")

    monkeypatch.setattr(cli_main, "run_doctor", fake_run_doctor)

    runner = CliRunner(mix_stderr=False)
    result = runner.invoke(app, ["doctor"])

    assert result.exit_code == 3
    assert "Dependency error: ffmpeg missing" in result.stderr


def test_cli_rejects_unknown_style(tmp_path: Path) -> None:
    runner = CliRunner(mix_stderr=False)
    result = runner.invoke(
        app,
        [
            "render",
            "--text",
            "Hello",
            "--video-url",
            "https://example.com/clip.mp4",
            "--style",
            "marquee",
            "--workdir",
            str(tmp_path / ".textreel"),
        ],
    )

    assert result.exit_code == 2


def test_cli_rejects_non_mp4_url(tmp_path: Path) -> None:
    runner = CliRunner(mix_stderr=False)
    result = runner.invoke(
        app,
        [
            "render",
            "--text",
            "Hello",
            "--video-url",
            "https://example.com/clip.webm",
            "--workdir",
            str(tmp_path / ".textreel"),
        ],
    )

    assert result.exit_code == 4
    assert "Input error: Video URL must point to an .mp4 file" in result.stderr
