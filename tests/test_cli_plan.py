from __future__ import annotations

import json

from typer.testing import CliRunner

from textreel.cli.main import app


def test_plan_prints_instructions_for_landscape_source() -> None:
    result = CliRunner().invoke(
        app,
        ["plan", "--width", "1920", "--height", "1080", "--text", "Hello world"],
    )

    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["style"] == "lower_third"
    assert payload["source_rect"] == {"x": 656, "y": 0, "width": 608, "height": 1080}
    assert payload["font_size"] == 54
    assert [line["text"] for line in payload["lines"]] == ["Hello world"]
    assert payload["lines"][0]["x"] == 540


def test_plan_portrait_source_uses_full_frame() -> None:
    result = CliRunner().invoke(
        app,
        ["plan", "--width", "1080", "--height", "1920", "--text", "Hi", "--style", "centered"],
    )

    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["source_rect"] == {"x": 0, "y": 0, "width": 1080, "height": 1920}
    assert payload["style"] == "centered"


def test_plan_rejects_zero_width() -> None:
    result = CliRunner(mix_stderr=False).invoke(
        app,
        ["plan", "--width", "0", "--height", "1080", "--text", "Hi"],
    )

    assert result.exit_code == 4
    assert "Invalid source dimensions" in result.stderr


def test_plan_rejects_unknown_metrics() -> None:
    result = CliRunner().invoke(
        app,
        ["plan", "--width", "1920", "--height", "1080", "--text", "Hi", "--metrics", "magic"],
    )
    assert result.exit_code == 2
