from __future__ import annotations

import functools
import json
from pathlib import Path
from typing import Callable, TypeVar

import typer

from textreel.config.settings import Settings
from textreel.domain.job import Job
from textreel.domain.request import OverlayRequest
from textreel.domain.workspace import Workspace
from textreel.exceptions import ConfigurationError, TextReelError
from textreel.layout.geometry import TARGET, Frame
from textreel.layout.metrics import load_font, pillow_measure, server_measure
from textreel.layout.plan import build_overlay_plan
from textreel.pipeline import Pipeline
from textreel.services.fetch import FetchService
from textreel.services.preview import PreviewService
from textreel.styles import get_style, list_styles
from textreel.styles.base import OverlayStyle
from textreel.utils import ffmpeg
from textreel.utils.doctor import run_doctor
from textreel.utils.logging import configure_logging, get_logger
from textreel.utils.manifest import load_run_manifest, write_run_manifest
from textreel.utils.timing import StepTimer, utc_now

app = typer.Typer(add_completion=False)
log = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., None])


def _report_errors(func: F) -> F:
    @functools.wraps(func)
    def wrapper(*args, **kwargs):  # noqa: ANN002, ANN003
        try:
            return func(*args, **kwargs)
        except TextReelError as exc:
            typer.echo(f"{exc.label()}: {exc.message}", err=True)
            raise typer.Exit(code=exc.exit_code or 1) from exc

    return wrapper  # type: ignore[return-value]


def _parse_style(style: str | None) -> OverlayStyle:
    try:
        return get_style(style)
    except ConfigurationError as exc:
        raise typer.BadParameter(exc.message) from exc


def _apply_overrides(
    settings: Settings,
    *,
    workdir: str | None = None,
    output_dir: str | None = None,
    font_path: str | None = None,
    style: str | None = None,
) -> dict[str, str]:
    overrides: dict[str, str] = {}
    if workdir is not None:
        settings.workdir = workdir
        overrides["workdir"] = workdir
    if output_dir is not None:
        settings.output_dir = output_dir
        overrides["output_dir"] = output_dir
    if font_path is not None:
        settings.font_path = font_path
        overrides["font_path"] = font_path
    if style is not None:
        settings.style = style
        overrides["style"] = style
    return overrides


def _run_render_pipeline(
    *,
    settings: Settings,
    request: OverlayRequest,
    style: OverlayStyle,
    cli_overrides: dict[str, str] | None = None,
) -> tuple[Job, Workspace]:
    workspace = Workspace.create(settings.workdir)
    job = Job(
        settings=settings,
        workspace=workspace,
        request=request,
        cli_overrides=cli_overrides or {},
    )
    job = Pipeline(style=style).run(job)
    return job, workspace


def _run_preview(
    *,
    settings: Settings,
    request: OverlayRequest,
    style: OverlayStyle,
    at: float,
    frames: int,
    interval: float,
    cli_overrides: dict[str, str] | None = None,
) -> tuple[Job, Workspace, list[Path]]:
    workspace = Workspace.create(settings.workdir)
    job = Job(
        settings=settings,
        workspace=workspace,
        request=request,
        cli_overrides=cli_overrides or {},
    )
    timer = StepTimer(clock=utc_now)
    started_at = timer.clock()
    error: str | None = None
    written: list[Path] = []
    try:
        with timer.step("fetch_source"):
            job.artifacts.source = FetchService().fetch(job)
        with timer.step("preview"):
            service = PreviewService()
            if frames <= 1:
                written.append(service.render_still(job, style=style, seconds=at).path)
            else:
                info = ffmpeg.probe_media(job.artifacts.source.path) or {}
                previews = service.watch(
                    job,
                    style=style,
                    frames=frames,
                    interval=interval,
                    start_at=at,
                    duration=info.get("duration_seconds"),
                )
                written.extend(p.path for p in previews)
        return job, workspace, written
    except Exception as exc:
        error = str(exc)
        raise
    finally:
        try:
            write_run_manifest(
                job=job,
                steps=timer.steps,
                started_at=started_at,
                finished_at=timer.clock(),
                style=style,
                error=error,
            )
        except OSError as exc:
            log.warning("Could not write run manifest: %s", exc)


def _resolve_workdir(workdir: str | None) -> Path:
    settings = Settings()
    return Path(workdir or settings.workdir).expanduser().resolve()


def _list_runs(workdir: Path) -> list[Path]:
    if not workdir.exists():
        return []
    candidates = []
    for run_dir in workdir.iterdir():
        if not run_dir.is_dir():
            continue
        if not (run_dir / "run.json").exists():
            continue
        candidates.append(run_dir)
    candidates.sort(key=lambda p: (p / "run.json").stat().st_mtime, reverse=True)
    return candidates


def _resolve_run_dir(workdir: Path, run_id: str) -> Path:
    if run_id == "latest":
        runs_list = _list_runs(workdir)
        if not runs_list:
            raise typer.BadParameter("No runs found.")
        return runs_list[0]
    return workdir / run_id


@app.command()
def styles() -> None:
    """List available overlay styles."""
    for name in list_styles():
        typer.echo(name)


@app.command()
def config() -> None:
    """Print resolved config."""
    s = Settings()
    typer.echo(json.dumps(s.to_public_dict(), indent=2))


@app.command()
@_report_errors
def doctor() -> None:
    """Run environment diagnostics."""
    settings = Settings()
    code = run_doctor(settings)
    raise typer.Exit(code=code)


@app.command()
@_report_errors
def plan(
    width: int = typer.Option(..., help="Source video width in pixels."),
    height: int = typer.Option(..., help="Source video height in pixels."),
    text: str = typer.Option(..., help="Overlay text."),
    style: str = typer.Option(None, help="Overlay style (lower-third, centered)."),
    font_path: str = typer.Option(None, help="TrueType font for metrics (overrides config)."),
    metrics: str = typer.Option("server", help="Text metrics: server (estimate unless a font is set) or pillow."),
) -> None:
    """Print the overlay drawing instructions for a source size as JSON."""
    settings = Settings()
    _apply_overrides(settings, font_path=font_path)
    style_spec = _parse_style(style or settings.style)
    font_size = style_spec.resolve_font_size(TARGET)

    if metrics == "server":
        measure = server_measure(settings.font_path, font_size)
    elif metrics == "pillow":
        measure = pillow_measure(load_font(settings.font_path, font_size))
    else:
        raise typer.BadParameter("Invalid --metrics. Use: server, pillow.")

    overlay = build_overlay_plan(Frame(width, height), text, style_spec, measure)
    typer.echo(json.dumps(overlay.to_instructions(), indent=2))


@app.command()
@_report_errors
def render(
    text: str = typer.Option(..., help="Overlay text (max 100 characters by default)."),
    video_url: str = typer.Option(..., "--video-url", help="Source video URL or local path."),
    style: str = typer.Option(None, help="Overlay style (overrides config)."),
    workdir: str = typer.Option(None, help="Workdir for run outputs (overrides config)."),
    output_dir: str = typer.Option(None, help="Directory for published videos (overrides config)."),
    font_path: str = typer.Option(None, help="TrueType font file (overrides config)."),
    log_level: str = typer.Option(None, help="Log level (overrides config)."),
    json_output: bool = typer.Option(False, "--json", help="Print the published result as JSON."),
) -> None:
    """Render the vertical video with the text overlay burned in."""
    settings = Settings()
    cli_overrides = _apply_overrides(
        settings,
        workdir=workdir,
        output_dir=output_dir,
        font_path=font_path,
        style=style,
    )

    # Configure logging after overrides so we use the final resolved level
    configure_logging(log_level or settings.log_level)

    style_spec = _parse_style(settings.style)
    request = OverlayRequest.create(text, video_url, max_chars=settings.max_text_chars)
    job, workspace = _run_render_pipeline(
        settings=settings,
        request=request,
        style=style_spec,
        cli_overrides=cli_overrides,
    )

    published = job.artifacts.published
    if json_output and published is not None:
        typer.echo(json.dumps(published.to_response(), indent=2))
        return
    typer.echo(f"✅ Done. run_id={workspace.run_id}")
    if published is not None:
        typer.echo(f"📦 Output: {published.url}")


@app.command()
@_report_errors
def preview(
    text: str = typer.Option(..., help="Overlay text."),
    video_url: str = typer.Option(..., "--video-url", help="Source video URL or local path."),
    at: float = typer.Option(0.0, help="Timestamp (seconds) of the first previewed frame."),
    frames: int = typer.Option(1, help="Number of frames; more than one runs the preview loop."),
    interval: float = typer.Option(None, help="Seconds between loop frames (overrides config)."),
    style: str = typer.Option(None, help="Overlay style (overrides config)."),
    workdir: str = typer.Option(None, help="Workdir for run outputs (overrides config)."),
    font_path: str = typer.Option(None, help="TrueType font file (overrides config)."),
    log_level: str = typer.Option(None, help="Log level (overrides config)."),
) -> None:
    """Composite the overlay onto sampled frames without encoding a video."""
    settings = Settings()
    cli_overrides = _apply_overrides(settings, workdir=workdir, font_path=font_path, style=style)
    configure_logging(log_level or settings.log_level)

    style_spec = _parse_style(settings.style)
    request = OverlayRequest.create(text, video_url, max_chars=settings.max_text_chars)
    _job, workspace, written = _run_preview(
        settings=settings,
        request=request,
        style=style_spec,
        at=at,
        frames=frames,
        interval=settings.preview_interval if interval is None else interval,
        cli_overrides=cli_overrides,
    )

    typer.echo(f"✅ Done. run_id={workspace.run_id}")
    for path in written:
        typer.echo(f"🖼️ Preview: {path}")


@app.command()
def runs(
    workdir: str = typer.Option(None, help="Workdir for outputs (overrides config)."),
    limit: int = typer.Option(5, help="Limit number of runs shown."),
) -> None:
    """List recent runs."""
    root = _resolve_workdir(workdir)
    runs_list = _list_runs(root)
    if limit is not None and limit > 0:
        runs_list = runs_list[:limit]

    typer.echo("run_id\tstarted_at\tstatus\tduration_s\tpublished")
    for run_dir in runs_list:
        manifest = load_run_manifest(run_dir / "run.json")
        if not manifest:
            continue
        duration = manifest.get("duration_seconds_total")
        duration_str = f"{duration:.2f}" if isinstance(duration, (float, int)) else "n/a"
        published = (manifest.get("published") or {}).get("url", "-")
        typer.echo(
            f"{run_dir.name}\t{manifest.get('started_at', 'n/a')}\t"
            f"{manifest.get('status', 'n/a')}\t{duration_str}\t{published}"
        )


@app.command()
def inspect(
    run_id: str = typer.Argument(..., help="Run id or 'latest'."),
    workdir: str = typer.Option(None, help="Workdir for outputs (overrides config)."),
) -> None:
    """Pretty-print run.json for a run."""
    root = _resolve_workdir(workdir)
    run_dir = _resolve_run_dir(root, run_id)

    manifest = load_run_manifest(run_dir / "run.json")
    if manifest is None:
        raise typer.BadParameter(f"run.json not found for run_id '{run_dir.name}'.")
    typer.echo(json.dumps(manifest, indent=2))


def _main() -> None:
    app()


if __name__ == "__main__":
    _main()
