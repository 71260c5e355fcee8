from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable

from textreel.domain.job import Job
from textreel.styles.base import OverlayStyle
from textreel.utils.timing import StepTiming, iso


def _artifact_entry(artifact: Any) -> dict[str, Any] | None:
    if artifact is None:
        return None
    entry = asdict(artifact) if is_dataclass(artifact) else {}
    path = getattr(artifact, "path", None)
    if path is not None:
        path = Path(path)
        entry["path"] = str(path)
        entry["size_bytes"] = path.stat().st_size if path.exists() else None
    for key, value in list(entry.items()):
        if isinstance(value, tuple):
            entry[key] = list(value)
    return entry


def build_run_manifest(
    *,
    job: Job,
    steps: Iterable[StepTiming],
    started_at: datetime,
    finished_at: datetime,
    style: OverlayStyle | None,
    error: str | None = None,
) -> dict[str, Any]:
    artifacts = job.artifacts
    published = artifacts.published.to_response() if artifacts.published else None
    return {
        "run_id": job.workspace.run_id,
        "started_at": iso(started_at),
        "finished_at": iso(finished_at),
        "duration_seconds_total": (finished_at - started_at).total_seconds(),
        "status": "failed" if error else "ok",
        "error": error,
        "settings_public": job.settings.to_public_dict(),
        "cli_overrides": job.cli_overrides,
        "request": {"text": job.request.text, "video_url": job.request.video_url},
        "style_id": style.name if style else None,
        "steps": [step.to_dict() for step in steps],
        "artifacts": {
            "source": _artifact_entry(artifacts.source),
            "video": _artifact_entry(artifacts.video),
            "preview": _artifact_entry(artifacts.preview),
        },
        "overlay_plan": job.plan_instructions,
        "published": published,
        "ffmpeg_cmd": job.ffmpeg_cmd,
        "ffmpeg_stderr_path": job.ffmpeg_stderr_path,
    }


def write_run_manifest(**kwargs: Any) -> Path:
    payload = build_run_manifest(**kwargs)
    out = kwargs["job"].workspace.run_manifest
    out.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return out


def load_run_manifest(path: Path) -> dict | None:
    if not path.exists():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        return None
