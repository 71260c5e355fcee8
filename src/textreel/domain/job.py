from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from textreel.config.settings import Settings
from textreel.domain.artifacts import Artifacts
from textreel.domain.request import OverlayRequest
from textreel.domain.workspace import Workspace


@dataclass
class Job:
    settings: Settings
    workspace: Workspace
    request: OverlayRequest
    artifacts: Artifacts = field(default_factory=Artifacts)
    cli_overrides: dict[str, str] = field(default_factory=dict)
    plan_instructions: dict[str, Any] | None = None
    ffmpeg_cmd: str | None = None
    ffmpeg_stderr_path: str | None = None
